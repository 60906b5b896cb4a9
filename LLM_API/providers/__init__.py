"""
LLM Provider Implementations
"""

from .gemini import GeminiModel
from .openai import OpenAIModel

__all__ = ['GeminiModel', 'OpenAIModel']
