"""
LLM API Package - Unified interface for text and image generation providers
"""

from .base import CallModel
from .data_classes import (
    BaseRequest, BaseResponse,
    StructuredOutputRequest, StructuredOutputResponse,
    ImageGenerationRequest, ImageGenerationResponse, GeneratedImage,
    ProviderConfig
)
from .exceptions import (
    LLMError, LLMAPIError, LLMValidationError,
    LLMAuthenticationError, LLMUnsupportedFeatureError
)

__version__ = "1.1.0"
__all__ = [
    # Base
    'CallModel',
    # Data Classes
    'BaseRequest', 'BaseResponse',
    'StructuredOutputRequest', 'StructuredOutputResponse',
    'ImageGenerationRequest', 'ImageGenerationResponse', 'GeneratedImage',
    'ProviderConfig',
    # Exceptions
    'LLMError', 'LLMAPIError', 'LLMValidationError',
    'LLMAuthenticationError', 'LLMUnsupportedFeatureError',
]
