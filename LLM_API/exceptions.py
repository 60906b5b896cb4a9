"""Errors raised by ``LLM_API`` providers.

Providers report most call failures through the ``error`` field of their
responses; these exceptions cover setup problems and callers that need to
turn an error response into a raised failure.
"""

from typing import Optional


class LLMError(Exception):
    """Base exception for provider failures"""

    def __init__(
        self,
        message: str,
        provider: str = "",
        error_type: str = "general",
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.error_type = error_type

    def __str__(self):
        prefix = f"[{self.provider}] " if self.provider else ""
        return f"{prefix}{self.error_type}: {self.message}"


class LLMAPIError(LLMError):
    """The provider returned an error or no usable output"""


class LLMAuthenticationError(LLMError):
    """No API key was configured for the provider"""


class LLMValidationError(LLMError):
    """The request was rejected before reaching the provider"""

    def __init__(self, message: str, provider: str = "", error_type: str = "validation",
                 field: Optional[str] = None):
        super().__init__(message, provider=provider, error_type=error_type)
        self.field = field


class LLMUnsupportedFeatureError(LLMError):
    """The provider does not offer the requested capability"""
