"""
Errors raised by network-backed LLM collaborators.

Every error carries a code and a retryability flag that the provider sets
from what it observed (HTTP status, timeout, transport failure). The retry
policy reads both before deciding to try again.
"""

from enum import Enum
from typing import Optional, Dict, Any

from vocabflow.core.exceptions import VocabflowError


class LLMErrorCode(Enum):
    """Error codes reported by LLM providers."""
    TIMEOUT = "LLM_TIMEOUT"
    RATE_LIMIT = "LLM_RATE_LIMIT"
    TOKEN_LIMIT_EXCEEDED = "TOKEN_LIMIT_EXCEEDED"
    API_ERROR = "LLM_API_ERROR"
    INVALID_RESPONSE = "LLM_INVALID_RESPONSE"
    NETWORK_ERROR = "LLM_NETWORK_ERROR"


class LLMError(VocabflowError):
    """Error from an LLM call.

    Attributes:
        code: What went wrong
        retryable: Whether the provider considers another attempt worthwhile
        details: Raw diagnostic data (status code, response body, ...)
    """

    def __init__(
        self,
        code: LLMErrorCode,
        message: str,
        retryable: bool = False,
        details: Optional[Dict[str, Any]] = None
    ):
        context = {"code": code.value}
        if details:
            context.update(details)
        super().__init__(message, context, recoverable=retryable)
        self.code = code
        self.retryable = retryable
        self.details = details or {}
