"""
LLM access: provider base class, error types and retry policy.
"""
from vocabflow.core.llm.base import LLMProvider, LLMResponse
from vocabflow.core.llm.exceptions import LLMError, LLMErrorCode
from vocabflow.core.llm.retry import RetryPolicy, with_retry, retrying, DEFAULT_RETRYABLE_CODES

__all__ = [
    'LLMProvider',
    'LLMResponse',
    'LLMError',
    'LLMErrorCode',
    'RetryPolicy',
    'with_retry',
    'retrying',
    'DEFAULT_RETRYABLE_CODES',
]
