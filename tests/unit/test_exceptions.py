"""
Unit tests for the exception hierarchy.
"""

from vocabflow.core.exceptions import (
    ConfigurationError,
    DocumentEmptyError,
    DocumentError,
    VocabflowError,
)
from vocabflow.core.llm.exceptions import LLMError, LLMErrorCode


class TestExceptions:

    def test_document_empty_defaults(self):
        error = DocumentEmptyError()
        assert isinstance(error, DocumentError)
        assert isinstance(error, VocabflowError)
        assert error.message == "Document contains no extractable text"
        assert not error.recoverable

    def test_configuration_error_keeps_rule_list(self):
        error = ConfigurationError("Invalid", errors=["a", "b"])
        assert error.errors == ["a", "b"]

    def test_llm_error_attributes(self):
        error = LLMError(LLMErrorCode.RATE_LIMIT, "Rate limit exceeded",
                         retryable=True, details={"status": 429})
        assert error.code == LLMErrorCode.RATE_LIMIT
        assert error.retryable
        assert error.recoverable
        assert error.details == {"status": 429}
        assert error.context == {"code": "LLM_RATE_LIMIT", "status": 429}

    def test_str_includes_context(self):
        error = LLMError(LLMErrorCode.TIMEOUT, "timed out", retryable=True)
        assert str(error) == "LLMError: timed out (context: code=LLM_TIMEOUT)"
