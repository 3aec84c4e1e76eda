"""
Exception hierarchy for the vocabulary pipeline.

Document-level and configuration errors are fatal and abort the whole
operation. Segment-level problems never surface as exceptions; they are
reported as data on the segment result.
"""

from typing import Optional, Dict, Any


class VocabflowError(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context about the error
        recoverable: Whether the error can potentially be recovered from
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base += f" (context: {context_str})"
        return base


# ============================================================================
# Configuration errors
# ============================================================================

class ConfigurationError(VocabflowError):
    """Raised when configuration is invalid.

    Attributes:
        errors: Every violated rule, in the order they were checked
    """

    def __init__(self, message: str, errors: Optional[list] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=False)
        self.errors = list(errors or [])


# ============================================================================
# Document-level errors
# ============================================================================

class DocumentError(VocabflowError):
    """Base exception for errors that abort processing of a whole document."""
    pass


class DocumentEmptyError(DocumentError):
    """Raised when a document has no text left after trimming."""

    def __init__(self, message: str = "Document contains no extractable text",
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=False)
