"""
Bounded exponential-backoff retry for LLM calls.

Only LLMError instances whose code is in the policy's retryable set and
which report themselves as retryable are attempted again. Anything else
propagates immediately. When the budget runs out the last error is
re-raised as-is.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Callable, Any, Awaitable, FrozenSet, TypeVar

from vocabflow.core.llm.exceptions import LLMError, LLMErrorCode

T = TypeVar("T")

DEFAULT_RETRYABLE_CODES: FrozenSet[LLMErrorCode] = frozenset({
    LLMErrorCode.TIMEOUT,
    LLMErrorCode.RATE_LIMIT,
    LLMErrorCode.NETWORK_ERROR,
    LLMErrorCode.API_ERROR,
})


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior.

    Attributes:
        max_retries: Retries after the first attempt (total calls = max_retries + 1)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay, in seconds
        backoff_multiplier: Growth factor applied per retry
        retryable_codes: Error codes eligible for retry
    """
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0
    retryable_codes: FrozenSet[LLMErrorCode] = field(default_factory=lambda: DEFAULT_RETRYABLE_CODES)

    @classmethod
    def from_llm_config(cls, llm_config) -> "RetryPolicy":
        """Build a policy from an LLMConfig (millisecond settings)."""
        return cls(
            max_retries=llm_config.max_retries,
            base_delay=llm_config.base_delay_ms / 1000.0,
            max_delay=llm_config.max_delay_ms / 1000.0,
            backoff_multiplier=llm_config.backoff_multiplier,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (0-based)."""
        return min(self.base_delay * (self.backoff_multiplier ** attempt), self.max_delay)

    def is_retryable(self, error: BaseException) -> bool:
        """Whether an error qualifies for another attempt under this policy."""
        return (
            isinstance(error, LLMError)
            and error.code in self.retryable_codes
            and error.retryable
        )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    operation_id: Optional[str] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
    log_callback: Optional[Callable[[str, str], None]] = None
) -> T:
    """Run an async operation, retrying transient LLM failures.

    Args:
        operation: Zero-argument callable returning an awaitable
        policy: Retry policy (defaults to RetryPolicy())
        operation_id: Name used in log messages
        on_retry: Called before each sleep with (error, retry_number)
        log_callback: Callback for logging (log_type, message)

    Returns:
        Whatever the operation returns on its first successful attempt

    Raises:
        Exception: The non-retryable error, or the last error once retries are exhausted
    """
    policy = policy or RetryPolicy()
    op_id = operation_id or getattr(operation, "__name__", "operation")

    def _log(log_type: str, message: str):
        if log_callback:
            log_callback(log_type, message)

    attempt = 0
    while True:
        try:
            result = await operation()
            if attempt > 0:
                _log("info", f"Operation {op_id} succeeded after {attempt + 1} attempts")
            return result

        except Exception as error:
            if not policy.is_retryable(error):
                _log("error", f"Non-retryable error in {op_id}: {error}")
                raise

            if attempt >= policy.max_retries:
                _log("error", f"Retry exhausted for {op_id} after {attempt + 1} attempts: {error}")
                raise

            delay = policy.delay_for(attempt)
            _log(
                "warning",
                f"Attempt {attempt + 1}/{policy.max_retries + 1} failed for {op_id}: "
                f"{error.code.value}: {error.message}. Retrying in {delay:.2f}s..."
            )

            if on_retry:
                try:
                    on_retry(error, attempt + 1)
                except Exception as callback_error:
                    _log("warning", f"Error in on_retry callback: {callback_error}")

            if delay > 0:
                await asyncio.sleep(delay)
            attempt += 1


def retrying(policy: Optional[RetryPolicy] = None):
    """Decorator to add retry logic to async functions.

    Example:
        @retrying(RetryPolicy(max_retries=5, base_delay=2.0))
        async def extract(text: str) -> list:
            ...
    """
    def decorator(func: Callable) -> Callable:
        async def wrapper(*args, **kwargs):
            return await with_retry(
                lambda: func(*args, **kwargs),
                policy,
                operation_id=func.__name__
            )
        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        return wrapper
    return decorator
