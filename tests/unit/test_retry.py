"""
Unit tests for the retry policy and with_retry.
"""

import pytest

from vocabflow.config import LLMConfig
from vocabflow.core.llm.exceptions import LLMError, LLMErrorCode
from vocabflow.core.llm.retry import RetryPolicy, retrying, with_retry

FAST_POLICY = RetryPolicy(max_retries=3, base_delay=0.01, max_delay=0.05)


class FlakyOperation:
    """Fails with the given errors in order, then returns a value."""

    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def timeout_error():
    return LLMError(LLMErrorCode.TIMEOUT, "timed out", retryable=True)


class TestWithRetry:
    """Retry loop behavior"""

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        """Two retryable failures then success: three calls total"""
        operation = FlakyOperation([timeout_error(), timeout_error()])

        result = await with_retry(operation, FAST_POLICY)

        assert result == "ok"
        assert operation.calls == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_not_retried(self):
        error = LLMError(LLMErrorCode.INVALID_RESPONSE, "garbage", retryable=False)
        operation = FlakyOperation([error])

        with pytest.raises(LLMError) as exc_info:
            await with_retry(operation, FAST_POLICY)

        assert exc_info.value is error
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_plain_exception_not_retried(self):
        operation = FlakyOperation([ValueError("bad input")])

        with pytest.raises(ValueError):
            await with_retry(operation, FAST_POLICY)
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_retryable_code_with_flag_off(self):
        """A 4xx API error carries retryable=False and is raised at once"""
        error = LLMError(LLMErrorCode.API_ERROR, "API error: 404", retryable=False)
        operation = FlakyOperation([error])

        with pytest.raises(LLMError):
            await with_retry(operation, FAST_POLICY)
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_code_outside_policy_set(self):
        policy = RetryPolicy(max_retries=3, base_delay=0.01,
                             retryable_codes=frozenset({LLMErrorCode.TIMEOUT}))
        error = LLMError(LLMErrorCode.RATE_LIMIT, "slow down", retryable=True)
        operation = FlakyOperation([error])

        with pytest.raises(LLMError):
            await with_retry(operation, policy)
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_exhaustion_raises_last_error(self):
        errors = [timeout_error() for _ in range(3)]
        operation = FlakyOperation(list(errors))
        policy = RetryPolicy(max_retries=2, base_delay=0.01)

        with pytest.raises(LLMError) as exc_info:
            await with_retry(operation, policy)

        assert operation.calls == 3
        assert exc_info.value is errors[-1]

    @pytest.mark.asyncio
    async def test_zero_retries_single_attempt(self):
        operation = FlakyOperation([timeout_error()])

        with pytest.raises(LLMError):
            await with_retry(operation, RetryPolicy(max_retries=0))
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_on_retry_receives_retry_numbers(self):
        operation = FlakyOperation([timeout_error(), timeout_error()])
        seen = []

        await with_retry(operation, FAST_POLICY, on_retry=lambda error, n: seen.append(n))

        assert seen == [1, 2]

    @pytest.mark.asyncio
    async def test_failing_on_retry_callback_ignored(self):
        operation = FlakyOperation([timeout_error()])

        def broken_callback(error, attempt):
            raise RuntimeError("callback bug")

        assert await with_retry(operation, FAST_POLICY, on_retry=broken_callback) == "ok"

    @pytest.mark.asyncio
    async def test_log_callback_messages(self):
        operation = FlakyOperation([timeout_error()])
        messages = []

        await with_retry(
            operation, FAST_POLICY, operation_id="chunk-1:extraction",
            log_callback=lambda log_type, message: messages.append((log_type, message))
        )

        assert messages[0][0] == "warning"
        assert "chunk-1:extraction" in messages[0][1]
        assert "LLM_TIMEOUT" in messages[0][1]
        assert messages[-1] == ("info", "Operation chunk-1:extraction succeeded after 2 attempts")


class TestRetryPolicy:

    def test_exponential_delays_capped(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=10.0, backoff_multiplier=2.0)
        assert [policy.delay_for(n) for n in range(6)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]

    def test_is_retryable(self):
        policy = RetryPolicy()
        assert policy.is_retryable(timeout_error())
        assert not policy.is_retryable(
            LLMError(LLMErrorCode.TOKEN_LIMIT_EXCEEDED, "too long", retryable=False)
        )
        assert not policy.is_retryable(ConnectionError("refused"))

    def test_from_llm_config(self):
        config = LLMConfig(max_retries=5, base_delay_ms=500, max_delay_ms=2000, backoff_multiplier=3.0)
        policy = RetryPolicy.from_llm_config(config)
        assert policy.max_retries == 5
        assert policy.base_delay == 0.5
        assert policy.max_delay == 2.0
        assert policy.backoff_multiplier == 3.0


class TestRetryingDecorator:

    @pytest.mark.asyncio
    async def test_decorated_function_retried(self):
        calls = []

        @retrying(RetryPolicy(max_retries=2, base_delay=0.01))
        async def fetch_words(text):
            calls.append(text)
            if len(calls) == 1:
                raise LLMError(LLMErrorCode.NETWORK_ERROR, "connection reset", retryable=True)
            return text.split()

        assert await fetch_words("alpha beta") == ["alpha", "beta"]
        assert calls == ["alpha beta", "alpha beta"]
        assert fetch_words.__name__ == "fetch_words"
