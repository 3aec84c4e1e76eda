"""
OpenAI-compatible provider implementation.

This module provides the OpenAICompatibleProvider class for interacting with
OpenAI API and compatible endpoints (llama.cpp, LM Studio, vLLM, Ollama, etc.).
"""

from typing import Optional, Callable
import httpx

from ..base import LLMProvider, LLMResponse
from ..exceptions import LLMError, LLMErrorCode


class OpenAICompatibleProvider(LLMProvider):
    """OpenAI-compatible API provider (works with llama.cpp, LM Studio, vLLM, OpenAI, etc.)"""

    def __init__(self, api_endpoint: str, model: str, api_key: Optional[str] = None,
                 default_max_tokens: int = 2000, default_temperature: float = 0.7,
                 timeout: float = 60.0, log_callback: Optional[Callable] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(model, timeout=timeout, transport=transport)
        self.api_endpoint = api_endpoint
        self.api_key = api_key
        self.default_max_tokens = default_max_tokens
        self.default_temperature = default_temperature
        self.log_callback = log_callback

    @classmethod
    def from_config(cls, llm_config, log_callback: Optional[Callable] = None,
                    transport: Optional[httpx.AsyncBaseTransport] = None) -> "OpenAICompatibleProvider":
        """Create a provider from an LLMConfig."""
        return cls(
            api_endpoint=llm_config.api_url,
            model=llm_config.model,
            api_key=llm_config.api_key or None,
            default_max_tokens=llm_config.default_max_tokens,
            default_temperature=llm_config.default_temperature,
            timeout=llm_config.timeout_seconds,
            log_callback=log_callback,
            transport=transport,
        )

    def _log(self, log_type: str, message: str):
        if self.log_callback:
            self.log_callback(log_type, message)

    async def generate(self, prompt: str, system_prompt: Optional[str] = None,
                       max_tokens: Optional[int] = None,
                       temperature: Optional[float] = None) -> LLMResponse:
        """
        Generate text using an OpenAI compatible API.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt (role/instructions)
            max_tokens: Completion token cap
            temperature: Sampling temperature

        Returns:
            LLMResponse with content and token usage info

        Raises:
            LLMError: Classified by HTTP status, timeout or transport failure
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        # Build messages array with optional system prompt
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens if max_tokens is not None else self.default_max_tokens,
            "temperature": temperature if temperature is not None else self.default_temperature,
            "stream": False,
        }

        client = await self._get_client()
        try:
            response = await client.post(self.api_endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise LLMError(
                LLMErrorCode.TIMEOUT,
                f"Request timed out after {self.timeout}s",
                retryable=True,
                details={"error": str(e)}
            ) from e
        except httpx.TransportError as e:
            raise LLMError(
                LLMErrorCode.NETWORK_ERROR,
                f"Network error: {e}",
                retryable=True,
                details={"error": str(e)}
            ) from e

        if response.status_code >= 400:
            raise self._error_from_status(response)

        try:
            response_json = response.json()
        except ValueError as e:
            raise LLMError(
                LLMErrorCode.INVALID_RESPONSE,
                "Response body is not valid JSON",
                retryable=False,
                details={"body": response.text[:500]}
            ) from e

        if not isinstance(response_json, dict):
            response_json = {}

        # Any shape other than choices[0].message.content counts as no content
        choices = response_json.get("choices")
        first = choices[0] if isinstance(choices, list) and choices else None
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not content or not isinstance(content, str):
            raise LLMError(
                LLMErrorCode.INVALID_RESPONSE,
                "Invalid response format: no content in response",
                retryable=False
            )

        usage = response_json.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        return LLMResponse(
            content=content,
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            model=response_json.get("model", self.model),
        )

    def _error_from_status(self, response: httpx.Response) -> LLMError:
        """Map an HTTP error response to an LLMError."""
        status = response.status_code
        body = response.text[:500]
        details = {"status": status, "body": body}

        self._log("error", f"LLM API HTTP Error: Status {status}, Body: {body}")

        if status == 429:
            return LLMError(LLMErrorCode.RATE_LIMIT, "Rate limit exceeded", retryable=True, details=details)

        if status == 400 and "token" in body.lower():
            return LLMError(
                LLMErrorCode.TOKEN_LIMIT_EXCEEDED,
                "Token limit exceeded",
                retryable=False,
                details=details
            )

        return LLMError(
            LLMErrorCode.API_ERROR,
            f"API error: {status} {response.reason_phrase}",
            retryable=status >= 500,
            details=details
        )
