"""
Provider base class and response type for LLM-backed stages.

Extraction and translation talk to a model through an LLMProvider. A
provider makes exactly one HTTP request per ``generate`` call and reports
every failure as an LLMError; retrying is the caller's job.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import httpx


@dataclass
class LLMResponse:
    """Model reply plus token accounting as reported by the server"""
    content: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    model: str = ""

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class LLMProvider(ABC):
    """Base for HTTP model providers.

    Args:
        model: Model identifier sent with each request
        timeout: Per-request timeout in seconds
        transport: httpx transport override (tests pass httpx.MockTransport)
    """

    def __init__(self, model: str, timeout: float = 60.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.model = model
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        # One pooled client per provider; segments share it concurrently
        if self._client is None:
            self._client = httpx.AsyncClient(
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @abstractmethod
    async def generate(self, prompt: str, system_prompt: Optional[str] = None,
                       max_tokens: Optional[int] = None,
                       temperature: Optional[float] = None) -> LLMResponse:
        """
        Send one completion request.

        Args:
            prompt: User message
            system_prompt: Optional instructions sent as the system message
            max_tokens: Completion cap (provider default when None)
            temperature: Sampling temperature (provider default when None)

        Returns:
            LLMResponse with the reply text and token usage

        Raises:
            LLMError: Classified failure with a retryability flag
        """
