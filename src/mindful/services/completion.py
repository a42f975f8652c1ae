"""Client for an OpenAI-compatible chat-completions endpoint."""

from __future__ import annotations

from typing import Protocol

import httpx
from loguru import logger

from ..config import settings
from ..core.exceptions import UpstreamUnavailableError


class CompletionService(Protocol):
    """Anything that turns an ordered message list into reply text."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str: ...


class OpenAICompletionClient:
    """
    POSTs ``{model, messages, temperature, max_tokens}`` to ``{base}/chat/completions``.

    Any transport error, non-2xx status, malformed body or empty reply is
    raised as UpstreamUnavailableError. No retries.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.CHAT_MODEL
        self.timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        payload = {
            "model": model or self.model,
            "messages": messages,
            "temperature": settings.LLM_TEMPERATURE if temperature is None else temperature,
            "max_tokens": settings.LLM_MAX_TOKENS if max_tokens is None else max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Completion service returned {e.response.status_code}")
            raise UpstreamUnavailableError(f"HTTP {e.response.status_code}", self.url) from e
        except httpx.HTTPError as e:
            logger.error(f"Completion service unreachable: {e}")
            raise UpstreamUnavailableError(str(e) or type(e).__name__, self.url) from e
        except ValueError as e:
            logger.error(f"Completion service returned invalid JSON: {e}")
            raise UpstreamUnavailableError("invalid JSON body", self.url) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        if not isinstance(content, str) or not content.strip():
            raise UpstreamUnavailableError("empty reply", self.url)
        return content
