"""
Mode classifier capability.

Three interchangeable variants share ``async classify(text) -> Mode``:

- KeywordClassifier: the pure keyword table, always available.
- LLMClassifier: asks the completion service for one of the four mode names.
- FallbackClassifier: tries the LLM behind a circuit breaker and answers
  with the keyword classifier whenever that path fails or is switched off.
"""

from __future__ import annotations

from typing import Any, Protocol

from loguru import logger

from ..config import settings
from ..core import modes
from ..core.modes import Mode, DEFAULT_MODE
from ..core.resilience import CircuitBreaker, CircuitBreakerConfig, CircuitBreakerOpen
from .completion import CompletionService


class ModeClassifier(Protocol):
    async def classify(self, text: Any) -> Mode: ...


class KeywordClassifier:
    """Keyword table lookup. Never raises."""

    async def classify(self, text: Any) -> Mode:
        return modes.classify(text)


class LLMClassifier:
    """
    Ask the completion service which mode fits a single message.

    The message is sent alone, without history. The stripped reply must be
    exactly one of the four mode names; anything else means Reflect.
    Upstream failures propagate so a wrapper can fall back.
    """

    def __init__(self, completion: CompletionService, model: str | None = None):
        self.completion = completion
        self.model = model or settings.CLASSIFIER_MODEL

    async def classify(self, text: Any) -> Mode:
        if not isinstance(text, str) or not text.strip():
            return DEFAULT_MODE

        reply = await self.completion.complete(
            [
                {"role": "system", "content": modes.CLASSIFIER_INSTRUCTION},
                {"role": "user", "content": text},
            ],
            model=self.model,
            temperature=0.3,
            max_tokens=10,
        )
        token = reply.strip()
        for mode in Mode:
            if token == mode.value:
                return mode

        logger.debug(f"Classifier returned unexpected token {token!r}, using {DEFAULT_MODE.value}")
        return DEFAULT_MODE


class FallbackClassifier:
    """Primary classifier guarded by a circuit breaker, keyword classifier as fallback."""

    def __init__(
        self,
        primary: ModeClassifier | None = None,
        fallback: ModeClassifier | None = None,
        breaker: CircuitBreaker | None = None,
    ):
        self.primary = primary
        self.fallback = fallback or KeywordClassifier()
        self.breaker = breaker or CircuitBreaker(
            CircuitBreakerConfig(failure_threshold=3, recovery_timeout=60.0, name="mode-classifier")
        )

    async def classify(self, text: Any) -> Mode:
        if self.primary is None:
            return await self.fallback.classify(text)

        try:
            return await self.breaker.call_async(self.primary.classify, text)
        except CircuitBreakerOpen:
            logger.debug("Mode classifier circuit open, using keyword classifier")
        except Exception as e:
            logger.warning(f"LLM classifier failed, using keyword classifier: {e}")

        return await self.fallback.classify(text)


def build_classifier(completion: CompletionService | None = None) -> ModeClassifier:
    """Classifier for the current settings: LLM first when enabled, keywords otherwise."""
    if settings.USE_LLM_CLASSIFIER and completion is not None:
        return FallbackClassifier(primary=LLMClassifier(completion))
    return FallbackClassifier()
