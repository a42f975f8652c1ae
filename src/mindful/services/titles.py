"""Short session titles from the opening of a conversation."""

from typing import Sequence

from loguru import logger

from ..config import settings
from ..core.exceptions import UpstreamUnavailableError
from ..core.modes import FALLBACK_TITLES, DEFAULT_MODE, Mode
from .completion import CompletionService

MAX_TITLE_LENGTH = 25

TITLE_PROMPT = (
    "Based on this therapy conversation in {mode} mode, generate a meaningful, "
    "empathetic 2-3 word title that captures the core emotional theme. Examples: "
    '"Ghosting Recovery", "Self-Worth Journey", "Healing Heartbreak", '
    '"Anxiety Clarity", "Trust Rebuilding".\n\n'
    'Conversation: "{conversation}"\n\n'
    "Title:"
)


def clean_title(raw: str) -> str:
    """Strip quotes and whitespace, cut to MAX_TITLE_LENGTH."""
    title = raw.replace('"', "").replace("'", "").strip()
    if len(title) > MAX_TITLE_LENGTH:
        title = title[:MAX_TITLE_LENGTH].strip()
    return title


class TitleGenerator:
    def __init__(self, completion: CompletionService, model: str | None = None):
        self.completion = completion
        self.model = model or settings.TITLE_MODEL

    async def generate(self, user_messages: Sequence[str], mode: Mode) -> str:
        """
        Title for a conversation given its first user messages.

        Falls back to a fixed title per mode when there is nothing to
        summarize or the completion service fails.
        """
        fallback = FALLBACK_TITLES.get(mode, FALLBACK_TITLES[DEFAULT_MODE])
        if not user_messages:
            return fallback

        prompt = TITLE_PROMPT.format(mode=mode.value, conversation=" ".join(user_messages))
        try:
            raw = await self.completion.complete(
                [{"role": "user", "content": prompt}],
                model=self.model,
                temperature=0.7,
                max_tokens=10,
            )
        except UpstreamUnavailableError as e:
            logger.warning(f"Title generation failed, using fallback: {e}")
            return fallback

        return clean_title(raw) or fallback
