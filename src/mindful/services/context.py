"""Bounded conversational context for one turn."""

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from ..config import settings
from ..repositories.message_repository import MessageRepository


@dataclass(frozen=True)
class ContextEntry:
    """One entry of the list handed to the completion service."""
    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to LLM API format."""
        return {"role": self.role, "content": self.content}


class ContextAssembler:
    """
    Builds ``[system, *recent messages]`` for a session.

    Only the latest ``window`` user/assistant messages are kept. The result
    is never persisted. Store failures propagate as StoreUnavailableError;
    an unreadable history must not turn into an empty context.
    """

    def __init__(self, message_repo: MessageRepository, window: int | None = None):
        self.message_repo = message_repo
        self.window = window if window is not None else settings.CONTEXT_WINDOW_MESSAGES

    async def build_context(self, session_id: UUID, system_prompt: str) -> list[dict[str, str]]:
        recent = await self.message_repo.get_recent(session_id, limit=self.window)

        entries = [ContextEntry(role="system", content=system_prompt)]
        entries.extend(ContextEntry(role=m.role, content=m.content) for m in recent)
        return [entry.to_dict() for entry in entries]
