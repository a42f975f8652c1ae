"""Mode transition audit log."""

from typing import List
from uuid import UUID

from sqlalchemy import select

from .base import BaseRepository, store_operation
from ..database import ModeTransition


class TransitionRepository(BaseRepository[ModeTransition]):
    """Append-only access to ModeTransition records."""

    @store_operation
    async def get_session_transitions(self, session_id: UUID) -> List[ModeTransition]:
        """Transitions of a session, oldest first."""
        result = await self.session.execute(
            select(ModeTransition)
            .where(ModeTransition.session_id == session_id)
            .order_by(ModeTransition.created_at.asc())
        )
        return list(result.scalars().all())
