"""
The only code path that changes a session's mode.

Every change writes exactly one ModeTransition; setting the mode a session
already has writes nothing.
"""

from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from loguru import logger

from ..core.exceptions import NotFoundError
from ..core.modes import Mode
from ..database import ModeTransition, TherapySession, utcnow
from ..repositories.session_repository import SessionRepository
from ..repositories.transition_repository import TransitionRepository


class ModeHistory:
    """Mode mutation plus its audit log."""

    def __init__(
        self,
        session_repo: SessionRepository,
        transition_repo: TransitionRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_repo = session_repo
        self.transition_repo = transition_repo
        self.clock = clock

    async def change_mode(self, session: TherapySession, new_mode: Mode) -> Optional[ModeTransition]:
        """
        Move ``session`` to ``new_mode``.

        Returns:
            The transition written, or None if the mode was unchanged

        Raises:
            NotFoundError: If the session disappeared before the update
        """
        old_mode = session.current_mode
        if old_mode == new_mode.value:
            return None

        if not await self.session_repo.set_mode(session.id, new_mode.value):
            raise NotFoundError("Session", session.id)

        transition = await self.transition_repo.create(
            session_id=session.id,
            user_id=session.user_id,
            old_mode=old_mode,
            new_mode=new_mode.value,
            created_at=self.clock(),
        )
        session.current_mode = new_mode.value

        logger.info(f"Session {session.id} mode {old_mode} -> {new_mode.value}")
        return transition

    async def get_transitions(self, session_id: UUID) -> List[ModeTransition]:
        return await self.transition_repo.get_session_transitions(session_id)
