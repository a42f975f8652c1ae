"""Session repository: therapy sessions and their explicit cascade delete."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update, delete, and_, func

from .base import BaseRepository, store_operation
from ..database import TherapySession, Message, ModeTransition, utcnow


class SessionRepository(BaseRepository[TherapySession]):
    """Repository for TherapySession operations."""

    @store_operation
    async def get_owned(self, session_id: UUID, user_id: UUID) -> Optional[TherapySession]:
        """Get a session only if it belongs to the user."""
        result = await self.session.execute(
            select(TherapySession).where(
                and_(
                    TherapySession.id == session_id,
                    TherapySession.user_id == user_id,
                )
            )
        )
        return result.scalar_one_or_none()

    @store_operation
    async def get_user_sessions(self, user_id: UUID, limit: int = 100) -> List[TherapySession]:
        """All sessions of a user, newest first."""
        result = await self.session.execute(
            select(TherapySession)
            .where(TherapySession.user_id == user_id)
            .order_by(TherapySession.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @store_operation
    async def get_latest(self, user_id: UUID) -> Optional[TherapySession]:
        """Most recently created session of a user."""
        result = await self.session.execute(
            select(TherapySession)
            .where(TherapySession.user_id == user_id)
            .order_by(TherapySession.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @store_operation
    async def count_user_sessions(self, user_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count(TherapySession.id)).where(TherapySession.user_id == user_id)
        )
        return result.scalar_one()

    @store_operation
    async def set_mode(self, session_id: UUID, mode: str) -> bool:
        """Store a new current mode. False if the session is gone."""
        result = await self.session.execute(
            update(TherapySession)
            .where(TherapySession.id == session_id)
            .values(current_mode=mode, updated_at=utcnow())
        )
        return result.rowcount == 1

    @store_operation
    async def increment_message_count(self, session_id: UUID, by: int) -> bool:
        """Atomically add to the message count. False if the session is gone."""
        result = await self.session.execute(
            update(TherapySession)
            .where(TherapySession.id == session_id)
            .values(
                message_count=TherapySession.message_count + by,
                updated_at=utcnow(),
            )
        )
        return result.rowcount == 1

    @store_operation
    async def mark_complete(self, session_id: UUID) -> bool:
        result = await self.session.execute(
            update(TherapySession)
            .where(TherapySession.id == session_id)
            .values(is_complete=True, updated_at=utcnow())
        )
        return result.rowcount == 1

    @store_operation
    async def set_title(self, session_id: UUID, title: str) -> bool:
        result = await self.session.execute(
            update(TherapySession)
            .where(TherapySession.id == session_id)
            .values(title=title, updated_at=utcnow())
        )
        return result.rowcount == 1

    @store_operation
    async def delete_cascade(self, session_id: UUID, user_id: UUID) -> bool:
        """
        Delete a session with its messages and mode transitions.

        The cascade is spelled out here rather than left to foreign keys,
        which SQLite does not enforce by default.
        """
        await self.session.execute(
            delete(Message).where(
                and_(Message.session_id == session_id, Message.user_id == user_id)
            )
        )
        await self.session.execute(
            delete(ModeTransition).where(
                and_(ModeTransition.session_id == session_id, ModeTransition.user_id == user_id)
            )
        )
        result = await self.session.execute(
            delete(TherapySession).where(
                and_(TherapySession.id == session_id, TherapySession.user_id == user_id)
            )
        )
        return result.rowcount == 1
