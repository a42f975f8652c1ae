"""Message repository for chat messages."""

from datetime import datetime
from typing import List

from sqlalchemy import select, and_, func
from uuid import UUID

from .base import BaseRepository, store_operation
from ..database import Message

CONVERSATION_ROLES = ("user", "assistant")


class MessageRepository(BaseRepository[Message]):
    """Repository for Message operations."""

    @store_operation
    async def get_recent(self, session_id: UUID, limit: int = 10) -> List[Message]:
        """Latest user/assistant messages of a session, in chronological order."""
        query = (
            select(Message)
            .where(
                and_(
                    Message.session_id == session_id,
                    Message.role.in_(CONVERSATION_ROLES),
                )
            )
            .order_by(Message.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        messages = list(result.scalars().all())

        # Return in chronological order
        return list(reversed(messages))

    @store_operation
    async def get_history(
        self,
        session_id: UUID,
        user_id: UUID,
        limit: int = 50,
    ) -> List[Message]:
        """Oldest-first transcript of a session."""
        query = (
            select(Message)
            .where(and_(Message.session_id == session_id, Message.user_id == user_id))
            .order_by(Message.created_at.asc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    @store_operation
    async def get_first_user_messages(self, session_id: UUID, limit: int = 3) -> List[Message]:
        query = (
            select(Message)
            .where(and_(Message.session_id == session_id, Message.role == "user"))
            .order_by(Message.created_at.asc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    @store_operation
    async def count_user_messages_between(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime,
    ) -> int:
        """Count user-authored messages with start <= created_at < end."""
        result = await self.session.execute(
            select(func.count(Message.id)).where(
                and_(
                    Message.user_id == user_id,
                    Message.role == "user",
                    Message.created_at >= start,
                    Message.created_at < end,
                )
            )
        )
        return result.scalar_one()
