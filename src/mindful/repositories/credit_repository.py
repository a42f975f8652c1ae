"""Session credit repository."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update, and_

from .base import BaseRepository, store_operation
from ..database import SessionCredit

UNREDEEMED = "unredeemed"
REDEEMED = "redeemed"


class CreditRepository(BaseRepository[SessionCredit]):
    """Repository for SessionCredit operations."""

    @store_operation
    async def get_unredeemed(self, user_id: UUID) -> List[SessionCredit]:
        """Unredeemed credits of a user, oldest first."""
        result = await self.session.execute(
            select(SessionCredit)
            .where(
                and_(
                    SessionCredit.user_id == user_id,
                    SessionCredit.status == UNREDEEMED,
                )
            )
            .order_by(SessionCredit.created_at.asc())
        )
        return list(result.scalars().all())

    @store_operation
    async def get_by_payment_id(self, payment_id: str) -> Optional[SessionCredit]:
        result = await self.session.execute(
            select(SessionCredit).where(SessionCredit.payment_id == payment_id)
        )
        return result.scalar_one_or_none()

    @store_operation
    async def redeem(self, credit_id: UUID, at: datetime) -> bool:
        """
        Flip a credit from unredeemed to redeemed.

        Conditional on the current status, so of two racing callers only one
        sees True.
        """
        result = await self.session.execute(
            update(SessionCredit)
            .where(
                and_(
                    SessionCredit.id == credit_id,
                    SessionCredit.status == UNREDEEMED,
                )
            )
            .values(status=REDEEMED, redeemed_at=at)
        )
        return result.rowcount == 1
