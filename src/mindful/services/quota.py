"""Daily message quota."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable
from uuid import UUID

from ..config import settings
from ..database import utcnow
from ..repositories.message_repository import MessageRepository


@dataclass(frozen=True)
class DailyUsage:
    message_count: int
    remaining_messages: int
    is_limit_reached: bool

    def to_dict(self) -> dict:
        return {
            "messageCount": self.message_count,
            "remainingMessages": self.remaining_messages,
            "isLimitReached": self.is_limit_reached,
        }


def day_window(now: datetime) -> tuple[datetime, datetime]:
    """``[start of today, start of tomorrow)`` for a naive UTC timestamp."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


class QuotaLedger:
    """
    Counts today's user-authored messages against the daily ceiling.

    Recomputed from the store on every check. A failed count raises
    StoreUnavailableError instead of reporting zero usage.
    """

    def __init__(
        self,
        message_repo: MessageRepository,
        limit: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.message_repo = message_repo
        self.limit = limit if limit is not None else settings.DAILY_MESSAGE_LIMIT
        self.clock = clock

    async def check_daily_limit(self, user_id: UUID) -> DailyUsage:
        start, end = day_window(self.clock())
        count = await self.message_repo.count_user_messages_between(user_id, start, end)
        return DailyUsage(
            message_count=count,
            remaining_messages=max(0, self.limit - count),
            is_limit_reached=count >= self.limit,
        )
