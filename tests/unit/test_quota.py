"""Unit tests for the daily quota ledger."""

from datetime import datetime, timedelta

import pytest

from mindful.core.exceptions import StoreUnavailableError
from mindful.services.quota import DailyUsage, QuotaLedger, day_window

NOON = datetime(2026, 3, 10, 12, 0, 0)


async def add_messages(session_repo, message_repo, user, count, at, role="user"):
    session = await session_repo.create(user_id=user.id)
    for i in range(count):
        await message_repo.create(
            session_id=session.id,
            user_id=user.id,
            role=role,
            content=f"message {i}",
            mode="Reflect",
            created_at=at,
        )
    await message_repo.commit()


def ledger(message_repo):
    return QuotaLedger(message_repo, limit=50, clock=lambda: NOON)


def test_day_window():
    start, end = day_window(datetime(2026, 3, 10, 23, 59, 59))
    assert start == datetime(2026, 3, 10)
    assert end == datetime(2026, 3, 11)


async def test_no_messages(message_repo, free_user):
    usage = await ledger(message_repo).check_daily_limit(free_user.id)

    assert usage.message_count == 0
    assert usage.remaining_messages == 50
    assert usage.is_limit_reached is False


async def test_forty_nine_messages_leave_one(session_repo, message_repo, free_user):
    await add_messages(session_repo, message_repo, free_user, 49, NOON)

    usage = await ledger(message_repo).check_daily_limit(free_user.id)

    assert usage.remaining_messages == 1
    assert usage.is_limit_reached is False


async def test_fifty_messages_reach_limit(session_repo, message_repo, free_user):
    await add_messages(session_repo, message_repo, free_user, 50, NOON)

    usage = await ledger(message_repo).check_daily_limit(free_user.id)

    assert usage.message_count == 50
    assert usage.remaining_messages == 0
    assert usage.is_limit_reached is True


async def test_only_todays_user_messages_count(session_repo, message_repo, free_user, premium_user):
    await add_messages(session_repo, message_repo, free_user, 3, NOON - timedelta(days=1))
    await add_messages(session_repo, message_repo, free_user, 4, datetime(2026, 3, 11, 0, 0, 0))
    await add_messages(session_repo, message_repo, free_user, 5, NOON, role="assistant")
    await add_messages(session_repo, message_repo, premium_user, 6, NOON)
    await add_messages(session_repo, message_repo, free_user, 2, datetime(2026, 3, 10, 0, 0, 0))

    usage = await ledger(message_repo).check_daily_limit(free_user.id)

    assert usage.message_count == 2


async def test_count_failure_fails_closed(broken_message_repo, free_user):
    with pytest.raises(StoreUnavailableError):
        await ledger(broken_message_repo).check_daily_limit(free_user.id)


def test_usage_to_dict():
    usage = DailyUsage(message_count=10, remaining_messages=40, is_limit_reached=False)
    assert usage.to_dict() == {
        "messageCount": 10,
        "remainingMessages": 40,
        "isLimitReached": False,
    }
