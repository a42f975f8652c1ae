"""Unit tests for context assembly."""

from datetime import datetime, timedelta

import pytest

from mindful.core.exceptions import StoreUnavailableError
from mindful.services.context import ContextAssembler, ContextEntry

START = datetime(2026, 3, 10, 9, 0, 0)


@pytest.fixture
async def session(session_repo, free_user):
    session = await session_repo.create(user_id=free_user.id)
    await session_repo.commit()
    return session


async def add_turns(message_repo, session, count):
    for i in range(count):
        await message_repo.create(
            session_id=session.id,
            user_id=session.user_id,
            role="user" if i % 2 == 0 else "assistant",
            content=f"message {i}",
            mode="Reflect",
            created_at=START + timedelta(minutes=i),
        )
    await message_repo.commit()


async def test_empty_session_yields_only_system_entry(message_repo, session):
    context = await ContextAssembler(message_repo).build_context(session.id, "be kind")

    assert context == [{"role": "system", "content": "be kind"}]


async def test_twelve_messages_keep_latest_ten_in_order(message_repo, session):
    await add_turns(message_repo, session, 12)

    context = await ContextAssembler(message_repo, window=10).build_context(session.id, "prompt")

    assert len(context) == 11
    assert context[0] == {"role": "system", "content": "prompt"}
    assert [entry["content"] for entry in context[1:]] == [f"message {i}" for i in range(2, 12)]
    assert context[1]["role"] == "user"
    assert context[-1]["role"] == "assistant"


async def test_other_sessions_are_excluded(session_repo, message_repo, session, free_user):
    other = await session_repo.create(user_id=free_user.id)
    await add_turns(message_repo, other, 4)
    await add_turns(message_repo, session, 2)

    context = await ContextAssembler(message_repo).build_context(session.id, "prompt")

    assert len(context) == 3


async def test_fetch_failure_propagates(broken_message_repo, session):
    with pytest.raises(StoreUnavailableError):
        await ContextAssembler(broken_message_repo).build_context(session.id, "prompt")


def test_context_entry_to_dict():
    assert ContextEntry(role="user", content="hi").to_dict() == {"role": "user", "content": "hi"}
