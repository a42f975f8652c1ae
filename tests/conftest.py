"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from mindful.core.exceptions import UpstreamUnavailableError
from mindful.core.locks import SessionLockRegistry
from mindful.database import (
    Base,
    Message,
    ModeTransition,
    SessionCredit,
    TherapySession,
    UserProfile,
)
from mindful.repositories import (
    CreditRepository,
    MessageRepository,
    SessionRepository,
    TransitionRepository,
    UserRepository,
)
from mindful.services import SessionController
from mindful.services.classifier import FallbackClassifier


# ============================================================================
# Collaborators
# ============================================================================

class TickingClock:
    """Naive UTC clock that moves forward one second per reading."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeCompletion:
    """Scripted completion service recording every call."""

    def __init__(self, reply: str = "I hear you. Tell me more."):
        self.reply = reply
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def complete(self, messages, *, model=None, temperature=None, max_tokens=None):
        self.calls.append({
            "messages": messages,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error is not None:
            raise self.error
        return self.reply

    def fail(self, reason: str = "connection refused") -> None:
        self.error = UpstreamUnavailableError(reason)


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def session_repo(db):
    return SessionRepository(TherapySession, db)


@pytest.fixture
def message_repo(db):
    return MessageRepository(Message, db)


@pytest.fixture
def transition_repo(db):
    return TransitionRepository(ModeTransition, db)


@pytest.fixture
def credit_repo(db):
    return CreditRepository(SessionCredit, db)


@pytest.fixture
def user_repo(db):
    return UserRepository(UserProfile, db)


# ============================================================================
# Domain fixtures
# ============================================================================

@pytest.fixture
def clock():
    return TickingClock(datetime(2026, 3, 10, 12, 0, 0))


@pytest.fixture
def fake_completion():
    return FakeCompletion()


@pytest.fixture
async def free_user(user_repo):
    user = await user_repo.create(email="free@example.com", is_premium=False)
    await user_repo.commit()
    return user


@pytest.fixture
async def premium_user(user_repo):
    user = await user_repo.create(email="premium@example.com", is_premium=True)
    await user_repo.commit()
    return user


@pytest.fixture
def controller(db, fake_completion, clock):
    return SessionController.for_session(
        db,
        fake_completion,
        classifier=FallbackClassifier(),
        clock=clock,
        locks=SessionLockRegistry(),
    )


class BrokenSession:
    """Stands in for an AsyncSession whose every statement fails."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))


@pytest.fixture
def broken_message_repo():
    return MessageRepository(Message, BrokenSession())
