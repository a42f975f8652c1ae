"""
Session lifecycle controller.

Entry point for everything a user does with a session: sending turns,
switching modes, listing and deleting sessions, and (through the renewal
gate) opening the next one.

Turn order:
    validate -> lock session -> lock user -> quota -> classify + score ->
    mode change -> user message (committed) -> unlock user -> context ->
    completion -> assistant message -> message count

A turn that fails at the completion call leaves the user message and any
mode change committed, with no assistant reply. Nothing is retried; the
caller gets UpstreamUnavailableError and may resend.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..core import modes, sentiment
from ..core.exceptions import (
    InvalidInputError,
    NotFoundError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from ..core.locks import SessionLockRegistry, session_locks
from ..core.modes import Mode, DEFAULT_MODE
from ..database import (
    Message,
    ModeTransition,
    SessionCredit,
    TherapySession,
    UserProfile,
    utcnow,
)
from ..repositories import (
    CreditRepository,
    MessageRepository,
    SessionRepository,
    TransitionRepository,
)
from .classifier import ModeClassifier, build_classifier
from .completion import CompletionService
from .context import ContextAssembler
from .mode_history import ModeHistory
from .quota import DailyUsage, QuotaLedger
from .renewal import Eligibility, RenewalGate, RenewalResult
from .titles import TitleGenerator

MAX_HISTORY_LIMIT = 200
TITLE_SOURCE_MESSAGES = 3


@dataclass(frozen=True)
class TurnResult:
    reply: str
    mode: Mode
    sentiment: float
    remaining_messages: int

    def to_dict(self) -> dict:
        return {
            "reply": self.reply,
            "mode": self.mode.value,
            "sentiment": self.sentiment,
            "remainingMessages": self.remaining_messages,
        }


@dataclass(frozen=True)
class ModeSwitchResult:
    previous_mode: Mode
    current_mode: Mode
    changed: bool
    suggested_mode: Optional[Mode] = None

    def to_dict(self) -> dict:
        return {
            "previousMode": self.previous_mode.value,
            "currentMode": self.current_mode.value,
            "changed": self.changed,
            "suggestedMode": self.suggested_mode.value if self.suggested_mode else None,
        }


class SessionController:
    """Orchestrates turns and session lifecycle for one unit of work."""

    def __init__(
        self,
        session_repo: SessionRepository,
        message_repo: MessageRepository,
        transition_repo: TransitionRepository,
        credit_repo: CreditRepository,
        completion: CompletionService,
        classifier: Optional[ModeClassifier] = None,
        clock: Callable[[], datetime] = utcnow,
        locks: SessionLockRegistry = session_locks,
    ):
        self.session_repo = session_repo
        self.message_repo = message_repo
        self.completion = completion
        self.classifier = classifier or build_classifier(completion)
        self.clock = clock
        self.locks = locks

        self.quota = QuotaLedger(message_repo, clock=clock)
        self.context = ContextAssembler(message_repo)
        self.mode_history = ModeHistory(session_repo, transition_repo, clock=clock)
        self.renewal = RenewalGate(session_repo, credit_repo, completion, clock=clock)
        self.titles = TitleGenerator(completion)

    @classmethod
    def for_session(
        cls,
        db: AsyncSession,
        completion: CompletionService,
        **kwargs: Any,
    ) -> "SessionController":
        """Controller whose repositories share one database session."""
        return cls(
            session_repo=SessionRepository(TherapySession, db),
            message_repo=MessageRepository(Message, db),
            transition_repo=TransitionRepository(ModeTransition, db),
            credit_repo=CreditRepository(SessionCredit, db),
            completion=completion,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    async def send_turn(self, user: UserProfile, session_id: Optional[UUID], text: Any) -> TurnResult:
        """
        Process one user message and return the assistant's reply.

        Raises:
            InvalidInputError: Missing text or session id
            NotFoundError: Session absent or owned by someone else
            QuotaExceededError: Daily ceiling already reached; nothing written
            UpstreamUnavailableError: Completion failed; user message kept
            StoreUnavailableError: Any store read or write failed
        """
        if session_id is None:
            raise InvalidInputError("Session id is required")
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Message text is required")

        async with self.locks.hold(session_id):
            session = await self._get_owned(user.id, session_id)

            # The quota spans all of a user's sessions; the user key is held
            # until the user message is committed.
            async with self.locks.hold(("quota", user.id)):
                usage = await self.quota.check_daily_limit(user.id)
                if usage.is_limit_reached:
                    logger.info(f"User {user.id} hit the daily limit ({usage.message_count})")
                    raise QuotaExceededError(usage.message_count, self.quota.limit)

                mode, score = await asyncio.gather(self._classify(text), self._score(text))

                await self.mode_history.change_mode(session, mode)
                await self.message_repo.create(
                    session_id=session.id,
                    user_id=user.id,
                    role="user",
                    content=text,
                    mode=mode.value,
                    sentiment_score=score,
                    created_at=self.clock(),
                )
                await self.message_repo.commit()

            context = await self.context.build_context(session.id, modes.system_prompt_for(mode))
            reply = await self.completion.complete(context, model=settings.CHAT_MODEL)
            if not isinstance(reply, str) or not reply.strip():
                raise UpstreamUnavailableError("empty reply")

            await self.message_repo.create(
                session_id=session.id,
                user_id=user.id,
                role="assistant",
                content=reply,
                mode=mode.value,
                created_at=self.clock(),
            )
            if not await self.session_repo.increment_message_count(session.id, 2):
                raise NotFoundError("Session", session.id)
            await self.session_repo.commit()

        return TurnResult(
            reply=reply,
            mode=mode,
            sentiment=score,
            remaining_messages=usage.remaining_messages - 1,
        )

    async def _classify(self, text: str) -> Mode:
        try:
            return await self.classifier.classify(text)
        except Exception as e:
            logger.warning(f"Mode classification failed, using {DEFAULT_MODE.value}: {e}")
            return DEFAULT_MODE

    async def _score(self, text: str) -> float:
        return sentiment.score(text)

    # ------------------------------------------------------------------
    # Usage and renewal
    # ------------------------------------------------------------------

    async def get_daily_usage(self, user: UserProfile) -> DailyUsage:
        return await self.quota.check_daily_limit(user.id)

    async def get_user_stats(self, user: UserProfile) -> dict:
        usage = await self.quota.check_daily_limit(user.id)
        total = await self.session_repo.count_user_sessions(user.id)
        return {
            "messagesUsedToday": usage.message_count,
            "remainingMessages": usage.remaining_messages,
            "isLimitReached": usage.is_limit_reached,
            "totalSessions": total,
            "isPremium": user.is_premium,
        }

    async def get_renewal_eligibility(self, user: UserProfile) -> Eligibility:
        return await self.renewal.get_renewal_eligibility(user)

    async def renew_session(self, user: UserProfile) -> RenewalResult:
        return await self.renewal.renew_session(user)

    async def record_credit(self, user: UserProfile, payment_id: Any) -> SessionCredit:
        if not isinstance(payment_id, str) or not payment_id.strip():
            raise InvalidInputError("Payment id is required")
        return await self.renewal.record_credit(user.id, payment_id.strip())

    # ------------------------------------------------------------------
    # Session management
    # ------------------------------------------------------------------

    async def create_session(
        self,
        user: UserProfile,
        title: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> TherapySession:
        if mode is None:
            initial = modes.TIER_DEFAULT_MODES[bool(user.is_premium)]
        else:
            initial = Mode.parse(mode)
            if initial is None:
                raise InvalidInputError(f"Unknown mode: {mode}")

        now = self.clock()
        data = dict(user_id=user.id, current_mode=initial.value, created_at=now, updated_at=now)
        if title and title.strip():
            data["title"] = title.strip()

        session = await self.session_repo.create(**data)
        await self.session_repo.commit()
        logger.info(f"Created session {session.id} for user {user.id} in {initial.value}")
        return session

    async def list_sessions(self, user: UserProfile) -> List[TherapySession]:
        return await self.session_repo.get_user_sessions(user.id)

    async def get_history(self, user: UserProfile, session_id: UUID, limit: int = 50) -> List[Message]:
        if limit < 1 or limit > MAX_HISTORY_LIMIT:
            raise InvalidInputError(f"limit must be between 1 and {MAX_HISTORY_LIMIT}")
        await self._get_owned(user.id, session_id)
        return await self.message_repo.get_history(session_id, user.id, limit=limit)

    async def switch_mode(
        self,
        user: UserProfile,
        session_id: Optional[UUID],
        new_mode: Any,
        message: Optional[str] = None,
    ) -> ModeSwitchResult:
        """Manual mode change; also reports what the keyword table would pick for ``message``."""
        if session_id is None:
            raise InvalidInputError("Session id is required")
        target = Mode.parse(new_mode)
        if target is None:
            raise InvalidInputError(f"Unknown mode: {new_mode}")

        async with self.locks.hold(session_id):
            session = await self._get_owned(user.id, session_id)
            previous = Mode.parse(session.current_mode) or DEFAULT_MODE
            transition = await self.mode_history.change_mode(session, target)
            await self.session_repo.commit()

        return ModeSwitchResult(
            previous_mode=previous,
            current_mode=target,
            changed=transition is not None,
            suggested_mode=modes.classify(message) if message else None,
        )

    async def get_mode_history(self, user: UserProfile, session_id: UUID) -> List[ModeTransition]:
        await self._get_owned(user.id, session_id)
        return await self.mode_history.get_transitions(session_id)

    async def complete_session(self, user: UserProfile, session_id: UUID) -> TherapySession:
        session = await self._get_owned(user.id, session_id)
        if not await self.session_repo.mark_complete(session.id):
            raise NotFoundError("Session", session_id)
        await self.session_repo.commit()
        session.is_complete = True
        return session

    async def delete_session(self, user: UserProfile, session_id: UUID) -> None:
        """Delete a session together with its messages and transitions."""
        async with self.locks.hold(session_id):
            await self._get_owned(user.id, session_id)
            if not await self.session_repo.delete_cascade(session_id, user.id):
                raise NotFoundError("Session", session_id)
            await self.session_repo.commit()
        logger.info(f"Deleted session {session_id} for user {user.id}")

    async def generate_title(self, user: UserProfile, session_id: UUID) -> str:
        session = await self._get_owned(user.id, session_id)
        first = await self.message_repo.get_first_user_messages(session.id, limit=TITLE_SOURCE_MESSAGES)
        mode = Mode.parse(session.current_mode) or DEFAULT_MODE

        title = await self.titles.generate([m.content for m in first], mode)
        if not await self.session_repo.set_title(session.id, title):
            raise NotFoundError("Session", session_id)
        await self.session_repo.commit()
        session.title = title
        return title

    async def _get_owned(self, user_id: UUID, session_id: UUID) -> TherapySession:
        session = await self.session_repo.get_owned(session_id, user_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        return session
