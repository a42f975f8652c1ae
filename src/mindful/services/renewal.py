"""
Cooldown/credit gate for opening a new session.

Limited-tier users get one session per cooldown period. A prepaid credit
never shortens the wait; once it has elapsed, a held credit is redeemed to
open the next session automatically, and without one the user must pay
first. Premium users are never gated.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from loguru import logger

from ..config import settings
from ..core import modes
from ..core.exceptions import (
    PaymentRequiredError,
    RenewalNotEligibleError,
    UpstreamUnavailableError,
)
from ..database import SessionCredit, TherapySession, UserProfile, utcnow
from ..repositories.credit_repository import CreditRepository
from ..repositories.session_repository import SessionRepository
from .completion import CompletionService


@dataclass(frozen=True)
class Eligibility:
    eligible: bool
    next_eligible_at: Optional[datetime] = None
    resumable_session: Optional[TherapySession] = None
    first_session: bool = False

    def to_dict(self) -> dict:
        return {
            "eligible": self.eligible,
            "nextEligibleTimestamp": (
                self.next_eligible_at.isoformat() if self.next_eligible_at else None
            ),
            "resumableSessionId": (
                str(self.resumable_session.id) if self.resumable_session else None
            ),
        }


@dataclass(frozen=True)
class RenewalResult:
    session: TherapySession
    opening_message: Optional[str]
    renewed: bool
    credit_id: Optional[UUID] = None

    def to_dict(self) -> dict:
        return {
            "newSessionId": str(self.session.id),
            "openingMessage": self.opening_message,
            "renewed": self.renewed,
            "creditId": str(self.credit_id) if self.credit_id else None,
        }


class RenewalGate:
    """Decides when a user may open a new session and opens it."""

    def __init__(
        self,
        session_repo: SessionRepository,
        credit_repo: CreditRepository,
        completion: CompletionService,
        clock: Callable[[], datetime] = utcnow,
        cooldown_days: int | None = None,
        resumable_hours: int | None = None,
    ):
        self.session_repo = session_repo
        self.credit_repo = credit_repo
        self.completion = completion
        self.clock = clock
        self.cooldown = timedelta(
            days=cooldown_days if cooldown_days is not None else settings.RENEWAL_COOLDOWN_DAYS
        )
        self.resumable_window = timedelta(
            hours=resumable_hours if resumable_hours is not None else settings.RESUMABLE_WINDOW_HOURS
        )

    async def get_renewal_eligibility(self, user: UserProfile) -> Eligibility:
        if user.is_premium:
            return Eligibility(eligible=True)

        last = await self.session_repo.get_latest(user.id)
        if last is None:
            return Eligibility(eligible=True, first_session=True)

        elapsed = self.clock() - last.created_at
        if elapsed < self.resumable_window and not last.is_complete:
            return Eligibility(eligible=True, resumable_session=last)

        # Whole days only: 29 days and 23 hours is still inside the cooldown
        if elapsed.days >= self.cooldown.days:
            return Eligibility(eligible=True)

        return Eligibility(eligible=False, next_eligible_at=last.created_at + self.cooldown)

    async def renew_session(self, user: UserProfile) -> RenewalResult:
        """
        Open the user's next session, or hand back the one still in progress.

        Raises:
            RenewalNotEligibleError: Cooldown still running
            PaymentRequiredError: Cooldown over but no unredeemed credit held
        """
        eligibility = await self.get_renewal_eligibility(user)
        if not eligibility.eligible:
            raise RenewalNotEligibleError(eligibility.next_eligible_at)

        if eligibility.resumable_session is not None:
            session = eligibility.resumable_session
            logger.info(f"User {user.id} resuming session {session.id}")
            return RenewalResult(session=session, opening_message=session.opening_message, renewed=False)

        if user.is_premium or eligibility.first_session:
            opening = await self.opening_message(user.is_premium)
            session = await self._create_session(user, opening)
            await self.session_repo.commit()
            logger.info(f"Opened session {session.id} for user {user.id} without a credit")
            return RenewalResult(session=session, opening_message=opening, renewed=True)

        if not await self.credit_repo.get_unredeemed(user.id):
            raise PaymentRequiredError()

        opening = await self.opening_message(user.is_premium)
        try:
            credit = await self._redeem_oldest(user.id)
            if credit is None:
                raise PaymentRequiredError()
            session = await self._create_session(user, opening)
            await self.session_repo.commit()
        except Exception:
            await self.session_repo.rollback()
            raise

        logger.info(f"Redeemed credit {credit.id} for user {user.id}, opened session {session.id}")
        return RenewalResult(session=session, opening_message=opening, renewed=True, credit_id=credit.id)

    async def record_credit(self, user_id: UUID, payment_id: str) -> SessionCredit:
        """Store an unredeemed credit for a captured payment. Replays return the existing credit."""
        existing = await self.credit_repo.get_by_payment_id(payment_id)
        if existing is not None:
            logger.info(f"Payment {payment_id} already recorded as credit {existing.id}")
            return existing

        credit = await self.credit_repo.create(
            user_id=user_id,
            payment_id=payment_id,
            created_at=self.clock(),
        )
        await self.credit_repo.commit()
        logger.info(f"Recorded credit {credit.id} for user {user_id}")
        return credit

    async def opening_message(self, is_premium: bool) -> str:
        """Greeting for a new session; the fixed instruction text if the completion service fails."""
        instruction = modes.GREETING_INSTRUCTIONS[bool(is_premium)]
        try:
            return await self.completion.complete(
                [
                    {"role": "system", "content": instruction},
                    {"role": "user", "content": modes.GREETING_USER_PROMPT},
                ],
            )
        except UpstreamUnavailableError as e:
            logger.warning(f"Greeting generation failed, using instruction text: {e}")
            return instruction

    async def _redeem_oldest(self, user_id: UUID) -> Optional[SessionCredit]:
        # Another request may redeem a credit between the read and the update
        for credit in await self.credit_repo.get_unredeemed(user_id):
            if await self.credit_repo.redeem(credit.id, self.clock()):
                return credit
        return None

    async def _create_session(self, user: UserProfile, opening: str) -> TherapySession:
        now = self.clock()
        return await self.session_repo.create(
            user_id=user.id,
            current_mode=modes.TIER_DEFAULT_MODES[bool(user.is_premium)].value,
            opening_message=opening,
            created_at=now,
            updated_at=now,
        )
