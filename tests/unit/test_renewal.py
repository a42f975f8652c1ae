"""Unit tests for the cooldown/credit gate."""

from datetime import timedelta

import pytest

from mindful.core import modes
from mindful.core.exceptions import PaymentRequiredError, RenewalNotEligibleError
from mindful.services.renewal import RenewalGate


@pytest.fixture
def gate(session_repo, credit_repo, fake_completion, clock):
    return RenewalGate(session_repo, credit_repo, fake_completion, clock=clock)


async def past_session(session_repo, user, clock, age, is_complete=True):
    created = clock.now - age
    session = await session_repo.create(
        user_id=user.id,
        created_at=created,
        updated_at=created,
        is_complete=is_complete,
    )
    await session_repo.commit()
    return session


# ============================================================================
# Eligibility
# ============================================================================

async def test_premium_always_eligible(gate, session_repo, premium_user, clock):
    await past_session(session_repo, premium_user, clock, timedelta(days=2))

    eligibility = await gate.get_renewal_eligibility(premium_user)

    assert eligibility.eligible is True
    assert eligibility.next_eligible_at is None


async def test_no_prior_session_is_eligible(gate, free_user):
    eligibility = await gate.get_renewal_eligibility(free_user)

    assert eligibility.eligible is True
    assert eligibility.first_session is True


async def test_recent_open_session_is_resumable(gate, session_repo, free_user, clock):
    session = await past_session(session_repo, free_user, clock, timedelta(hours=3), is_complete=False)

    eligibility = await gate.get_renewal_eligibility(free_user)

    assert eligibility.eligible is True
    assert eligibility.resumable_session.id == session.id


async def test_ten_days_is_not_eligible(gate, session_repo, free_user, clock):
    session = await past_session(session_repo, free_user, clock, timedelta(days=10))

    eligibility = await gate.get_renewal_eligibility(free_user)

    assert eligibility.eligible is False
    assert eligibility.next_eligible_at == session.created_at + timedelta(days=30)
    assert eligibility.to_dict()["nextEligibleTimestamp"] == (
        session.created_at + timedelta(days=30)
    ).isoformat()


async def test_thirty_one_days_is_eligible(gate, session_repo, free_user, clock):
    await past_session(session_repo, free_user, clock, timedelta(days=31))

    eligibility = await gate.get_renewal_eligibility(free_user)

    assert eligibility.eligible is True
    assert eligibility.resumable_session is None


async def test_partial_day_does_not_count(gate, session_repo, free_user, clock):
    await past_session(session_repo, free_user, clock, timedelta(days=29, hours=23))

    eligibility = await gate.get_renewal_eligibility(free_user)

    assert eligibility.eligible is False


async def test_cooldown_counts_from_session_start(gate, session_repo, message_repo, free_user, clock):
    session = await past_session(session_repo, free_user, clock, timedelta(days=31), is_complete=False)
    await message_repo.create(
        session_id=session.id,
        user_id=free_user.id,
        role="user",
        content="still talking",
        mode="Reflect",
        created_at=clock.now - timedelta(hours=2),
    )
    await message_repo.commit()

    eligibility = await gate.get_renewal_eligibility(free_user)

    assert eligibility.eligible is True
    assert eligibility.resumable_session is None


async def test_credit_does_not_shorten_cooldown(gate, session_repo, free_user, clock):
    await past_session(session_repo, free_user, clock, timedelta(days=10))
    await gate.record_credit(free_user.id, "PAY-1")

    with pytest.raises(RenewalNotEligibleError) as exc_info:
        await gate.renew_session(free_user)

    assert exc_info.value.details()["nextEligibleTimestamp"]


# ============================================================================
# Renewal
# ============================================================================

async def test_renew_redeems_credit_once(gate, session_repo, credit_repo, free_user, clock, fake_completion):
    await past_session(session_repo, free_user, clock, timedelta(days=31))
    credit = await gate.record_credit(free_user.id, "PAY-1")
    fake_completion.reply = "Welcome back, friend."

    result = await gate.renew_session(free_user)

    assert result.renewed is True
    assert result.credit_id == credit.id
    assert result.opening_message == "Welcome back, friend."
    assert result.session.opening_message == "Welcome back, friend."
    assert result.session.current_mode == modes.TIER_DEFAULT_MODES[False].value
    assert await credit_repo.get_unredeemed(free_user.id) == []

    again = await gate.renew_session(free_user)

    assert again.renewed is False
    assert again.session.id == result.session.id
    assert again.credit_id is None


async def test_redeem_is_conditional(credit_repo, free_user, clock):
    credit = await credit_repo.create(user_id=free_user.id, payment_id="PAY-9")

    assert await credit_repo.redeem(credit.id, clock()) is True
    assert await credit_repo.redeem(credit.id, clock()) is False


async def test_oldest_credit_redeemed_first(gate, session_repo, credit_repo, free_user, clock):
    await past_session(session_repo, free_user, clock, timedelta(days=40))
    first = await gate.record_credit(free_user.id, "PAY-A")
    second = await gate.record_credit(free_user.id, "PAY-B")

    result = await gate.renew_session(free_user)

    assert result.credit_id == first.id
    remaining = await credit_repo.get_unredeemed(free_user.id)
    assert [c.id for c in remaining] == [second.id]


async def test_no_credit_requires_payment(gate, session_repo, free_user, clock):
    await past_session(session_repo, free_user, clock, timedelta(days=31))

    with pytest.raises(PaymentRequiredError):
        await gate.renew_session(free_user)

    assert await session_repo.count_user_sessions(free_user.id) == 1


async def test_first_session_needs_no_credit(gate, credit_repo, free_user):
    result = await gate.renew_session(free_user)

    assert result.renewed is True
    assert result.credit_id is None


async def test_premium_renews_without_credit(gate, session_repo, premium_user, clock):
    await past_session(session_repo, premium_user, clock, timedelta(days=3))

    result = await gate.renew_session(premium_user)

    assert result.renewed is True
    assert result.session.current_mode == modes.Mode.EVOLVE.value


async def test_greeting_falls_back_to_instruction(gate, free_user, fake_completion):
    fake_completion.fail()

    result = await gate.renew_session(free_user)

    assert result.opening_message == modes.GREETING_INSTRUCTIONS[False]


async def test_greeting_uses_tier_instruction(gate, premium_user, fake_completion):
    await gate.renew_session(premium_user)

    messages = fake_completion.calls[-1]["messages"]
    assert messages[0] == {"role": "system", "content": modes.GREETING_INSTRUCTIONS[True]}
    assert messages[1]["content"] == modes.GREETING_USER_PROMPT


async def test_record_credit_is_idempotent(gate, credit_repo, free_user):
    first = await gate.record_credit(free_user.id, "PAY-1")
    second = await gate.record_credit(free_user.id, "PAY-1")

    assert first.id == second.id
    assert len(await credit_repo.get_unredeemed(free_user.id)) == 1
