"""Unit tests for exception hierarchy."""

from datetime import datetime

from mindful.core.exceptions import (
    InvalidInputError,
    MindfulException,
    NotFoundError,
    PaymentRequiredError,
    QuotaExceededError,
    RenewalNotEligibleError,
    StoreUnavailableError,
    UnauthorizedError,
    UpstreamUnavailableError,
)


def test_mindful_exception_base():
    """Test base exception with context."""
    exc = MindfulException("test error", context={"key": "value"})
    assert exc.message == "test error"
    assert exc.context == {"key": "value"}
    assert "key=value" in str(exc)
    assert exc.details() == {}


def test_not_found_error():
    exc = NotFoundError("Session", "abc")

    assert exc.kind == "not_found"
    assert exc.status_code == 404
    assert "abc" in str(exc)


def test_quota_exceeded_details():
    exc = QuotaExceededError(50, 50)

    assert exc.status_code == 429
    assert exc.remaining_messages == 0
    assert exc.details() == {"messageCount": 50, "remainingMessages": 0}


def test_renewal_not_eligible_details():
    when = datetime(2026, 4, 9, 12, 0, 0)
    exc = RenewalNotEligibleError(when)

    assert exc.status_code == 403
    assert exc.details() == {"nextEligibleTimestamp": "2026-04-09T12:00:00"}


def test_store_unavailable_keeps_original():
    original = RuntimeError("disk I/O error")
    exc = StoreUnavailableError("MessageRepository.get_recent", original)

    assert exc.status_code == 503
    assert exc.original_error is original
    assert "disk I/O error" in str(exc)


def test_upstream_unavailable():
    exc = UpstreamUnavailableError("HTTP 500", "http://llm/chat/completions")

    assert exc.kind == "upstream_unavailable"
    assert exc.status_code == 502
    assert "llm" in str(exc)


def test_status_codes():
    assert UnauthorizedError().status_code == 401
    assert InvalidInputError("bad").status_code == 400
    assert PaymentRequiredError().status_code == 402


def test_exception_inheritance():
    for cls in (
        UnauthorizedError,
        NotFoundError,
        InvalidInputError,
        QuotaExceededError,
        RenewalNotEligibleError,
        PaymentRequiredError,
        UpstreamUnavailableError,
        StoreUnavailableError,
    ):
        assert issubclass(cls, MindfulException)
