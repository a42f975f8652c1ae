"""
Domain-specific exception hierarchy for Mindful.

All custom exceptions inherit from MindfulException for consistent error handling.
Each one carries an HTTP status and a machine-readable ``kind`` so callers can
tell a quota rejection apart from an upstream outage without parsing messages.
"""

from datetime import datetime
from typing import Any


class MindfulException(Exception):
    """
    Base exception for all Mindful errors.

    Attributes:
        message: Human-readable error message
        context: Additional context for debugging
    """

    kind: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def details(self) -> dict[str, Any]:
        """Extra fields rendered into the error response body."""
        return {}


# ============================================================================
# Request Exceptions
# ============================================================================

class UnauthorizedError(MindfulException):
    """Missing or invalid credential."""

    kind = "unauthorized"
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(MindfulException):
    """Resource absent or not owned by the caller."""

    kind = "not_found"
    status_code = 404

    def __init__(self, resource: str, id: Any):
        super().__init__(
            f"{resource} not found",
            context={"resource": resource, "id": str(id)}
        )
        self.resource = resource
        self.id = id


class InvalidInputError(MindfulException):
    """Missing or malformed input data."""

    kind = "invalid_input"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)


# ============================================================================
# Policy Exceptions
# ============================================================================

class QuotaExceededError(MindfulException):
    """Daily message ceiling reached."""

    kind = "quota_exceeded"
    status_code = 429

    def __init__(self, message_count: int, limit: int):
        super().__init__(
            f"Daily free tier limit reached ({limit} messages/day)",
            context={"message_count": message_count, "limit": limit}
        )
        self.message_count = message_count
        self.limit = limit
        self.remaining_messages = 0

    def details(self) -> dict[str, Any]:
        return {
            "messageCount": self.message_count,
            "remainingMessages": self.remaining_messages,
        }


class RenewalNotEligibleError(MindfulException):
    """Renewal attempted before the cooldown elapsed."""

    kind = "renewal_not_eligible"
    status_code = 403

    def __init__(self, next_eligible_at: datetime):
        super().__init__(
            "Cooldown period active",
            context={"next_eligible_at": next_eligible_at.isoformat()}
        )
        self.next_eligible_at = next_eligible_at

    def details(self) -> dict[str, Any]:
        return {"nextEligibleTimestamp": self.next_eligible_at.isoformat()}


class PaymentRequiredError(MindfulException):
    """Cooldown elapsed but no unredeemed session credit is held."""

    kind = "payment_required"
    status_code = 402

    def __init__(self, message: str = "Payment required to start your next session"):
        super().__init__(message)


# ============================================================================
# Collaborator Exceptions
# ============================================================================

class UpstreamUnavailableError(MindfulException):
    """Completion service unreachable or returned no usable content."""

    kind = "upstream_unavailable"
    status_code = 502

    def __init__(self, reason: str, url: str | None = None):
        super().__init__(
            f"Completion service unavailable: {reason}",
            context={"url": url} if url else None
        )
        self.reason = reason
        self.url = url


class StoreUnavailableError(MindfulException):
    """Data store read or write failed."""

    kind = "store_unavailable"
    status_code = 503

    def __init__(self, operation: str, original_error: Exception | None = None):
        super().__init__(
            f"Data store operation '{operation}' failed",
            context={"original": str(original_error)} if original_error else None
        )
        self.operation = operation
        self.original_error = original_error
