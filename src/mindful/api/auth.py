"""Bearer-token authentication.

Tokens are issued by the external identity provider; this module only
verifies them. ``sub`` carries the user id.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from pydantic import BaseModel, ValidationError

from ..config import settings
from ..core.exceptions import UnauthorizedError


class TokenPayload(BaseModel):
    """JWT token payload."""
    sub: str  # User ID
    exp: Optional[int] = None
    email: Optional[str] = None


def create_jwt_token(user_id: UUID, expires_minutes: int = 60) -> str:
    """Sign an access token. Used by tooling and tests; production tokens come from the identity provider."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_jwt_token(token: str) -> TokenPayload:
    """
    Decode and validate a token.

    Raises:
        UnauthorizedError: Bad signature, expired, or malformed payload
    """
    try:
        raw = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return TokenPayload(**raw)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except (jwt.InvalidTokenError, ValidationError):
        raise UnauthorizedError("Invalid token")


def user_id_from_token(token: str) -> UUID:
    payload = verify_jwt_token(token)
    try:
        return UUID(payload.sub)
    except ValueError:
        raise UnauthorizedError("Invalid token subject")
