"""
Unit tests for JWT handling.

Tests token creation, verification, and expiration.
"""

from uuid import uuid4

import jwt
import pytest

from mindful.api.auth import create_jwt_token, user_id_from_token, verify_jwt_token
from mindful.config import settings
from mindful.core.exceptions import UnauthorizedError


def test_roundtrip_user_id():
    user_id = uuid4()

    assert user_id_from_token(create_jwt_token(user_id)) == user_id


def test_payload_carries_subject():
    user_id = uuid4()
    payload = verify_jwt_token(create_jwt_token(user_id))

    assert payload.sub == str(user_id)
    assert payload.exp is not None


def test_expired_token():
    token = create_jwt_token(uuid4(), expires_minutes=-1)

    with pytest.raises(UnauthorizedError, match="expired"):
        verify_jwt_token(token)


def test_wrong_secret():
    token = jwt.encode({"sub": str(uuid4())}, "some-other-secret", algorithm="HS256")

    with pytest.raises(UnauthorizedError):
        verify_jwt_token(token)


def test_garbage_token():
    with pytest.raises(UnauthorizedError):
        verify_jwt_token("not.a.token")


def test_missing_subject():
    token = jwt.encode({"email": "a@b.c"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(UnauthorizedError):
        verify_jwt_token(token)


def test_non_uuid_subject():
    token = jwt.encode({"sub": "user123"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(UnauthorizedError):
        user_id_from_token(token)
