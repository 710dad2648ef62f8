"""Unit tests for JWT token creation, decoding, and verification."""

import uuid
from datetime import timedelta

import pytest
from jose import JWTError, jwt

from travelworld.auth.jwt import Identity, create_access_token, decode_token, verify_token
from travelworld.config import settings
from travelworld.errors import InvalidToken


class TestCreateAccessToken:
    """Test access token creation."""

    def test_contains_identity_claims(self):
        user_id = uuid.uuid4()
        payload = decode_token(create_access_token(user_id, "user", "alice"))
        assert payload["sub"] == str(user_id)
        assert payload["role"] == "user"
        assert payload["username"] == "alice"

    def test_username_optional(self):
        payload = decode_token(create_access_token(uuid.uuid4(), "admin"))
        assert "username" not in payload

    def test_default_expiry_is_seven_days(self):
        payload = decode_token(create_access_token(uuid.uuid4(), "user"))
        assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60

    def test_custom_expiry_delta(self):
        token = create_access_token(uuid.uuid4(), "user", expires_delta=timedelta(hours=1))
        payload = decode_token(token)
        assert payload["exp"] - payload["iat"] == 3600


class TestDecodeToken:
    """Test raw decoding."""

    def test_expired_token_raises(self):
        token = create_access_token(uuid.uuid4(), "user", expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_wrong_secret_raises(self):
        token = jwt.encode({"sub": str(uuid.uuid4()), "role": "user"}, "other-secret", algorithm="HS256")
        with pytest.raises(JWTError):
            decode_token(token)


class TestVerifyToken:
    """Test verification into an Identity."""

    def test_valid_token(self):
        user_id = uuid.uuid4()
        identity = verify_token(create_access_token(user_id, "admin", "root"))
        assert identity == Identity(id=user_id, role="admin", username="root")
        assert identity.is_admin

    def test_regular_user_is_not_admin(self):
        identity = verify_token(create_access_token(uuid.uuid4(), "user"))
        assert not identity.is_admin

    def test_expired_token(self):
        token = create_access_token(uuid.uuid4(), "user", expires_delta=timedelta(seconds=-1))
        with pytest.raises(InvalidToken):
            verify_token(token)

    def test_garbage_token(self):
        with pytest.raises(InvalidToken):
            verify_token("not.a.valid.jwt")

    def test_missing_role(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(InvalidToken):
            verify_token(token)

    def test_non_uuid_subject(self):
        token = jwt.encode(
            {"sub": "user-123", "role": "user"},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(InvalidToken):
            verify_token(token)
