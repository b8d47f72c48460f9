"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens
"""
import pytest
from datetime import timedelta
from types import SimpleNamespace
from fastapi import HTTPException

from campusdesk.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    decode_token,
    build_token_data,
)
from campusdesk.models.user import UserRole


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        hashed = get_password_hash("testpassword123")

        assert hashed != "testpassword123"
        assert hashed.startswith("$2")

    def test_hash_password_different_each_time(self):
        # Bcrypt generates different salts
        assert get_password_hash("testpassword123") != get_password_hash("testpassword123")

    def test_verify_password_correct(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("wrongpassword", hashed) is False

    def test_hash_long_password_truncated(self):
        # Bcrypt has 72 byte limit
        hashed = get_password_hash("a" * 100)

        assert verify_password("a" * 72, hashed) is True


class TestTokens:

    def test_access_token_round_trip(self):
        token = create_access_token({"sub": "user-1", "role": "HOD"})

        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["role"] == "HOD"
        assert payload["type"] == "access"

    def test_refresh_token_type(self):
        payload = decode_token(create_refresh_token({"sub": "user-1"}))

        assert payload["type"] == "refresh"

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_garbage_token_rejected(self):
        with pytest.raises(HTTPException):
            decode_token("not-a-token")

    def test_build_token_data(self):
        user = SimpleNamespace(id="u1", email="hod@campus.edu", role=UserRole.HOD)

        assert build_token_data(user) == {"sub": "u1", "email": "hod@campus.edu", "role": "HOD"}
