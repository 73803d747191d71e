"""Tests for JWT utilities."""
import time
from datetime import timedelta

import jwt
import pytest
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from tailorbook.lib.jwt import create_access_token, get_user_from_token, verify_token
from tailorbook.lib.settings import settings


USER_ID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.mark.unit
def test_create_and_verify_token():
    token = create_access_token(USER_ID, "customer")

    assert isinstance(token, str)
    assert len(token) > 0

    payload = verify_token(token)
    assert payload["sub"] == USER_ID
    assert payload["role"] == "customer"
    assert "iat" in payload
    assert "exp" in payload


@pytest.mark.unit
def test_get_user_from_token():
    token = create_access_token(USER_ID, "admin")

    extracted_id, extracted_role = get_user_from_token(token)
    assert extracted_id == USER_ID
    assert extracted_role == "admin"


@pytest.mark.unit
def test_token_without_role_claim():
    token = jwt.encode({"sub": USER_ID}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    with pytest.raises(InvalidTokenError):
        get_user_from_token(token)


@pytest.mark.unit
def test_expired_token():
    token = create_access_token(USER_ID, "admin", expires_delta=timedelta(seconds=1))

    time.sleep(2)

    with pytest.raises(ExpiredSignatureError):
        verify_token(token)


@pytest.mark.unit
def test_invalid_token():
    with pytest.raises(InvalidTokenError):
        verify_token("not.a.valid.token")


@pytest.mark.unit
def test_tampered_token():
    token = create_access_token(USER_ID, "customer")
    tampered_token = token[:-5] + "XXXXX"

    with pytest.raises(InvalidTokenError):
        verify_token(tampered_token)


@pytest.mark.unit
def test_token_signed_with_other_secret():
    token = jwt.encode(
        {"sub": USER_ID, "role": "admin"},
        "some-other-secret-that-is-long-enough",
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(InvalidTokenError):
        verify_token(token)


@pytest.mark.unit
def test_custom_expiry():
    token = create_access_token(USER_ID, "customer", expires_delta=timedelta(hours=1))

    payload = verify_token(token)
    diff = payload["exp"] - payload["iat"]

    # Should be close to 3600 seconds (1 hour)
    assert 3590 < diff < 3610
