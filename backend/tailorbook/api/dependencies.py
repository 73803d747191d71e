"""
API dependencies for FastAPI dependency injection.

Provides database sessions, the authenticated actor, and service instances.
"""
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jwt.exceptions import InvalidTokenError
from sqlalchemy.orm import Session

from tailorbook.api.middleware.error_handler import UnauthorizedException
from tailorbook.lib.db import get_db as get_db_session
from tailorbook.lib.jwt import get_user_from_token
from tailorbook.models.users import User
from tailorbook.services.actor import Actor
from tailorbook.services.booking_lifecycle import BookingLifecycleService
from tailorbook.services.consultation_service import ConsultationService


# Re-export get_db for convenience
get_db = get_db_session


# Browser clients send the token in this cookie instead of the header
TOKEN_COOKIE_NAME = "token"

# auto_error=False so a missing header can fall back to the cookie
security = HTTPBearer(auto_error=False)


def get_current_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Actor:
    """
    Dependency resolving the caller to an Actor from a JWT.

    The role is taken from the stored user, not the token claim, so a
    demoted admin loses access without waiting for token expiry.

    Raises:
        UnauthorizedException: 401 if token missing/invalid or user unknown/inactive
    """
    token = credentials.credentials if credentials else request.cookies.get(TOKEN_COOKIE_NAME)
    if not token:
        raise UnauthorizedException("Not authorized, no token")

    try:
        user_id, _role = get_user_from_token(token)
    except InvalidTokenError as e:
        raise UnauthorizedException(f"Could not validate credentials: {e}")

    try:
        user = db.get(User, UUID(str(user_id)))
    except ValueError:
        raise UnauthorizedException("Invalid authentication token")

    if user is None or not user.is_active:
        raise UnauthorizedException("User not found")

    return Actor(id=user.id, role=user.role)


def get_booking_service(db: Session = Depends(get_db)) -> BookingLifecycleService:
    """Get BookingLifecycleService bound to the request's session."""
    return BookingLifecycleService(db)


def get_consultation_service(db: Session = Depends(get_db)) -> ConsultationService:
    """Get ConsultationService bound to the request's session."""
    return ConsultationService(db)
