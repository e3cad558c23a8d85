"""
Registration, login and session cookie handling

Session tokens are stateless JWTs stored in an HTTP-only cookie. Logging out
only clears the cookie on the client; a token copied before logout stays
valid until it expires because nothing is revoked server-side.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Response
from sqlmodel import Session

from config import Settings
from models import User
from stores import users as user_store
from utils.errors import AuthError, ConflictError, ValidationError
from utils.jwt import create_access_token
from utils.security import (
    MIN_PASSWORD_LENGTH,
    dummy_hash,
    hash_password,
    is_valid_email,
    verify_password,
)

logger = logging.getLogger(__name__)

COOKIE_NAME = "token"


def register(
    session: Session,
    settings: Settings,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
) -> User:
    """
    Create a user account

    Raises:
        ValidationError: Missing field, malformed email or short password
        ConflictError: Email already registered
    """
    name = name.strip() if name else name
    if not name or not email or not password:
        raise ValidationError("Please provide name, email, and password")

    if not is_valid_email(email):
        raise ValidationError("Please provide a valid email address")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    if user_store.get_user_by_email(session, email):
        raise ConflictError("User with this email already exists")

    password_hash = hash_password(password, rounds=settings.bcrypt_rounds)
    user = user_store.create_user(session, name, email, password_hash)

    logger.info("Registered user %s", user.id)
    return user


def login(
    session: Session,
    settings: Settings,
    email: Optional[str],
    password: Optional[str],
) -> User:
    """
    Check credentials

    Unknown email and wrong password raise the same error so callers cannot
    probe which accounts exist.
    """
    if not email or not password:
        raise ValidationError("Please provide email and password")

    user = user_store.get_user_by_email(session, email)
    if user is None:
        # Unknown emails cost one bcrypt check too
        verify_password(password, dummy_hash(settings.bcrypt_rounds))

    if user is None or not verify_password(password, user.password):
        logger.warning("Failed login attempt")
        raise AuthError("Invalid email or password")

    logger.info("User %s logged in", user.id)
    return user


def issue_session_cookie(response: Response, user: User, settings: Settings) -> str:
    """Sign a token for the user and set it as the session cookie"""
    token = create_access_token(user.id, settings.jwt_secret, settings.jwt_expires_in)
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=settings.cookie_max_age,
        expires=datetime.now(timezone.utc) + timedelta(seconds=settings.cookie_max_age),
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return token


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    logger.info("User logged out")
