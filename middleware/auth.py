from typing import Optional

from fastapi import Cookie, Depends
from sqlmodel import Session

from config import Settings, get_settings
from database import get_session
from models import User
from stores import users as user_store
from utils.errors import AuthError
from utils.jwt import get_user_id_from_token


def get_current_user(
    token: Optional[str] = Cookie(None),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Resolve the user behind the session cookie

    Args:
        token: Value of the "token" cookie
        session: Database session
        settings: Application settings (JWT secret)

    Returns:
        The authenticated user record

    Raises:
        AuthError: If the cookie is missing, the token does not verify, or
            the user it names no longer exists
    """
    if not token:
        raise AuthError("Authentication required. Please log in.")

    user_id = get_user_id_from_token(token, settings.jwt_secret)

    user = user_store.get_user(session, user_id)
    if user is None:
        raise AuthError("The user belonging to this token no longer exists.")

    return user
