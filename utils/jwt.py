import jwt
from datetime import datetime, timedelta, timezone

from utils.errors import AuthError

ALGORITHM = "HS256"


def create_access_token(user_id: int, secret: str, expires_in: timedelta) -> str:
    """
    Sign a session token for a user

    Args:
        user_id: ID of the authenticated user
        secret: HS256 signing key
        expires_in: Token lifetime

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def get_user_id_from_token(token: str, secret: str) -> int:
    """
    Verify a session token and return the user ID it was issued for

    Args:
        token: JWT token string
        secret: HS256 signing key

    Returns:
        User ID from the subject claim

    Raises:
        AuthError: If the token is expired, malformed, or otherwise unusable
    """
    try:
        payload = jwt.decode(
            token, secret, algorithms=[ALGORITHM], options={"require": ["exp", "sub"]}
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Your token has expired. Please log in again.")
    except (jwt.DecodeError, jwt.InvalidSignatureError, jwt.InvalidAlgorithmError):
        raise AuthError("Invalid token. Please log in again.")
    except jwt.InvalidTokenError:
        raise AuthError("Authentication failed.")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthError("Authentication failed.")
