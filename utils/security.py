import re
from functools import lru_cache

from passlib.hash import bcrypt

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.using(rounds=rounds).hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.verify(password, password_hash)


@lru_cache(maxsize=None)
def dummy_hash(rounds: int = 10) -> str:
    """Hash of a throwaway password, checked when a login names an unknown account"""
    return hash_password("not-a-real-password", rounds=rounds)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))
