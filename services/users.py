import logging
from typing import Optional

from sqlmodel import Session

from config import Settings
from models import User
from stores import users as user_store
from utils.cloudinary import CloudinaryUploader
from utils.errors import AuthError, ConflictError, NotFoundError, ValidationError
from utils.security import (
    MIN_PASSWORD_LENGTH,
    hash_password,
    is_valid_email,
    verify_password,
)

logger = logging.getLogger(__name__)


def get_profile(session: Session, user_id: int) -> User:
    user = user_store.get_user(session, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_profile(
    session: Session,
    user_id: int,
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    """
    Change the caller's name and/or email

    Raises:
        ValidationError: Nothing to update, blank name or malformed email
        ConflictError: Email belongs to another user
        NotFoundError: The user is gone
    """
    if not name and not email:
        raise ValidationError("Please provide at least one field to update (name or email)")

    fields = {}
    if name is not None:
        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        fields["name"] = name

    if email:
        if not is_valid_email(email):
            raise ValidationError("Please provide a valid email address")
        existing = user_store.get_user_by_email(session, email)
        if existing and existing.id != user_id:
            raise ConflictError("Email is already taken by another user")
        fields["email"] = email

    user = get_profile(session, user_id)
    user = user_store.update_user(session, user, **fields)
    logger.info("User %s updated profile (%s)", user_id, ", ".join(sorted(fields)))
    return user


def change_password(
    session: Session,
    settings: Settings,
    user_id: int,
    current_password: Optional[str],
    new_password: Optional[str],
) -> User:
    if not current_password or not new_password:
        raise ValidationError("Please provide current and new password")

    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    user = get_profile(session, user_id)
    if not verify_password(current_password, user.password):
        raise AuthError("Current password is incorrect")

    user = user_store.update_user(
        session, user, password=hash_password(new_password, rounds=settings.bcrypt_rounds)
    )
    logger.info("User %s changed password", user_id)
    return user


def update_profile_picture(
    session: Session,
    uploader: CloudinaryUploader,
    user_id: int,
    content: bytes,
    filename: str,
) -> User:
    user = get_profile(session, user_id)
    url = uploader.upload(content, user_id, filename=filename)
    user = user_store.update_user(session, user, profile_picture=url)
    logger.info("User %s uploaded a profile picture", user_id)
    return user
