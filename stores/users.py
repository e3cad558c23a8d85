from typing import Optional

from sqlmodel import Session, select

from models import User, utcnow


def create_user(session: Session, name: str, email: str, password_hash: str) -> User:
    user = User(name=name, email=email, password=password_hash)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def get_user(session: Session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email)).first()


def update_user(session: Session, user: User, **fields) -> User:
    """
    Apply field changes to a user and bump updated_at

    Args:
        session: Database session
        user: Loaded user record
        **fields: Column values to set (name, email, password, profile_picture)

    Returns:
        The refreshed user
    """
    for key, value in fields.items():
        setattr(user, key, value)
    user.updated_at = utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)
    return user
