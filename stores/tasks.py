from typing import List, Optional

from sqlalchemy import delete, or_, update
from sqlmodel import Session, col, select

from models import Task, utcnow


def create_task(
    session: Session,
    user_id: int,
    title: str,
    description: Optional[str],
    status: str,
) -> Task:
    task = Task(user_id=user_id, title=title, description=description, status=status)
    session.add(task)
    session.commit()
    session.refresh(task)
    return task


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_tasks(
    session: Session,
    user_id: int,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Task]:
    """
    Tasks owned by a user, newest first

    Args:
        session: Database session
        user_id: Owner
        status: Only tasks with this status
        search: Case-insensitive substring of title or description

    Returns:
        Matching tasks
    """
    query = select(Task).where(Task.user_id == user_id)

    if status:
        query = query.where(Task.status == status)

    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.where(
            or_(
                col(Task.title).ilike(pattern, escape="\\"),
                col(Task.description).ilike(pattern, escape="\\"),
            )
        )

    query = query.order_by(col(Task.created_at).desc(), col(Task.id).desc())

    return list(session.exec(query).all())


def get_task(session: Session, task_id: int, user_id: int) -> Optional[Task]:
    query = select(Task).where(Task.id == task_id, Task.user_id == user_id)
    return session.exec(query).first()


def update_task(session: Session, task_id: int, user_id: int, **fields) -> Optional[Task]:
    """
    Update an owned task in a single conditional statement

    Returns:
        The updated task, or None when no task with this id belongs to user_id
    """
    statement = (
        update(Task)
        .where(col(Task.id) == task_id, col(Task.user_id) == user_id)
        .values(**fields, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    matched = session.exec(statement).rowcount
    session.commit()

    if matched == 0:
        return None

    return get_task(session, task_id, user_id)


def delete_task(session: Session, task_id: int, user_id: int) -> bool:
    statement = (
        delete(Task)
        .where(col(Task.id) == task_id, col(Task.user_id) == user_id)
        .execution_options(synchronize_session=False)
    )
    deleted = session.exec(statement).rowcount
    session.commit()
    return deleted > 0
