import logging
from typing import List, Optional, Union

from sqlmodel import Session

from models import Task, TaskStatus
from schemas import TaskUpdate
from stores import tasks as task_store
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "status")
# Largest value an INTEGER primary key holds on Postgres
MAX_TASK_ID = 2**31 - 1


def _check_status(status: Optional[str]) -> None:
    if status not in TaskStatus.values():
        raise ValidationError(f"Status must be one of: {', '.join(TaskStatus.values())}")


def parse_task_id(task_id: Union[str, int]) -> int:
    """
    Parse a task id taken from the URL

    Raises:
        ValidationError: If it is not an integer between 1 and MAX_TASK_ID
    """
    text = str(task_id).strip()
    if not (text.isascii() and text.isdigit()) or not 1 <= int(text) <= MAX_TASK_ID:
        raise ValidationError("Invalid task ID")
    return int(text)


def create_task(
    session: Session,
    user_id: int,
    title: Optional[str],
    description: Optional[str] = None,
    status: Optional[str] = None,
) -> Task:
    title = title.strip() if title else title
    if not title:
        raise ValidationError("Title is required")

    if status is not None:
        _check_status(status)

    task = task_store.create_task(
        session,
        user_id=user_id,
        title=title,
        description=description or None,
        status=status or TaskStatus.PENDING.value,
    )
    logger.info("User %s created task %s", user_id, task.id)
    return task


def list_tasks(
    session: Session,
    user_id: int,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Task]:
    if status:
        _check_status(status)
    return task_store.list_tasks(session, user_id, status=status, search=search or None)


def get_task(session: Session, user_id: int, task_id: Union[str, int]) -> Task:
    task = task_store.get_task(session, parse_task_id(task_id), user_id)
    if task is None:
        raise NotFoundError("Task not found or you do not have permission to view it")
    return task


def update_task(
    session: Session,
    user_id: int,
    task_id: Union[str, int],
    changes: TaskUpdate,
) -> Task:
    """
    Apply a partial update to an owned task

    Only the fields present in changes.model_fields_set are written, so a
    description explicitly sent as null clears it while an omitted one is
    left alone.

    Raises:
        ValidationError: Bad id, bad status, blank title or nothing to update
        NotFoundError: No such task for this user
    """
    task_id = parse_task_id(task_id)
    provided = changes.model_fields_set

    if "status" in provided:
        _check_status(changes.status)

    fields = {name: getattr(changes, name) for name in UPDATABLE_FIELDS if name in provided}
    if not fields:
        raise ValidationError(
            "Please provide at least one field to update (title, description, or status)"
        )

    if "title" in fields:
        title = fields["title"].strip() if fields["title"] else ""
        if not title:
            raise ValidationError("Title cannot be empty")
        fields["title"] = title

    task = task_store.update_task(session, task_id, user_id, **fields)
    if task is None:
        raise NotFoundError("Task not found or you do not have permission to update it")

    logger.info("User %s updated task %s (%s)", user_id, task_id, ", ".join(sorted(fields)))
    return task


def delete_task(session: Session, user_id: int, task_id: Union[str, int]) -> None:
    task_id = parse_task_id(task_id)
    if not task_store.delete_task(session, task_id, user_id):
        raise NotFoundError("Task not found or you do not have permission to delete it")
    logger.info("User %s deleted task %s", user_id, task_id)
