from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import Optional
from database import get_session
from models import User
from schemas import TaskCreate, TaskUpdate, envelope, task_payload
from middleware.auth import get_current_user
from services import tasks as task_service

router = APIRouter()


@router.get("/tasks")
def list_tasks(
    status: Optional[str] = None,
    search: Optional[str] = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    """
    Get all tasks for authenticated user

    Args:
        status: Filter by status (pending, in_progress, completed)
        search: Case-insensitive text to look for in title or description
        user: Authenticated user
        session: Database session

    Returns:
        Envelope with the task list and its length
    """
    tasks = task_service.list_tasks(session, user.id, status=status, search=search)

    return envelope(
        results=len(tasks),
        data={"tasks": [task_payload(task) for task in tasks]},
    )


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    """
    Create a new task

    Args:
        task_data: Task creation data
        user: Authenticated user
        session: Database session

    Returns:
        Envelope with created task
    """
    task = task_service.create_task(
        session,
        user.id,
        title=task_data.title,
        description=task_data.description,
        status=task_data.status,
    )

    return envelope(message="Task created successfully", data={"task": task_payload(task)})


@router.get("/tasks/{task_id}")
def get_task(
    task_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    """
    Get task details

    Args:
        task_id: Task ID
        user: Authenticated user
        session: Database session

    Returns:
        Envelope with task details
    """
    task = task_service.get_task(session, user.id, task_id)

    return envelope(data={"task": task_payload(task)})


@router.put("/tasks/{task_id}")
def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    """
    Update a task

    Args:
        task_id: Task ID
        task_data: Fields to change; omitted fields are left untouched
        user: Authenticated user
        session: Database session

    Returns:
        Envelope with updated task
    """
    task = task_service.update_task(session, user.id, task_id, task_data)

    return envelope(message="Task updated successfully", data={"task": task_payload(task)})


@router.delete("/tasks/{task_id}")
def delete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    """
    Delete a task

    Args:
        task_id: Task ID
        user: Authenticated user
        session: Database session

    Returns:
        Envelope with success message
    """
    task_service.delete_task(session, user.id, task_id)

    return envelope(message="Task deleted successfully")
