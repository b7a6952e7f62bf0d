"""
tasks.py — Task CRUD Endpoints (API Layer)

All routes require a live session; every operation is scoped to the caller.

Examples:
    GET /tasks?completed=true
    GET /tasks?limit=10&skip=10
    GET /tasks?sortBy=createdAt:desc
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskapi.core.database import get_db
from taskapi.core.security import get_current_user
from taskapi.models.user import User
from taskapi.schemas.task import TaskCreate, TaskOut, TaskUpdate
from taskapi.services import tasks as task_service

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"]
)


@router.get("", response_model=List[TaskOut])
def list_tasks(
    completed: Optional[str] = Query(None, description="Only tasks whose completed flag matches (\"true\" / \"false\")"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="field:asc or field:desc"),
    limit: Optional[str] = Query(None, description="Page size; missing or non-numeric means unbounded"),
    skip: Optional[str] = Query(None, description="Number of tasks to skip"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Raw strings on purpose: a non-numeric limit/skip means "not given", not a 400
    query = task_service.parse_task_query(completed=completed, sort_by=sort_by, limit=limit, skip=skip)
    return task_service.list_tasks(db, user, query)


@router.get("/{task_id}", response_model=TaskOut)
def read_task(task_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return task_service.get_task(db, user, task_id)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(payload: TaskCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    POST /tasks

    The owner is always the authenticated user; the body cannot set it.
    """
    return task_service.create_task(db, user, payload)


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    PATCH /tasks/{task_id}

    Allowed fields: description, completed. A body with any other key is
    rejected (400) before the task is even looked up.
    """
    return task_service.update_task(db, user, task_id, payload)


@router.delete("/{task_id}", response_model=TaskOut)
def delete_task(task_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return task_service.delete_task(db, user, task_id)
