"""
tasks.py — Task Manager

Purpose:
- CRUD on tasks, always scoped to the authenticated owner.
- Translate the `GET /tasks` query string (completed / sortBy / limit / skip)
  into a query.

Ownership:
- Every query starts from `owned_tasks(owner_id)`, which applies the owner
  predicate before anything the client asked for. There is no code path
  that loads a task by id alone.
- A task that exists but belongs to someone else is reported exactly like a
  task that does not exist (NotFoundError).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from taskapi.core.errors import NotFoundError
from taskapi.core.logging import get_logger
from taskapi.models.task import Task
from taskapi.models.user import User
from taskapi.schemas.task import TaskCreate, TaskUpdate

logger = get_logger(__name__)

# Public (camelCase) field name → column
SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "description": Task.description,
    "completed": Task.completed,
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# -----------------------------------------------------------------------------
# Query options
# -----------------------------------------------------------------------------

@dataclass
class TaskQuery:
    """Filter / sort / pagination options for listing tasks."""

    completed: Optional[bool] = None
    sort_field: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None
    skip: int = 0


def parse_int(value: Optional[str]) -> Optional[int]:
    """
    Read a leading integer from a query-string value ("10", " 7abc" → 7).
    Returns None when the value is missing or does not start with a number.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_task_query(
    completed: Optional[str] = None,
    sort_by: Optional[str] = None,
    limit: Optional[str] = None,
    skip: Optional[str] = None,
) -> TaskQuery:
    """
    Build a TaskQuery from raw query-string values.

    - completed: any non-empty value filters; only "true" means True.
    - sort_by:   "field" or "field:asc" / "field:desc"; unknown fields are ignored.
    - limit:     missing, non-numeric or <= 0 → unbounded.
    - skip:      missing, non-numeric or < 0 → 0.
    """
    query = TaskQuery()

    if completed:
        query.completed = completed == "true"

    if sort_by:
        field, _, direction = sort_by.partition(":")
        if field in SORTABLE_FIELDS:
            query.sort_field = field
            query.descending = direction == "desc"
        else:
            logger.debug("Ignoring unsupported sort field %r", field)

    parsed_limit = parse_int(limit)
    if parsed_limit is not None and parsed_limit > 0:
        query.limit = parsed_limit

    parsed_skip = parse_int(skip)
    if parsed_skip is not None and parsed_skip > 0:
        query.skip = parsed_skip

    return query


def owned_tasks(owner_id: str) -> Select:
    """Base statement for every task read: the owner predicate comes first."""
    return select(Task).where(Task.owner_id == owner_id)


def build_list_statement(owner_id: str, query: TaskQuery) -> Select:
    stmt = owned_tasks(owner_id)

    if query.completed is not None:
        stmt = stmt.where(Task.completed == query.completed)

    if query.sort_field:
        column = SORTABLE_FIELDS[query.sort_field]
        stmt = stmt.order_by(column.desc() if query.descending else column.asc())
    # Insertion order as default / tie-breaker
    stmt = stmt.order_by(Task.seq.asc())

    if query.skip:
        stmt = stmt.offset(query.skip)
    if query.limit is not None:
        stmt = stmt.limit(query.limit)
    return stmt


# -----------------------------------------------------------------------------
# CRUD
# -----------------------------------------------------------------------------

def list_tasks(db: Session, owner: User, query: TaskQuery) -> List[Task]:
    return list(db.execute(build_list_statement(owner.id, query)).scalars().all())


def get_task(db: Session, owner: User, task_id: str) -> Task:
    """
    Raises:
        NotFoundError: no such task, or it belongs to another user.
    """
    task = db.execute(owned_tasks(owner.id).where(Task.id == task_id)).scalars().first()
    if task is None:
        raise NotFoundError()
    return task


def create_task(db: Session, owner: User, data: TaskCreate) -> Task:
    task = Task(
        description=data.description,
        completed=data.completed,
        owner_id=owner.id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("User %s created task %s", owner.id, task.id)
    return task


def update_task(db: Session, owner: User, task_id: str, data: TaskUpdate) -> Task:
    task = get_task(db, owner, task_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, owner: User, task_id: str) -> Task:
    task = get_task(db, owner, task_id)
    db.delete(task)
    db.commit()
    logger.info("User %s deleted task %s", owner.id, task_id)
    return task
