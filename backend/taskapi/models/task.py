"""
task.py — ORM Model for Tasks

Every task has exactly one owner. All reads and writes go through
services/tasks.py, which scopes every query by `owner_id`.

`seq` is an internal autoincrement key that records insertion order; the
public identifier is the opaque string `id`.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from taskapi.core.database import Base
from taskapi.models.user import new_id, utcnow


class Task(Base):
    __tablename__ = "task"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, index=True, nullable=False, default=new_id)

    description = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)

    # Owner — set from the authenticated session, never from request input
    owner_id = Column(String(32), ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Task {self.id} | owner={self.owner_id} | completed={self.completed}>"
