"""
user.py — ORM Models for Users and their Session Tokens

Purpose:
- Represent registered users of the system.
- Stores hashed passwords only — never raw.
- Track the set of live session tokens per user (one row per device/login).

Used by:
- services/users.py (registration, login, profile, avatar)
- core/security.py (auth gate lookup)

Tasks reference users through `task.owner_id`; deleting a user's tasks is
done explicitly by services/users.delete_user, not by an ORM hook.
"""

import datetime
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import relationship

from taskapi.core.database import Base


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime.datetime:
    # Naive UTC, matching what the database hands back
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "user"

    id = Column(String(32), primary_key=True, default=new_id)

    # Profile
    name = Column(String, nullable=False)
    age = Column(Integer, nullable=False, default=0)

    # Authentication fields (email is stored lower-cased)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    # Canonical PNG, see services/avatars.py
    avatar = Column(LargeBinary, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    tokens = relationship(
        "UserToken",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<User {self.email}>"


class UserToken(Base):
    """One live session token. Removing the row revokes the token."""

    __tablename__ = "user_token"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    token = Column(Text, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="tokens")

    def __repr__(self):
        return f"<UserToken user={self.user_id}>"
