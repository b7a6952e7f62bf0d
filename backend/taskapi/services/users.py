"""
users.py — Identity Manager

Purpose:
- Register users, verify credentials, and manage the per-user set of live
  session tokens (issue / revoke one / revoke all).
- Apply validated profile updates and avatar changes.
- Delete a user together with every task it owns.

Notes:
- Inputs arrive as already-validated schemas (taskapi/schemas/user.py);
  field allow-lists are enforced there at parse time.
- Email uniqueness is checked up front for a clean error and backed by the
  unique index for races.
- Nothing here sends email; routes schedule notifications after commit.
"""

from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskapi.core.errors import InvalidCredentialsError, NotFoundError, ValidationError
from taskapi.core.logging import get_logger
from taskapi.core.security import create_access_token, hash_password, pwd_context, verify_password
from taskapi.models.task import Task
from taskapi.models.user import User, UserToken
from taskapi.schemas.user import UserCreate, UserUpdate

logger = get_logger(__name__)

EMAIL_TAKEN = "Email is already taken"


def _email_taken(db: Session, email: str, exclude_user_id: Optional[str] = None) -> bool:
    stmt = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    return db.execute(stmt).first() is not None


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(
        select(User).where(User.email == email.strip().lower())
    ).scalars().first()


# -----------------------------------------------------------------------------
# Tokens
# -----------------------------------------------------------------------------

def issue_token(db: Session, user: User) -> str:
    """Mint a token for `user`, add it to the live set and persist."""
    token = create_access_token(user.id)
    user.tokens.append(UserToken(token=token))
    db.commit()
    return token


def logout(db: Session, user: User, token: str) -> None:
    """Revoke exactly the presented token; other devices stay logged in."""
    user.tokens = [t for t in user.tokens if t.token != token]
    db.commit()
    logger.info("User %s logged out one session", user.id)


def logout_all(db: Session, user: User) -> None:
    """Revoke every live token of `user`."""
    user.tokens.clear()
    db.commit()
    logger.info("User %s logged out of all sessions", user.id)


# -----------------------------------------------------------------------------
# Registration / Login
# -----------------------------------------------------------------------------

def register_user(db: Session, data: UserCreate) -> Tuple[User, str]:
    """
    Create a user and its first session token.

    Raises:
        ValidationError: if the email is already registered.
    """
    if _email_taken(db, data.email):
        raise ValidationError.for_field("email", EMAIL_TAKEN)

    user = User(
        name=data.name,
        email=data.email,
        age=data.age,
        hashed_password=hash_password(data.password),
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ValidationError.for_field("email", EMAIL_TAKEN)

    token = issue_token(db, user)
    logger.info("Registered user %s", user.id)
    return user, token


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Return the user matching `email` + `password`.

    Unknown email and wrong password raise the same InvalidCredentialsError.
    """
    user = get_user_by_email(db, email)
    if user is None:
        # Burn comparable time so response latency does not reveal the email exists
        pwd_context.dummy_verify()
        logger.info("Login failed")
        raise InvalidCredentialsError()

    if not verify_password(password, user.hashed_password):
        logger.info("Login failed")
        raise InvalidCredentialsError()

    return user


def login(db: Session, email: str, password: str) -> Tuple[User, str]:
    user = authenticate(db, email, password)
    token = issue_token(db, user)
    logger.info("User %s logged in", user.id)
    return user, token


# -----------------------------------------------------------------------------
# Profile
# -----------------------------------------------------------------------------

def update_profile(db: Session, user: User, data: UserUpdate) -> User:
    """
    Apply the fields the client sent. A new password is re-hashed; a new
    email must not belong to another user.
    """
    changes = data.model_dump(exclude_unset=True)

    if "email" in changes and _email_taken(db, changes["email"], exclude_user_id=user.id):
        raise ValidationError.for_field("email", EMAIL_TAKEN)

    for field, value in changes.items():
        if field == "password":
            user.hashed_password = hash_password(value)
        else:
            setattr(user, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError.for_field("email", EMAIL_TAKEN)

    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> int:
    """
    Delete every task owned by `user`, then the user and its tokens, in a
    single transaction. Returns the number of tasks removed.
    """
    try:
        result = db.execute(delete(Task).where(Task.owner_id == user.id))
        db.delete(user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Deleted user %s and %d task(s)", user.id, result.rowcount)
    return result.rowcount


# -----------------------------------------------------------------------------
# Avatar
# -----------------------------------------------------------------------------

def set_avatar(db: Session, user: User, png_bytes: bytes) -> None:
    user.avatar = png_bytes
    db.commit()
    logger.info("Stored avatar for user %s (%d bytes)", user.id, len(png_bytes))


def clear_avatar(db: Session, user: User) -> None:
    user.avatar = None
    db.commit()


def get_avatar(db: Session, user_id: str) -> bytes:
    """
    Raises:
        NotFoundError: unknown user, or a user without an avatar.
    """
    avatar = db.execute(select(User.avatar).where(User.id == user_id)).scalar_one_or_none()
    if not avatar:
        raise NotFoundError()
    return avatar
