"""
security.py — Authentication Utilities (Password Hashing, Tokens, Auth Gate)

Purpose:
- Hash & verify passwords (never store raw passwords).
- Issue and decode signed session tokens (JWT).
- Provide the `get_current_session` dependency that guards protected routes.

Revocation model:
- A token is only accepted if its signature verifies AND it is still present
  in the owner's live token set (`user_token` table). Logout removes the
  row, so a token with a perfectly valid signature stops working.

This module does NOT:
- Define API routes → see taskapi/api/v1/users.py
- Mutate the token set → see taskapi/services/users.py
"""

import datetime
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from taskapi.core.config import settings
from taskapi.core.database import get_db
from taskapi.core.errors import AuthError
from taskapi.core.logging import get_logger
from taskapi.models.user import User, UserToken

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Password Hashing
# -----------------------------------------------------------------------------

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

def hash_password(raw_password: str) -> str:
    """
    Hash a plaintext password using bcrypt.
    """
    return pwd_context.hash(raw_password)

def verify_password(raw_password: str, hashed_password: str) -> bool:
    """
    Verify that a raw password matches its hashed stored version.
    """
    return pwd_context.verify(raw_password, hashed_password)


# -----------------------------------------------------------------------------
# JWT Token Handling
# -----------------------------------------------------------------------------

def create_access_token(user_id: str) -> str:
    """
    Create a signed session token bound to `user_id`.

    Payload:
        sub: user id
        iat: issue time
        jti: random id, so two logins in the same second get distinct tokens
        exp: only when JWT_EXPIRE_MINUTES is configured
    """
    now = datetime.datetime.now(datetime.timezone.utc)
    to_encode: Dict[str, Any] = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "jti": uuid.uuid4().hex,
    }
    if settings.JWT_EXPIRE_MINUTES:
        to_encode["exp"] = now + datetime.timedelta(minutes=settings.JWT_EXPIRE_MINUTES)

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT token.
    Returns the payload dict if valid, None if invalid.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


# -----------------------------------------------------------------------------
# Auth Gate
# -----------------------------------------------------------------------------

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentSession:
    """The authenticated user and the exact token the request presented."""

    user: User
    token: str


def resolve_session(db: Session, token: str) -> CurrentSession:
    """
    Map a raw bearer token onto a live session.

    Raises AuthError for a bad signature, a missing subject, an unknown user,
    or a token that is no longer in the user's live set.
    """
    payload = decode_token(token)
    user_id = payload.get("sub") if payload else None
    if not user_id:
        raise AuthError()

    user = db.execute(
        select(User)
        .join(UserToken, UserToken.user_id == User.id)
        .where(User.id == user_id, UserToken.token == token)
    ).scalars().first()
    if user is None:
        raise AuthError()

    return CurrentSession(user=user, token=token)


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentSession:
    """
    FastAPI dependency for every protected route.

    Flow:
    - Extract token from `Authorization: Bearer <token>`.
    - Verify signature and decode `sub`.
    - Require a user with that id whose live token set holds this token.
    """
    if credentials is None or not credentials.credentials:
        raise AuthError()
    return resolve_session(db, credentials.credentials)


def get_current_user(session: CurrentSession = Depends(get_current_session)) -> User:
    return session.user
