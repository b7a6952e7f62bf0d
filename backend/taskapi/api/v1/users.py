"""
users.py — Account, Session and Avatar Endpoints (API Layer)

Purpose:
- Registration, login, logout (one session / all sessions).
- Read, update and delete the authenticated user's own profile.
- Upload, remove and publicly serve avatars.

This file should be thin — hashing, token bookkeeping and persistence live
in core/security.py and services/users.py. Domain errors raised below are
turned into responses by the handlers in api/handlers.py.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, File, Response, UploadFile, status
from sqlalchemy.orm import Session

from taskapi.core.config import settings
from taskapi.core.database import get_db
from taskapi.core.security import CurrentSession, get_current_session, get_current_user
from taskapi.models.user import User
from taskapi.schemas.user import AuthResponse, LoginRequest, UserCreate, UserOut, UserUpdate
from taskapi.services import users as user_service
from taskapi.services.avatars import normalize_avatar
from taskapi.services.notifications import send_cancellation_email, send_welcome_email

router = APIRouter(
    prefix="/users",
    tags=["users"]
)


# -----------------------------------------------------------------------------
# Registration / Sessions
# -----------------------------------------------------------------------------

@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    """
    POST /users

    Create an account, log it in, and queue the welcome email.
    """
    user, token = user_service.register_user(db, payload)
    background_tasks.add_task(send_welcome_email, user.email, user.name)
    return AuthResponse(user=UserOut.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    POST /users/login

    Unknown email and wrong password produce the same 400 response.
    """
    user, token = user_service.login(db, payload.email, payload.password)
    return AuthResponse(user=UserOut.model_validate(user), token=token)


@router.post("/logout")
def logout(session: CurrentSession = Depends(get_current_session), db: Session = Depends(get_db)):
    """POST /users/logout — revoke the token used for this request."""
    user_service.logout(db, session.user, session.token)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/logoutAll")
def logout_all(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """POST /users/logoutAll — revoke every token of the user, on every device."""
    user_service.logout_all(db, user)
    return Response(status_code=status.HTTP_200_OK)


# -----------------------------------------------------------------------------
# Profile
# -----------------------------------------------------------------------------

@router.get("/me", response_model=UserOut)
def read_me(user: User = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=UserOut)
def update_me(payload: UserUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    PATCH /users/me

    Allowed fields: name, email, password, age. Any other key fails the
    whole request with 400 before anything is written.
    """
    return user_service.update_profile(db, user, payload)


@router.delete("/me", response_model=UserOut)
def delete_me(
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    DELETE /users/me

    Removes the user's tasks, then the user. Returns the deleted profile and
    queues the cancellation email.
    """
    deleted = UserOut.model_validate(user)
    user_service.delete_user(db, user)
    background_tasks.add_task(send_cancellation_email, deleted.email, deleted.name)
    return deleted


# -----------------------------------------------------------------------------
# Avatar
# -----------------------------------------------------------------------------

@router.post("/me/avatar")
def upload_avatar(
    avatar: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    POST /users/me/avatar (multipart, field "avatar")

    Accepts jpg/jpeg/png up to AVATAR_MAX_BYTES; stores it as the canonical PNG.
    """
    # Read one byte past the cap so oversize uploads are detectable without buffering them whole
    data = avatar.file.read(settings.AVATAR_MAX_BYTES + 1)
    png = normalize_avatar(avatar.filename or "", data)
    user_service.set_avatar(db, user, png)
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/me/avatar")
def delete_avatar(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user_service.clear_avatar(db, user)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/{user_id}/avatar")
def read_avatar(user_id: str, db: Session = Depends(get_db)):
    """
    GET /users/{user_id}/avatar

    Public. Always served as image/png; 404 when the user or avatar is missing.
    """
    return Response(content=user_service.get_avatar(db, user_id), media_type="image/png")
