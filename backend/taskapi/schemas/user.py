"""
Request / response schemas for the /users routes.

The update schema is strict (`extra="forbid"`): a body naming any field
outside {name, email, password, age} fails validation as a whole.
UserOut is the only shape a user is ever serialized as, so the password
hash, token set and avatar bytes cannot leak through a response.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 6
# Largest value the `user.age` INTEGER column holds
AGE_MAX = 2**31 - 1


def check_password(value: str) -> str:
    value = value.strip()
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if "password" in value.lower():
        raise ValueError('Password cannot contain "password"')
    return value


def check_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


def check_age(value: int) -> int:
    if value < 0:
        raise ValueError("Age must be a positive number")
    if value > AGE_MAX:
        raise ValueError(f"Age must be at most {AGE_MAX}")
    return value


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    email: EmailStr
    password: str
    age: int = 0

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return _strip(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_name(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password(v)

    @field_validator("age")
    @classmethod
    def validate_age(cls, v: int) -> int:
        return check_age(v)


class UserUpdate(BaseModel):
    """PATCH /users/me body. Only fields present in the request are applied."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    age: Optional[int] = None

    @field_validator("name", "email", "password", "age", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        # Validators only run for fields the client actually sent
        if v is None:
            raise ValueError("Field cannot be null")
        return _strip(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_name(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password(v)

    @field_validator("age")
    @classmethod
    def validate_age(cls, v: int) -> int:
        return check_age(v)


class LoginRequest(BaseModel):
    """
    Schema for login POST.
    - `email`: User's login email (not format-checked; a bad address is just a failed login).
    - `password`: Raw password supplied by the user.
    """
    email: str
    password: str


class UserOut(BaseModel):
    """Public view of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    age: int
    createdAt: datetime = Field(validation_alias=AliasChoices("created_at", "createdAt"))
    updatedAt: datetime = Field(validation_alias=AliasChoices("updated_at", "updatedAt"))


class AuthResponse(BaseModel):
    """Returned by registration and login."""

    user: UserOut
    token: str
