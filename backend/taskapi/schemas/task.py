from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def check_description(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Description is required")
    return value


class TaskCreate(BaseModel):
    # `owner` is not a field: it always comes from the session
    model_config = ConfigDict(extra="forbid")

    description: str
    completed: bool = False

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return check_description(v)


class TaskUpdate(BaseModel):
    """PATCH /tasks/{id} body. Allow-set is exactly {description, completed}."""

    model_config = ConfigDict(extra="forbid")

    description: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("description", "completed", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return check_description(v)


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str
    completed: bool
    owner: str = Field(validation_alias=AliasChoices("owner_id", "owner"))
    createdAt: datetime = Field(validation_alias=AliasChoices("created_at", "createdAt"))
    updatedAt: datetime = Field(validation_alias=AliasChoices("updated_at", "updatedAt"))
