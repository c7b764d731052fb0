from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

TITLE_MAX_LENGTH = 255


def _string_or_none(value: Any) -> Optional[str]:
    """
    Keep strings (trimmed), drop anything else.

    Wrongly typed values are treated as absent rather than rejected so that
    the route can answer with its own 400 message.
    """
    if isinstance(value, str):
        return value.strip()
    return None


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    `title` stays optional at the schema level; the route rejects a missing or
    blank title with a 400 "Title is required".
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")

    @field_validator("title", mode="before")
    @classmethod
    def normalize_title(cls, v: Any) -> Optional[str]:
        """Strip whitespace; non-string input counts as missing."""
        return _string_or_none(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only recognized fields with the right JSON type
    are applied. Unknown fields are ignored.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "completed": True,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="New title for the todo item")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("title", mode="before")
    @classmethod
    def normalize_title(cls, v: Any) -> Optional[str]:
        return _string_or_none(v)

    @field_validator("completed", mode="before")
    @classmethod
    def strict_completed(cls, v: Any) -> Optional[bool]:
        """Only JSON booleans count; "true", 1 and friends are ignored."""
        return v if isinstance(v, bool) else None

    def changes(self) -> dict[str, Any]:
        """Return the recognized fields that were supplied."""
        fields: dict[str, Any] = {}
        if self.completed is not None:
            fields["completed"] = self.completed
        if self.title is not None:
            fields["title"] = self.title
        return fields


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy groceries",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456+00:00",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        # '+00:00' offset rather than 'Z' so datetime.fromisoformat reads it everywhere
        return value.isoformat()


# PUBLIC_INTERFACE
class DeleteResult(BaseModel):
    """Confirmation returned after a Todo is deleted."""

    message: str = Field("Todo deleted successfully", description="Human readable confirmation")
    todo: TodoOut = Field(..., description="The deleted Todo item")


# PUBLIC_INTERFACE
def validate_title(title: Optional[str]) -> str:
    """
    Apply the title rules shared by create and rename.

    Raises:
        ValueError: with the client-facing message when the title is unusable.
    """
    if not title:
        raise ValueError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return title
