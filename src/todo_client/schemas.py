from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from .models import Priority

# Shared type for incoming due dates which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]

_EMAIL_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)


def _as_utc(value: datetime) -> datetime:
    # Naive values carry no offset; they are taken as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError as e:
        # e.g. '0001-01-01T00:00:00+05:00' falls before datetime.min in UTC
        raise ValueError("dueDate out of range") from e



# PUBLIC_INTERFACE
def parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Normalize a due date into an aware UTC datetime.

    - None or an empty string means "no due date".
    - A date (not datetime) becomes midnight UTC of that day.
    - A datetime is converted to UTC; naive datetimes are taken as UTC.
    - A string is parsed as ISO8601 datetime or date; a trailing 'Z' is accepted.

    Raises:
        ValueError: when the value cannot be interpreted as a due date.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s[-1] in "Zz":
            s = s[:-1] + "+00:00"
        try:
            return _as_utc(datetime.fromisoformat(s))
        except ValueError:
            try:
                d = date.fromisoformat(s)
            except ValueError as e:
                raise ValueError(
                    "Invalid dueDate format. Use ISO8601 date or datetime string "
                    "(e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
                ) from e
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)

    raise ValueError("Invalid type for dueDate; expected date, datetime, or ISO8601 string.")


# PUBLIC_INTERFACE
def serialize_due_date(value: Optional[DueDateInput]) -> Optional[str]:
    """
    Render a due date as an ISO8601 UTC instant ('2025-01-31T00:00:00Z').

    The output keeps microseconds, so parse_due_date(serialize_due_date(d)) == d
    for every aware datetime d.
    """
    parsed = parse_due_date(value)
    if parsed is None:
        return None
    return parsed.isoformat().replace("+00:00", "Z")


def _clean_text(v: str) -> str:
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("text length must be between 1 and 200 characters")
    return s


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A task as confirmed by the remote store.

    Instances are immutable; merging a remote response replaces the whole record.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "65b2a9f0c1",
                "text": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "dueDate": "2025-02-01T00:00:00Z",
                "priority": "Medium",
            }
        },
    )

    id: str = Field(
        ...,
        validation_alias=AliasChoices("id", "_id"),
        description="Identifier assigned by the remote store",
    )
    text: str = Field(..., description="Short title of the task")
    description: Optional[str] = Field(default=None, description="Optional free text")
    completed: bool = Field(default=False, description="Completion status flag")
    due_date: Optional[datetime] = Field(
        default=None, alias="dueDate", description="Due instant (UTC) or None"
    )
    priority: Priority = Field(default=Priority.MEDIUM, description="Low, Medium or High")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Stores that hand out integer ids are accepted; ids are opaque strings here."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, v: Any) -> Any:
        return None if v == "" else v

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, v: Any) -> Any:
        return Priority.MEDIUM if v is None or v == "" else v

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return parse_due_date(v)

    @field_serializer("due_date")
    def dump_due(self, v: Optional[datetime]) -> Optional[str]:
        return serialize_due_date(v)


# PUBLIC_INTERFACE
class TaskDraft(BaseModel):
    """
    Body for creating a task. Validated before any remote call.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "text": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "dueDate": "2025-02-01",
                "priority": "High",
            }
        },
    )

    text: str = Field(..., description="Short title of the task", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional free text")
    completed: bool = Field(default=False, description="Completion status flag")
    due_date: Optional[datetime] = Field(
        default=None,
        alias="dueDate",
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00 UTC",
    )
    priority: Priority = Field(default=Priority.MEDIUM, description="Low, Medium or High")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _clean_text(v)

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, v: Any) -> Any:
        return None if v == "" else v

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        """
        Normalize dueDate from str/date/datetime to an aware UTC datetime.
        """
        return parse_due_date(v)

    @field_serializer("due_date")
    def dump_due(self, v: Optional[datetime]) -> Optional[str]:
        return serialize_due_date(v)

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for POST /tasks."""
        return self.model_dump(mode="json", by_alias=True)


# PUBLIC_INTERFACE
class TaskPatch(BaseModel):
    """
    Body for updating an existing task.
    All fields are optional; only provided fields are transmitted. An explicit
    dueDate of None clears the due date.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "text": "Buy groceries and supplies",
                "priority": "Low",
                "dueDate": "2025-02-02T09:30:00Z",
            }
        },
    )

    text: Optional[str] = Field(default=None, description="Short title of the task", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional free text")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    due_date: Optional[datetime] = Field(default=None, alias="dueDate", description="Due date/time or None")
    priority: Optional[Priority] = Field(default=None, description="Low, Medium or High")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> Optional[str]:
        """
        If text is provided, strip whitespace and enforce 1..200 length.
        """
        if v is None:
            return v
        return _clean_text(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return parse_due_date(v)

    @field_serializer("due_date")
    def dump_due(self, v: Optional[datetime]) -> Optional[str]:
        return serialize_due_date(v)

    @model_validator(mode="after")
    def reject_null_required(self) -> "TaskPatch":
        # text, completed and priority always hold a value on a task
        for name in ("text", "completed", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for PUT /tasks/{id}, holding only the fields that were set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# PUBLIC_INTERFACE
class LoginRequest(BaseModel):
    """Credentials exchanged for a bearer token."""

    model_config = ConfigDict(extra="forbid")

    email: str = Field(..., description="Account email address")
    password: str = Field(..., description="Account password", min_length=6)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        s = v.strip()
        if not _EMAIL_RE.match(s):
            raise ValueError("Invalid email address")
        return s


# PUBLIC_INTERFACE
class SignupRequest(LoginRequest):
    """
    Account registration. confirm_password is checked locally and never transmitted.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    username: str = Field(..., description="Display name", min_length=3)
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        s = v.strip()
        if len(s) < 3:
            raise ValueError("Username must be at least 3 characters")
        return s

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupRequest":
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"confirm_password"})


# PUBLIC_INTERFACE
class AuthToken(BaseModel):
    """Successful login/signup response."""

    token: str = Field(..., min_length=1, description="Bearer credential")
    username: str = Field(default="", description="Display name of the account")
