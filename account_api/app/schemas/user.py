"""
Pydantic models for user data.

Defines schemas for signing up, signing in, updating and reading user
accounts.  Passwords are accepted on input only; none of the read
schemas carry a password or its hash, so serialising a response can
never leak one.

E‑mail addresses are trimmed and lower‑cased before validation so the
uniqueness constraint in the store compares normalised values.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, StringConstraints, model_validator


class UserRole(str, Enum):
    """Roles a user account can hold."""

    USER = "user"
    ADMIN = "admin"


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip().lower()
        if len(value) > 255:
            raise ValueError("Email must be at most 255 characters")
    return value


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=255)]
Email = Annotated[EmailStr, BeforeValidator(_normalize_email)]
Password = Annotated[str, StringConstraints(min_length=6, max_length=128)]


class SignupRequest(BaseModel):
    """Payload for ``POST /auth/signup``."""

    model_config = ConfigDict(extra="forbid")

    name: Name = Field(..., examples=["Jane Doe"])
    email: Email = Field(..., examples=["jane@example.com"])
    password: Password = Field(..., examples=["strongpassword"])
    role: UserRole = Field(UserRole.USER, examples=["user"])


class SigninRequest(BaseModel):
    """Payload for ``POST /auth/signin``."""

    email: Email = Field(..., examples=["jane@example.com"])
    password: str = Field(..., min_length=1, max_length=128)


class UserUpdate(BaseModel):
    """Partial update of a user account.

    Any subset of ``name``, ``email``, ``password`` and ``role`` may be
    supplied, but at least one of them is required and none may be
    ``null``.  Unknown fields are rejected rather than ignored.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[Name] = None
    email: Optional[Email] = None
    password: Optional[Password] = None
    role: Optional[UserRole] = None

    @model_validator(mode="after")
    def _require_changes(self) -> "UserUpdate":
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> Dict[str, Any]:
        """Return only the fields the client supplied."""
        return self.model_dump(exclude_unset=True)


class UserSummary(BaseModel):
    """Identifying fields of a user returned after signup."""

    id: int
    name: str
    email: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class UserRead(UserSummary):
    """Public projection of a stored user account."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserResponse(BaseModel):
    message: str
    user: UserRead


class SignupResponse(BaseModel):
    message: str
    user: UserSummary


class UserListResponse(BaseModel):
    message: str
    users: List[UserRead]
    count: int


class MessageResponse(BaseModel):
    message: str
