"""Authentication and profile schemas."""
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from taskdesk.schemas.base import CamelModel


def _clean_username(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if len(value) < 3 or not value.replace("_", "").isalnum():
        raise ValueError("Username must be at least 3 characters of letters, digits or underscores")
    return value


class RegisterRequest(CamelModel):
    """Registration request body."""
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if isinstance(value, str) else value

    _username = field_validator("username")(_clean_username)


class LoginRequest(CamelModel):
    """Login request body."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=30)
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if isinstance(value, str) else value

    _username = field_validator("username")(_clean_username)


class UserResponse(CamelModel):
    """Public view of a user; never includes the password hash."""
    id: str
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            created_at=user.created_at,
        )


class AuthResponse(CamelModel):
    """Response containing the JWT issued on register or login."""
    message: str
    token: str
    user: UserResponse


class UserEnvelope(CamelModel):
    user: UserResponse


class UserMessageEnvelope(CamelModel):
    message: str
    user: UserResponse
