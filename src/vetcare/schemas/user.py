"""
Staff user Pydantic schemas for login and account management.
"""

from typing import Optional

from pydantic import Field, field_validator

from ..utils.validation import require_text, validate_email
from .base import InputSchema, ResponseSchema

MIN_PASSWORD_LENGTH = 8


class LoginRequest(InputSchema):
    """Credentials submitted to obtain a token."""

    email: str = Field("", description="Login email")
    password: str = Field("", description="Plain-text password")


class UserCreate(InputSchema):
    """Schema for registering a staff account."""

    email: str = Field(..., description="Login email")
    password: str = Field(..., description="Plain-text password")
    name: str = Field(..., description="Display name", max_length=200)
    role: str = Field("admin", description="Staff role", max_length=50)

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        result = validate_email(v)
        if not result.is_valid:
            raise ValueError("A valid email is required")
        return result.value

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_text(v, "Name")


class UserDTO(ResponseSchema):
    """Public view of a staff account (never includes the password hash)."""

    id: int
    email: str
    name: str
    role: str
    created_at: Optional[str] = None


class LoginResponse(ResponseSchema):
    """Token issued on successful login."""

    token: str
    user: UserDTO
