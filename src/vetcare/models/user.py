"""
User model for the vetcare package.

Staff login accounts. Passwords are stored only as bcrypt hashes.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel

DEFAULT_USER_ROLE = "admin"


class User(BaseModel):
    """Clinic staff account used to obtain access tokens."""

    __tablename__ = "users"

    def __init__(self, **kwargs):
        """Initialize User with default values."""
        if "role" not in kwargs:
            kwargs["role"] = DEFAULT_USER_ROLE
        super().__init__(**kwargs)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Login email address",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="bcrypt hash of the password"
    )

    name: Mapped[str] = mapped_column(
        String(200), nullable=False, comment="Display name"
    )

    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_USER_ROLE,
        server_default=DEFAULT_USER_ROLE,
        comment="Staff role",
    )

    def to_public_dict(self) -> dict:
        """User fields safe to return to clients."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
        }
