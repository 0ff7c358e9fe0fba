"""
Validation and data processing utilities for clinic records.

This module provides the field-level checks shared by the input schemas:
string sanitization, required-text checks, email shape, identifiers and
birth dates.
"""

import re
import unicodedata
from datetime import date
from typing import Any, Generic, List, Optional, TypeVar

from .datetime_utils import get_current_date

T = TypeVar("T")


class ValidationError(Exception):
    """Field-level validation error with structured information."""

    def __init__(
        self, message: str, field: Optional[str] = None, code: Optional[str] = None
    ):
        self.message = message
        self.field = field
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert the error to a dictionary format."""
        return {"message": self.message, "field": self.field, "code": self.code}


class ValidationResult(Generic[T]):
    """Result of a validation operation."""

    def __init__(
        self, value: Optional[T] = None, errors: Optional[List[ValidationError]] = None
    ):
        self.value = value
        self.errors = errors or []
        self.is_valid = len(self.errors) == 0

    def add_error(self, error: ValidationError) -> None:
        """Add an error to the result."""
        self.errors.append(error)
        self.is_valid = False

    @property
    def first_message(self) -> Optional[str]:
        """Message of the first recorded error, if any."""
        return self.errors[0].message if self.errors else None


# local@domain with no whitespace; the clinic accepts any domain shape
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")


def sanitize_string(value: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize a string by normalizing unicode and trimming whitespace.

    Args:
        value: The string to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    normalized = unicodedata.normalize("NFKC", value)
    sanitized = re.sub(r"\s+", " ", normalized.strip())

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length].rstrip()

    return sanitized


def require_text(value: Optional[str], field_name: str) -> str:
    """
    Ensure a text value is present and not blank.

    Raises:
        ValueError: If the value is None or only whitespace
    """
    if value is None or not value.strip():
        raise ValueError(f"{field_name} is required")
    return sanitize_string(value)


def validate_email(email: Optional[str]) -> ValidationResult[str]:
    """
    Validate an email address.

    Args:
        email: The email to validate

    Returns:
        ValidationResult with the sanitized email or errors
    """
    result = ValidationResult[str]()

    if not email or not email.strip():
        result.add_error(ValidationError("Email is required", "email", "required"))
        return result

    sanitized_email = sanitize_string(email).lower()

    if not EMAIL_PATTERN.match(sanitized_email):
        result.add_error(
            ValidationError("A valid email is required", "email", "invalid_format")
        )
        return result

    if len(sanitized_email) > 254:
        result.add_error(ValidationError("Email is too long", "email", "too_long"))
        return result

    result.value = sanitized_email
    return result


def validate_record_id(value: Any, field_name: str) -> int:
    """
    Coerce a foreign-key value into a positive integer.

    Accepts integers and numeric strings such as ``"7"``.

    Raises:
        ValueError: If the value is not a positive whole number
    """
    if isinstance(value, bool):
        raise ValueError(f"A valid {field_name} is required")
    try:
        number = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise ValueError(f"A valid {field_name} is required")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"A valid {field_name} is required")
    if number <= 0:
        raise ValueError(f"A valid {field_name} is required")
    return number


def validate_birth_date(
    birth_date: date, reference_date: Optional[date] = None
) -> ValidationResult[date]:
    """
    Validate a pet's birth date.

    Args:
        birth_date: The birth date to check
        reference_date: Date treated as today

    Returns:
        ValidationResult with the birth date or errors
    """
    result = ValidationResult[date]()
    today = reference_date or get_current_date()

    if birth_date > today:
        result.add_error(
            ValidationError(
                "Birth date cannot be in the future", "birth_date", "future_date"
            )
        )
        return result

    result.value = birth_date
    return result
