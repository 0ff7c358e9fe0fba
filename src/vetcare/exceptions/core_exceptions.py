"""
Core exceptions for the vetcare package.

This module defines the exception hierarchy used throughout the clinic
service. Every exception carries an explicit ``ErrorKind`` so the request
boundary can map it to a response without inspecting message text.
"""

import enum
import logging
import time
import traceback
from typing import Any, Dict, List, Optional


class ErrorKind(enum.Enum):
    """Category of a failure, used to pick the response status."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"

    @property
    def status_hint(self) -> int:
        """HTTP-style status code associated with this kind."""
        return _STATUS_HINTS[self]


_STATUS_HINTS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INTERNAL: 500,
}


class VetCareException(Exception):
    """
    Base exception class for all vetcare exceptions.

    Provides a consistent interface for error handling across the package.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    @property
    def status_hint(self) -> int:
        """Status code the boundary should answer with."""
        return self.kind.status_hint

    @property
    def is_internal(self) -> bool:
        """Whether the message must be hidden from callers."""
        return self.kind is ErrorKind.INTERNAL

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "error_kind": self.kind.value,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": time.time(),
        }

    def get_debug_info(self) -> Dict[str, Any]:
        """
        Get detailed debug information for the exception.

        Returns:
            Dictionary with debug information including traceback
        """
        debug_info = self.to_dict()
        formatted = traceback.format_exc()
        debug_info.update(
            {
                "traceback": (
                    formatted if formatted.strip() != "NoneType: None" else None
                ),
                "module": self.__class__.__module__,
                "class_name": self.__class__.__name__,
            }
        )
        return debug_info

    def log_error(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        """
        Log the exception with appropriate level and context.

        Args:
            logger: Logger instance to use (creates default if None)
            level: Logging level to use
        """
        if logger is None:
            logger = logging.getLogger(__name__)

        log_data = {
            "error_type": self.__class__.__name__,
            "error_kind": self.kind.value,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

        logger.log(
            level,
            f"Exception occurred: {self.message}",
            extra={"exception_data": log_data},
        )

    def __str__(self) -> str:
        """String representation of the exception."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationException(VetCareException):
    """Raised when caller input is missing or malformed."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[Dict[str, List[str]]] = None,
    ):
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: Field that failed validation
            value: Value that failed validation
            validation_errors: Field name to list of messages
        """
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details,
        )
        self.validation_errors = validation_errors or {}


class NotFoundException(VetCareException):
    """Raised when a requested or referenced record does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        entity: str = "Record",
        record_id: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        """
        Initialize not-found exception.

        Args:
            entity: Human-readable entity name (e.g. "Pet")
            record_id: Identifier that was looked up
            message: Optional message override
        """
        details: Dict[str, Any] = {"entity": entity}
        if record_id is not None:
            details["record_id"] = record_id

        super().__init__(
            message=message or f"{entity} not found",
            error_code="NOT_FOUND",
            details=details,
        )
        self.entity = entity
        self.record_id = record_id


class ConflictException(VetCareException):
    """Base exception for requests that clash with stored state."""

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        message: str = "Request conflicts with existing data",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code or "CONFLICT",
            details=details,
        )


class DuplicateRecordException(ConflictException):
    """Raised when a unique constraint (e.g. email) would be violated."""

    def __init__(
        self,
        message: str = "A record with the same unique value already exists",
        entity: Optional[str] = None,
        field: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if entity:
            details["entity"] = entity
        if field:
            details["field"] = field
        super().__init__(message, error_code="DUPLICATE_RECORD", details=details)


class ReferenceConflictException(ConflictException):
    """Raised when deleting a row that other records still reference."""

    def __init__(
        self,
        entity: str = "Record",
        record_id: Optional[Any] = None,
    ):
        details: Dict[str, Any] = {"entity": entity}
        if record_id is not None:
            details["record_id"] = record_id
        super().__init__(
            f"{entity} is referenced by other records and cannot be deleted",
            error_code="REFERENCE_CONFLICT",
            details=details,
        )


class SlotAlreadyBookedException(ConflictException):
    """Raised when a vet already has a live appointment in the slot."""

    def __init__(
        self,
        vet_id: Optional[int] = None,
        day: Optional[str] = None,
        time_slot: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if vet_id is not None:
            details["vet_id"] = vet_id
        if day is not None:
            details["day"] = day
        if time_slot is not None:
            details["time_slot"] = time_slot
        super().__init__(
            "This time slot is already booked for the selected vet",
            error_code="SLOT_ALREADY_BOOKED",
            details=details,
        )


class DeleteGuardException(ConflictException):
    """Raised when a delete is refused by a business rule."""

    def __init__(
        self,
        message: str = "Record cannot be deleted in its current state",
        rule_name: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if rule_name:
            details["rule_name"] = rule_name
        super().__init__(message, error_code="DELETE_GUARD", details=details)


class AuthFailureReason(enum.Enum):
    """Why a credential was rejected."""

    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_LOGIN = "invalid_login"


class AuthenticationException(VetCareException):
    """Raised when a bearer credential or login attempt is rejected."""

    kind = ErrorKind.UNAUTHORIZED

    _DEFAULT_MESSAGES = {
        AuthFailureReason.MISSING_CREDENTIALS: "Authorization header missing or malformed",
        AuthFailureReason.INVALID_CREDENTIALS: "Invalid or expired token",
        AuthFailureReason.INVALID_LOGIN: "Invalid email or password",
    }

    def __init__(
        self,
        reason: AuthFailureReason = AuthFailureReason.INVALID_CREDENTIALS,
        message: Optional[str] = None,
    ):
        super().__init__(
            message=message or self._DEFAULT_MESSAGES[reason],
            error_code="AUTHENTICATION_ERROR",
            details={"reason": reason.value},
        )
        self.reason = reason


class DatabaseException(VetCareException):
    """Base exception for unexpected database errors."""

    kind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize database exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
            original_error: Original exception that caused this error
        """
        super().__init__(message, error_code or "DATABASE_ERROR", details)
        self.original_error = original_error

        if original_error and "original_error" not in self.details:
            self.details["original_error"] = str(original_error)


class TransactionException(DatabaseException):
    """Exception raised when a database transaction fails."""

    def __init__(
        self,
        message: str = "Database transaction failed",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize transaction exception.

        Args:
            message: Error message
            operation: Description of the failed operation
            original_error: Original exception
        """
        details = {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code="DATABASE_TRANSACTION_ERROR",
            details=details,
            original_error=original_error,
        )


# Utility functions for exception handling and error formatting


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Format Pydantic validation errors into a user-friendly structure.

    Args:
        errors: List of Pydantic validation errors

    Returns:
        Dictionary mapping field names to lists of error messages
    """
    formatted_errors: Dict[str, List[str]] = {}

    for error in errors:
        field_path = ".".join(str(loc) for loc in error.get("loc", []))
        if not field_path:
            field_path = "root"

        message = error.get("msg", "Validation error")
        error_type = error.get("type", "unknown")

        if error_type == "value_error":
            formatted_message = message.removeprefix("Value error, ")
        elif error_type == "missing":
            formatted_message = "This field is required"
        else:
            formatted_message = message

        formatted_errors.setdefault(field_path, []).append(formatted_message)

    return formatted_errors


def summarize_validation_errors(errors: Dict[str, List[str]]) -> str:
    """Collapse formatted errors into a single human-readable sentence."""
    parts = []
    for field, messages in errors.items():
        for message in messages:
            parts.append(f"{field}: {message}" if field != "root" else message)
    return "; ".join(parts) if parts else "Validation failed"


def log_exception_context(
    exception: Exception,
    context: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with additional context information.

    Args:
        exception: The exception to log
        context: Additional context information
        logger: Logger instance to use
        level: Logging level
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if isinstance(exception, VetCareException):
        log_data = exception.to_dict()
        log_data["context"] = context
        logger.log(
            level,
            f"Exception with context: {exception.message}",
            extra={"exception_data": log_data},
        )
    else:
        logger.log(
            level,
            f"Non-VetCare exception: {str(exception)}",
            exc_info=exception,
            extra={
                "exception_type": exception.__class__.__name__,
                "exception_message": str(exception),
                "context": context,
            },
        )
