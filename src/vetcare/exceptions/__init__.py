"""
Custom exceptions for the vetcare package.

This module defines the exception hierarchy and custom exceptions
used throughout the veterinary clinic service.
"""

from .core_exceptions import (  # Utility functions
    AuthenticationException,
    AuthFailureReason,
    ConflictException,
    DatabaseException,
    DeleteGuardException,
    DuplicateRecordException,
    ErrorKind,
    NotFoundException,
    ReferenceConflictException,
    SlotAlreadyBookedException,
    TransactionException,
    ValidationException,
    VetCareException,
    format_validation_errors,
    log_exception_context,
    summarize_validation_errors,
)

__all__ = [
    # Exception classes
    "ErrorKind",
    "VetCareException",
    "ValidationException",
    "NotFoundException",
    "ConflictException",
    "DuplicateRecordException",
    "ReferenceConflictException",
    "SlotAlreadyBookedException",
    "DeleteGuardException",
    "AuthFailureReason",
    "AuthenticationException",
    "DatabaseException",
    "TransactionException",
    # Utility functions
    "format_validation_errors",
    "summarize_validation_errors",
    "log_exception_context",
]
