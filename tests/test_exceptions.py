"""
Tests for exception handling in the vetcare package.
"""

import logging
from unittest.mock import Mock

import pytest
from pydantic import ValidationError as PydanticValidationError

from vetcare.exceptions import (
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
from vetcare.schemas import PetCreate


class TestVetCareException:
    """Test cases for the base VetCareException class."""

    def test_basic_exception_creation(self):
        exc = VetCareException("Test error")

        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.error_code == "VetCareException"
        assert exc.details == {}
        assert exc.kind is ErrorKind.INTERNAL
        assert exc.is_internal

    def test_exception_with_details(self):
        exc = VetCareException("Test error", details={"field": "name"})

        assert exc.details == {"field": "name"}
        assert "Details: " in str(exc)

    def test_to_dict_method(self):
        exc = VetCareException("Test error", error_code="TEST_ERROR")

        result = exc.to_dict()

        assert result["error_type"] == "VetCareException"
        assert result["error_kind"] == "internal"
        assert result["error_code"] == "TEST_ERROR"
        assert result["message"] == "Test error"
        assert "timestamp" in result

    def test_log_error(self):
        mock_logger = Mock()
        exc = VetCareException("Test error")

        exc.log_error(mock_logger, logging.WARNING)

        mock_logger.log.assert_called_once()
        level, message = mock_logger.log.call_args[0]
        assert level == logging.WARNING
        assert "Test error" in message


class TestErrorKinds:
    """Every exception carries an explicit kind with a status hint."""

    @pytest.mark.parametrize(
        "exc, kind, status",
        [
            (ValidationException("bad"), ErrorKind.VALIDATION, 400),
            (NotFoundException("Pet", 1), ErrorKind.NOT_FOUND, 404),
            (ConflictException(), ErrorKind.CONFLICT, 409),
            (DuplicateRecordException(field="email"), ErrorKind.CONFLICT, 409),
            (ReferenceConflictException("Owner", 1), ErrorKind.CONFLICT, 409),
            (SlotAlreadyBookedException(2, "2025-04-10", "11:00"), ErrorKind.CONFLICT, 409),
            (DeleteGuardException("no"), ErrorKind.CONFLICT, 409),
            (AuthenticationException(), ErrorKind.UNAUTHORIZED, 401),
            (DatabaseException("db down"), ErrorKind.INTERNAL, 500),
            (TransactionException(), ErrorKind.INTERNAL, 500),
        ],
    )
    def test_kind_and_status(self, exc, kind, status):
        assert exc.kind is kind
        assert exc.status_hint == status
        assert exc.is_internal == (kind is ErrorKind.INTERNAL)


class TestSpecificExceptions:
    """Messages and details of the concrete exception classes."""

    def test_not_found_message(self):
        exc = NotFoundException("Pet", 42)

        assert exc.message == "Pet not found"
        assert exc.details == {"entity": "Pet", "record_id": 42}

    def test_slot_already_booked(self):
        exc = SlotAlreadyBookedException(2, "2025-04-10", "11:00")

        assert exc.message == "This time slot is already booked for the selected vet"
        assert exc.details == {"vet_id": 2, "day": "2025-04-10", "time_slot": "11:00"}

    def test_reference_conflict_message(self):
        exc = ReferenceConflictException("Owner", 3)

        assert "Owner is referenced by other records" in exc.message

    def test_validation_exception_field(self):
        exc = ValidationException(
            "Invalid", field="email", validation_errors={"email": ["bad"]}
        )

        assert exc.details["field"] == "email"
        assert exc.validation_errors == {"email": ["bad"]}

    def test_authentication_default_messages(self):
        missing = AuthenticationException(AuthFailureReason.MISSING_CREDENTIALS)
        login = AuthenticationException(AuthFailureReason.INVALID_LOGIN)

        assert missing.details == {"reason": "missing_credentials"}
        assert login.message == "Invalid email or password"

    def test_database_exception_keeps_original_error(self):
        original = RuntimeError("connection reset")
        exc = TransactionException(operation="create_visit", original_error=original)

        assert exc.original_error is original
        assert exc.details["operation"] == "create_visit"
        assert exc.details["original_error"] == "connection reset"


class TestUtilityFunctions:
    """Test cases for exception utility functions."""

    def test_format_validation_errors(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            PetCreate.model_validate({"ownerId": "abc", "species": "Katė"})

        errors = format_validation_errors(exc_info.value.errors())

        assert "name" in errors
        assert errors["name"] == ["This field is required"]
        assert errors["ownerId"] == ["A valid ownerId is required"]

    def test_summarize_validation_errors(self):
        summary = summarize_validation_errors(
            {"name": ["Pet name is required"], "root": ["Body is invalid"]}
        )

        assert summary == "name: Pet name is required; Body is invalid"
        assert summarize_validation_errors({}) == "Validation failed"

    def test_log_exception_context(self):
        mock_logger = Mock()
        exc = NotFoundException("Visit", 9)

        log_exception_context(exc, {"operation": "get"}, mock_logger)

        mock_logger.log.assert_called_once()
        extra = mock_logger.log.call_args[1]["extra"]
        assert extra["exception_data"]["context"] == {"operation": "get"}

    def test_log_exception_context_plain_exception(self):
        mock_logger = Mock()

        log_exception_context(ValueError("boom"), {"stage": "after_create"}, mock_logger)

        extra = mock_logger.log.call_args[1]["extra"]
        assert extra["exception_type"] == "ValueError"
        assert extra["context"] == {"stage": "after_create"}
