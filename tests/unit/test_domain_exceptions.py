"""Tests for domain exceptions (error_code, message, details) and their HTTP mapping."""

import pytest

from taskboard.core.exception_handlers import status_for
from taskboard.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    InvalidCursorException,
    OwnerMismatchException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    TaskboardException,
    ValidationException,
)
from taskboard.infrastructure.exceptions import StorageNotFoundError


def test_base_exception_defaults_error_code_to_class_name() -> None:
    exc = TaskboardException("Something failed")
    assert exc.error_code == "TaskboardException"
    assert exc.to_dict() == {"error": "TaskboardException", "message": "Something failed", "details": {}}


def test_validation_exception_field() -> None:
    exc = ValidationException("Task title must not be empty", field="title")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "title"}


def test_authentication_exception_message() -> None:
    exc = AuthenticationException("Called saveUser without authentication present")
    assert exc.error_code == "AUTHENTICATION_ERROR"
    assert "saveUser" in exc.message


def test_authorization_exception_resource_action() -> None:
    exc = AuthorizationException("task", "update")
    assert exc.message == "Permission denied: update on task"
    assert exc.details == {"resource": "task", "action": "update"}


def test_owner_mismatch_exception() -> None:
    exc = OwnerMismatchException("u2", "u1")
    assert exc.error_code == "OWNER_MISMATCH"
    assert exc.details == {"owner_id": "u2", "user_id": "u1"}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("task", "t9")
    assert exc.message == "task not found: t9"
    assert exc.details["resource_id"] == "t9"


def test_invalid_cursor_exception() -> None:
    exc = InvalidCursorException("bad")
    assert exc.error_code == "INVALID_CURSOR"
    assert exc.details == {"reason": "bad"}


@pytest.mark.parametrize(
    "exc, status",
    [
        (ValidationException("x"), 400),
        (InvalidCursorException("x"), 400),
        (AuthenticationException(), 401),
        (AuthorizationException("task", "update"), 403),
        (OwnerMismatchException("a", "b"), 403),
        (ResourceNotFoundException("task", "t"), 404),
        (StorageNotFoundError("tasks/x"), 404),
        (SqlNotConfiguredException(), 503),
    ],
)
def test_error_codes_map_to_http_status(exc: TaskboardException, status: int) -> None:
    assert status_for(exc.error_code) == status
