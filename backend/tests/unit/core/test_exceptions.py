"""
Unit Tests for the portal exception hierarchy
"""
import pytest

from taskportal.core.exceptions import (
    AuthenticationError,
    BlogPostNotFoundError,
    DuplicateIdentityError,
    ForbiddenError,
    InvalidTransitionError,
    NotAssignedError,
    StoreUnavailableError,
    TaskNotFoundError,
    TaskPortalError,
    ValidationFailure,
    error_response,
)


class TestStatusCodes:

    @pytest.mark.parametrize("error, status_code", [
        (AuthenticationError(), 401),
        (ForbiddenError(), 403),
        (TaskNotFoundError("t1"), 404),
        (BlogPostNotFoundError("b1"), 404),
        (InvalidTransitionError("task is already completed"), 409),
        (NotAssignedError("t1"), 403),
        (ValidationFailure("bad"), 400),
        (DuplicateIdentityError("Email already registered", field="email"), 400),
        (StoreUnavailableError("save_task"), 503),
    ])
    def test_status_code(self, error, status_code):
        assert isinstance(error, TaskPortalError)
        assert error.status_code == status_code


class TestErrorDetails:

    def test_not_found_details(self):
        error = TaskNotFoundError("t1")
        assert error.code == "TASK_NOT_FOUND"
        assert error.details == {"resource_type": "Task", "resource_id": "t1"}

    def test_multi_word_resource_code(self):
        assert BlogPostNotFoundError("b1").code == "BLOG_POST_NOT_FOUND"

    def test_transition_carries_current_status(self):
        error = InvalidTransitionError("task has already been started", current_status="in_progress")
        assert error.details == {"current_status": "in_progress"}

    def test_not_assigned_is_a_transition_error(self):
        error = NotAssignedError("t1")
        assert isinstance(error, InvalidTransitionError)
        assert error.code == "NOT_ASSIGNED"
        assert error.details == {"task_id": "t1"}

    def test_validation_field(self):
        assert ValidationFailure("bad", field="score").details == {"field": "score"}
        assert ValidationFailure("bad").details == {}

    def test_store_unavailable_names_operation(self):
        error = StoreUnavailableError("save_task")
        assert "save_task" in error.message
        assert error.details["operation"] == "save_task"

    def test_error_response_envelope(self):
        body = error_response(ForbiddenError("Admin access required"))
        assert body == {
            "success": False,
            "error": {"code": "FORBIDDEN", "message": "Admin access required", "details": {}},
        }
