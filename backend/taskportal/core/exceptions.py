"""
Custom Exceptions for the Student Task Portal
=============================================

Services raise these instead of HTTPException so the same rules can be
exercised without a request. The API layer renders any TaskPortalError
through a single exception handler using its ``status_code``.

Usage:
    from taskportal.core.exceptions import TaskNotFoundError, InvalidTransitionError

    if task is None:
        raise TaskNotFoundError(task_id)

    if task.status == TaskStatus.COMPLETED:
        raise InvalidTransitionError("task is not in a submittable state")
"""

from typing import Optional, Any, Dict


class TaskPortalError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(TaskPortalError):
    """Credentials missing or wrong"""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="AUTH_FAILED")


class ForbiddenError(TaskPortalError):
    """Actor lacks the role or ownership required for the action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(TaskPortalError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class TaskNotFoundError(ResourceNotFoundError):
    def __init__(self, task_id: str):
        super().__init__("Task", task_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class BlogPostNotFoundError(ResourceNotFoundError):
    def __init__(self, post_id: str):
        super().__init__("Blog post", post_id)


# ============================================
# Task Lifecycle Errors
# ============================================

class InvalidTransitionError(TaskPortalError):
    """A state machine precondition is not met; the task is left untouched"""

    status_code = 409

    def __init__(self, message: str, current_status: Optional[str] = None):
        details = {"current_status": current_status} if current_status else {}
        super().__init__(message, code="INVALID_TRANSITION", details=details)


class NotAssignedError(InvalidTransitionError):
    """The acting student is not in the task's assignee set"""

    status_code = 403

    def __init__(self, task_id: str):
        super().__init__("You are not assigned to this task")
        self.code = "NOT_ASSIGNED"
        self.details = {"task_id": task_id}


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationFailure(TaskPortalError):
    """Input is malformed or references invalid entities"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class DuplicateIdentityError(ValidationFailure):
    """Email or student number already registered"""

    def __init__(self, message: str, field: str):
        super().__init__(message, field=field)
        self.code = "DUPLICATE_IDENTITY"


# ============================================
# Persistence Errors
# ============================================

class StoreUnavailableError(TaskPortalError):
    """The underlying database call failed; nothing was persisted"""

    status_code = 503

    def __init__(self, operation: str, message: str = "Database unavailable"):
        super().__init__(f"{message} during {operation}", code="STORE_UNAVAILABLE")
        self.details["operation"] = operation


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: TaskPortalError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
