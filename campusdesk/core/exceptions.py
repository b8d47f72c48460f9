"""
Custom Exceptions for CampusDesk
================================

Services raise these; the API layer turns them into JSON error responses
(see ``register_exception_handlers`` in ``campusdesk.main``).

Usage:
    from campusdesk.core.exceptions import NoDueRequestNotFoundError

    request = await self.get(request_id)
    if not request:
        raise NoDueRequestNotFoundError(request_id)
"""

from typing import Optional, Any, Dict


class CampusDeskError(Exception):
    """Base exception for all CampusDesk errors"""

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
# Authorization Errors
# ============================================

class AuthorizationError(CampusDeskError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class ApproverRoleError(AuthorizationError):
    """Caller tried to approve for a role they do not hold"""

    def __init__(self, user_role: str, requested_role: str):
        super().__init__(
            f"A {user_role} user cannot approve as {requested_role}"
        )
        self.code = "APPROVER_ROLE_MISMATCH"
        self.details = {"user_role": user_role, "requested_role": requested_role}


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(CampusDeskError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class StudentNotFoundError(ResourceNotFoundError):
    def __init__(self, student_id: str):
        super().__init__("Student", student_id)


class AssignmentNotFoundError(ResourceNotFoundError):
    def __init__(self, assignment_id: str):
        super().__init__("Assignment", assignment_id)


class NoDueRequestNotFoundError(ResourceNotFoundError):
    def __init__(self, request_id: str):
        super().__init__("No Due Request", request_id)


class NotificationNotFoundError(ResourceNotFoundError):
    def __init__(self, notification_id: str):
        super().__init__("Notification", notification_id)


# ============================================
# Validation Errors
# ============================================

class ValidationError(CampusDeskError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, code="VALIDATION_ERROR")
        if field:
            self.details["field"] = field


class InvalidApproverRoleError(ValidationError):
    """Role is not one of the four no-due approvers"""

    def __init__(self, role: str):
        super().__init__(
            f"'{role}' is not a no-due approver role",
            field="role"
        )
        self.code = "INVALID_APPROVER_ROLE"


# ============================================
# Conflict Errors (409-type)
# ============================================

class ConflictError(CampusDeskError):
    """Request clashes with the current state of a resource"""

    status_code = 409

    def __init__(self, message: str, code: str = "CONFLICT",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class AssignmentConflictError(ConflictError):
    """Faculty already holds a slot at the same day and period"""

    def __init__(self, conflict: Dict[str, Any]):
        super().__init__(
            conflict.get("message") or "Faculty is already assigned in this slot",
            code="ASSIGNMENT_CONFLICT",
            details={"conflict": conflict}
        )


class DuplicateNoDueRequestError(ConflictError):
    """Student already has a no-due request on file"""

    def __init__(self, student_id: str, request_id: str):
        super().__init__(
            "A no-due request already exists for this student",
            code="NO_DUE_REQUEST_EXISTS",
            details={"student_id": student_id, "request_id": request_id}
        )


class ApprovalsPendingError(ConflictError):
    """Certificate requested before every approver has signed off"""

    def __init__(self, request_id: str, pending_roles: list):
        super().__init__(
            f"No-due request is still waiting on: {', '.join(pending_roles)}",
            code="APPROVALS_PENDING",
            details={"request_id": request_id, "pending_roles": pending_roles}
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: CampusDeskError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
