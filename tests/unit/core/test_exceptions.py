from campusdesk.core.exceptions import (
    ApprovalsPendingError,
    ApproverRoleError,
    AssignmentConflictError,
    InvalidApproverRoleError,
    NoDueRequestNotFoundError,
    ValidationError,
    error_response,
)


def test_not_found_code_is_derived_from_resource_name():
    error = NoDueRequestNotFoundError("r1")

    assert error.status_code == 404
    assert error.code == "NO_DUE_REQUEST_NOT_FOUND"
    assert error.details == {"resource_type": "No Due Request", "resource_id": "r1"}


def test_assignment_conflict_carries_the_clash():
    conflict = {"has_conflict": True, "message": "F1 is already assigned", "conflicting_assignments": []}

    error = AssignmentConflictError(conflict)

    assert error.status_code == 409
    assert error.message == "F1 is already assigned"
    assert error.details == {"conflict": conflict}


def test_approvals_pending_lists_roles():
    error = ApprovalsPendingError("r1", ["LIBRARIAN", "PRINCIPAL"])

    assert error.status_code == 409
    assert "LIBRARIAN, PRINCIPAL" in error.message


def test_approver_role_mismatch_is_forbidden():
    error = ApproverRoleError("LIBRARIAN", "HOD")

    assert error.status_code == 403
    assert error.code == "APPROVER_ROLE_MISMATCH"


def test_validation_errors_name_the_field():
    assert ValidationError("bad", field="day").details == {"field": "day"}
    assert InvalidApproverRoleError("WARDEN").details == {"field": "role"}


def test_error_response_shape():
    body = error_response(ValidationError("bad day", field="day"))

    assert body == {
        "success": False,
        "error": {"code": "VALIDATION_ERROR", "message": "bad day", "details": {"field": "day"}},
    }
