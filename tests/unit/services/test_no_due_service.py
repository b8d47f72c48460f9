"""
Unit Tests for the No-Due approval workflow
"""
import pytest

from campusdesk.core.events import EventType, no_due_topic
from campusdesk.core.exceptions import (
    ApproverRoleError,
    AuthorizationError,
    DuplicateNoDueRequestError,
    InvalidApproverRoleError,
    NoDueRequestNotFoundError,
    ValidationError,
)
from campusdesk.models.no_due_request import APPROVER_ROLES, ApproverRole
from campusdesk.models.user import UserRole
from campusdesk.services.no_due_service import (
    NoDueService,
    resolve_approver_role,
    to_approver_role,
)
from campusdesk.services.notification_service import NotificationService


@pytest.fixture
def service(db_session, bus):
    return NoDueService(db_session, bus)


@pytest.fixture
async def request_for_student(service, student_user):
    return await service.create(str(student_user.id), student_user)


class TestCreate:

    async def test_new_request_has_every_flag_cleared(self, request_for_student):
        request = request_for_student

        assert request.hod_approved is False
        assert request.librarian_approved is False
        assert request.accountant_approved is False
        assert request.principal_approved is False
        assert request.all_approved is False
        assert request.pending_roles == ["HOD", "LIBRARIAN", "ACCOUNTANT", "PRINCIPAL"]

    async def test_second_request_for_same_student_rejected(self, service, student_user, request_for_student):
        with pytest.raises(DuplicateNoDueRequestError) as exc_info:
            await service.create(str(student_user.id), student_user)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["request_id"] == str(request_for_student.id)

    async def test_insert_race_reports_duplicate(self, service, student_user, request_for_student, monkeypatch):
        existing_id = str(request_for_student.id)
        real_lookup = service.get_by_student
        calls = []

        async def stale_lookup(student_id):
            # First lookup misses, as it would for a concurrent filing
            calls.append(student_id)
            return None if len(calls) == 1 else await real_lookup(student_id)

        monkeypatch.setattr(service, "get_by_student", stale_lookup)

        with pytest.raises(DuplicateNoDueRequestError) as exc_info:
            await service.create(str(student_user.id), student_user)

        assert exc_info.value.details["request_id"] == existing_id
        assert len(await service.list_recent()) == 1

    async def test_student_cannot_apply_for_someone_else(self, service, student_user, make_user):
        other = await make_user(UserRole.STUDENT)

        with pytest.raises(AuthorizationError):
            await service.create(str(other.id), student_user)

    async def test_cr_can_apply_for_a_classmate(self, service, cr_user, student_user):
        request = await service.create(str(student_user.id), cr_user)

        assert request.student_id == str(student_user.id)
        assert request.applicant_id == str(cr_user.id)

    async def test_faculty_cannot_apply(self, service, faculty_user, student_user):
        with pytest.raises(AuthorizationError):
            await service.create(str(student_user.id), faculty_user)

    async def test_request_only_for_student_accounts(self, service, admin_user, faculty_user):
        with pytest.raises(ValidationError):
            await service.create(str(faculty_user.id), admin_user)

    async def test_created_event_published(self, service, bus, student_user):
        received = []
        bus.subscribe(no_due_topic(str(student_user.id)), received.append)

        await service.create(str(student_user.id), student_user)

        assert [e.type for e in received] == [EventType.NO_DUE_CREATED]


class TestApprove:

    async def test_approval_sets_only_that_flag(self, service, request_for_student):
        request = await service.approve(str(request_for_student.id), ApproverRole.LIBRARIAN)

        assert request.librarian_approved is True
        assert request.hod_approved is False
        assert request.accountant_approved is False
        assert request.principal_approved is False
        assert request.librarian_approved_at is not None

    async def test_approval_is_idempotent(self, service, request_for_student, hod_user):
        first = await service.approve(str(request_for_student.id), "HOD", str(hod_user.id))
        approved_at = first.hod_approved_at

        second = await service.approve(str(request_for_student.id), "hod", "someone-else")

        assert second.hod_approved is True
        assert second.hod_approved_at == approved_at
        assert second.hod_approved_by == str(hod_user.id)

    async def test_complete_only_after_all_four(self, service, request_for_student):
        request_id = str(request_for_student.id)
        for role in APPROVER_ROLES[:3]:
            request = await service.approve(request_id, role)
            assert request.all_approved is False

        request = await service.approve(request_id, APPROVER_ROLES[3])

        assert request.all_approved is True
        assert request.pending_roles == []

    async def test_order_of_approvals_does_not_matter(self, service, request_for_student):
        request_id = str(request_for_student.id)
        for role in reversed(APPROVER_ROLES):
            request = await service.approve(request_id, role)

        assert request.all_approved is True

    async def test_unknown_role_rejected(self, service, request_for_student):
        with pytest.raises(InvalidApproverRoleError):
            await service.approve(str(request_for_student.id), "WARDEN")

    async def test_missing_request(self, service):
        with pytest.raises(NoDueRequestNotFoundError):
            await service.approve("missing", ApproverRole.HOD)

    async def test_student_is_notified(self, db_session, service, request_for_student, student_user):
        await service.approve(str(request_for_student.id), ApproverRole.ACCOUNTANT)

        notifications = await NotificationService(db_session).get_notifications_by_user(str(student_user.id))

        assert len(notifications) == 1
        assert "Accounts Section" in notifications[0].message

    async def test_completion_notification(self, db_session, service, request_for_student, student_user):
        for role in APPROVER_ROLES:
            await service.approve(str(request_for_student.id), role)

        notifications = await NotificationService(db_session).get_notifications_by_user(str(student_user.id))

        assert len(notifications) == 5
        assert any(n.title == "No-due certificate ready" for n in notifications)

    async def test_repeat_approval_sends_no_extra_event(self, service, bus, request_for_student, student_user):
        received = []
        bus.subscribe(no_due_topic(str(student_user.id)), received.append)

        await service.approve(str(request_for_student.id), ApproverRole.HOD)
        await service.approve(str(request_for_student.id), ApproverRole.HOD)

        assert [e.type for e in received] == [EventType.NO_DUE_APPROVED]

    async def test_completed_event_after_last_approval(self, service, bus, request_for_student, student_user):
        received = []
        bus.subscribe(no_due_topic(str(student_user.id)), received.append)

        for role in APPROVER_ROLES:
            await service.approve(str(request_for_student.id), role)

        assert received[-1].type == EventType.NO_DUE_COMPLETED
        assert received[-1].data["all_approved"] is True


class TestQueries:

    async def test_get_by_student_returns_none_before_applying(self, service, student_user):
        assert await service.get_by_student(str(student_user.id)) is None

    async def test_get_by_student(self, service, student_user, request_for_student):
        found = await service.get_by_student(str(student_user.id))

        assert found.id == request_for_student.id

    async def test_list_recent_includes_student_name(self, service, student_user, request_for_student):
        rows = await service.list_recent()

        assert len(rows) == 1
        request, name = rows[0]
        assert request.id == request_for_student.id
        assert name == student_user.full_name

    async def test_mark_form_generated(self, service, request_for_student):
        request = await service.mark_form_generated(str(request_for_student.id))

        assert request.form_generated_at is not None


class TestSubscriptions:

    async def test_subscriber_sees_changes_until_unsubscribed(self, service, request_for_student, student_user):
        received = []
        unsubscribe = service.subscribe_to_student_requests(str(student_user.id), received.append)

        await service.approve(str(request_for_student.id), ApproverRole.HOD)
        unsubscribe()
        await service.approve(str(request_for_student.id), ApproverRole.LIBRARIAN)

        assert len(received) == 1
        assert received[0].data["hod_approved"] is True

    async def test_unsubscribe_twice_is_harmless(self, service, bus, student_user):
        unsubscribe = service.subscribe_to_student_requests(str(student_user.id), lambda e: None)

        unsubscribe()
        unsubscribe()

        assert bus.handler_count() == 0

    async def test_other_students_changes_not_delivered(self, service, make_user, student_user):
        other = await make_user(UserRole.STUDENT)
        received = []
        service.subscribe_to_student_requests(str(student_user.id), received.append)

        await service.create(str(other.id), other)

        assert received == []


class TestResolveApproverRole:

    async def test_approver_acts_for_own_role(self, librarian_user):
        assert resolve_approver_role(librarian_user) == ApproverRole.LIBRARIAN

    async def test_approver_cannot_act_for_another_role(self, librarian_user):
        with pytest.raises(ApproverRoleError):
            resolve_approver_role(librarian_user, "PRINCIPAL")

    async def test_admin_must_name_a_role(self, admin_user):
        with pytest.raises(ValidationError):
            resolve_approver_role(admin_user)

    async def test_admin_acts_for_named_role(self, admin_user):
        assert resolve_approver_role(admin_user, "accountant") == ApproverRole.ACCOUNTANT

    async def test_faculty_cannot_approve(self, faculty_user):
        with pytest.raises(AuthorizationError):
            resolve_approver_role(faculty_user)


def test_to_approver_role_is_case_insensitive():
    assert to_approver_role("principal") == ApproverRole.PRINCIPAL
    assert to_approver_role(ApproverRole.HOD) == ApproverRole.HOD
