"""
No Due Service
Four-approver clearance workflow for the no-due certificate.

Each approver role owns one boolean flag. Approving sets that flag and
nothing else; a flag that is already set stays set, with its first approver
and timestamp kept. There is no rejection or reset. A request is complete
when all four flags are set, which is computed on read.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.config import settings
from campusdesk.core.events import (
    EventBus,
    EventHandler,
    EventType,
    event_bus as default_bus,
    no_due_topic,
)
from campusdesk.core.exceptions import (
    ApproverRoleError,
    AuthorizationError,
    DuplicateNoDueRequestError,
    InvalidApproverRoleError,
    NoDueRequestNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from campusdesk.core.logging_config import logger
from campusdesk.models.no_due_request import APPROVER_ROLES, ApproverRole, NoDueRequest
from campusdesk.models.notification import NotificationType
from campusdesk.models.user import NO_DUE_APPLICANT_ROLES, User, UserRole
from campusdesk.services.notification_service import NotificationService

APPROVER_TITLES = {
    ApproverRole.HOD: "Head of Department",
    ApproverRole.LIBRARIAN: "Library",
    ApproverRole.ACCOUNTANT: "Accounts Section",
    ApproverRole.PRINCIPAL: "Principal",
}


def to_approver_role(role: Union[str, ApproverRole]) -> ApproverRole:
    if isinstance(role, ApproverRole):
        return role
    try:
        return ApproverRole(str(role).upper())
    except ValueError:
        raise InvalidApproverRoleError(str(role))


def resolve_approver_role(user: User, requested: Optional[Union[str, ApproverRole]] = None) -> ApproverRole:
    """
    The flag ``user`` is allowed to set.

    Approvers act only for their own role; admins must name the role they are
    approving on behalf of.
    """
    if user.role == UserRole.ADMIN:
        if requested is None:
            raise ValidationError("Admins must specify which approver role to act for", field="role")
        return to_approver_role(requested)

    try:
        own = ApproverRole(user.role.value)
    except ValueError:
        raise AuthorizationError(f"{user.role.value} users cannot approve no-due requests")

    if requested is not None and to_approver_role(requested) != own:
        raise ApproverRoleError(own.value, to_approver_role(requested).value)
    return own


def no_due_to_dict(request: NoDueRequest, student_name: Optional[str] = None) -> Dict[str, Any]:
    data = {
        "id": str(request.id),
        "student_id": str(request.student_id),
        "applicant_id": str(request.applicant_id) if request.applicant_id else None,
        "all_approved": request.all_approved,
        "pending_roles": request.pending_roles,
        "created_at": request.created_at,
        "form_generated_at": request.form_generated_at,
        "student_name": student_name,
    }
    for role in APPROVER_ROLES:
        prefix = role.value.lower()
        data[role.flag] = bool(getattr(request, role.flag))
        data[f"{prefix}_approved_at"] = getattr(request, f"{prefix}_approved_at")
    return data


class NoDueService:
    """Service for no-due requests"""

    def __init__(self, db: AsyncSession, bus: Optional[EventBus] = None):
        self.db = db
        self.bus = bus or default_bus
        self.notifications = NotificationService(db)

    # =====================================================
    # QUERIES
    # =====================================================

    async def get(self, request_id: str) -> NoDueRequest:
        result = await self.db.execute(select(NoDueRequest).where(NoDueRequest.id == request_id))
        request = result.scalar_one_or_none()
        if not request:
            raise NoDueRequestNotFoundError(request_id)
        return request

    async def get_by_student(self, student_id: str) -> Optional[NoDueRequest]:
        """The student's request, or None when they have not applied"""
        result = await self.db.execute(
            select(NoDueRequest)
            .where(NoDueRequest.student_id == student_id)
            .order_by(NoDueRequest.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_recent(self, limit: Optional[int] = None) -> List[Tuple[NoDueRequest, Optional[str]]]:
        """Newest requests first, paired with the student's name"""
        limit = limit or settings.NO_DUE_RECENT_LIMIT
        result = await self.db.execute(
            select(NoDueRequest, User.full_name)
            .outerjoin(User, User.id == NoDueRequest.student_id)
            .order_by(NoDueRequest.created_at.desc())
            .limit(limit)
        )
        return [(request, name) for request, name in result.all()]

    # =====================================================
    # WORKFLOW
    # =====================================================

    async def create(self, student_id: str, applicant: User) -> NoDueRequest:
        """
        File a request with every flag cleared.

        Students file for themselves; class representatives and admins may
        file for any student. One request per student.
        """
        if applicant.role == UserRole.STUDENT and str(applicant.id) != str(student_id):
            raise AuthorizationError("Students can only apply for their own no-due certificate")
        if applicant.role not in NO_DUE_APPLICANT_ROLES and applicant.role != UserRole.ADMIN:
            raise AuthorizationError("Only students and class representatives can apply for no-due")

        result = await self.db.execute(select(User).where(User.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise UserNotFoundError(student_id)
        if student.role not in NO_DUE_APPLICANT_ROLES:
            raise ValidationError("No-due requests can only be filed for students", field="student_id")

        existing = await self.get_by_student(student_id)
        if existing:
            raise DuplicateNoDueRequestError(str(student_id), str(existing.id))

        request = NoDueRequest(
            student_id=student_id,
            applicant_id=applicant.id,
            hod_approved=False,
            librarian_approved=False,
            accountant_approved=False,
            principal_approved=False,
        )
        self.db.add(request)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another filing for the same student won the insert
            await self.db.rollback()
            existing = await self.get_by_student(student_id)
            raise DuplicateNoDueRequestError(str(student_id), str(existing.id) if existing else "")
        await self.db.refresh(request)

        logger.log_workflow_event(
            "no_due", "created", entity_id=str(request.id),
            student_id=str(student_id), applicant_id=str(applicant.id)
        )
        await self.bus.emit(EventType.NO_DUE_CREATED, no_due_topic(str(student_id)), no_due_to_dict(request))
        return request

    async def approve(
        self,
        request_id: str,
        role: Union[str, ApproverRole],
        approver_id: Optional[str] = None,
    ) -> NoDueRequest:
        """
        Set the flag for ``role``.

        Idempotent: approving an already-approved role changes nothing and is
        not an error. Other roles' flags are never touched.
        """
        role = to_approver_role(role)
        request = await self.get(request_id)

        if request.is_approved_by(role):
            logger.debug(f"[NoDue] {role.value} already approved {request_id}")
            return request

        prefix = role.value.lower()
        setattr(request, role.flag, True)
        setattr(request, f"{prefix}_approved_by", approver_id)
        setattr(request, f"{prefix}_approved_at", datetime.utcnow())

        completed = request.all_approved
        await self.notifications.create_notification(
            user_id=request.student_id,
            title="No-due approval",
            message=f"{APPROVER_TITLES[role]} has cleared your no-due request.",
            type=NotificationType.SUCCESS,
            action_url="/no-due",
            commit=False,
        )
        if completed:
            await self.notifications.create_notification(
                user_id=request.student_id,
                title="No-due certificate ready",
                message="All departments have cleared your request. You can now generate the certificate.",
                type=NotificationType.SUCCESS,
                action_url="/no-due",
                commit=False,
            )

        await self.db.commit()
        await self.db.refresh(request)

        logger.log_workflow_event(
            "no_due", "approved", entity_id=str(request.id),
            approver_role=role.value, approver_id=approver_id, all_approved=completed
        )
        topic = no_due_topic(str(request.student_id))
        payload = no_due_to_dict(request)
        await self.bus.emit(EventType.NO_DUE_APPROVED, topic, {**payload, "approved_role": role.value})
        if completed:
            await self.bus.emit(EventType.NO_DUE_COMPLETED, topic, payload)
        return request

    async def mark_form_generated(self, request_id: str) -> NoDueRequest:
        """
        Stamp form_generated_at with the current time.

        Does not check the approvals; callers that render the certificate
        gate on ``all_approved`` themselves.
        """
        request = await self.get(request_id)
        request.form_generated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(request)

        logger.log_workflow_event("no_due", "form_generated", entity_id=str(request.id))
        await self.bus.emit(
            EventType.NO_DUE_FORM_GENERATED,
            no_due_topic(str(request.student_id)),
            no_due_to_dict(request),
        )
        return request

    # =====================================================
    # REALTIME
    # =====================================================

    def subscribe_to_student_requests(self, student_id: str, callback: EventHandler) -> Callable[[], None]:
        """Call ``callback`` on every change to the student's requests; returns the disposer"""
        return self.bus.subscribe(no_due_topic(str(student_id)), callback)
