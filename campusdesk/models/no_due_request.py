from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from datetime import datetime
from typing import List
import enum

from campusdesk.core.database import Base
from campusdesk.core.types import GUID, generate_uuid


class ApproverRole(str, enum.Enum):
    """The four authorities that clear a no-due request"""
    HOD = "HOD"
    LIBRARIAN = "LIBRARIAN"
    ACCOUNTANT = "ACCOUNTANT"
    PRINCIPAL = "PRINCIPAL"

    @property
    def flag(self) -> str:
        return f"{self.value.lower()}_approved"


APPROVER_ROLES: List[ApproverRole] = [
    ApproverRole.HOD,
    ApproverRole.LIBRARIAN,
    ApproverRole.ACCOUNTANT,
    ApproverRole.PRINCIPAL,
]


class NoDueRequest(Base):
    """
    A student's application for a no-due certificate.

    Each approver flag only ever moves from False to True. Completion is
    derived from the flags and never stored.
    """
    __tablename__ = "no_due_requests"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    applicant_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    hod_approved = Column(Boolean, default=False, nullable=False)
    hod_approved_by = Column(GUID, nullable=True)
    hod_approved_at = Column(DateTime, nullable=True)

    librarian_approved = Column(Boolean, default=False, nullable=False)
    librarian_approved_by = Column(GUID, nullable=True)
    librarian_approved_at = Column(DateTime, nullable=True)

    accountant_approved = Column(Boolean, default=False, nullable=False)
    accountant_approved_by = Column(GUID, nullable=True)
    accountant_approved_at = Column(DateTime, nullable=True)

    principal_approved = Column(Boolean, default=False, nullable=False)
    principal_approved_by = Column(GUID, nullable=True)
    principal_approved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    form_generated_at = Column(DateTime, nullable=True)

    def is_approved_by(self, role: ApproverRole) -> bool:
        return bool(getattr(self, role.flag))

    @property
    def all_approved(self) -> bool:
        return all(self.is_approved_by(role) for role in APPROVER_ROLES)

    @property
    def pending_roles(self) -> List[str]:
        return [role.value for role in APPROVER_ROLES if not self.is_approved_by(role)]

    def __repr__(self):
        return f"<NoDueRequest {self.id} student={self.student_id}>"
