"""Pydantic schemas for the no-due certificate workflow"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from campusdesk.models.no_due_request import ApproverRole


class NoDueCreate(BaseModel):
    """File a request; students may omit student_id to apply for themselves"""
    student_id: Optional[str] = Field(None, description="users.id of the student")


class NoDueApprove(BaseModel):
    """Role defaults to the caller's own; only admins may name another"""
    role: Optional[ApproverRole] = None


class NoDueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    applicant_id: Optional[str] = None

    hod_approved: bool
    hod_approved_at: Optional[datetime] = None
    librarian_approved: bool
    librarian_approved_at: Optional[datetime] = None
    accountant_approved: bool
    accountant_approved_at: Optional[datetime] = None
    principal_approved: bool
    principal_approved_at: Optional[datetime] = None

    all_approved: bool
    pending_roles: List[str]

    created_at: datetime
    form_generated_at: Optional[datetime] = None

    student_name: Optional[str] = None


class NoDueListResponse(BaseModel):
    requests: List[NoDueResponse]
    total: int
