"""Pydantic schemas for the faculty timetable"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Dict
from datetime import datetime

from campusdesk.services.timetable import PERIODS_PER_DAY, normalize_day


class AssignmentBase(BaseModel):
    faculty_id: str = Field(..., description="users.id of the faculty member")
    faculty_name: Optional[str] = Field(None, max_length=255)
    department: str = Field(..., min_length=1, max_length=20)
    day: str = Field(..., description="Monday..Saturday")
    period: int = Field(..., ge=0, le=PERIODS_PER_DAY - 1, description="0-based period index")
    subject: str = Field(..., min_length=1, max_length=255)
    class_name: str = Field(..., min_length=1, max_length=50)
    room: Optional[str] = Field(None, max_length=50)

    @field_validator("day")
    @classmethod
    def validate_day(cls, v: str) -> str:
        return normalize_day(v)


class AssignmentCreate(AssignmentBase):
    """Add a timetable slot"""
    pass


class AssignmentUpdate(BaseModel):
    """Partial update of a timetable slot"""
    faculty_id: Optional[str] = None
    faculty_name: Optional[str] = Field(None, max_length=255)
    department: Optional[str] = Field(None, min_length=1, max_length=20)
    day: Optional[str] = None
    period: Optional[int] = Field(None, ge=0, le=PERIODS_PER_DAY - 1)
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    class_name: Optional[str] = Field(None, min_length=1, max_length=50)
    room: Optional[str] = Field(None, max_length=50)

    @field_validator("day")
    @classmethod
    def validate_day(cls, v: Optional[str]) -> Optional[str]:
        return normalize_day(v) if v is not None else v

    @field_validator("faculty_id", "department", "day", "period", "subject", "class_name")
    @classmethod
    def reject_null(cls, v):
        # Omit a field to keep it; only faculty_name and room can be cleared
        if v is None:
            raise ValueError("cannot be null")
        return v


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    faculty_id: str
    faculty_name: Optional[str] = None
    department: str
    day: str
    period: int
    time_slot: str
    subject: str
    class_name: str
    room: Optional[str] = None
    created_at: Optional[datetime] = None


class ConflictInfo(BaseModel):
    """Result of a slot clash check; advisory only"""
    has_conflict: bool
    conflicting_assignments: List[AssignmentResponse] = Field(default_factory=list)
    message: str = ""


class AssignmentSaveResponse(BaseModel):
    """Saved slot plus the clash that was overridden, if any"""
    assignment: AssignmentResponse
    conflict: ConflictInfo


class TimetableResponse(BaseModel):
    """Monday..Saturday grid, one entry per period, null when free"""
    owner: str
    days: Dict[str, List[Optional[AssignmentResponse]]]
