"""
Faculty timetable endpoints.

Saving a slot that clashes with another slot of the same faculty member
answers 409 with the clash details; resend with ``force=true`` to double-book.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from campusdesk.core.database import get_db
from campusdesk.core.exceptions import ValidationError
from campusdesk.models.user import User
from campusdesk.modules.auth.dependencies import get_current_user, get_timetable_editor
from campusdesk.schemas.faculty_assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    AssignmentResponse,
    AssignmentSaveResponse,
    ConflictInfo,
    TimetableResponse,
)
from campusdesk.services.conflict_checker import ConflictResult
from campusdesk.services.faculty_assignment_service import FacultyAssignmentService
from campusdesk.services.timetable import PERIODS_PER_DAY, normalize_day

router = APIRouter()


def to_conflict_info(result: ConflictResult) -> ConflictInfo:
    return ConflictInfo(
        has_conflict=result.has_conflict,
        conflicting_assignments=[
            AssignmentResponse.model_validate(a) for a in result.conflicting_assignments
        ],
        message=result.message,
    )


def to_timetable(owner: str, week) -> TimetableResponse:
    return TimetableResponse(
        owner=owner,
        days={
            day: [AssignmentResponse.model_validate(a) if a else None for a in slots]
            for day, slots in week.items()
        },
    )


def parse_day(day: Optional[str]) -> Optional[str]:
    if day is None:
        return None
    try:
        return normalize_day(day)
    except ValueError as e:
        raise ValidationError(str(e), field="day")


@router.get("", response_model=List[AssignmentResponse])
async def list_assignments(
    department: Optional[str] = None,
    faculty_id: Optional[str] = None,
    day: Optional[str] = None,
    period: Optional[int] = Query(None, ge=0, le=PERIODS_PER_DAY - 1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List timetable slots with optional filters"""
    service = FacultyAssignmentService(db)
    assignments = await service.list_assignments(
        department=department,
        faculty_id=faculty_id,
        day=parse_day(day),
        period=period,
    )
    return [AssignmentResponse.model_validate(a) for a in assignments]


@router.get("/conflicts", response_model=ConflictInfo)
async def check_assignment_conflict(
    faculty_id: str,
    day: str,
    period: int = Query(..., ge=0, le=PERIODS_PER_DAY - 1),
    exclude_assignment_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Would this slot clash? Pass the id being edited as exclude_assignment_id."""
    service = FacultyAssignmentService(db)
    await service.refresh()
    result = service.check_conflict(
        faculty_id, parse_day(day), period, exclude_assignment_id=exclude_assignment_id
    )
    return to_conflict_info(result)


@router.get("/timetable/faculty/{faculty_id}", response_model=TimetableResponse)
async def get_faculty_timetable(
    faculty_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = FacultyAssignmentService(db)
    week = await service.get_faculty_timetable(faculty_id)
    return to_timetable(faculty_id, week)


@router.get("/timetable/class/{class_name}", response_model=TimetableResponse)
async def get_class_timetable(
    class_name: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = FacultyAssignmentService(db)
    week = await service.get_class_timetable(class_name)
    return to_timetable(class_name, week)


@router.get("/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    assignment = await FacultyAssignmentService(db).get_assignment(assignment_id)
    return AssignmentResponse.model_validate(assignment)


@router.post("", response_model=AssignmentSaveResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    data: AssignmentCreate,
    force: bool = Query(False, description="Save even if the faculty member is already booked"),
    current_user: User = Depends(get_timetable_editor),
    db: AsyncSession = Depends(get_db)
):
    """Add a timetable slot"""
    service = FacultyAssignmentService(db)
    assignment, conflict = await service.add_assignment(data, force=force)
    return AssignmentSaveResponse(
        assignment=AssignmentResponse.model_validate(assignment),
        conflict=to_conflict_info(conflict),
    )


@router.put("/{assignment_id}", response_model=AssignmentSaveResponse)
async def update_assignment(
    assignment_id: str,
    data: AssignmentUpdate,
    force: bool = Query(False, description="Save even if the faculty member is already booked"),
    current_user: User = Depends(get_timetable_editor),
    db: AsyncSession = Depends(get_db)
):
    """Edit a timetable slot; the slot never clashes with itself"""
    service = FacultyAssignmentService(db)
    assignment, conflict = await service.update_assignment(assignment_id, data, force=force)
    return AssignmentSaveResponse(
        assignment=AssignmentResponse.model_validate(assignment),
        conflict=to_conflict_info(conflict),
    )


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: str,
    current_user: User = Depends(get_timetable_editor),
    db: AsyncSession = Depends(get_db)
):
    await FacultyAssignmentService(db).remove_assignment(assignment_id)
