from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.database import get_db
from campusdesk.core.exceptions import AuthorizationError
from campusdesk.models.user import User, UserRole
from campusdesk.modules.auth.dependencies import get_current_user
from campusdesk.schemas.student import StudentResponse, StudentUpdate
from campusdesk.services.student_service import StudentService

router = APIRouter()

STUDENT_EDITOR_ROLES = {UserRole.ADMIN, UserRole.HOD, UserRole.COORDINATOR}


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    student = await StudentService(db).get_student(student_id)
    if current_user.role == UserRole.STUDENT and str(student.user_id) != str(current_user.id):
        raise AuthorizationError("Students can only view their own profile")
    return StudentResponse.model_validate(student)


@router.patch("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    changes: StudentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update profile fields; staff may edit any student, students only themselves"""
    service = StudentService(db)
    student = await service.get_student(student_id)

    is_self = student.user_id is not None and str(student.user_id) == str(current_user.id)
    if current_user.role not in STUDENT_EDITOR_ROLES and not is_self:
        raise AuthorizationError("Not allowed to edit this student")
    if (is_self and current_user.role not in STUDENT_EDITOR_ROLES
            and "mentor_id" in changes.model_fields_set):
        raise AuthorizationError("Students cannot change their mentor")

    student = await service.update_student(student_id, changes)
    return StudentResponse.model_validate(student)
