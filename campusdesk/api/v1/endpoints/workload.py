from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from campusdesk.core.database import get_db
from campusdesk.models.user import Department, User, UserRole
from campusdesk.modules.auth.dependencies import require_roles
from campusdesk.schemas.workload import FacultyWorkload, WorkloadReport, WorkloadThresholds
from campusdesk.services.faculty_workload_service import FacultyWorkloadService

router = APIRouter()

get_workload_viewer = require_roles(
    {UserRole.ADMIN, UserRole.PRINCIPAL, UserRole.HOD},
    "Workload report is limited to admin, principal and HOD"
)


@router.get("", response_model=WorkloadReport)
async def get_faculty_workload(
    department: Optional[Department] = None,
    current_user: User = Depends(get_workload_viewer),
    db: AsyncSession = Depends(get_db)
):
    """Weekly workload per faculty member, highest score first"""
    # HODs only see their own department
    if current_user.role == UserRole.HOD:
        department = current_user.department

    service = FacultyWorkloadService(db)
    report = await service.get_faculty_workloads(department=department)
    return WorkloadReport(
        thresholds=WorkloadThresholds(**service.thresholds),
        faculty=[FacultyWorkload(**row) for row in report],
        summary=service.summarize(report),
    )
