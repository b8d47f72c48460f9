from fastapi import APIRouter
from campusdesk.api.v1.endpoints import (
    auth,
    faculty_assignments,
    health,
    no_due,
    notifications,
    students,
    workload,
)

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(faculty_assignments.router, prefix="/faculty-assignments", tags=["Timetable"])
api_router.include_router(workload.router, prefix="/faculty-workload", tags=["Timetable"])
api_router.include_router(no_due.router, prefix="/no-due", tags=["No Due"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check for load balancers"""
    return {"status": "healthy", "service": "campusdesk-backend"}
