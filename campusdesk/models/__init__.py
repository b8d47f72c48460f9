# Re-export all models for convenient imports
from campusdesk.models.user import User, UserRole, Department
from campusdesk.models.student import Student
from campusdesk.models.faculty_assignment import FacultyAssignment
from campusdesk.models.no_due_request import NoDueRequest, ApproverRole, APPROVER_ROLES
from campusdesk.models.notification import Notification, NotificationType

__all__ = [
    # Users
    "User",
    "UserRole",
    "Department",
    "Student",
    # Timetable
    "FacultyAssignment",
    # No-due workflow
    "NoDueRequest",
    "ApproverRole",
    "APPROVER_ROLES",
    # Notifications
    "Notification",
    "NotificationType",
]
