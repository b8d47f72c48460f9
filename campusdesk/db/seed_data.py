"""
Database Seed Data Module

Demo accounts for every approver role, a few faculty with a weekly
timetable, and students with profiles.
Run with: python -m campusdesk.db.seed_data  (or `campusdesk-seed`)
"""
import asyncio
import sys
from typing import Dict, List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.database import get_session_local, init_db
from campusdesk.core.security import get_password_hash
from campusdesk.models import (
    FacultyAssignment,
    NoDueRequest,
    Notification,
    Student,
    User,
    UserRole,
    Department,
)
from campusdesk.services.timetable import time_slot_label

DEFAULT_PASSWORD = "Password123!"


# ==================== Sample Data Constants ====================

SAMPLE_USERS = [
    {"email": "admin@campus.edu", "full_name": "Portal Admin", "role": UserRole.ADMIN, "department": None},
    {"email": "principal@campus.edu", "full_name": "Dr. K. Ramana Rao", "role": UserRole.PRINCIPAL, "department": None},
    {"email": "hod.cse@campus.edu", "full_name": "Dr. S. Lakshmi", "role": UserRole.HOD, "department": Department.CSE},
    {"email": "librarian@campus.edu", "full_name": "M. Venkatesh", "role": UserRole.LIBRARIAN, "department": None},
    {"email": "accounts@campus.edu", "full_name": "P. Suresh", "role": UserRole.ACCOUNTANT, "department": None},
    {"email": "coordinator@campus.edu", "full_name": "R. Anitha", "role": UserRole.COORDINATOR, "department": Department.CSE},

    # Faculty
    {"email": "faculty1@campus.edu", "full_name": "Dr. Srinivas Kumar", "role": UserRole.FACULTY, "department": Department.CSE},
    {"email": "faculty2@campus.edu", "full_name": "Prof. Lakshmi Devi", "role": UserRole.FACULTY, "department": Department.CSE},
    {"email": "faculty3@campus.edu", "full_name": "Dr. Ravi Teja", "role": UserRole.FACULTY, "department": Department.ECE},

    # Students
    {"email": "student1@campus.edu", "full_name": "Rahul Sharma", "role": UserRole.STUDENT, "department": Department.CSE},
    {"email": "student2@campus.edu", "full_name": "Priya Patel", "role": UserRole.STUDENT, "department": Department.CSE},
    {"email": "cr.cse@campus.edu", "full_name": "Amit Kumar", "role": UserRole.CR, "department": Department.CSE},
]

SAMPLE_STUDENTS = [
    {"email": "student1@campus.edu", "register_id": "22EC1A0501", "class_name": "CSE-A"},
    {"email": "student2@campus.edu", "register_id": "22EC1A0502", "class_name": "CSE-A"},
    {"email": "cr.cse@campus.edu", "register_id": "22EC1A0503", "class_name": "CSE-A"},
]

# (faculty email, day, period, subject, class, room)
SAMPLE_TIMETABLE = [
    ("faculty1@campus.edu", "Monday", 0, "Data Structures", "CSE-A", "101"),
    ("faculty1@campus.edu", "Monday", 2, "Data Structures", "CSE-B", "102"),
    ("faculty1@campus.edu", "Tuesday", 4, "Data Structures Lab", "CSE-A", "Lab 1"),
    ("faculty1@campus.edu", "Tuesday", 5, "Data Structures Lab", "CSE-A", "Lab 1"),
    ("faculty1@campus.edu", "Tuesday", 6, "Data Structures Lab", "CSE-A", "Lab 1"),
    ("faculty2@campus.edu", "Monday", 1, "Operating Systems", "CSE-A", "101"),
    ("faculty2@campus.edu", "Wednesday", 0, "Operating Systems", "CSE-B", "102"),
    ("faculty2@campus.edu", "Thursday", 3, "Computer Networks", "CSE-A", "101"),
    ("hod.cse@campus.edu", "Friday", 1, "Software Engineering", "CSE-A", "101"),
    ("faculty3@campus.edu", "Monday", 0, "Signals and Systems", "ECE-A", "201"),
]


async def seed_users(db: AsyncSession) -> Dict[str, User]:
    """Create sample users keyed by email"""
    users = {}
    hashed = get_password_hash(DEFAULT_PASSWORD)

    for user_data in SAMPLE_USERS:
        user = User(
            email=user_data["email"],
            full_name=user_data["full_name"],
            hashed_password=hashed,
            role=user_data["role"],
            department=user_data["department"],
            is_active=True,
        )
        db.add(user)
        users[user.email] = user

    await db.flush()
    print(f"Created {len(users)} users")
    return users


async def seed_students(db: AsyncSession, users: Dict[str, User]) -> List[Student]:
    """Create student profiles, mentored by the first faculty member"""
    mentor = users["faculty1@campus.edu"]
    students = []

    for data in SAMPLE_STUDENTS:
        user = users[data["email"]]
        student = Student(
            user_id=user.id,
            register_id=data["register_id"],
            full_name=user.full_name,
            email=user.email,
            department=user.department,
            class_name=data["class_name"],
            regulation="R22",
            mentor_id=mentor.id,
        )
        db.add(student)
        students.append(student)

    await db.flush()
    print(f"Created {len(students)} student profiles")
    return students


async def seed_timetable(db: AsyncSession, users: Dict[str, User]) -> List[FacultyAssignment]:
    """Create a conflict-free weekly timetable"""
    assignments = []

    for email, day, period, subject, class_name, room in SAMPLE_TIMETABLE:
        faculty = users[email]
        assignment = FacultyAssignment(
            faculty_id=faculty.id,
            faculty_name=faculty.full_name,
            department=faculty.department.value if faculty.department else "",
            day=day,
            period=period,
            time_slot=time_slot_label(period),
            subject=subject,
            class_name=class_name,
            room=room,
        )
        db.add(assignment)
        assignments.append(assignment)

    await db.flush()
    print(f"Created {len(assignments)} timetable slots")
    return assignments


# ==================== Main Seed Function ====================

async def seed_all():
    """Seed all sample data"""
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    await init_db()

    async with get_session_local()() as db:
        try:
            users = await seed_users(db)
            await seed_students(db, users)
            await seed_timetable(db, users)

            await db.commit()
            print("=" * 50)
            print(f"Database seeding completed! Password for all accounts: {DEFAULT_PASSWORD}")
            print("=" * 50)

        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise


async def clear_all():
    """Clear all data from database"""
    print("Clearing all data...")
    async with get_session_local()() as db:
        # Reverse order of dependencies
        for model in (Notification, NoDueRequest, FacultyAssignment, Student, User):
            await db.execute(delete(model))
        await db.commit()
        print("All data cleared!")


def main():
    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())


if __name__ == "__main__":
    main()
