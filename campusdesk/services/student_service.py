"""
Student Service
Profile lookups and updates; every update is pushed on the students topic
"""

from typing import Optional, Dict, Any
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.events import EventBus, EventType, STUDENTS_TOPIC, event_bus as default_bus
from campusdesk.core.exceptions import StudentNotFoundError, UserNotFoundError
from campusdesk.core.logging_config import logger
from campusdesk.models.student import Student
from campusdesk.models.user import User
from campusdesk.schemas.student import StudentUpdate


def student_to_dict(student: Student) -> Dict[str, Any]:
    return {
        "id": str(student.id),
        "user_id": str(student.user_id) if student.user_id else None,
        "register_id": student.register_id,
        "full_name": student.full_name,
        "email": student.email,
        "department": student.department.value if student.department else None,
        "class_name": student.class_name,
        "regulation": student.regulation,
        "phone": student.phone,
        "mentor_id": str(student.mentor_id) if student.mentor_id else None,
    }


class StudentService:
    def __init__(self, db: AsyncSession, bus: Optional[EventBus] = None):
        self.db = db
        self.bus = bus or default_bus

    async def get_student(self, student_id: str) -> Student:
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise StudentNotFoundError(student_id)
        return student

    async def get_by_user_id(self, user_id: str) -> Optional[Student]:
        """Profile row for a student account, or None when it was never filled in"""
        result = await self.db.execute(select(Student).where(Student.user_id == user_id))
        return result.scalar_one_or_none()

    async def count_mentees_by_mentor(self) -> Dict[str, int]:
        result = await self.db.execute(
            select(Student.mentor_id, func.count(Student.id))
            .where(Student.mentor_id.is_not(None))
            .group_by(Student.mentor_id)
        )
        return {str(mentor_id): count for mentor_id, count in result.all()}

    async def update_student(self, student_id: str, changes: StudentUpdate) -> Student:
        student = await self.get_student(student_id)
        values = changes.model_dump(exclude_unset=True)

        if values.get("mentor_id"):
            mentor = await self.db.execute(select(User.id).where(User.id == values["mentor_id"]))
            if mentor.scalar_one_or_none() is None:
                raise UserNotFoundError(values["mentor_id"])

        for key, value in values.items():
            setattr(student, key, value)

        await self.db.commit()
        await self.db.refresh(student)

        logger.log_workflow_event(
            "students", "student_updated", entity_id=str(student.id),
            fields=sorted(values.keys())
        )
        await self.bus.emit(EventType.STUDENT_UPDATED, STUDENTS_TOPIC, student_to_dict(student))
        return student
