from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index
from datetime import datetime

from campusdesk.core.database import Base
from campusdesk.core.types import GUID, generate_uuid


class FacultyAssignment(Base):
    """
    One slot of a faculty member's weekly timetable.

    Two rows for the same faculty, day and period are allowed: the clash is
    reported before saving but can be overridden.
    """
    __tablename__ = "faculty_assignments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    faculty_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    faculty_name = Column(String(255), nullable=True)
    department = Column(String(20), nullable=False, index=True)

    day = Column(String(10), nullable=False)  # Monday..Saturday
    period = Column(Integer, nullable=False)  # 0..6
    time_slot = Column(String(20), nullable=False)

    subject = Column(String(255), nullable=False)
    class_name = Column(String(50), nullable=False, index=True)
    room = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_faculty_assignments_slot", "faculty_id", "day", "period"),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "faculty_id": str(self.faculty_id),
            "faculty_name": self.faculty_name,
            "department": self.department,
            "day": self.day,
            "period": self.period,
            "time_slot": self.time_slot,
            "subject": self.subject,
            "class_name": self.class_name,
            "room": self.room,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<FacultyAssignment {self.faculty_id} {self.day} P{self.period}>"
