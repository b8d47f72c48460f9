from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum
from datetime import datetime

from campusdesk.core.database import Base
from campusdesk.core.types import GUID, generate_uuid
from campusdesk.models.user import Department


class Student(Base):
    """Academic profile of a student account"""
    __tablename__ = "students"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=True, index=True)
    register_id = Column(String(50), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    department = Column(SQLEnum(Department), nullable=True, index=True)
    class_name = Column(String(50), nullable=True, index=True)  # section, e.g. CSE-A
    regulation = Column(String(20), nullable=True)
    phone = Column(String(20), nullable=True)

    # Faculty mentor (users.id)
    mentor_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Student {self.register_id}>"
