from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from datetime import datetime
import enum

from campusdesk.core.database import Base
from campusdesk.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """Portal roles"""
    ADMIN = "ADMIN"
    PRINCIPAL = "PRINCIPAL"
    HOD = "HOD"
    COORDINATOR = "COORDINATOR"
    EXAM_CELL_COORDINATOR = "EXAM_CELL_COORDINATOR"
    CR = "CR"
    STUDENT = "STUDENT"
    FACULTY = "FACULTY"
    GUEST = "GUEST"
    LIBRARIAN = "LIBRARIAN"
    ACCOUNTANT = "ACCOUNTANT"


class Department(str, enum.Enum):
    """Academic departments"""
    CSE = "CSE"
    CSM = "CSM"
    ECE = "ECE"
    EEE = "EEE"
    CIVIL = "CIVIL"
    MECH = "MECH"
    AME = "AME"
    MBA = "MBA"
    MCA = "MCA"
    DIPLOMA = "DIPLOMA"
    BBA = "BBA"
    BCA = "BCA"
    BSH = "BS&H"


# Roles that file no-due requests
NO_DUE_APPLICANT_ROLES = {UserRole.STUDENT, UserRole.CR}

# Roles counted in the faculty workload report
TEACHING_ROLES = {UserRole.FACULTY, UserRole.HOD, UserRole.COORDINATOR}


class User(Base):
    """Portal account"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=True)

    role = Column(SQLEnum(UserRole), default=UserRole.STUDENT, nullable=False, index=True)
    department = Column(SQLEnum(Department), nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else '-'})>"
