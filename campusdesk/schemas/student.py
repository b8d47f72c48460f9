from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
import enum

from campusdesk.models.user import Department


class StudentUpdate(BaseModel):
    """Editable profile fields"""
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    department: Optional[Department] = None
    class_name: Optional[str] = Field(None, max_length=50)
    regulation: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, pattern=r'^[6-9]\d{9}$', description="10-digit Indian mobile number")
    mentor_id: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def reject_null_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("full_name cannot be null")
        return v


class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    register_id: str
    full_name: str
    email: Optional[str] = None
    department: Optional[str] = None
    class_name: Optional[str] = None
    regulation: Optional[str] = None
    phone: Optional[str] = None
    mentor_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    @field_validator("department", mode="before")
    @classmethod
    def enum_to_value(cls, v):
        return v.value if isinstance(v, enum.Enum) else v
