from pydantic import BaseModel
from typing import List, Dict, Optional


class WorkloadThresholds(BaseModel):
    max_teaching_hours: float
    max_lab_sessions: int
    max_mentees: int
    max_meetings_per_week: int


class FacultyWorkload(BaseModel):
    faculty_id: str
    faculty_name: str
    department: Optional[str] = None
    teaching_hours: float
    theory_periods: int
    lab_periods: int
    lab_sessions: int
    lab_hours: float
    mentee_count: int
    meeting_count: int
    workload_score: float
    burnout_level: str  # normal | elevated | high | critical
    overload_reasons: List[str]


class WorkloadReport(BaseModel):
    thresholds: WorkloadThresholds
    faculty: List[FacultyWorkload]
    summary: Dict[str, int]
