"""
Faculty Workload Service
Weekly load score per faculty member from timetable, mentees and meetings
"""

from typing import Any, Dict, Iterable, List, Optional
from decimal import Decimal, ROUND_HALF_UP
import math

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.config import settings
from campusdesk.models.faculty_assignment import FacultyAssignment
from campusdesk.models.user import TEACHING_ROLES, Department, User
from campusdesk.services.student_service import StudentService
from campusdesk.services.timetable import PERIOD_MINUTES

LAB_PERIODS_PER_SESSION = 3
LAB_KEYWORDS = ("lab", "practical")
MAX_SCORE = 100

# Share of the 100-point score each dimension carries at its threshold
WEIGHTS = {
    "teaching": 30,
    "labs": 25,
    "mentees": 25,
    "meetings": 20,
}

BURNOUT_LEVELS = ("normal", "elevated", "high", "critical")


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like a printed figure: 6.25 -> 6.3, where round() would give 6.2"""
    return float(Decimal(value).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP))


def is_lab_subject(subject: Optional[str]) -> bool:
    lowered = (subject or "").lower()
    return any(keyword in lowered for keyword in LAB_KEYWORDS)


def burnout_level(score: float, max_score: float = MAX_SCORE) -> str:
    ratio = score / max_score
    if ratio <= 0.6:
        return "normal"
    if ratio <= 0.8:
        return "elevated"
    if ratio <= 1.0:
        return "high"
    return "critical"


def compute_workload(
    subjects: Iterable[str],
    mentee_count: int,
    meeting_count: int,
    thresholds: Dict[str, float],
) -> Dict[str, Any]:
    """Score one faculty member; ``subjects`` holds one entry per weekly period taught"""
    theory_periods = 0
    lab_periods = 0
    for subject in subjects:
        if is_lab_subject(subject):
            lab_periods += 1
        else:
            theory_periods += 1

    lab_sessions = math.ceil(lab_periods / LAB_PERIODS_PER_SESSION)
    teaching_hours = round_half_up((theory_periods + lab_periods) * PERIOD_MINUTES / 60)
    lab_hours = round_half_up(lab_periods * PERIOD_MINUTES / 60)

    score = round_half_up(
        teaching_hours / thresholds["max_teaching_hours"] * WEIGHTS["teaching"]
        + lab_sessions / thresholds["max_lab_sessions"] * WEIGHTS["labs"]
        + mentee_count / thresholds["max_mentees"] * WEIGHTS["mentees"]
        + meeting_count / thresholds["max_meetings_per_week"] * WEIGHTS["meetings"]
    )

    reasons: List[str] = []
    if teaching_hours > thresholds["max_teaching_hours"]:
        reasons.append(f"Teaching {teaching_hours}h/wk (max {thresholds['max_teaching_hours']}h)")
    if lab_sessions > thresholds["max_lab_sessions"]:
        reasons.append(f"{lab_sessions} lab sessions/wk (max {thresholds['max_lab_sessions']})")
    if mentee_count > thresholds["max_mentees"]:
        reasons.append(f"{mentee_count} mentees (max {thresholds['max_mentees']})")
    if meeting_count > thresholds["max_meetings_per_week"]:
        reasons.append(f"{meeting_count} meetings/wk (max {thresholds['max_meetings_per_week']})")

    return {
        "teaching_hours": teaching_hours,
        "theory_periods": theory_periods,
        "lab_periods": lab_periods,
        "lab_sessions": lab_sessions,
        "lab_hours": lab_hours,
        "mentee_count": mentee_count,
        "meeting_count": meeting_count,
        "workload_score": score,
        "burnout_level": burnout_level(score),
        "overload_reasons": reasons,
    }


class FacultyWorkloadService:
    """Workload report across teaching staff"""

    def __init__(self, db: AsyncSession, thresholds: Optional[Dict[str, float]] = None):
        self.db = db
        self.thresholds = thresholds or settings.get_workload_thresholds()

    async def get_faculty_workloads(
        self,
        department: Optional[Department] = None,
        meetings_per_week: Optional[Dict[str, int]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Workload for every FACULTY, HOD and COORDINATOR, highest score first.

        ``meetings_per_week`` maps faculty id to this week's meeting count;
        faculty missing from it count zero meetings.
        """
        query = select(User).where(User.role.in_(list(TEACHING_ROLES)), User.is_active == True)  # noqa: E712
        if department:
            query = query.where(User.department == department)
        result = await self.db.execute(query)
        faculty = list(result.scalars().all())
        if not faculty:
            return []

        faculty_ids = [str(f.id) for f in faculty]
        slots = await self.db.execute(
            select(FacultyAssignment.faculty_id, FacultyAssignment.subject)
            .where(FacultyAssignment.faculty_id.in_(faculty_ids))
        )
        subjects_by_faculty: Dict[str, List[str]] = {fid: [] for fid in faculty_ids}
        for faculty_id, subject in slots.all():
            subjects_by_faculty[str(faculty_id)].append(subject)

        mentees = await StudentService(self.db).count_mentees_by_mentor()
        meetings_per_week = meetings_per_week or {}

        report = []
        for member in faculty:
            fid = str(member.id)
            metrics = compute_workload(
                subjects_by_faculty.get(fid, []),
                mentees.get(fid, 0),
                meetings_per_week.get(fid, 0),
                self.thresholds,
            )
            report.append({
                "faculty_id": fid,
                "faculty_name": member.full_name,
                "department": member.department.value if member.department else None,
                **metrics,
            })

        report.sort(key=lambda r: r["workload_score"], reverse=True)
        return report

    @staticmethod
    def summarize(report: List[Dict[str, Any]]) -> Dict[str, int]:
        summary = {level: 0 for level in BURNOUT_LEVELS}
        for row in report:
            summary[row["burnout_level"]] += 1
        return summary
