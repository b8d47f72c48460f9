"""
Unit Tests for the faculty workload score
"""
import pytest

from campusdesk.core.config import settings
from campusdesk.models import Department, FacultyAssignment, Student, UserRole
from campusdesk.services.faculty_workload_service import (
    FacultyWorkloadService,
    burnout_level,
    compute_workload,
    is_lab_subject,
    round_half_up,
)
from campusdesk.services.timetable import time_slot_label

THRESHOLDS = {
    "max_teaching_hours": 20,
    "max_lab_sessions": 4,
    "max_mentees": 25,
    "max_meetings_per_week": 5,
}


class TestComputeWorkload:

    def test_idle_faculty_scores_zero(self):
        result = compute_workload([], 0, 0, THRESHOLDS)

        assert result["workload_score"] == 0
        assert result["burnout_level"] == "normal"
        assert result["overload_reasons"] == []

    def test_lab_periods_grouped_into_sessions(self):
        subjects = ["DS Lab"] * 4 + ["Maths"] * 2

        result = compute_workload(subjects, 0, 0, THRESHOLDS)

        assert result["lab_periods"] == 4
        assert result["theory_periods"] == 2
        assert result["lab_sessions"] == 2

    def test_lab_hours_counted_separately(self):
        result = compute_workload(["DS Lab"] * 4 + ["Maths"] * 2, 0, 0, THRESHOLDS)

        assert result["lab_hours"] == 3.3
        assert result["teaching_hours"] == 5.0

    def test_score_halves_round_up(self):
        # 1 of 4 mentees is exactly 6.25 points
        result = compute_workload([], 1, 0, {**THRESHOLDS, "max_mentees": 4})

        assert result["workload_score"] == 6.3

    def test_teaching_hours_from_fifty_minute_periods(self):
        result = compute_workload(["Maths"] * 6, 0, 0, THRESHOLDS)

        assert result["teaching_hours"] == 5.0

    def test_every_dimension_at_threshold_scores_one_hundred(self):
        # 24 periods * 50 min = 20 h, 4 lab sessions = 12 lab periods
        subjects = ["Physics Lab"] * 12 + ["Physics"] * 12

        result = compute_workload(subjects, 25, 5, THRESHOLDS)

        assert result["workload_score"] == 100
        assert result["burnout_level"] == "high"
        assert result["overload_reasons"] == []

    def test_overload_reasons_listed(self):
        result = compute_workload(["Maths"] * 30, 30, 6, THRESHOLDS)

        assert len(result["overload_reasons"]) == 3
        assert result["overload_reasons"][0].startswith("Teaching 25.0h/wk")
        assert result["workload_score"] == 91.5
        assert result["burnout_level"] == "high"


class TestBurnoutLevel:

    @pytest.mark.parametrize("score,level", [
        (0, "normal"),
        (60, "normal"),
        (60.1, "elevated"),
        (80, "elevated"),
        (95, "high"),
        (100, "high"),
        (100.1, "critical"),
    ])
    def test_levels(self, score, level):
        assert burnout_level(score) == level


@pytest.mark.parametrize("subject,expected", [
    ("Data Structures Lab", True),
    ("Engineering Practical", True),
    ("Data Structures", False),
    (None, False),
])
def test_is_lab_subject(subject, expected):
    assert is_lab_subject(subject) is expected


class TestFacultyWorkloadService:

    async def test_report_ranks_by_score(self, db_session, make_user, student_user):
        busy = await make_user(UserRole.FACULTY, full_name="Busy")
        await make_user(UserRole.FACULTY, full_name="Idle")
        await make_user(UserRole.LIBRARIAN, department=None)

        for period in range(6):
            db_session.add(FacultyAssignment(
                faculty_id=busy.id, faculty_name=busy.full_name, department="CSE",
                day="Monday", period=period, time_slot=time_slot_label(period),
                subject="Maths", class_name="CSE-A",
            ))
        db_session.add(Student(
            user_id=student_user.id, register_id="22EC1A0599", full_name=student_user.full_name,
            department=Department.CSE, mentor_id=busy.id,
        ))
        await db_session.commit()

        report = await FacultyWorkloadService(db_session).get_faculty_workloads()

        assert [row["faculty_name"] for row in report] == ["Busy", "Idle"]
        assert report[0]["teaching_hours"] == 5.0
        assert report[0]["mentee_count"] == 1
        assert report[1]["workload_score"] == 0

    async def test_department_filter(self, db_session, make_user):
        await make_user(UserRole.FACULTY, department=Department.CSE)
        ece = await make_user(UserRole.HOD, department=Department.ECE)

        report = await FacultyWorkloadService(db_session).get_faculty_workloads(department=Department.ECE)

        assert [row["faculty_id"] for row in report] == [str(ece.id)]

    async def test_meetings_are_optional_input(self, db_session, faculty_user):
        report = await FacultyWorkloadService(db_session).get_faculty_workloads(
            meetings_per_week={str(faculty_user.id): 5}
        )

        assert report[0]["meeting_count"] == 5
        assert report[0]["workload_score"] == 20

    def test_thresholds_default_to_settings(self):
        service = FacultyWorkloadService(None)

        assert service.thresholds == settings.get_workload_thresholds()

    def test_summarize(self):
        report = [{"burnout_level": "normal"}, {"burnout_level": "critical"}, {"burnout_level": "normal"}]

        assert FacultyWorkloadService.summarize(report) == {
            "normal": 2, "elevated": 0, "high": 0, "critical": 1,
        }


@pytest.mark.parametrize("value,expected", [
    (6.25, 6.3),
    (0.25, 0.3),
    (91.5, 91.5),
    (3.3333333333333335, 3.3),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
