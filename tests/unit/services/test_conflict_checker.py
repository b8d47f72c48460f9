"""
Unit Tests for the faculty slot conflict checker
"""
import pytest

from campusdesk.models.faculty_assignment import FacultyAssignment
from campusdesk.services.conflict_checker import (
    ConflictResult,
    UNKNOWN_FACULTY,
    check_conflict,
    find_conflicts,
)
from campusdesk.services.timetable import time_slot_label


def slot(id, faculty_id, day, period, subject="Maths", class_name="CSE-A"):
    return FacultyAssignment(
        id=id,
        faculty_id=faculty_id,
        faculty_name=None,
        department="CSE",
        day=day,
        period=period,
        time_slot=time_slot_label(period),
        subject=subject,
        class_name=class_name,
    )


@pytest.fixture
def timetable():
    return [
        slot("a1", "f1", "Monday", 2, "Maths", "CSE-A"),
        slot("a2", "f1", "Tuesday", 2, "Maths", "CSE-B"),
        slot("a3", "f2", "Monday", 2, "Physics", "CSE-B"),
        slot("a4", "f1", "Monday", 3, "Maths Lab", "CSE-A"),
    ]


class TestCheckConflict:
    """Clash detection against an in-memory timetable"""

    def test_monday_period_clash_is_reported(self, timetable):
        result = check_conflict(timetable, "f1", "Monday", 2, faculty_name="F1")

        assert result.has_conflict is True
        assert [a.id for a in result.conflicting_assignments] == ["a1"]
        assert result.message == (
            "F1 is already assigned to Maths (CSE-A) during Monday Period 3 "
            "(10:50 - 11:40). Do you want to assign them to multiple classes?"
        )

    def test_free_slot_has_no_conflict(self, timetable):
        result = check_conflict(timetable, "f1", "Wednesday", 2, faculty_name="F1")

        assert result.has_conflict is False
        assert result.conflicting_assignments == []
        assert result.message == ""

    def test_other_faculty_in_same_slot_is_not_a_conflict(self, timetable):
        result = check_conflict(timetable, "f3", "Monday", 2)

        assert result.has_conflict is False

    def test_editing_a_slot_does_not_clash_with_itself(self, timetable):
        result = check_conflict(timetable, "f1", "Monday", 2, exclude_assignment_id="a1")

        assert result.has_conflict is False

    def test_exclude_only_removes_the_named_slot(self, timetable):
        timetable.append(slot("a5", "f1", "Monday", 2, "Algebra", "CSE-C"))

        result = check_conflict(timetable, "f1", "Monday", 2, exclude_assignment_id="a1")

        assert result.has_conflict is True
        assert [a.id for a in result.conflicting_assignments] == ["a5"]

    def test_every_clashing_slot_is_listed(self, timetable):
        timetable.append(slot("a5", "f1", "Monday", 2, "Algebra", "CSE-C"))

        result = check_conflict(timetable, "f1", "Monday", 2, faculty_name="F1")

        assert len(result.conflicting_assignments) == 2
        assert "Maths (CSE-A), Algebra (CSE-C)" in result.message

    def test_unknown_faculty_name_falls_back(self, timetable):
        result = check_conflict(timetable, "f1", "Monday", 2)

        assert result.message.startswith(f"{UNKNOWN_FACULTY} is already assigned")

    def test_empty_timetable_never_raises(self):
        result = check_conflict([], "f1", "Monday", 0)

        assert result == ConflictResult(has_conflict=False)

    def test_flag_matches_presence_of_conflicts(self, timetable):
        for day in ("Monday", "Tuesday", "Friday"):
            for period in range(7):
                result = check_conflict(timetable, "f1", day, period)
                expected = find_conflicts(timetable, "f1", day, period)
                assert result.has_conflict == bool(expected)
                assert result.conflicting_assignments == expected

    def test_ids_compare_as_strings(self):
        import uuid
        faculty_id = uuid.uuid4()
        timetable = [slot("a1", str(faculty_id), "Friday", 0)]

        assert check_conflict(timetable, faculty_id, "Friday", 0).has_conflict is True


class TestConflictResult:

    def test_to_dict_serializes_assignments(self, timetable):
        result = check_conflict(timetable, "f1", "Monday", 2, faculty_name="F1")
        data = result.to_dict()

        assert data["has_conflict"] is True
        assert data["conflicting_assignments"][0]["id"] == "a1"
        assert data["conflicting_assignments"][0]["subject"] == "Maths"
        assert data["message"] == result.message
