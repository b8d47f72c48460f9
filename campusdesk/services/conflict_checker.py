"""
Faculty slot conflict detection.

A conflict is any other assignment of the same faculty member on the same day
and period. The check is advisory: callers show the message and let the user
decide whether to double-book.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

UNKNOWN_FACULTY = "Unknown Faculty"


@dataclass
class ConflictResult:
    has_conflict: bool
    conflicting_assignments: List[Any] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_conflict": self.has_conflict,
            "conflicting_assignments": [
                a.to_dict() if hasattr(a, "to_dict") else a
                for a in self.conflicting_assignments
            ],
            "message": self.message,
        }


def find_conflicts(
    assignments: Iterable[Any],
    faculty_id: str,
    day: str,
    period: int,
    exclude_assignment_id: Optional[str] = None,
) -> List[Any]:
    """Assignments of ``faculty_id`` at (day, period), minus the excluded id"""
    faculty_id = str(faculty_id)
    excluded = str(exclude_assignment_id) if exclude_assignment_id is not None else None
    return [
        a for a in assignments
        if str(a.faculty_id) == faculty_id
        and a.day == day
        and a.period == period
        and str(a.id) != excluded
    ]


def conflict_message(faculty_name: Optional[str], day: str, period: int,
                     conflicts: List[Any]) -> str:
    details = ", ".join(f"{a.subject} ({a.class_name})" for a in conflicts)
    return (
        f"{faculty_name or UNKNOWN_FACULTY} is already assigned to {details} "
        f"during {day} Period {period + 1} ({conflicts[0].time_slot}). "
        "Do you want to assign them to multiple classes?"
    )


def check_conflict(
    assignments: Iterable[Any],
    faculty_id: str,
    day: str,
    period: int,
    exclude_assignment_id: Optional[str] = None,
    faculty_name: Optional[str] = None,
) -> ConflictResult:
    """
    Scan ``assignments`` for a clash with a prospective slot.

    Never raises; an empty list simply yields no conflict. When editing an
    existing slot pass its id as ``exclude_assignment_id`` so it is not
    reported against itself.
    """
    conflicts = find_conflicts(assignments, faculty_id, day, period, exclude_assignment_id)
    if not conflicts:
        return ConflictResult(has_conflict=False)

    return ConflictResult(
        has_conflict=True,
        conflicting_assignments=conflicts,
        message=conflict_message(faculty_name, day, period, conflicts),
    )
