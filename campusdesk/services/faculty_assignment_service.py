"""
Faculty Assignment Service
Timetable slots, clash checks and weekly grids
"""

from typing import List, Optional, Dict, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.events import EventBus, EventType, TIMETABLE_TOPIC, event_bus as default_bus
from campusdesk.core.exceptions import (
    AssignmentNotFoundError,
    AssignmentConflictError,
    UserNotFoundError,
)
from campusdesk.core.logging_config import logger
from campusdesk.models.faculty_assignment import FacultyAssignment
from campusdesk.models.user import User
from campusdesk.schemas.faculty_assignment import AssignmentCreate, AssignmentUpdate
from campusdesk.services.conflict_checker import ConflictResult, check_conflict
from campusdesk.services.timetable import empty_week, time_slot_label


class FacultyAssignmentService:
    """
    Service for timetable operations.

    ``assignments`` is a snapshot of the table taken by :meth:`refresh`; clash
    checks run against that snapshot, so a concurrent edit by another user
    can slip past until the next refresh.
    """

    def __init__(self, db: AsyncSession, bus: Optional[EventBus] = None):
        self.db = db
        self.bus = bus or default_bus
        self.assignments: List[FacultyAssignment] = []
        self._faculty_names: Dict[str, str] = {}

    # =====================================================
    # SNAPSHOT
    # =====================================================

    async def refresh(self) -> List[FacultyAssignment]:
        """Reload every assignment and the names of the faculty holding them"""
        result = await self.db.execute(
            select(FacultyAssignment).order_by(
                FacultyAssignment.day, FacultyAssignment.period, FacultyAssignment.created_at
            )
        )
        self.assignments = list(result.scalars().all())

        faculty_ids = {str(a.faculty_id) for a in self.assignments}
        self._faculty_names = {}
        if faculty_ids:
            names = await self.db.execute(
                select(User.id, User.full_name).where(User.id.in_(list(faculty_ids)))
            )
            self._faculty_names = {str(uid): name for uid, name in names.all()}
        return self.assignments

    def faculty_name(self, faculty_id: str) -> Optional[str]:
        faculty_id = str(faculty_id)
        if faculty_id in self._faculty_names:
            return self._faculty_names[faculty_id]
        for a in self.assignments:
            if str(a.faculty_id) == faculty_id and a.faculty_name:
                return a.faculty_name
        return None

    # =====================================================
    # CONFLICTS
    # =====================================================

    def check_conflict(
        self,
        faculty_id: str,
        day: str,
        period: int,
        exclude_assignment_id: Optional[str] = None,
    ) -> ConflictResult:
        """Clash check against the current snapshot; never raises"""
        return check_conflict(
            self.assignments,
            faculty_id,
            day,
            period,
            exclude_assignment_id=exclude_assignment_id,
            faculty_name=self.faculty_name(faculty_id),
        )

    # =====================================================
    # QUERIES
    # =====================================================

    async def get_assignment(self, assignment_id: str) -> FacultyAssignment:
        result = await self.db.execute(
            select(FacultyAssignment).where(FacultyAssignment.id == assignment_id)
        )
        assignment = result.scalar_one_or_none()
        if not assignment:
            raise AssignmentNotFoundError(assignment_id)
        return assignment

    async def list_assignments(
        self,
        department: Optional[str] = None,
        faculty_id: Optional[str] = None,
        day: Optional[str] = None,
        period: Optional[int] = None,
    ) -> List[FacultyAssignment]:
        query = select(FacultyAssignment)
        if department:
            query = query.where(FacultyAssignment.department == department)
        if faculty_id:
            query = query.where(FacultyAssignment.faculty_id == faculty_id)
        if day:
            query = query.where(FacultyAssignment.day == day)
        if period is not None:
            query = query.where(FacultyAssignment.period == period)

        result = await self.db.execute(
            query.order_by(FacultyAssignment.faculty_name, FacultyAssignment.period)
        )
        return list(result.scalars().all())

    def get_assignments_by_time_slot(self, day: str, period: int) -> List[FacultyAssignment]:
        return [a for a in self.assignments if a.day == day and a.period == period]

    def get_assignments_by_faculty(self, faculty_id: str) -> List[FacultyAssignment]:
        return [a for a in self.assignments if str(a.faculty_id) == str(faculty_id)]

    def get_assignments_by_department(self, department: str) -> List[FacultyAssignment]:
        return [a for a in self.assignments if a.department == department]

    # =====================================================
    # TIMETABLE GRIDS
    # =====================================================

    def _grid(self, assignments: List[FacultyAssignment]) -> Dict[str, List[Optional[FacultyAssignment]]]:
        week = empty_week()
        for a in assignments:
            # First slot wins when a double-booking was forced through
            if a.day in week and week[a.day][a.period] is None:
                week[a.day][a.period] = a
        return week

    async def get_faculty_timetable(self, faculty_id: str) -> Dict[str, List[Optional[FacultyAssignment]]]:
        await self.refresh()
        return self._grid(self.get_assignments_by_faculty(faculty_id))

    async def get_class_timetable(self, class_name: str) -> Dict[str, List[Optional[FacultyAssignment]]]:
        await self.refresh()
        return self._grid([a for a in self.assignments if a.class_name == class_name])

    # =====================================================
    # WRITES
    # =====================================================

    async def _get_faculty(self, faculty_id: str) -> User:
        result = await self.db.execute(select(User).where(User.id == faculty_id))
        faculty = result.scalar_one_or_none()
        if not faculty:
            raise UserNotFoundError(faculty_id)
        return faculty

    async def add_assignment(
        self,
        data: AssignmentCreate,
        force: bool = False,
    ) -> Tuple[FacultyAssignment, ConflictResult]:
        """
        Save a new slot.

        Raises AssignmentConflictError on a clash unless ``force`` is set, in
        which case the slot is saved and the clash is returned alongside it.
        """
        faculty = await self._get_faculty(data.faculty_id)
        await self.refresh()

        conflict = self.check_conflict(data.faculty_id, data.day, data.period)
        if conflict.has_conflict and not force:
            logger.log_workflow_event(
                "timetable", "conflict_blocked",
                faculty_id=str(data.faculty_id), day=data.day, period=data.period
            )
            raise AssignmentConflictError(conflict.to_dict())

        assignment = FacultyAssignment(
            faculty_id=data.faculty_id,
            faculty_name=data.faculty_name or faculty.full_name,
            department=data.department,
            day=data.day,
            period=data.period,
            time_slot=time_slot_label(data.period),
            subject=data.subject,
            class_name=data.class_name,
            room=data.room,
        )
        self.db.add(assignment)
        await self.db.commit()
        await self.db.refresh(assignment)
        self.assignments.append(assignment)

        logger.log_workflow_event(
            "timetable", "assignment_created", entity_id=str(assignment.id),
            forced=conflict.has_conflict
        )
        await self.bus.emit(EventType.ASSIGNMENT_CREATED, TIMETABLE_TOPIC, assignment.to_dict())
        return assignment, conflict

    async def update_assignment(
        self,
        assignment_id: str,
        data: AssignmentUpdate,
        force: bool = False,
    ) -> Tuple[FacultyAssignment, ConflictResult]:
        """Apply a partial update; the slot being edited never clashes with itself"""
        assignment = await self.get_assignment(assignment_id)
        changes = data.model_dump(exclude_unset=True)

        if "faculty_id" in changes and changes["faculty_id"] != assignment.faculty_id:
            faculty = await self._get_faculty(changes["faculty_id"])
            changes.setdefault("faculty_name", faculty.full_name)

        faculty_id = changes.get("faculty_id", assignment.faculty_id)
        day = changes.get("day", assignment.day)
        period = changes.get("period", assignment.period)

        await self.refresh()
        conflict = self.check_conflict(faculty_id, day, period, exclude_assignment_id=assignment_id)
        if conflict.has_conflict and not force:
            raise AssignmentConflictError(conflict.to_dict())

        for key, value in changes.items():
            setattr(assignment, key, value)
        assignment.time_slot = time_slot_label(period)

        await self.db.commit()
        await self.db.refresh(assignment)

        logger.log_workflow_event(
            "timetable", "assignment_updated", entity_id=str(assignment.id),
            forced=conflict.has_conflict
        )
        await self.bus.emit(EventType.ASSIGNMENT_UPDATED, TIMETABLE_TOPIC, assignment.to_dict())
        return assignment, conflict

    async def remove_assignment(self, assignment_id: str) -> None:
        assignment = await self.get_assignment(assignment_id)
        payload = assignment.to_dict()

        await self.db.delete(assignment)
        await self.db.commit()
        self.assignments = [a for a in self.assignments if str(a.id) != str(assignment_id)]

        logger.log_workflow_event("timetable", "assignment_deleted", entity_id=str(assignment_id))
        await self.bus.emit(EventType.ASSIGNMENT_DELETED, TIMETABLE_TOPIC, payload)
