"""Student to tutor assignment registry."""

from __future__ import annotations

import structlog
from tutorsched.core.auth import Role
from tutorsched.core.errors import UnknownTeacher, UserNotFound
from tutorsched.domain.events import EventBus, EventType
from tutorsched.domain.models import User
from tutorsched.domain.store import DomainStore

logger = structlog.get_logger(__name__)


class AssignmentService:
    """Keeps exactly one tutor (or admin) per student."""

    def __init__(self, store: DomainStore, bus: EventBus) -> None:
        self.store = store
        self.bus = bus

    def assign(self, student_id: str, teacher_id: str) -> str:
        """Point ``student_id`` at ``teacher_id``, replacing any previous mapping."""
        teacher = self.store.get_teacher(teacher_id)
        student = self._get_student(student_id)

        previous = self.store.assignments.get(student.id)
        self.store.assignments[student.id] = teacher.id

        logger.info(
            "student_assigned",
            student_id=student.id,
            teacher_id=teacher.id,
            previous_teacher_id=previous,
        )
        self.bus.emit(
            EventType.ASSIGNMENT_UPDATE,
            student_id=student.id,
            teacher_id=teacher.id,
            previous_teacher_id=previous,
        )
        return teacher.id

    def auto_assign_new_student(self, student_id: str) -> str:
        """Assign to the teacher with the fewest students.

        Ties go to the teacher that comes first in the user list.
        """
        student = self._get_student(student_id)
        teachers = self.store.teachers()
        if not teachers:
            raise UnknownTeacher("No tutor or admin available for assignment")

        load = {teacher.id: 0 for teacher in teachers}
        for sid, tid in self.store.assignments.items():
            if sid != student.id and tid in load:
                load[tid] += 1

        target = min(teachers, key=lambda teacher: load[teacher.id])
        return self.assign(student.id, target.id)

    def assign_unassigned_students(self) -> list[str]:
        """Auto-assign students with no tutor or one that no longer teaches."""
        teacher_ids = {teacher.id for teacher in self.store.teachers()}
        if not teacher_ids:
            return []
        repaired = [
            student.id
            for student in self.store.students()
            if self.store.assignments.get(student.id) not in teacher_ids
        ]
        for student_id in repaired:
            self.auto_assign_new_student(student_id)
        if repaired:
            logger.warning("unassigned_students_repaired", student_ids=repaired)
        return repaired

    def tutor_of(self, student_id: str) -> str | None:
        return self.store.assignments.get(student_id)

    def students_of(self, teacher_id: str) -> list[str]:
        return self.store.students_of(teacher_id)

    def load_by_teacher(self) -> dict[str, int]:
        load = {teacher.id: 0 for teacher in self.store.teachers()}
        for tid in self.store.assignments.values():
            if tid in load:
                load[tid] += 1
        return load

    def _get_student(self, student_id: str) -> User:
        user = self.store.find_user(student_id)
        if user is None or user.role is not Role.STUDENT:
            raise UserNotFound(f"Student {student_id} not found")
        return user
