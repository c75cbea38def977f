"""
Teacher Assignment Service

A teacher may author questions only for (subject, class) pairs they are
assigned to. Saving from the admin screen replaces the whole set.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from typing import List, Iterable, Tuple
import logging

from cbt.core.exceptions import AssignmentNotFoundError, TeacherNotFoundError, TeacherNotAssignedError
from cbt.models.teacher_assignment import TeacherAssignment
from cbt.models.user import User, UserRole
from cbt.schemas.teacher_assignment import AssignmentPair

logger = logging.getLogger(__name__)


class TeacherAssignmentService:

    async def list_all(self, db: AsyncSession) -> List[TeacherAssignment]:
        result = await db.execute(
            select(TeacherAssignment).order_by(TeacherAssignment.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_teacher(self, db: AsyncSession, teacher_id: str) -> List[TeacherAssignment]:
        result = await db.execute(
            select(TeacherAssignment)
            .where(TeacherAssignment.teacher_id == teacher_id)
            .order_by(TeacherAssignment.subject, TeacherAssignment.class_name)
        )
        return list(result.scalars().all())

    async def replace_for_teacher(
        self,
        db: AsyncSession,
        teacher_id: str,
        assignments: List[AssignmentPair],
    ) -> List[TeacherAssignment]:
        """Delete all of the teacher's assignments and insert the new set atomically"""
        result = await db.execute(select(User).where(User.id == teacher_id))
        teacher = result.scalar_one_or_none()
        if not teacher or teacher.role != UserRole.TEACHER:
            raise TeacherNotFoundError(teacher_id)

        # Collapse duplicates coming from the form
        pairs = list(dict.fromkeys((a.subject.strip(), a.class_name.strip()) for a in assignments))

        await db.execute(delete(TeacherAssignment).where(TeacherAssignment.teacher_id == teacher_id))
        rows = [
            TeacherAssignment(teacher_id=teacher_id, teacher=teacher, subject=subject, class_name=class_name)
            for subject, class_name in pairs
        ]
        db.add_all(rows)
        await db.commit()

        logger.info(f"Replaced assignments for teacher {teacher.email}: {len(rows)} pairs")
        return rows

    async def delete(self, db: AsyncSession, assignment_id: str) -> None:
        result = await db.execute(select(TeacherAssignment).where(TeacherAssignment.id == assignment_id))
        assignment = result.scalar_one_or_none()
        if not assignment:
            raise AssignmentNotFoundError(assignment_id)

        await db.delete(assignment)
        await db.commit()

    async def is_assigned(self, db: AsyncSession, teacher_id: str, subject: str, class_name: str) -> bool:
        result = await db.execute(
            select(TeacherAssignment.id).where(
                TeacherAssignment.teacher_id == teacher_id,
                TeacherAssignment.subject == subject,
                TeacherAssignment.class_name == class_name,
            )
        )
        return result.first() is not None

    async def ensure_assigned(
        self,
        db: AsyncSession,
        teacher_id: str,
        pairs: Iterable[Tuple[str, str]],
    ) -> None:
        """Raise TeacherNotAssignedError for the first (subject, class) the teacher does not hold"""
        assigned = {
            (a.subject, a.class_name) for a in await self.list_for_teacher(db, teacher_id)
        }
        for subject, class_name in pairs:
            if (subject, class_name) not in assigned:
                raise TeacherNotAssignedError(subject, class_name)


teacher_assignment_service = TeacherAssignmentService()
