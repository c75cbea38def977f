"""
Reference Service - subjects, classes, terms and academic sessions
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import List, Type
import logging

from cbt.core.exceptions import DuplicateNameError
from cbt.models.reference import Subject, SchoolClass, Term, AcademicSession

logger = logging.getLogger(__name__)

REFERENCE_LABELS = {
    Subject: "Subject",
    SchoolClass: "Class",
    Term: "Term",
    AcademicSession: "Session",
}


class ReferenceService:
    """Admin-managed lookup vocabularies"""

    async def list_items(self, db: AsyncSession, model: Type) -> List:
        order = model.name.desc() if model is AcademicSession else model.name
        result = await db.execute(select(model).order_by(order))
        return list(result.scalars().all())

    async def create_item(self, db: AsyncSession, model: Type, name: str, **fields):
        existing = await db.execute(select(model).where(model.name == name))
        if existing.scalar_one_or_none():
            raise DuplicateNameError(REFERENCE_LABELS[model], name)

        item = model(name=name, **fields)
        db.add(item)
        await db.commit()
        logger.info(f"Created {REFERENCE_LABELS[model].lower()} {name}")
        return item

    async def create_session(self, db: AsyncSession, name: str, is_current: bool = False) -> AcademicSession:
        """Create an academic session; marking it current clears the flag elsewhere"""
        existing = await db.execute(select(AcademicSession).where(AcademicSession.name == name))
        if existing.scalar_one_or_none():
            raise DuplicateNameError("Session", name)

        if is_current:
            await db.execute(update(AcademicSession).values(is_current=False))

        session = AcademicSession(name=name, is_current=is_current)
        db.add(session)
        await db.commit()
        logger.info(f"Created session {name}" + (" (current)" if is_current else ""))
        return session

    async def get_current_session(self, db: AsyncSession):
        result = await db.execute(select(AcademicSession).where(AcademicSession.is_current.is_(True)))
        return result.scalars().first()


reference_service = ReferenceService()
