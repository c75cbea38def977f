"""
Database Seed Data Module

Reference vocabularies (subjects, classes, terms, sessions) and the default
admin account. Safe to run repeatedly: existing rows are left alone.
Run with: python -m cbt.db.seed_data
"""
import asyncio
from typing import List, Type

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cbt.core.config import settings
from cbt.core.database import AsyncSessionLocal, init_db
from cbt.models.user import User, Profile, UserRole
from cbt.models.reference import Subject, SchoolClass, Term, AcademicSession
from cbt.models.teacher_assignment import TeacherAssignment
from cbt.models.question import Question
from cbt.models.test_code import TestCodeBatch, TestCode
from cbt.models.test_paper import IssuedPaper
from cbt.models.test_result import TestResult
from cbt.services.user_service import user_service


# ==================== Sample Data Constants ====================

SUBJECTS = [
    "Mathematics",
    "English Language",
    "Basic Science",
    "Basic Technology",
    "Social Studies",
    "Civic Education",
    "Computer Studies",
    "Physics",
    "Chemistry",
    "Biology",
    "Economics",
    "Government",
    "Literature in English",
    "Agricultural Science",
]

CLASSES = ["JSS1", "JSS2", "JSS3", "SS1", "SS2", "SS3"]

TERMS = ["First Term", "Second Term", "Third Term"]

SESSIONS = ["2023/2024", "2024/2025", "2025/2026"]
CURRENT_SESSION = "2024/2025"


# ==================== Seed Functions ====================

async def seed_names(db: AsyncSession, model: Type, names: List[str]) -> int:
    """Insert the names that are not there yet; returns how many were added"""
    result = await db.execute(select(model.name))
    existing = set(result.scalars().all())

    added = [model(name=name) for name in names if name not in existing]
    db.add_all(added)
    return len(added)


async def seed_sessions(db: AsyncSession) -> int:
    result = await db.execute(select(AcademicSession.name))
    existing = set(result.scalars().all())

    has_current = (await db.execute(
        select(AcademicSession.id).where(AcademicSession.is_current.is_(True))
    )).first() is not None

    added = [
        AcademicSession(name=name, is_current=(name == CURRENT_SESSION and not has_current))
        for name in SESSIONS if name not in existing
    ]
    db.add_all(added)
    return len(added)


async def seed_admin(db: AsyncSession) -> User:
    admin = await user_service.get_user_by_email(db, settings.DEFAULT_ADMIN_EMAIL)
    if admin:
        print(f"Admin {admin.email} already exists")
        return admin

    admin = await user_service.create_user(
        db,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password=settings.DEFAULT_ADMIN_PASSWORD,
        full_name=settings.DEFAULT_ADMIN_NAME,
        role=UserRole.ADMIN,
    )
    print(f"Created admin {admin.email}")
    return admin


# ==================== Main Seed Function ====================

async def seed_all():
    """Seed reference data and the default admin"""
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            counts = {
                "subjects": await seed_names(db, Subject, SUBJECTS),
                "classes": await seed_names(db, SchoolClass, CLASSES),
                "terms": await seed_names(db, Term, TERMS),
                "sessions": await seed_sessions(db),
            }
            await db.commit()
            for name, count in counts.items():
                print(f"  {name}: {count} added")

            await seed_admin(db)

            print("=" * 50)
            print("Database seeding completed successfully!")
            print("=" * 50)

        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise


async def clear_all():
    """Clear all data from database"""
    print("Clearing all data...")
    async with AsyncSessionLocal() as db:
        # Delete in reverse order of dependencies
        for model in (
            TestResult,
            IssuedPaper,
            TestCode,
            TestCodeBatch,
            Question,
            TeacherAssignment,
            Profile,
            User,
            AcademicSession,
            Term,
            SchoolClass,
            Subject,
        ):
            await db.execute(delete(model))
        await db.commit()
        print("All data cleared!")


def main():
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())


if __name__ == "__main__":
    main()
