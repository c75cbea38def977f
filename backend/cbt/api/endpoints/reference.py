from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from cbt.core.database import get_db
from cbt.models.user import User
from cbt.models.reference import Subject, SchoolClass, Term, AcademicSession
from cbt.schemas.reference import ReferenceCreate, SessionCreate, ReferenceItem, SessionItem
from cbt.modules.auth.dependencies import get_current_admin
from cbt.services.reference_service import reference_service

router = APIRouter()


# ==================== Subjects ====================

@router.get("/subjects", response_model=List[ReferenceItem])
async def list_subjects(db: AsyncSession = Depends(get_db)):
    return await reference_service.list_items(db, Subject)


@router.post("/subjects", response_model=ReferenceItem, status_code=status.HTTP_201_CREATED)
async def create_subject(
    data: ReferenceCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await reference_service.create_item(db, Subject, data.name)


# ==================== Classes ====================

@router.get("/classes", response_model=List[ReferenceItem])
async def list_classes(db: AsyncSession = Depends(get_db)):
    return await reference_service.list_items(db, SchoolClass)


@router.post("/classes", response_model=ReferenceItem, status_code=status.HTTP_201_CREATED)
async def create_class(
    data: ReferenceCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await reference_service.create_item(db, SchoolClass, data.name)


# ==================== Terms ====================

@router.get("/terms", response_model=List[ReferenceItem])
async def list_terms(db: AsyncSession = Depends(get_db)):
    return await reference_service.list_items(db, Term)


@router.post("/terms", response_model=ReferenceItem, status_code=status.HTTP_201_CREATED)
async def create_term(
    data: ReferenceCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await reference_service.create_item(db, Term, data.name)


# ==================== Sessions ====================

@router.get("/sessions", response_model=List[SessionItem])
async def list_sessions(db: AsyncSession = Depends(get_db)):
    """Academic sessions, most recent first"""
    return await reference_service.list_items(db, AcademicSession)


@router.post("/sessions", response_model=SessionItem, status_code=status.HTTP_201_CREATED)
async def create_session(
    data: SessionCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await reference_service.create_session(db, data.name, data.is_current)
