from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from cbt.core.config import settings
from cbt.core.database import get_db
from cbt.core.exceptions import AuthorizationError
from cbt.models.user import User, UserRole
from cbt.schemas.base import BulkUpdateResponse
from cbt.schemas.test_code import TestCodeResponse, TestCodePreview, TestPaper, PaperQuestion
from cbt.modules.auth.dependencies import get_current_user, get_current_admin, get_current_student
from cbt.services.test_code_service import test_code_service

router = APIRouter()


@router.get("", response_model=List[TestCodeResponse])
async def list_codes(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await test_code_service.list_codes(db)


@router.put("/deactivate-all", response_model=BulkUpdateResponse)
async def deactivate_all_codes(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    updated = await test_code_service.deactivate_all(db)
    return BulkUpdateResponse(updated=updated, message=f"Deactivated {updated} test codes")


@router.get("/validate/{code}", response_model=TestCodePreview)
async def validate_code(
    code: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Check a code before the student starts: 404 unknown, 400 inactive or expired"""
    return await test_code_service.validate_code(db, code)


@router.get("/{code}/paper", response_model=TestPaper)
async def get_paper(
    code: str,
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    """Assemble a shuffled paper for an active code. Answers stay on the server."""
    test_code, items, paper = await test_code_service.build_paper(db, code, current_user)
    return TestPaper(
        test_code=TestCodePreview.model_validate(test_code),
        time_limit_seconds=test_code.time_limit * 60,
        total_possible_score=paper.total_possible_score,
        max_security_violations=settings.MAX_SECURITY_VIOLATIONS,
        questions=[PaperQuestion.from_item(item) for item in items],
    )


@router.get("/{code}", response_model=TestCodePreview)
async def get_code(
    code: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await test_code_service.validate_code(db, code)


@router.put("/{code}/activate", response_model=TestCodeResponse)
async def activate_code(
    code: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await test_code_service.set_code_active(db, code, True)


@router.put("/{code}/deactivate", response_model=TestCodeResponse)
async def deactivate_code(
    code: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Students burn their code when leaving a test; safe to repeat"""
    if current_user.role not in [UserRole.STUDENT, UserRole.ADMIN]:
        raise AuthorizationError("Student or admin access required")
    return await test_code_service.set_code_active(db, code, False)
