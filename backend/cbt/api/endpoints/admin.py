from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import datetime

from cbt.core.database import get_db
from cbt.core.logging_config import logger
from cbt.models.user import User, UserRole
from cbt.schemas.admin import AdminStats, DashboardStats
from cbt.modules.auth.dependencies import get_current_admin
from cbt.services.question_service import question_service
from cbt.services.report_service import report_service
from cbt.services.test_code_service import test_code_service
from cbt.services.test_result_service import test_result_service
from cbt.services.user_service import user_service

router = APIRouter()


@router.get("/students/export")
async def export_students(
    search: Optional[str] = None,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Export students (optionally filtered by name/email) as CSV"""
    students = await user_service.search_students(db, search)
    logger.info(f"Exporting {len(students)} students for {current_user.email}")

    filename = f"students_{datetime.utcnow().strftime('%Y%m%d')}.csv"
    return StreamingResponse(
        iter([report_service.students_csv(students)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/admin/stats", response_model=AdminStats)
async def admin_stats(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return AdminStats(total_students=await user_service.count_by_role(db, UserRole.STUDENT))


@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Counts for the admin dashboard cards; deleted codes are excluded"""
    return DashboardStats(
        tests_taken=await test_result_service.count_results(db),
        active_test_codes=await test_code_service.count_codes(db, active_only=True),
        total_test_codes=await test_code_service.count_codes(db),
        total_questions=await question_service.count_questions(db),
    )
