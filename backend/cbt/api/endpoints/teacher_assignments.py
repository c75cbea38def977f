from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from cbt.core.database import get_db
from cbt.models.user import User, UserRole
from cbt.models.teacher_assignment import TeacherAssignment
from cbt.schemas.base import MessageResponse
from cbt.schemas.teacher_assignment import AssignmentsReplace, AssignmentResponse, TeacherSummary
from cbt.modules.auth.dependencies import get_current_admin, get_current_teacher
from cbt.services.teacher_assignment_service import teacher_assignment_service
from cbt.services.user_service import user_service

router = APIRouter()


def _to_response(assignment: TeacherAssignment) -> AssignmentResponse:
    data = AssignmentResponse.model_validate(assignment)
    if assignment.teacher is not None:
        data.teacher_name = assignment.teacher.display_name
    return data


@router.get("/teacher-assignments", response_model=List[AssignmentResponse])
async def list_assignments(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Every assignment with the teacher's display name"""
    assignments = await teacher_assignment_service.list_all(db)
    return [_to_response(a) for a in assignments]


@router.post("/teacher-assignments", response_model=List[AssignmentResponse])
async def replace_assignments(
    data: AssignmentsReplace,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Replace a teacher's full set of (subject, class) assignments"""
    rows = await teacher_assignment_service.replace_for_teacher(db, data.teacher_id, data.assignments)
    return [_to_response(a) for a in rows]


@router.delete("/teacher-assignments/{assignment_id}", response_model=MessageResponse)
async def delete_assignment(
    assignment_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await teacher_assignment_service.delete(db, assignment_id)
    return MessageResponse(message="Assignment deleted")


@router.get("/teachers", response_model=List[TeacherSummary])
async def list_teachers(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    teachers = await user_service.list_by_role(db, UserRole.TEACHER)
    return [TeacherSummary(id=str(t.id), name=t.display_name, email=t.email) for t in teachers]


@router.get("/my-assignments", response_model=List[AssignmentResponse])
async def my_assignments(
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    assignments = await teacher_assignment_service.list_for_teacher(db, current_user.id)
    return [_to_response(a) for a in assignments]
