from fastapi import APIRouter, Depends, Query, UploadFile, File, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from cbt.core.database import get_db
from cbt.core.exceptions import ValidationError, CSVImportError
from cbt.models.user import User
from cbt.schemas.base import MessageResponse
from cbt.schemas.question import (
    QuestionCreate,
    QuestionUpdate,
    QuestionBulkCreate,
    QuestionResponse,
    BulkCreateResponse,
)
from cbt.schemas.test_code import PaperQuestion
from cbt.modules.auth.dependencies import get_current_user, get_current_admin, get_question_author
from cbt.services import test_engine
from cbt.services.question_service import question_service

router = APIRouter()


def _csv_response(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("", response_model=List[QuestionResponse])
async def list_questions(
    subject: Optional[str] = None,
    class_name: Optional[str] = Query(None, alias="class"),
    term: Optional[str] = None,
    current_user: User = Depends(get_question_author),
    db: AsyncSession = Depends(get_db)
):
    """All questions for admins; a teacher sees only their own"""
    questions = await question_service.list_questions(
        db, current_user, subject=subject, class_name=class_name, term=term
    )
    return [QuestionResponse.from_question(q) for q in questions]


@router.post("", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(
    data: QuestionCreate,
    current_user: User = Depends(get_question_author),
    db: AsyncSession = Depends(get_db)
):
    question = await question_service.create_question(db, data, current_user)
    return QuestionResponse.from_question(question)


@router.post("/bulk", response_model=BulkCreateResponse, status_code=status.HTTP_201_CREATED)
async def bulk_create_questions(
    data: QuestionBulkCreate,
    current_user: User = Depends(get_question_author),
    db: AsyncSession = Depends(get_db)
):
    """Insert a batch of questions in one transaction"""
    questions = await question_service.bulk_create(db, data.questions, current_user)
    return BulkCreateResponse(
        count=len(questions),
        questions=[QuestionResponse.from_question(q) for q in questions],
    )


@router.get("/for-test", response_model=List[PaperQuestion])
async def questions_for_test(
    subject: Optional[str] = None,
    class_name: Optional[str] = Query(None, alias="class"),
    term: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Random sample of questions for a subject/class/term, shuffled and
    stripped of their answers.
    """
    if not subject or not class_name or not term:
        raise ValidationError("Missing required parameters")

    questions = await question_service.sample_for_test(
        db, subject=subject, class_name=class_name, term=term, limit=limit
    )
    # Sampling already randomizes order; options are shuffled per question
    return [
        PaperQuestion.from_item(test_engine.build_paper_item(q, q.score_per_question or 1))
        for q in questions
    ]


@router.get("/export")
async def export_questions(
    subject: Optional[str] = None,
    class_name: Optional[str] = Query(None, alias="class"),
    term: Optional[str] = None,
    teacher_id: Optional[str] = Query(None, alias="teacher"),
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Export the question bank as CSV"""
    questions = await question_service.list_questions(
        db, current_user, subject=subject, class_name=class_name, term=term, teacher_id=teacher_id
    )
    return _csv_response(question_service.export_csv(questions), "questions_export.csv")


@router.get("/template")
async def download_template(
    current_user: User = Depends(get_question_author)
):
    """CSV header row plus one example question"""
    return _csv_response(question_service.template_csv(), "questions_template.csv")


@router.post("/import", response_model=BulkCreateResponse, status_code=status.HTTP_201_CREATED)
async def import_questions(
    file: UploadFile = File(...),
    current_user: User = Depends(get_question_author),
    db: AsyncSession = Depends(get_db)
):
    """Create questions from an uploaded CSV in the template layout"""
    raw = await file.read()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise CSVImportError("File must be UTF-8 encoded CSV")

    items = question_service.parse_import_csv(content)
    questions = await question_service.bulk_create(db, items, current_user)
    return BulkCreateResponse(
        count=len(questions),
        questions=[QuestionResponse.from_question(q) for q in questions],
    )


@router.get("/{question_id}", response_model=QuestionResponse)
async def get_question(
    question_id: str,
    current_user: User = Depends(get_question_author),
    db: AsyncSession = Depends(get_db)
):
    question = await question_service.get_question(db, question_id)
    question_service.check_access(question, current_user, "view")
    return QuestionResponse.from_question(question)


@router.put("/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: str,
    data: QuestionUpdate,
    current_user: User = Depends(get_question_author),
    db: AsyncSession = Depends(get_db)
):
    question = await question_service.update_question(db, question_id, data, current_user)
    return QuestionResponse.from_question(question)


@router.delete("/{question_id}", response_model=MessageResponse)
async def delete_question(
    question_id: str,
    current_user: User = Depends(get_question_author),
    db: AsyncSession = Depends(get_db)
):
    await question_service.delete_question(db, question_id, current_user)
    return MessageResponse(message="Question deleted")
