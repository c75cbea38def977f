"""
Question Service - question bank business logic

Handles:
- Listing (admin sees all, teacher sees own)
- Create / bulk create / update / delete with ownership and assignment checks
- Random sampling of questions for a test
- CSV template, import parsing and export rows
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from pydantic import ValidationError as PydanticValidationError
from datetime import datetime
from typing import Optional, List, Dict, Any
import csv
import io
import logging

from cbt.core.exceptions import (
    QuestionNotFoundError,
    QuestionOwnershipError,
    NoQuestionsAvailableError,
    ValidationError,
    CSVImportError,
)
from cbt.models.question import Question, QuestionType, OPTION_QUESTION_TYPES
from cbt.models.user import User, UserRole
from cbt.schemas.question import QuestionCreate, QuestionUpdate
from cbt.services.teacher_assignment_service import teacher_assignment_service

logger = logging.getLogger(__name__)

OPTION_LETTERS = "ABCD"

# Columns of the import template, in order
TEMPLATE_HEADERS = [
    "Question", "Question Type", "Option A", "Option B", "Option C", "Option D",
    "Correct Answer", "Correct Answer Text", "Image URL",
    "Subject", "Class", "Term", "Section", "Score",
]

EXPORT_HEADERS = [
    "ID", "Question", "Question Type", "Option A", "Option B", "Option C", "Option D",
    "Correct Answer", "Correct Answer Text", "Image URL",
    "Subject", "Class", "Term", "Score", "Teacher",
]


def _first_error(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    message = error.get("msg", "Invalid question")
    return message.replace("Value error, ", "")


def correct_answer_label(question: Question) -> str:
    """Human-readable answer key: a letter for option questions"""
    if question.question_type in OPTION_QUESTION_TYPES and question.correct_answer is not None:
        try:
            return OPTION_LETTERS[int(question.correct_answer)]
        except (ValueError, IndexError):
            return question.correct_answer
    return question.correct_answer or ""


def parse_answer_cell(value: str, question_type: str) -> Optional[str]:
    """Accept A-D as well as 0-3 for option questions in uploaded CSVs"""
    value = (value or "").strip()
    if not value:
        return None
    if question_type in {t.value for t in OPTION_QUESTION_TYPES} and value.upper() in OPTION_LETTERS:
        return str(OPTION_LETTERS.index(value.upper()))
    return value


class QuestionService:
    """Service for the question bank"""

    async def get_question(self, db: AsyncSession, question_id: str) -> Question:
        result = await db.execute(select(Question).where(Question.id == question_id))
        question = result.scalar_one_or_none()
        if not question:
            raise QuestionNotFoundError(question_id)
        return question

    async def list_questions(
        self,
        db: AsyncSession,
        user: User,
        subject: Optional[str] = None,
        class_name: Optional[str] = None,
        term: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> List[Question]:
        """All questions for admins, own questions for teachers"""
        query = select(Question)
        if user.role != UserRole.ADMIN:
            query = query.where(Question.teacher_id == user.id)
        elif teacher_id:
            query = query.where(Question.teacher_id == teacher_id)
        if subject:
            query = query.where(Question.subject == subject)
        if class_name:
            query = query.where(Question.class_name == class_name)
        if term:
            query = query.where(Question.term == term)

        result = await db.execute(query.order_by(Question.created_at.desc()))
        return list(result.scalars().all())

    def check_access(self, question: Question, user: User, action: str) -> None:
        if user.role != UserRole.ADMIN and question.teacher_id != user.id:
            raise QuestionOwnershipError(action)

    async def _check_assignments(self, db: AsyncSession, user: User, items: List[QuestionCreate]) -> None:
        if user.role == UserRole.ADMIN:
            return
        pairs = dict.fromkeys((item.subject, item.class_name) for item in items)
        await teacher_assignment_service.ensure_assigned(db, user.id, pairs)

    def _build(self, data: QuestionCreate, author: User) -> Question:
        return Question(
            teacher_id=author.id,
            creator=author,
            editor=None,
            term=data.term,
            class_name=data.class_name,
            section=data.section,
            subject=data.subject,
            question=data.question.strip(),
            question_type=data.question_type,
            option_a=data.option_a,
            option_b=data.option_b,
            option_c=data.option_c,
            option_d=data.option_d,
            correct_answer=data.correct_answer,
            correct_answer_text=data.correct_answer_text,
            image_url=data.image_url,
            score_per_question=data.score_per_question,
        )

    async def create_question(self, db: AsyncSession, data: QuestionCreate, author: User) -> Question:
        await self._check_assignments(db, author, [data])

        question = self._build(data, author)
        db.add(question)
        await db.commit()

        logger.info(f"Question {question.id} created by {author.email} ({data.subject}/{data.class_name})")
        return question

    async def bulk_create(self, db: AsyncSession, items: List[QuestionCreate], author: User) -> List[Question]:
        """Insert all questions in one transaction; every subject/class pair must be assigned"""
        if not items:
            raise ValidationError("No questions provided", field="questions")
        await self._check_assignments(db, author, items)

        questions = [self._build(item, author) for item in items]
        db.add_all(questions)
        await db.commit()

        logger.info(f"Bulk created {len(questions)} questions by {author.email}")
        return questions

    async def update_question(
        self,
        db: AsyncSession,
        question_id: str,
        data: QuestionUpdate,
        user: User,
    ) -> Question:
        question = await self.get_question(db, question_id)
        self.check_access(question, user, "edit")

        merged = {
            "term": question.term,
            "class_name": question.class_name,
            "section": question.section,
            "subject": question.subject,
            "question": question.question,
            "question_type": question.question_type,
            "option_a": question.option_a,
            "option_b": question.option_b,
            "option_c": question.option_c,
            "option_d": question.option_d,
            "correct_answer": question.correct_answer,
            "correct_answer_text": question.correct_answer_text,
            "image_url": question.image_url,
            "score_per_question": question.score_per_question,
        }
        merged.update(data.model_dump(exclude_unset=True))

        try:
            validated = QuestionCreate.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e))

        if (validated.subject, validated.class_name) != (question.subject, question.class_name):
            await self._check_assignments(db, user, [validated])

        for key, value in validated.model_dump().items():
            setattr(question, key, value)
        question.edited_by = user.id
        question.editor = user
        question.edited_at = datetime.utcnow()
        question.updated_at = datetime.utcnow()

        await db.commit()
        logger.info(f"Question {question.id} edited by {user.email}")
        return question

    async def delete_question(self, db: AsyncSession, question_id: str, user: User) -> None:
        question = await self.get_question(db, question_id)
        self.check_access(question, user, "delete")

        await db.delete(question)
        await db.commit()
        logger.info(f"Question {question_id} deleted by {user.email}")

    async def sample_for_test(
        self,
        db: AsyncSession,
        subject: str,
        class_name: str,
        term: str,
        limit: int,
    ) -> List[Question]:
        """Random sample (database-side, unseeded) of up to ``limit`` matching questions"""
        result = await db.execute(
            select(Question)
            .where(
                Question.subject == subject,
                Question.class_name == class_name,
                Question.term == term,
            )
            .order_by(func.random())
            .limit(limit)
        )
        questions = list(result.scalars().all())
        if not questions:
            raise NoQuestionsAvailableError(subject, class_name, term)
        return questions

    async def get_many(self, db: AsyncSession, question_ids: List[str]) -> Dict[str, Question]:
        if not question_ids:
            return {}
        result = await db.execute(select(Question).where(Question.id.in_(question_ids)))
        return {str(q.id): q for q in result.scalars().all()}

    async def count_questions(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(Question.id)))
        return result.scalar() or 0

    # ==================== CSV ====================

    def template_csv(self) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(TEMPLATE_HEADERS)
        writer.writerow([
            "What is 2 + 2?", "multiple_choice", "3", "4", "5", "6",
            "B", "", "", "Mathematics", "JSS1", "First Term", "", "1",
        ])
        return output.getvalue()

    def parse_import_csv(self, content: str) -> List[QuestionCreate]:
        """
        Parse an uploaded CSV in the template layout.

        Raises CSVImportError naming the first bad row (1-based, header excluded).
        """
        reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
        if not reader.fieldnames:
            raise CSVImportError("File is empty")

        headers = {h.strip() for h in reader.fieldnames if h}
        missing = [h for h in ("Question", "Subject", "Class", "Term") if h not in headers]
        if missing:
            raise CSVImportError(f"Missing columns: {', '.join(missing)}")

        items: List[QuestionCreate] = []
        for row_number, raw in enumerate(reader, start=1):
            row = {(k or "").strip(): (v or "").strip() for k, v in raw.items()}
            if not any(row.values()):
                continue

            question_type = (row.get("Question Type") or QuestionType.MULTIPLE_CHOICE.value).lower()
            payload: Dict[str, Any] = {
                "question": row.get("Question"),
                "question_type": question_type,
                "option_a": row.get("Option A") or None,
                "option_b": row.get("Option B") or None,
                "option_c": row.get("Option C") or None,
                "option_d": row.get("Option D") or None,
                "correct_answer": parse_answer_cell(row.get("Correct Answer"), question_type),
                "correct_answer_text": row.get("Correct Answer Text") or None,
                "image_url": row.get("Image URL") or None,
                "subject": row.get("Subject"),
                "class_name": row.get("Class"),
                "term": row.get("Term"),
                "section": row.get("Section") or None,
                "score_per_question": row.get("Score") or 1,
            }
            try:
                items.append(QuestionCreate.model_validate(payload))
            except PydanticValidationError as e:
                raise CSVImportError(_first_error(e), row=row_number)

        if not items:
            raise CSVImportError("File contains no questions")
        return items

    def export_csv(self, questions: List[Question]) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(EXPORT_HEADERS)
        for q in questions:
            writer.writerow([
                str(q.id),
                q.question,
                q.question_type.value,
                q.option_a or "",
                q.option_b or "",
                q.option_c or "",
                q.option_d or "",
                correct_answer_label(q),
                q.correct_answer_text or "",
                q.image_url or "",
                q.subject,
                q.class_name,
                q.term,
                q.score_per_question,
                q.creator.display_name if q.creator else "",
            ])
        return output.getvalue()


question_service = QuestionService()
