"""
Question bank schemas.

Type-specific rules are enforced here so that every path into the bank
(single create, bulk create, CSV import, update) rejects a malformed
question before it reaches the database.
"""

from pydantic import Field, field_validator, model_validator
from typing import List, Optional, Any
from datetime import datetime

from cbt.models.question import Question, QuestionType, OPTION_QUESTION_TYPES, TEXT_QUESTION_TYPES
from cbt.schemas.base import CamelModel


OPTION_FIELDS = ("option_a", "option_b", "option_c", "option_d")


def _coerce_answer(v: Any) -> Optional[str]:
    """Accept 2, "2", True or "True" and store them as lowercase strings"""
    if v is None:
        return None
    if isinstance(v, bool):
        return "true" if v else "false"
    v = str(v).strip()
    return v.lower() if v else None


class QuestionFields(CamelModel):
    term: str = Field(..., min_length=1)
    class_name: str = Field(..., min_length=1, alias="class")
    section: Optional[str] = None
    subject: str = Field(..., min_length=1)

    question: str = Field(..., min_length=1)
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    correct_answer: Optional[str] = None
    correct_answer_text: Optional[str] = None
    image_url: Optional[str] = None
    score_per_question: int = Field(1, ge=1, le=100)

    @field_validator('correct_answer', mode='before')
    @classmethod
    def coerce_correct_answer(cls, v):
        return _coerce_answer(v)

    @model_validator(mode='after')
    def validate_type_fields(self):
        """Check the fields each question type depends on"""
        if not self.question.strip():
            raise ValueError("Question text cannot be blank")

        qtype = self.question_type
        if qtype in OPTION_QUESTION_TYPES:
            missing = [name for name in OPTION_FIELDS if not (getattr(self, name) or "").strip()]
            if missing:
                raise ValueError("All four options are required for this question type")
            if self.correct_answer not in ("0", "1", "2", "3"):
                raise ValueError("correctAnswer must be the index 0-3 of the correct option")
            if qtype == QuestionType.IMAGE_BASED and not (self.image_url or "").strip():
                raise ValueError("imageUrl is required for image-based questions")

        elif qtype == QuestionType.TRUE_FALSE:
            if self.correct_answer not in ("true", "false"):
                raise ValueError("correctAnswer must be true or false")

        elif qtype in TEXT_QUESTION_TYPES:
            if not (self.correct_answer_text or "").strip():
                raise ValueError("correctAnswerText is required for this question type")

        return self


class QuestionCreate(QuestionFields):
    pass


class QuestionUpdate(CamelModel):
    """Partial update; the merged question is re-validated as a QuestionCreate"""
    term: Optional[str] = None
    class_name: Optional[str] = Field(None, alias="class")
    section: Optional[str] = None
    subject: Optional[str] = None
    question: Optional[str] = None
    question_type: Optional[QuestionType] = None
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    correct_answer: Optional[str] = None
    correct_answer_text: Optional[str] = None
    image_url: Optional[str] = None
    score_per_question: Optional[int] = Field(None, ge=1, le=100)

    @field_validator('correct_answer', mode='before')
    @classmethod
    def coerce_correct_answer(cls, v):
        return _coerce_answer(v)


class QuestionBulkCreate(CamelModel):
    questions: List[QuestionCreate] = Field(..., min_length=1, max_length=500)


class QuestionResponse(CamelModel):
    id: str
    teacher_id: str
    term: str
    class_name: str = Field(..., alias="class")
    section: Optional[str] = None
    subject: str
    question: str
    question_type: QuestionType
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    correct_answer: Optional[str] = None
    correct_answer_text: Optional[str] = None
    image_url: Optional[str] = None
    score_per_question: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    edited_by: Optional[str] = None
    edited_at: Optional[datetime] = None

    created_by_name: Optional[str] = None
    created_by_role: Optional[str] = None
    edited_by_name: Optional[str] = None
    edited_by_role: Optional[str] = None

    @classmethod
    def from_question(cls, question: Question) -> "QuestionResponse":
        """Build a response including creator/editor display names"""
        data = cls.model_validate(question)
        if question.creator is not None:
            data.created_by_name = question.creator.display_name
            data.created_by_role = question.creator.role.value if question.creator.role else None
        if question.editor is not None:
            data.edited_by_name = question.editor.display_name
            data.edited_by_role = question.editor.role.value if question.editor.role else None
        return data


class BulkCreateResponse(CamelModel):
    success: bool = True
    count: int
    questions: List[QuestionResponse]
