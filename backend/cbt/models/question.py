"""
Question bank model.

``question_type`` decides which optional columns are meaningful:

- multiple_choice / image_based: option_a..option_d plus ``correct_answer``
  holding the index "0".."3" (image_based also sets ``image_url``)
- true_false: ``correct_answer`` is "true" or "false"
- fill_blank / essay: ``correct_answer_text`` holds the expected text
"""

from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from cbt.core.database import Base
from cbt.core.types import GUID, generate_uuid


class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FILL_BLANK = "fill_blank"
    ESSAY = "essay"
    IMAGE_BASED = "image_based"


# Types whose answer is one of the four options (shuffled at test time)
OPTION_QUESTION_TYPES = frozenset({QuestionType.MULTIPLE_CHOICE, QuestionType.IMAGE_BASED})
# Types graded by comparing free text with correct_answer_text
TEXT_QUESTION_TYPES = frozenset({QuestionType.FILL_BLANK, QuestionType.ESSAY})


class Question(Base):
    __tablename__ = "questions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    teacher_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    term = Column(String(50), nullable=False)
    class_name = Column("class", String(50), nullable=False)
    section = Column(String(50), nullable=True)
    subject = Column(String(100), nullable=False)

    question = Column(Text, nullable=False)
    question_type = Column(SQLEnum(QuestionType), default=QuestionType.MULTIPLE_CHOICE, nullable=False)
    option_a = Column(Text, nullable=True)
    option_b = Column(Text, nullable=True)
    option_c = Column(Text, nullable=True)
    option_d = Column(Text, nullable=True)
    correct_answer = Column(String(20), nullable=True)
    correct_answer_text = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    score_per_question = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    edited_by = Column(GUID, ForeignKey("users.id"), nullable=True)
    edited_at = Column(DateTime, nullable=True)

    creator = relationship("User", foreign_keys=[teacher_id], lazy="selectin")
    editor = relationship("User", foreign_keys=[edited_by], lazy="selectin")

    __table_args__ = (
        Index("ix_questions_subject_term", "subject", "term"),
    )

    @property
    def options(self):
        return [self.option_a, self.option_b, self.option_c, self.option_d]

    def __repr__(self):
        return f"<Question {self.id} {self.subject}/{self.class_name}/{self.term}>"
