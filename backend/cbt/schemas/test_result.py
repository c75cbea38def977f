from pydantic import Field, field_validator, model_validator
from typing import List, Optional, Union, Dict, Any
from datetime import datetime

from cbt.models.test_code import TestType
from cbt.models.test_result import TestResult
from cbt.schemas.base import CamelModel


class SubmittedAnswer(CamelModel):
    """
    One answer as sent by the client.

    For option questions ``answer`` is the index the student picked in the
    shuffled order and ``option_mapping`` is the mapping served with the
    paper. ``answer`` is None for unanswered questions.
    """
    question_id: str
    answer: Optional[Union[int, bool, str]] = None
    option_mapping: Optional[List[int]] = None


class SecurityViolation(CamelModel):
    type: Optional[str] = None
    message: str
    timestamp: Optional[datetime] = None


class TestResultSubmit(CamelModel):
    test_code_id: Optional[str] = None
    code: Optional[str] = None
    time_taken: Optional[int] = Field(None, ge=0, description="Seconds")
    answers: List[SubmittedAnswer] = Field(..., min_length=1)
    security_violations: List[SecurityViolation] = Field(default_factory=list)

    @field_validator('security_violations', mode='before')
    @classmethod
    def wrap_plain_violations(cls, v):
        # Older clients send bare strings
        if isinstance(v, list):
            return [{"message": item} if isinstance(item, str) else item for item in v]
        return v

    @model_validator(mode='after')
    def require_code_reference(self):
        if not self.test_code_id and not (self.code or "").strip():
            raise ValueError("testCodeId or code is required")
        return self


class TestCodeSummary(CamelModel):
    code: str
    subject: str
    term: str
    class_name: str = Field(..., alias="class")
    session: str
    test_type: TestType


class TestResultResponse(CamelModel):
    id: str
    student_id: str
    test_code_id: str
    score: int
    total_questions: int
    total_possible_score: int
    percentage: float
    time_taken: Optional[int] = None
    answers: Dict[str, Any] = Field(default_factory=dict)
    security_violations: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class TestResultDetail(TestResultResponse):
    """Admin listing row: adds the student's name and the code's configuration"""
    student_name: Optional[str] = None
    test_code: Optional[TestCodeSummary] = None

    @classmethod
    def from_result(cls, result: TestResult) -> "TestResultDetail":
        data = cls.model_validate(result)
        if result.student is not None:
            data.student_name = result.student.display_name
        if result.test_code is not None:
            data.test_code = TestCodeSummary.model_validate(result.test_code)
        return data


class SubmissionResponse(TestResultResponse):
    correct_count: int
