from pydantic import Field
from typing import List, Optional
from datetime import datetime

from cbt.schemas.base import CamelModel


class AssignmentPair(CamelModel):
    subject: str = Field(..., min_length=1)
    class_name: str = Field(..., min_length=1, alias="class")


class AssignmentsReplace(CamelModel):
    """Full replacement of one teacher's subject/class assignments"""
    teacher_id: str
    assignments: List[AssignmentPair] = Field(default_factory=list)


class AssignmentResponse(CamelModel):
    id: str
    teacher_id: str
    subject: str
    class_name: str = Field(..., alias="class")
    created_at: Optional[datetime] = None
    teacher_name: Optional[str] = None


class TeacherSummary(CamelModel):
    id: str
    name: str
    email: str
