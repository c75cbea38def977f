# Re-export all models for convenient imports
from cbt.models.user import User, Profile, UserRole
from cbt.models.reference import Subject, SchoolClass, Term, AcademicSession
from cbt.models.teacher_assignment import TeacherAssignment
from cbt.models.question import Question, QuestionType, OPTION_QUESTION_TYPES, TEXT_QUESTION_TYPES
from cbt.models.test_code import TestCodeBatch, TestCode, TestType
from cbt.models.test_paper import IssuedPaper
from cbt.models.test_result import TestResult

__all__ = [
    # Users
    "User",
    "Profile",
    "UserRole",
    # Reference data
    "Subject",
    "SchoolClass",
    "Term",
    "AcademicSession",
    # Authoring
    "TeacherAssignment",
    "Question",
    "QuestionType",
    "OPTION_QUESTION_TYPES",
    "TEXT_QUESTION_TYPES",
    # Tests
    "TestCodeBatch",
    "TestCode",
    "TestType",
    "IssuedPaper",
    "TestResult",
]
