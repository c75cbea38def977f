from cbt.services.user_service import UserService, user_service
from cbt.services.reference_service import ReferenceService, reference_service
from cbt.services.teacher_assignment_service import TeacherAssignmentService, teacher_assignment_service
from cbt.services.question_service import QuestionService, question_service
from cbt.services.test_code_service import TestCodeService, test_code_service
from cbt.services.test_result_service import TestResultService, test_result_service
from cbt.services.report_service import ReportService, report_service

__all__ = [
    "UserService",
    "user_service",
    "ReferenceService",
    "reference_service",
    "TeacherAssignmentService",
    "teacher_assignment_service",
    "QuestionService",
    "question_service",
    "TestCodeService",
    "test_code_service",
    "TestResultService",
    "test_result_service",
    "ReportService",
    "report_service",
]
