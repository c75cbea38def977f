from cbt.schemas.base import CamelModel, MessageResponse, BulkUpdateResponse
from cbt.schemas.auth import SignupRequest, SigninRequest, AuthResponse, SessionResponse, UserInfo, ProfileResponse
from cbt.schemas.reference import ReferenceCreate, SessionCreate, ReferenceItem, SessionItem
from cbt.schemas.teacher_assignment import AssignmentPair, AssignmentsReplace, AssignmentResponse, TeacherSummary
from cbt.schemas.question import (
    QuestionCreate,
    QuestionUpdate,
    QuestionBulkCreate,
    QuestionResponse,
    BulkCreateResponse,
)
from cbt.schemas.test_code import (
    BatchCreate,
    BatchResponse,
    BatchCreateResponse,
    TestCodeResponse,
    TestCodePreview,
    PaperQuestion,
    TestPaper,
)
from cbt.schemas.test_result import (
    SubmittedAnswer,
    SecurityViolation,
    TestResultSubmit,
    TestResultResponse,
    TestResultDetail,
    SubmissionResponse,
)
from cbt.schemas.admin import AdminStats, DashboardStats
