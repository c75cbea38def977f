"""
Custom Exceptions for the CBT Portal
====================================

Services raise these instead of HTTPException so that the same rules apply
whether an operation is called from an endpoint, the seed command or a test.
The handler registered in ``cbt.main`` turns every CBTError into a JSON body
of the form ``{"error": message, "code": code}``.

Usage:
    from cbt.core.exceptions import TestCodeNotFoundError, TestCodeInactiveError

    if not test_code:
        raise TestCodeNotFoundError(code)
    if not test_code.is_active:
        raise TestCodeInactiveError(code)
"""

from typing import Optional, Any, Dict


class CBTError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(CBTError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidCredentialsError(AuthenticationError):
    """Email or password did not match"""

    def __init__(self):
        super().__init__("Invalid credentials")
        self.code = "INVALID_CREDENTIALS"


class AuthorizationError(CBTError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="NOT_AUTHORIZED")


class TeacherNotAssignedError(AuthorizationError):
    """Teacher holds no assignment for the subject/class pair"""

    def __init__(self, subject: str, class_name: str):
        super().__init__("You are not assigned to this subject and class")
        self.code = "TEACHER_NOT_ASSIGNED"
        self.details = {"subject": subject, "class": class_name}


class QuestionOwnershipError(AuthorizationError):
    """Teacher tried to modify a question created by someone else"""

    def __init__(self, action: str = "modify"):
        super().__init__(f"You can only {action} your own questions")
        self.code = "NOT_QUESTION_OWNER"


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(CBTError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class TeacherNotFoundError(ResourceNotFoundError):
    def __init__(self, teacher_id: str):
        super().__init__("Teacher", teacher_id)


class QuestionNotFoundError(ResourceNotFoundError):
    def __init__(self, question_id: str):
        super().__init__("Question", question_id)


class BatchNotFoundError(ResourceNotFoundError):
    def __init__(self, batch_id: str):
        super().__init__("Test code batch", batch_id, message="Batch not found")


class TestCodeNotFoundError(ResourceNotFoundError):
    def __init__(self, code: str):
        super().__init__("Test code", code)


class AssignmentNotFoundError(ResourceNotFoundError):
    def __init__(self, assignment_id: str):
        super().__init__("Assignment", assignment_id)


class NoQuestionsAvailableError(ResourceNotFoundError):
    """Question pool is empty for the requested subject/class/term"""

    def __init__(self, subject: str, class_name: str, term: str):
        super().__init__(
            "Question",
            f"{subject}/{class_name}/{term}",
            message=f"No questions found for {subject}, {class_name}, {term}"
        )
        self.code = "NO_QUESTIONS_AVAILABLE"


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(CBTError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class UserAlreadyExistsError(ValidationError):
    def __init__(self, email: str):
        super().__init__("User already exists", field="email")
        self.code = "USER_EXISTS"


class DuplicateNameError(ValidationError):
    def __init__(self, resource_type: str, name: str):
        super().__init__(f"{resource_type} '{name}' already exists", field="name")
        self.code = "DUPLICATE_NAME"


class InvalidTestCodeError(ValidationError):
    """Submission references a test code that does not exist"""

    def __init__(self):
        super().__init__("Invalid test code", field="testCodeId")
        self.code = "INVALID_TEST_CODE"


class TestCodeInactiveError(ValidationError):
    def __init__(self, code: str):
        super().__init__("Test code is not active", field="code")
        self.code = "TEST_CODE_INACTIVE"
        self.details["test_code"] = code


class TestCodeExpiredError(ValidationError):
    def __init__(self, code: str):
        super().__init__("Test code has expired", field="code")
        self.code = "TEST_CODE_EXPIRED"
        self.details["test_code"] = code


class PaperNotIssuedError(ValidationError):
    """Submission for a code whose paper this student never fetched"""

    def __init__(self, code: str):
        super().__init__("No paper has been issued for this test code", field="code")
        self.code = "PAPER_NOT_ISSUED"
        self.details["test_code"] = code


class InvalidAnswerError(ValidationError):
    """A submitted answer or option mapping cannot be graded"""

    def __init__(self, message: str, question_id: Optional[str] = None):
        super().__init__(message, field="answers")
        self.code = "INVALID_ANSWER"
        if question_id:
            self.details["question_id"] = question_id


class NoResultsFoundError(ValidationError):
    def __init__(self):
        super().__init__("No results found for the selected filters")
        self.code = "NO_RESULTS"


class CSVImportError(ValidationError):
    """A row in an uploaded question CSV could not be parsed"""

    def __init__(self, message: str, row: Optional[int] = None):
        super().__init__(f"Row {row}: {message}" if row else message, field="file")
        self.code = "CSV_IMPORT_ERROR"
        if row:
            self.details["row"] = row


__all__ = [
    "CBTError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "AuthorizationError",
    "TeacherNotAssignedError",
    "QuestionOwnershipError",
    "ResourceNotFoundError",
    "UserNotFoundError",
    "TeacherNotFoundError",
    "QuestionNotFoundError",
    "BatchNotFoundError",
    "TestCodeNotFoundError",
    "AssignmentNotFoundError",
    "NoQuestionsAvailableError",
    "ValidationError",
    "UserAlreadyExistsError",
    "DuplicateNameError",
    "InvalidTestCodeError",
    "TestCodeInactiveError",
    "TestCodeExpiredError",
    "PaperNotIssuedError",
    "InvalidAnswerError",
    "NoResultsFoundError",
    "CSVImportError",
]
