# Authentication module

from cbt.modules.auth.dependencies import (
    get_current_user,
    get_optional_user,
    get_current_admin,
    get_current_teacher,
    get_current_student,
    get_question_author,
)

__all__ = [
    "get_current_user",
    "get_optional_user",
    "get_current_admin",
    "get_current_teacher",
    "get_current_student",
    "get_question_author",
]
