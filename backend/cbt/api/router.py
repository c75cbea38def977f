from fastapi import APIRouter
from cbt.api.endpoints import (
    auth,
    reference,
    teacher_assignments,
    questions,
    test_code_batches,
    test_codes,
    test_results,
    admin,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(reference.router, tags=["Reference Data"])
api_router.include_router(teacher_assignments.router, tags=["Teacher Assignments"])
api_router.include_router(questions.router, prefix="/questions", tags=["Questions"])
api_router.include_router(test_code_batches.router, prefix="/test-code-batches", tags=["Test Code Batches"])
api_router.include_router(test_codes.router, prefix="/test-codes", tags=["Test Codes"])
api_router.include_router(test_results.router, prefix="/test-results", tags=["Test Results"])
api_router.include_router(admin.router, tags=["Admin"])
