from cbt.schemas.base import CamelModel


class AdminStats(CamelModel):
    total_students: int


class DashboardStats(CamelModel):
    tests_taken: int
    active_test_codes: int
    total_test_codes: int
    total_questions: int
