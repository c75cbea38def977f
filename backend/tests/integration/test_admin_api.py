"""
Integration Tests for admin exports and dashboard counters
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from cbt.models.user import UserRole
from cbt.services.user_service import user_service


@pytest.fixture
async def students(db_session: AsyncSession) -> list:
    return [
        await user_service.create_user(db_session, email="ada@school.edu.ng", password="password123",
                                       full_name="Ada Obi", role=UserRole.STUDENT),
        await user_service.create_user(db_session, email="bola@school.edu.ng", password="password123",
                                       full_name="Bola Ade", role=UserRole.STUDENT),
    ]


class TestStudentExport:
    """Test the student list CSV"""

    @pytest.mark.asyncio
    async def test_exports_all_students(self, client: AsyncClient, students, teacher_user, admin_headers):
        response = await client.get("/api/students/export", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "students_" in response.headers["content-disposition"]
        lines = response.text.strip().splitlines()
        assert lines[0] == "ID,Email,Full Name,Registration Date"
        assert len(lines) == 3
        assert teacher_user.email not in response.text

    @pytest.mark.asyncio
    async def test_search_by_name_or_email(self, client: AsyncClient, students, admin_headers):
        by_name = await client.get("/api/students/export", params={"search": "ada o"}, headers=admin_headers)
        by_email = await client.get("/api/students/export", params={"search": "BOLA@"}, headers=admin_headers)

        assert "Ada Obi" in by_name.text
        assert "Bola Ade" not in by_name.text
        assert "bola@school.edu.ng" in by_email.text
        assert "ada@school.edu.ng" not in by_email.text

    @pytest.mark.asyncio
    async def test_admin_only(self, client: AsyncClient, teacher_headers):
        response = await client.get("/api/students/export", headers=teacher_headers)

        assert response.status_code == 403


class TestStats:
    """Test dashboard counters"""

    @pytest.mark.asyncio
    async def test_admin_stats(self, client: AsyncClient, students, teacher_user, admin_headers):
        response = await client.get("/api/admin/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"totalStudents": 2}

    @pytest.mark.asyncio
    async def test_dashboard_stats(self, client: AsyncClient, make_test_code, make_question, admin_headers):
        await make_question()
        await make_question()
        await make_test_code()
        await make_test_code(active=False)
        deleted = await make_test_code()
        await client.delete(f"/api/test-code-batches/{deleted.batch_id}", headers=admin_headers)

        response = await client.get("/api/dashboard/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "testsTaken": 0,
            "activeTestCodes": 1,
            "totalTestCodes": 2,
            "totalQuestions": 2,
        }

    @pytest.mark.asyncio
    async def test_stats_admin_only(self, client: AsyncClient, student_headers):
        assert (await client.get("/api/admin/stats", headers=student_headers)).status_code == 403
        assert (await client.get("/api/dashboard/stats", headers=student_headers)).status_code == 403
