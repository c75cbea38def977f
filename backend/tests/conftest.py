"""
CBT Portal - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable, Awaitable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_cbt.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'

from cbt.main import app
from cbt.core.database import Base, get_db
from cbt.core.security import create_access_token
from cbt.models.user import User, UserRole
from cbt.models.reference import Subject, SchoolClass, Term, AcademicSession
from cbt.models.question import Question, QuestionType
from cbt.models.test_code import TestCode, TestType
from cbt.schemas.test_code import BatchCreate
from cbt.services.user_service import user_service
from cbt.services.teacher_assignment_service import teacher_assignment_service
from cbt.services.test_code_service import test_code_service
from cbt.schemas.teacher_assignment import AssignmentPair

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_cbt.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)

SUBJECT = "Mathematics"
CLASS_NAME = "JSS1"
TERM = "First Term"
SESSION = "2024/2025"


def make_headers(user: User) -> dict:
    """Bearer headers for a user, as the web client sends them"""
    token = create_access_token({
        'sub': str(user.id),
        'email': user.email,
        'role': user.role.value
    })
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker:
    """Sessions independent of ``db_session``, on the same test database"""
    return TestSessionLocal


@pytest.fixture
def per_request_sessions(client: AsyncClient) -> None:
    """Give every request its own session so requests can run concurrently"""
    async def override_get_db():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db


# ==================== Users ====================

async def _create_user(db: AsyncSession, role: UserRole, password: str = 'password123') -> User:
    return await user_service.create_user(
        db,
        email=fake.unique.email(),
        password=password,
        full_name=fake.name(),
        role=role,
    )


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.ADMIN)


@pytest.fixture
async def teacher_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.TEACHER)


@pytest.fixture
async def other_teacher(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.TEACHER)


@pytest.fixture
async def student_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.STUDENT)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return make_headers(admin_user)


@pytest.fixture
def teacher_headers(teacher_user: User) -> dict:
    return make_headers(teacher_user)


@pytest.fixture
def student_headers(student_user: User) -> dict:
    return make_headers(student_user)


# ==================== Domain data ====================

@pytest.fixture
async def reference_data(db_session: AsyncSession) -> None:
    """A small vocabulary of subjects, classes, terms and sessions"""
    db_session.add_all([
        Subject(name=SUBJECT),
        Subject(name="English Language"),
        SchoolClass(name=CLASS_NAME),
        SchoolClass(name="JSS2"),
        Term(name=TERM),
        Term(name="Second Term"),
        AcademicSession(name="2023/2024", is_current=False),
        AcademicSession(name=SESSION, is_current=True),
    ])
    await db_session.commit()


@pytest.fixture
async def assigned_teacher(db_session: AsyncSession, teacher_user: User) -> User:
    """The teacher, assigned to Mathematics / JSS1"""
    await teacher_assignment_service.replace_for_teacher(
        db_session,
        teacher_user.id,
        [AssignmentPair(subject=SUBJECT, class_name=CLASS_NAME)],
    )
    return teacher_user


@pytest.fixture
def mc_question_payload() -> dict:
    """A valid multiple-choice question as the web client posts it"""
    return {
        "subject": SUBJECT,
        "class": CLASS_NAME,
        "term": TERM,
        "question": "What is 7 x 8?",
        "questionType": "multiple_choice",
        "optionA": "54",
        "optionB": "56",
        "optionC": "58",
        "optionD": "64",
        "correctAnswer": 1,
        "scorePerQuestion": 1,
    }


@pytest.fixture
def make_question(db_session: AsyncSession, teacher_user: User) -> Callable[..., Awaitable[Question]]:
    """Factory inserting a question straight into the bank"""
    async def _make(**overrides) -> Question:
        author = overrides.pop("author", teacher_user)
        fields = {
            "subject": SUBJECT,
            "class_name": CLASS_NAME,
            "term": TERM,
            "question": fake.sentence(),
            "question_type": QuestionType.MULTIPLE_CHOICE,
            "option_a": "A1",
            "option_b": "B1",
            "option_c": "C1",
            "option_d": "D1",
            "correct_answer": "0",
            "score_per_question": 1,
        }
        fields.update(overrides)
        question = Question(teacher_id=author.id, creator=author, editor=None, **fields)
        db_session.add(question)
        await db_session.commit()
        return question

    return _make


@pytest.fixture
def make_test_code(db_session: AsyncSession, admin_user: User) -> Callable[..., Awaitable[TestCode]]:
    """Factory generating a one-code batch and activating it"""
    async def _make(active: bool = True, **overrides) -> TestCode:
        config = {
            "batch_name": "Mid-term CA",
            "subject": SUBJECT,
            "class_name": CLASS_NAME,
            "term": TERM,
            "session": SESSION,
            "test_type": TestType.CA,
            "num_questions": 5,
            "time_limit": 30,
            "score_per_question": 1,
            "num_codes": 1,
        }
        config.update(overrides)
        batch, codes = await test_code_service.create_batch(db_session, BatchCreate(**config), admin_user)
        if active:
            await test_code_service.set_batch_active(db_session, batch.id, True)
        return codes[0]

    return _make


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    """Headers for any user created inside a test"""
    return make_headers
