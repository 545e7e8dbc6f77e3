"""
Student Task Portal - Test Configuration and Fixtures
"""
import os
from datetime import timedelta
from typing import AsyncGenerator, Callable, List, Optional
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment before the app reads its settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''
os.environ['DEFAULT_ADMIN_EMAIL'] = ''

from taskportal.main import app
from taskportal.core.database import Base, get_db, utc_now
from taskportal.core.security import get_password_hash, create_access_token
from taskportal.models.task import Task, TaskStatus, TaskPriority
from taskportal.models.user import User, UserRole, StudentCategory
from taskportal.services.presence import PresenceRegistry

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def user_password() -> str:
    """Plain-text password of every fixture-created user"""
    return TEST_PASSWORD


@pytest.fixture
def presence() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.fixture
async def client(db_session: AsyncSession, presence: PresenceRegistry) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override and a fresh presence registry"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    # ASGITransport does not run the lifespan
    app.state.presence = presence

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()
    presence.clear()


_student_sequence = iter(range(1, 10_000))


async def _make_user(db_session: AsyncSession, role: UserRole, **overrides) -> User:
    fields = dict(
        name=fake.name(),
        email=fake.unique.email(),
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=role,
        is_active=True,
    )
    if role == UserRole.STUDENT:
        fields.update(
            student_number=f"S{next(_student_sequence):03d}",
            category=StudentCategory.WEB_DEVELOPMENT,
        )
    fields.update(overrides)
    user = User(**fields)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory for extra users: ``await make_user(UserRole.STUDENT, is_active=False)``"""
    async def factory(role: UserRole = UserRole.STUDENT, **overrides) -> User:
        return await _make_user(db_session, role, **overrides)
    return factory


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await _make_user(db_session, UserRole.ADMIN)


@pytest.fixture
async def student_user(db_session: AsyncSession) -> User:
    """Create a student test user"""
    return await _make_user(db_session, UserRole.STUDENT)


@pytest.fixture
async def other_student(db_session: AsyncSession) -> User:
    """A second student who is not assigned to anything by default"""
    return await _make_user(db_session, UserRole.STUDENT, category=StudentCategory.DATA_SCIENCE)


def headers_for(user: User) -> dict:
    token = create_access_token({
        'sub': user.id,
        'email': user.email,
        'role': user.role.value
    })
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(student_user: User) -> dict:
    """Generate authentication headers for the student user"""
    return headers_for(student_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return headers_for(admin_user)


@pytest.fixture
def other_auth_headers(other_student: User) -> dict:
    """Headers for a student outside the default assignee set"""
    return headers_for(other_student)


@pytest.fixture
def make_headers() -> Callable:
    return headers_for


@pytest.fixture
def make_task(db_session: AsyncSession, admin_user: User, student_user: User) -> Callable:
    """Factory for persisted tasks created by ``admin_user``, assigned to ``student_user`` by default"""
    async def factory(
        assignees: Optional[List[User]] = None,
        status: TaskStatus = TaskStatus.NOT_STARTED,
        deadline_days: int = 7,
        **overrides
    ) -> Task:
        fields = dict(
            title=fake.sentence(nb_words=4),
            description=fake.paragraph(),
            category='Web Development',
            deadline=utc_now() + timedelta(days=deadline_days),
            priority=TaskPriority.MEDIUM,
            requirements=['Push to GitHub'],
            created_by=admin_user.id,
            creator=admin_user,
            status=status,
            notifications=[],
            assignees=assignees if assignees is not None else [student_user],
        )
        fields.update(overrides)
        task = Task(**fields)
        db_session.add(task)
        await db_session.commit()
        return task
    return factory
