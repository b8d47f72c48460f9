"""
CampusDesk - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable, Optional
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing-only-32chars'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'

from campusdesk.main import app
from campusdesk.core.database import Base, get_db
from campusdesk.core.events import EventBus
from campusdesk.core.security import get_password_hash, create_access_token, build_token_data
from campusdesk.models import Department, Student, User, UserRole

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
def bus() -> EventBus:
    """Private event bus so subscriptions never leak between tests"""
    return EventBus()


# ============================================
# Users
# ============================================

@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory: await make_user(UserRole.HOD, department=Department.CSE)"""
    async def _make(role: UserRole, department: Optional[Department] = Department.CSE,
                    full_name: Optional[str] = None, is_active: bool = True) -> User:
        user = User(
            email=fake.unique.email(),
            hashed_password=get_password_hash(TEST_PASSWORD),
            full_name=full_name or fake.name(),
            role=role,
            department=department,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(UserRole.ADMIN, department=None)


@pytest.fixture
async def hod_user(make_user) -> User:
    return await make_user(UserRole.HOD)


@pytest.fixture
async def librarian_user(make_user) -> User:
    return await make_user(UserRole.LIBRARIAN, department=None)


@pytest.fixture
async def accountant_user(make_user) -> User:
    return await make_user(UserRole.ACCOUNTANT, department=None)


@pytest.fixture
async def principal_user(make_user) -> User:
    return await make_user(UserRole.PRINCIPAL, department=None)


@pytest.fixture
async def faculty_user(make_user) -> User:
    return await make_user(UserRole.FACULTY, full_name='F1')


@pytest.fixture
async def student_user(make_user) -> User:
    return await make_user(UserRole.STUDENT)


@pytest.fixture
async def cr_user(make_user) -> User:
    return await make_user(UserRole.CR)


@pytest.fixture
async def student_profile(db_session: AsyncSession, student_user: User) -> Student:
    """Academic profile linked to student_user"""
    student = Student(
        user_id=student_user.id,
        register_id='22EC1A0501',
        full_name=student_user.full_name,
        email=student_user.email,
        department=Department.CSE,
        class_name='CSE-A',
        regulation='R22',
    )
    db_session.add(student)
    await db_session.commit()
    await db_session.refresh(student)
    return student


@pytest.fixture
async def approvers(hod_user, librarian_user, accountant_user, principal_user) -> dict:
    return {
        'HOD': hod_user,
        'LIBRARIAN': librarian_user,
        'ACCOUNTANT': accountant_user,
        'PRINCIPAL': principal_user,
    }


# ============================================
# Auth headers
# ============================================

def headers_for(user: User) -> dict:
    """Bearer header for ``user``"""
    token = create_access_token(build_token_data(user))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(student_user: User) -> dict:
    return headers_for(student_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    return headers_for(admin_user)
