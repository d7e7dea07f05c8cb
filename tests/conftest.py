"""테스트 인프라 — 테스트 DB, 세션, httpx 클라이언트, 역할별 사용자 픽스처.

Test infrastructure — Test database, session, httpx client and per-role
user fixtures. Defaults to an in-memory SQLite database (aiosqlite); set
TEST_DATABASE_URL to run against PostgreSQL. The schema is created and
dropped around each test.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import AuthUser, Issue, IssuePriority, IssueStatus, Profile, UserRole
from app.schemas.issue import IssueResponse
from app.services.mappers import avatar_url
from app.utils.jwt import create_access_token
from app.utils.password import hash_password

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL: str = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

DEFAULT_PASSWORD: str = "secret123"


def _engine_options(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # 하나의 in-memory DB를 모든 세션이 공유 (one shared in-memory database)
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 스키마 생성 후 테스트 종료 시 삭제."""
    eng = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_options(TEST_DATABASE_URL))
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def make_user(
    db: AsyncSession,
    role: UserRole,
    email: str,
    full_name: str,
    password: str = DEFAULT_PASSWORD,
    with_profile: bool = True,
) -> AuthUser:
    """인증 계정(및 프로필)을 생성합니다."""
    identity = AuthUser(
        email=email,
        password_hash=hash_password(password),
        user_metadata={"full_name": full_name, "role": role.value, "avatar_url": avatar_url(full_name)},
    )
    db.add(identity)
    await db.flush()
    if with_profile:
        db.add(Profile(
            id=identity.id,
            email=email,
            full_name=full_name,
            role=role.value,
            avatar_url=avatar_url(full_name),
        ))
        await db.flush()
    await db.refresh(identity)
    return identity


async def make_issue(db: AsyncSession, reporter: AuthUser, **overrides: Any) -> Issue:
    """이슈 행을 직접 생성합니다 (timestamps may be overridden)."""
    now = datetime.now(timezone.utc)
    values: dict[str, Any] = {
        "title": "Fryer not heating",
        "description": "The left fryer stays cold after ignition.",
        "status": IssueStatus.OPEN.value,
        "priority": IssuePriority.HIGH.value,
        "category": "Kitchen Equipment / Machinery",
        "sub_category": "Fryers, grills, ovens",
        "place": "Outlet",
        "location": "Nawala",
        "reported_by": reporter.id,
        "reported_by_name": (reporter.user_metadata or {}).get("full_name"),
        "comments": [],
        "attachments": [],
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    issue = Issue(**values)
    db.add(issue)
    await db.flush()
    await db.refresh(issue)
    return issue


def make_record(**overrides: Any) -> IssueResponse:
    """순수 함수 테스트용 도메인 레코드 (no database)."""
    now = datetime.now(timezone.utc)
    values: dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "title": "Fryer not heating",
        "description": "The left fryer stays cold after ignition.",
        "status": IssueStatus.OPEN,
        "priority": IssuePriority.MEDIUM,
        "category": "Kitchen Equipment / Machinery",
        "sub_category": "Fryers, grills, ovens",
        "place": "Outlet",
        "location": "Nawala",
        "reported_by": str(uuid.uuid4()),
        "reported_by_name": "Nimal Perera",
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return IssueResponse(**values)


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> AuthUser:
    return await make_user(db, UserRole.ADMIN, "admin@streetburger.lk", "Asha Admin")


@pytest_asyncio.fixture
async def manager_user(db: AsyncSession) -> AuthUser:
    return await make_user(db, UserRole.MANAGER, "manager@streetburger.lk", "Mala Manager")


@pytest_asyncio.fixture
async def technician_user(db: AsyncSession) -> AuthUser:
    return await make_user(db, UserRole.TECHNICIAN, "tech@streetburger.lk", "Tharindu Tech")


@pytest_asyncio.fixture
async def staff_user(db: AsyncSession) -> AuthUser:
    return await make_user(db, UserRole.STAFF, "staff@streetburger.lk", "Sunil Staff")


@pytest_asyncio.fixture
async def other_staff_user(db: AsyncSession) -> AuthUser:
    return await make_user(db, UserRole.STAFF, "other@streetburger.lk", "Oshadi Other")


def make_token(user: AuthUser) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": (user.user_metadata or {}).get("role", "STAFF"),
    })


@pytest.fixture
def admin_token(admin_user: AuthUser) -> str:
    return make_token(admin_user)


@pytest.fixture
def manager_token(manager_user: AuthUser) -> str:
    return make_token(manager_user)


@pytest.fixture
def technician_token(technician_user: AuthUser) -> str:
    return make_token(technician_user)


@pytest.fixture
def staff_token(staff_user: AuthUser) -> str:
    return make_token(staff_user)


@pytest.fixture
def other_staff_token(other_staff_user: AuthUser) -> str:
    return make_token(other_staff_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
