"""데이터베이스 엔진 및 세션 설정 모듈.

Database engine and session configuration module.
Sets up the async SQLAlchemy engine, session factory, and ORM base class.
PostgreSQL (asyncpg) is the production store; any async SQLAlchemy URL works.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

# JSON 컬럼 타입 / PostgreSQL에서는 JSONB, 그 외 dialect에서는 JSON
# JSON column type: JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _engine_options(url: str) -> dict[str, Any]:
    """드라이버별 엔진 옵션.

    asyncpg 전용 옵션은 asyncpg URL에만 적용 (asyncpg-only options for asyncpg URLs).
    """
    if url.startswith("postgresql+asyncpg"):
        return {
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
            # Supavisor(트랜잭션 모드 풀러)에서 prepared statement 비활성화
            "connect_args": {"statement_cache_size": 0},
        }
    return {"pool_pre_ping": True}


# 비동기 데이터베이스 엔진 / Async database engine
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL),
)

# 비동기 세션 팩토리 / expire_on_commit=False: 커밋 후에도 속성 접근 가능
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all ORM models.
    """

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """비동기 데이터베이스 세션을 생성하고 요청 종료 시 닫습니다.

    FastAPI dependency that yields an async database session.
    The session is automatically closed after the request completes.

    Yields:
        AsyncSession: SQLAlchemy 비동기 세션 인스턴스 (Async session instance)
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
