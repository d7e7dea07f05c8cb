"""기본 CRUD 레포지토리 — 모든 레포지토리의 부모 클래스.

Base CRUD Repository — Parent class for all domain repositories.
Provides generic Create, Read, Update, Delete operations and the single
place where driver errors are translated into the service error taxonomy
(schema missing, store unavailable, missing server-side function).

Usage:
    class IssueRepository(BaseRepository[Issue]):
        def __init__(self) -> None:
            super().__init__(Issue)
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import Select, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base
from app.utils.exceptions import (
    DuplicateError,
    RemoteFunctionMissingError,
    SchemaMissingError,
    StoreUnavailableError,
)

# 제네릭 타입 변수 / SQLAlchemy 모델을 나타냄
ModelType = TypeVar("ModelType", bound=Base)

# PostgreSQL SQLSTATE 코드 / SQLSTATE codes the taxonomy cares about
_UNDEFINED_TABLE: str = "42P01"
_UNDEFINED_FUNCTION: str = "42883"
_POLICY_RECURSION: str = "42P17"


def _sqlstate(exc: DBAPIError) -> str | None:
    """드라이버 예외에서 SQLSTATE 추출 (asyncpg adapter or its cause)."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def translate_store_error(
    exc: DBAPIError,
    context: str,
    function_name: str | None = None,
) -> HTTPException:
    """드라이버 예외를 사람이 읽을 수 있는 서비스 예외로 변환합니다.

    Map a driver error to the error taxonomy with a human-readable message.

    Args:
        exc: SQLAlchemy DBAPI 예외 (Wrapped driver error)
        context: 실패한 작업 이름 (Operation name, e.g. "list issues")
        function_name: 호출한 서버 함수 이름 (Server-side function being called, if any)

    Returns:
        HTTPException: 발생시킬 예외 (Exception to raise)
    """
    code: str | None = _sqlstate(exc)
    message: str = str(exc.orig) if exc.orig is not None else str(exc)
    lowered: str = message.lower()

    if function_name is not None and (
        code == _UNDEFINED_FUNCTION
        or "no such function" in lowered
        or ("function" in lowered and "does not exist" in lowered)
    ):
        return RemoteFunctionMissingError(function_name)
    if code == _UNDEFINED_TABLE or "no such table" in lowered or (
        "relation" in lowered and "does not exist" in lowered
    ):
        return SchemaMissingError(
            "Database setup incomplete. A required table is missing. "
            "Please run the database migrations."
        )
    if code == _POLICY_RECURSION or "infinite recursion" in lowered:
        return SchemaMissingError(
            "Database configuration error. Infinite recursion in policies detected. "
            "Please apply the policy fix migration."
        )
    if isinstance(exc, IntegrityError):
        return DuplicateError(f"Could not {context}: the record conflicts with existing data.")
    return StoreUnavailableError(f"Could not {context}: {message}")


@asynccontextmanager
async def store_errors(context: str, function_name: str | None = None) -> AsyncIterator[None]:
    """레포지토리 경계에서 드라이버 예외를 변환하는 컨텍스트 매니저.

    Translate driver errors raised inside the block; nothing is swallowed.

    Usage:
        async with store_errors("list issues"):
            result = await db.execute(query)
    """
    try:
        yield
    except DBAPIError as exc:
        raise translate_store_error(exc, context, function_name) from exc
    except OSError as exc:
        # 연결 거부 등 소켓 수준 오류 (socket-level failures such as connection refused)
        raise StoreUnavailableError(f"Could not {context}: {exc}") from exc


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Generic CRUD repository providing common database operations.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
        label: 오류 메시지용 리소스 이름 (Resource name used in error messages)
    """

    def __init__(self, model: type[ModelType], label: str | None = None) -> None:
        self.model: type[ModelType] = model
        self.label: str = label or model.__tablename__

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self.model.id == record_id)
        async with store_errors(f"load {self.label}"):
            result = await db.execute(query)
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다.

        Create a new record in the database.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            obj_data: 생성할 레코드의 데이터 딕셔너리 (Column values for the new record)

        Returns:
            ModelType: 생성된 레코드 (The created record)
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        async with store_errors(f"create {self.label}"):
            await db.flush()
            await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
    ) -> ModelType | None:
        """기존 레코드를 부분 업데이트합니다 (sparse patch).

        Only the keys present in update_data are written; None is a value,
        not an omission.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 업데이트할 레코드의 UUID (UUID of the record to update)
            update_data: 업데이트할 필드와 값의 딕셔너리 (Fields to write)

        Returns:
            ModelType | None: 업데이트된 레코드 또는 None (Updated record or None)
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return None

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        async with store_errors(f"update {self.label}"):
            await db.flush()
            await db.refresh(db_obj)
        return db_obj

    async def delete(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> bool:
        """레코드를 삭제합니다.

        Returns:
            bool: 삭제 성공 여부 (Whether a record was deleted)
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return False

        async with store_errors(f"delete {self.label}"):
            await db.delete(db_obj)
            await db.flush()
        return True

