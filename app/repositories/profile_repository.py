"""프로필 레포지토리 — 사용자 프로필 CRUD 및 권한 프로시저 호출.

Profile Repository — CRUD for user profiles plus the two privileged
server-side procedures (admin_reset_password, delete_user). A missing
procedure surfaces as RemoteFunctionMissingError, never as a generic failure.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, String, Uuid, bindparam, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.profile import Profile
from app.repositories.base import BaseRepository, store_errors

ADMIN_RESET_PASSWORD: str = "admin_reset_password"
DELETE_USER: str = "delete_user"


class ProfileRepository(BaseRepository[Profile]):
    """프로필 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the profiles table.
    """

    def __init__(self) -> None:
        super().__init__(Profile, label="profiles")

    async def list_by_name(
        self,
        db: AsyncSession,
        role: str | None = None,
    ) -> Sequence[Profile]:
        """이름순 프로필 목록 (Profiles ordered by full name, optionally one role)."""
        query: Select = select(Profile)
        if role is not None:
            query = query.where(Profile.role == role)
        query = query.order_by(Profile.full_name, Profile.email)
        async with store_errors("list users"):
            result = await db.execute(query)
        return result.scalars().all()

    async def admin_reset_password(
        self,
        db: AsyncSession,
        target_user_id: UUID,
        new_password: str,
    ) -> None:
        """권한 프로시저로 다른 사용자의 비밀번호를 재설정합니다.

        Reset another user's password through the privileged procedure.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            target_user_id: 대상 사용자 ID (Target user UUID)
            new_password: 새 비밀번호, 정책 검사 완료 (New password, already validated)

        Raises:
            RemoteFunctionMissingError: 프로시저 미설치 (Procedure not provisioned)
        """
        statement = text(
            f"SELECT {ADMIN_RESET_PASSWORD}(:target_user_id, :new_password)"
        ).bindparams(
            bindparam("target_user_id", type_=Uuid),
            bindparam("new_password", type_=String),
        )
        async with store_errors("reset password", function_name=ADMIN_RESET_PASSWORD):
            await db.execute(
                statement,
                {"target_user_id": target_user_id, "new_password": new_password},
            )

    async def delete_user(
        self,
        db: AsyncSession,
        target_user_id: UUID,
    ) -> None:
        """권한 프로시저로 사용자 계정과 프로필을 삭제합니다.

        Delete an identity and its profile through the privileged procedure.

        Raises:
            RemoteFunctionMissingError: 프로시저 미설치 (Procedure not provisioned)
        """
        statement = text(f"SELECT {DELETE_USER}(:target_user_id)").bindparams(
            bindparam("target_user_id", type_=Uuid),
        )
        async with store_errors("delete user", function_name=DELETE_USER):
            await db.execute(statement, {"target_user_id": target_user_id})
        # 세션에 남아 있는 삭제된 행 정리 (drop stale identities from the session)
        db.expire_all()


# 싱글턴 인스턴스 / Singleton instance
profile_repository: ProfileRepository = ProfileRepository()
