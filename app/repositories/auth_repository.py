"""인증 레포지토리 — 인증 계정 조회 및 리프레시 토큰 CRUD.

Auth Repository — Identity lookups and refresh token lifecycle.
Provides database operations for the authentication layer: email/id
identity lookups, identity creation and password changes, and refresh
token create/verify/revoke.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.auth import AuthUser
from app.models.token import RefreshToken
from app.repositories.base import store_errors


class AuthRepository:
    """인증 관련 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling authentication-related database queries.
    Manages identity records and refresh token lifecycle.
    """

    async def get_identity_by_email(
        self,
        db: AsyncSession,
        email: str,
    ) -> AuthUser | None:
        """이메일로 인증 계정을 조회합니다 (대소문자 무시).

        Retrieve an identity by email, case-insensitively.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            email: 로그인 이메일 (Login email)

        Returns:
            AuthUser | None: 조회된 계정 또는 None (Found identity or None)
        """
        query: Select = select(AuthUser).where(func.lower(AuthUser.email) == email.strip().lower())
        async with store_errors("load account"):
            result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_identity_by_id(
        self,
        db: AsyncSession,
        identity_id: UUID,
    ) -> AuthUser | None:
        async with store_errors("load account"):
            return await db.get(AuthUser, identity_id)

    async def create_identity(
        self,
        db: AsyncSession,
        email: str,
        password_hash: str,
        metadata: dict[str, Any],
    ) -> AuthUser:
        """새 인증 계정을 생성합니다.

        Create a new identity with its sign-up metadata claims.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            email: 로그인 이메일 (Login email, stored lower-cased)
            password_hash: bcrypt 해시 (bcrypt hash)
            metadata: 가입 클레임 {full_name, role, avatar_url} (Sign-up claims)

        Returns:
            AuthUser: 생성된 계정 (Created identity)
        """
        identity: AuthUser = AuthUser(
            email=email.strip().lower(),
            password_hash=password_hash,
            user_metadata=metadata,
        )
        db.add(identity)
        async with store_errors("create account"):
            await db.flush()
            await db.refresh(identity)
        return identity

    async def set_password_hash(
        self,
        db: AsyncSession,
        identity: AuthUser,
        password_hash: str,
    ) -> None:
        identity.password_hash = password_hash
        async with store_errors("update password"):
            await db.flush()

    async def create_refresh_token(
        self,
        db: AsyncSession,
        user_id: UUID,
        token: str,
        expires_at: datetime,
    ) -> RefreshToken:
        """새 리프레시 토큰을 생성합니다.

        Create a new refresh token record in the database.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 토큰 소유자 계정 ID (Token owner identity UUID)
            token: JWT 리프레시 토큰 문자열 (JWT refresh token string)
            expires_at: 토큰 만료 일시 (Token expiration timestamp)

        Returns:
            RefreshToken: 생성된 리프레시 토큰 레코드 (Created refresh token record)
        """
        db_token: RefreshToken = RefreshToken(
            user_id=user_id,
            token=token,
            expires_at=expires_at,
        )
        db.add(db_token)
        async with store_errors("store session"):
            await db.flush()
            await db.refresh(db_token)
        return db_token

    async def get_refresh_token(
        self,
        db: AsyncSession,
        token: str,
    ) -> RefreshToken | None:
        """토큰 문자열로 리프레시 토큰을 조회합니다.

        Retrieve a refresh token record by its token string.
        """
        query: Select = select(RefreshToken).where(RefreshToken.token == token)
        async with store_errors("load session"):
            result = await db.execute(query)
        return result.scalar_one_or_none()

    async def delete_refresh_token(
        self,
        db: AsyncSession,
        token: str,
    ) -> None:
        """리프레시 토큰을 삭제합니다 (로그아웃 또는 토큰 교체 시).

        Delete a refresh token (used on sign-out or token rotation).
        """
        async with store_errors("revoke session"):
            await db.execute(delete(RefreshToken).where(RefreshToken.token == token))
            await db.flush()

    async def delete_user_refresh_tokens(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> None:
        """사용자의 모든 리프레시 토큰을 삭제합니다 (비밀번호 변경 시).

        Revoke every session of an identity (used after a password reset).
        """
        async with store_errors("revoke sessions"):
            await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
            await db.flush()


# 싱글턴 인스턴스 / Singleton instance
auth_repository: AuthRepository = AuthRepository()
