"""인증 서비스 — 회원가입, 로그인, 토큰 갱신, 비밀번호 복구 비즈니스 로직.

Auth Service — Business logic for the authentication provider:
sign-up, sign-in, sign-out, token refresh, session lookup, password
update and password recovery. Every state change is published on the
auth event stream (SIGNED_IN, SIGNED_OUT, PASSWORD_RECOVERY, USER_UPDATED).
"""

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.auth import AuthUser
from app.models.enums import UserRole
from app.models.profile import Profile
from app.repositories.auth_repository import auth_repository
from app.repositories.profile_repository import profile_repository
from app.schemas.auth import (
    PasswordRecoveryComplete,
    RefreshRequest,
    SignInRequest,
    SignUpRequest,
    TokenResponse,
)
from app.schemas.user import UserResponse
from app.services.auth_events import AuthEvent, AuthEventBus, AuthEventType, auth_events
from app.services.mappers import avatar_url, map_identity, map_profile
from app.utils.dates import as_utc, utcnow
from app.utils.exceptions import DuplicateError, NotAuthenticatedError, ValidationFailedError
from app.utils.jwt import (
    create_access_token,
    create_recovery_token,
    create_refresh_token,
    decode_token,
)
from app.utils.password import hash_password, validate_new_password, verify_password

logger = logging.getLogger("issue-tracker.auth")


def _password_fingerprint(password_hash: str) -> str:
    # 비밀번호가 바뀌면 기존 복구 토큰 무효 (a used or stale recovery link stops working)
    return password_hash[-12:]


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    Manages identities, JWT sessions and password recovery.
    """

    def __init__(self, events: AuthEventBus = auth_events) -> None:
        self.events: AuthEventBus = events

    def _build_jwt_payload(self, identity: AuthUser, role: str) -> dict[str, str]:
        """JWT 토큰 페이로드를 생성합니다 (sub, email, role)."""
        return {
            "sub": str(identity.id),
            "email": identity.email,
            "role": role,
        }

    async def _resolve_role(self, db: AsyncSession, identity: AuthUser) -> str:
        profile: Profile | None = await profile_repository.get_by_id(db, identity.id)
        if profile is not None:
            return UserRole.coerce(profile.role).value
        return map_identity(identity).role

    async def _generate_tokens(
        self,
        db: AsyncSession,
        identity: AuthUser,
        role: str,
    ) -> TokenResponse:
        """액세스 토큰과 리프레시 토큰을 생성합니다.

        Generate access and refresh token pair for an identity.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            identity: 인증 계정 (Identity)
            role: 토큰에 기록할 역할 (Role claim)

        Returns:
            TokenResponse: 토큰 응답 (Token response with access and refresh tokens)
        """
        payload: dict[str, str] = self._build_jwt_payload(identity, role)
        access_token: str = create_access_token(payload)
        refresh_token: str = create_refresh_token(payload)

        # 리프레시 토큰을 DB에 저장 / Persist refresh token so sign-out can revoke it
        expires_at: datetime = utcnow() + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
        await auth_repository.create_refresh_token(
            db, user_id=identity.id, token=refresh_token, expires_at=expires_at
        )

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def create_identity(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        full_name: str,
        role: UserRole = UserRole.STAFF,
        *,
        issue_session: bool = True,
    ) -> tuple[AuthUser, TokenResponse | None]:
        """인증 계정과 프로필을 함께 생성합니다.

        Create an identity plus its profile row. With issue_session=False no
        tokens are created and no SIGNED_IN event is emitted, so an admin
        creating another account keeps their own session untouched.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            email: 로그인 이메일 (Login email)
            password: 비밀번호 (Plain text password)
            full_name: 표시 이름 (Display name)
            role: 역할 (Role, default STAFF)
            issue_session: 세션 발급 여부 (Whether to sign the new identity in)

        Returns:
            tuple[AuthUser, TokenResponse | None]: 계정과 세션 (Identity and session, if issued)

        Raises:
            ValidationFailedError: 비밀번호 정책 위반 또는 이름 누락
            DuplicateError: 이미 등록된 이메일 (Email already registered)
        """
        validate_new_password(password)
        name: str = full_name.strip()
        if not name:
            raise ValidationFailedError("Name is required")

        existing: AuthUser | None = await auth_repository.get_identity_by_email(db, email)
        if existing is not None:
            raise DuplicateError("User already registered")

        metadata: dict[str, Any] = {
            "full_name": name,
            "role": role.value,
            "avatar_url": avatar_url(name),
        }
        identity: AuthUser = await auth_repository.create_identity(
            db, email=email, password_hash=hash_password(password), metadata=metadata
        )
        await profile_repository.create(
            db,
            {
                "id": identity.id,
                "email": identity.email,
                "full_name": name,
                "role": role.value,
                "avatar_url": metadata["avatar_url"],
            },
        )

        if not issue_session:
            return identity, None

        tokens: TokenResponse = await self._generate_tokens(db, identity, role.value)
        await self.events.emit(
            AuthEvent(AuthEventType.SIGNED_IN, user_id=str(identity.id), email=identity.email)
        )
        return identity, tokens

    async def sign_up(self, db: AsyncSession, data: SignUpRequest) -> TokenResponse:
        """자가 회원가입 — 항상 STAFF 역할 (Self-registration always starts as STAFF)."""
        _, tokens = await self.create_identity(
            db, email=data.email, password=data.password, full_name=data.full_name
        )
        return tokens  # type: ignore[return-value]

    async def sign_in(self, db: AsyncSession, data: SignInRequest) -> TokenResponse:
        """이메일/비밀번호 로그인을 처리합니다.

        Raises:
            NotAuthenticatedError: 잘못된 인증 정보일 때 (Invalid credentials)
        """
        identity: AuthUser | None = await auth_repository.get_identity_by_email(db, data.email)
        if identity is None or not verify_password(data.password, identity.password_hash):
            raise NotAuthenticatedError("Invalid login credentials")

        role: str = await self._resolve_role(db, identity)
        tokens: TokenResponse = await self._generate_tokens(db, identity, role)
        await self.events.emit(
            AuthEvent(AuthEventType.SIGNED_IN, user_id=str(identity.id), email=identity.email)
        )
        return tokens

    async def refresh(self, db: AsyncSession, data: RefreshRequest) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다 (rotation).

        Raises:
            NotAuthenticatedError: 유효하지 않거나 만료된 리프레시 토큰일 때
                                   (Invalid, revoked or expired refresh token)
        """
        # DB에서 리프레시 토큰 확인 / Verify refresh token in database
        db_token = await auth_repository.get_refresh_token(db, data.refresh_token)
        if db_token is None:
            raise NotAuthenticatedError("Invalid refresh token")

        # 만료 확인 / Check expiration
        if as_utc(db_token.expires_at) < utcnow():
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise NotAuthenticatedError("Refresh token has expired")

        try:
            payload: dict = decode_token(data.refresh_token)
        except jwt.InvalidTokenError:
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise NotAuthenticatedError("Invalid refresh token")
        if payload.get("type") != "refresh":
            raise NotAuthenticatedError("Invalid token type")

        identity: AuthUser | None = await auth_repository.get_identity_by_id(db, db_token.user_id)
        if identity is None:
            raise NotAuthenticatedError("User not found")

        # 기존 리프레시 토큰 삭제 후 새 토큰 발급 / Delete old token and issue new pair
        await auth_repository.delete_refresh_token(db, data.refresh_token)
        role: str = await self._resolve_role(db, identity)
        return await self._generate_tokens(db, identity, role)

    async def sign_out(self, db: AsyncSession, refresh_token: str) -> None:
        """로그아웃 처리 — 리프레시 토큰을 삭제하고 SIGNED_OUT 발행."""
        db_token = await auth_repository.get_refresh_token(db, refresh_token)
        if db_token is None:
            return
        await auth_repository.delete_refresh_token(db, refresh_token)
        await self.events.emit(AuthEvent(AuthEventType.SIGNED_OUT, user_id=str(db_token.user_id)))

    async def get_session(self, db: AsyncSession, access_token: str) -> AuthUser:
        """액세스 토큰으로 현재 세션의 계정을 조회합니다.

        Resolve the identity behind an access token.

        Raises:
            NotAuthenticatedError: 토큰이 없거나 유효하지 않음 (No valid session)
        """
        try:
            payload: dict = decode_token(access_token)
        except jwt.ExpiredSignatureError:
            raise NotAuthenticatedError("Session expired")
        except jwt.InvalidTokenError:
            raise NotAuthenticatedError("Invalid or expired token")

        # 토큰 타입 검증 / Reject refresh/recovery tokens used as access tokens
        if payload.get("type") != "access":
            raise NotAuthenticatedError("Invalid token type")
        try:
            identity_id: UUID = UUID(str(payload.get("sub")))
        except ValueError:
            raise NotAuthenticatedError("Invalid token")

        identity: AuthUser | None = await auth_repository.get_identity_by_id(db, identity_id)
        if identity is None:
            raise NotAuthenticatedError("User not found")
        return identity

    async def get_current_user(self, db: AsyncSession, identity: AuthUser) -> UserResponse:
        """현재 사용자 — 프로필이 없으면 인증 클레임으로 대체.

        Return the current user from their profile, falling back to the
        identity's metadata claims (role defaults to STAFF) when the profile
        row is not provisioned yet.
        """
        profile: Profile | None = await profile_repository.get_by_id(db, identity.id)
        if profile is not None:
            return map_profile(profile)
        logger.info("Profile missing for %s; using identity claims", identity.id)
        return map_identity(identity)

    async def update_password(
        self,
        db: AsyncSession,
        identity: AuthUser,
        new_password: str,
        confirm_password: str | None = None,
    ) -> None:
        """계정 비밀번호 변경 — 정책 검사 후 해시 저장, USER_UPDATED 발행."""
        validate_new_password(new_password, confirm_password)
        await auth_repository.set_password_hash(db, identity, hash_password(new_password))
        await self.events.emit(
            AuthEvent(AuthEventType.USER_UPDATED, user_id=str(identity.id), email=identity.email)
        )

    async def request_password_recovery(self, db: AsyncSession, email: str) -> None:
        """복구 토큰 발급 후 PASSWORD_RECOVERY 발행.

        Unknown emails are accepted silently so the endpoint cannot be used
        to discover which addresses are registered.
        """
        identity: AuthUser | None = await auth_repository.get_identity_by_email(db, email)
        if identity is None:
            return
        token: str = create_recovery_token(
            {
                "sub": str(identity.id),
                "email": identity.email,
                "pwd": _password_fingerprint(identity.password_hash),
            }
        )
        await self.events.emit(
            AuthEvent(
                AuthEventType.PASSWORD_RECOVERY,
                user_id=str(identity.id),
                email=identity.email,
                token=token,
            )
        )

    async def complete_password_recovery(
        self,
        db: AsyncSession,
        data: PasswordRecoveryComplete,
    ) -> None:
        """복구 토큰으로 새 비밀번호 설정.

        The password pair is validated before the token is looked at. All
        existing sessions of the identity are revoked afterwards.

        Raises:
            ValidationFailedError: 불일치 또는 길이 부족 (Mismatch or too short)
            NotAuthenticatedError: 유효하지 않거나 사용된 복구 링크 (Invalid or used link)
        """
        validate_new_password(data.password, data.confirm_password)

        try:
            payload: dict = decode_token(data.token)
        except jwt.InvalidTokenError:
            raise NotAuthenticatedError("Recovery link is invalid or has expired")
        if payload.get("type") != "recovery":
            raise NotAuthenticatedError("Recovery link is invalid or has expired")

        try:
            identity_id: UUID = UUID(str(payload.get("sub")))
        except ValueError:
            raise NotAuthenticatedError("Recovery link is invalid or has expired")
        identity: AuthUser | None = await auth_repository.get_identity_by_id(db, identity_id)
        if identity is None or payload.get("pwd") != _password_fingerprint(identity.password_hash):
            raise NotAuthenticatedError("Recovery link is invalid or has expired")

        await auth_repository.delete_user_refresh_tokens(db, identity.id)
        await self.update_password(db, identity, data.password)


# 싱글턴 인스턴스 / Singleton instance
auth_service: AuthService = AuthService()
