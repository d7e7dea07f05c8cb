"""사용자 관리 서비스 — 관리자 전용 사용자 생성/역할/비밀번호/삭제.

User Service — Admin user management: list, create (without touching the
admin's own session), role change, password reset and deletion. Password
reset and deletion go through privileged server-side procedures.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.auth import AuthUser
from app.models.enums import UserRole
from app.models.profile import Profile
from app.repositories.auth_repository import auth_repository
from app.repositories.profile_repository import profile_repository
from app.schemas.user import AdminUserCreate, UserResponse
from app.services.auth_service import auth_service
from app.services.mappers import map_identity, map_profile
from app.services.permission_service import Action, Actor, ensure
from app.utils.exceptions import NotFoundError, PermissionDeniedError, ValidationFailedError
from app.utils.password import validate_new_password


def parse_role(raw: str) -> UserRole:
    """요청의 역할 문자열 검증 — 쓰기 경로에서는 알 수 없는 값 거부.

    Unlike reads, writes never coerce: an unknown role is a validation error.
    """
    try:
        return UserRole(raw.strip().upper())
    except ValueError:
        raise ValidationFailedError(f"Unknown role: {raw}")


class UserService:
    """사용자 관리 비즈니스 로직."""

    async def list_users(self, db: AsyncSession) -> list[UserResponse]:
        """이름순 전체 사용자 (All users ordered by name)."""
        profiles: Sequence[Profile] = await profile_repository.list_by_name(db)
        return [map_profile(p) for p in profiles]

    async def list_technicians(self, db: AsyncSession) -> list[UserResponse]:
        """담당자로 지정 가능한 사용자 — TECHNICIAN 역할."""
        profiles: Sequence[Profile] = await profile_repository.list_by_name(
            db, role=UserRole.TECHNICIAN.value
        )
        return [map_profile(p) for p in profiles]

    async def create_user_as_admin(
        self,
        db: AsyncSession,
        actor: Actor,
        data: AdminUserCreate,
    ) -> UserResponse:
        """관리자가 새 사용자를 생성합니다.

        The new identity is created without a session, so the calling
        admin's own session is left exactly as it was.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 요청 관리자 (Requesting admin)
            data: 생성 요청 (Creation request)

        Returns:
            UserResponse: 생성된 사용자 (Created user)

        Raises:
            PermissionDeniedError: 관리자가 아님 (Not an admin)
            ValidationFailedError: 비밀번호/역할/이름 검증 실패
            DuplicateError: 이미 등록된 이메일
        """
        ensure(actor, Action.MANAGE_USERS)
        role: UserRole = parse_role(data.role)
        identity, _ = await auth_service.create_identity(
            db,
            email=data.email,
            password=data.password,
            full_name=data.full_name,
            role=role,
            issue_session=False,
        )
        profile: Profile | None = await profile_repository.get_by_id(db, identity.id)
        return map_profile(profile) if profile is not None else map_identity(identity)

    async def update_role(
        self,
        db: AsyncSession,
        actor: Actor,
        user_id: UUID,
        raw_role: str,
    ) -> UserResponse:
        """사용자 역할 변경 — 본인 역할 변경은 항상 거부 (lockout 방지).

        Raises:
            PermissionDeniedError: 본인 대상이거나 관리자가 아님
            NotFoundError: 사용자 없음
        """
        if str(user_id) == actor.id:
            raise PermissionDeniedError("You cannot change your own role")
        ensure(actor, Action.CHANGE_USER_ROLE, target_user_id=str(user_id))
        role: UserRole = parse_role(raw_role)

        profile: Profile | None = await profile_repository.update(db, user_id, {"role": role.value})
        if profile is None:
            raise NotFoundError("User not found")
        return map_profile(profile)

    async def reset_password(
        self,
        db: AsyncSession,
        actor: Actor,
        user_id: UUID,
        new_password: str,
    ) -> None:
        """다른 사용자의 비밀번호 재설정 — 정책 검사 후 권한 프로시저 호출.

        Raises:
            ValidationFailedError: 6자 미만 (Too short; checked before any store call)
            RemoteFunctionMissingError: admin_reset_password 미설치
        """
        ensure(actor, Action.RESET_USER_PASSWORD, target_user_id=str(user_id))
        validate_new_password(new_password)
        await self._require_identity(db, user_id)
        await profile_repository.admin_reset_password(db, user_id, new_password)

    async def delete_user(
        self,
        db: AsyncSession,
        actor: Actor,
        user_id: UUID,
    ) -> None:
        """사용자 삭제 — 본인 삭제는 항상 거부.

        Issue snapshot names (reporter/assignee/comment author) are left as
        they were.

        Raises:
            PermissionDeniedError: 본인 대상이거나 관리자가 아님
            NotFoundError: 사용자 없음
            RemoteFunctionMissingError: delete_user 미설치
        """
        if str(user_id) == actor.id:
            raise PermissionDeniedError("You cannot delete your own account")
        ensure(actor, Action.DELETE_USER, target_user_id=str(user_id))
        await self._require_identity(db, user_id)
        await profile_repository.delete_user(db, user_id)

    async def _require_identity(self, db: AsyncSession, user_id: UUID) -> AuthUser:
        identity: AuthUser | None = await auth_repository.get_identity_by_id(db, user_id)
        if identity is None:
            raise NotFoundError("User not found")
        return identity


# 싱글턴 인스턴스 / Singleton instance
user_service: UserService = UserService()
