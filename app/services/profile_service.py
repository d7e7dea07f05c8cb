"""프로필 서비스 — 현재 사용자 프로필 조회/수정 비즈니스 로직.

Profile Service — Business logic for the current user's own profile:
rename (admin only) and password change (admin only).
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.auth import AuthUser
from app.models.profile import Profile
from app.repositories.profile_repository import profile_repository
from app.schemas.user import PasswordChange, ProfileUpdate, UserResponse
from app.services.auth_events import AuthEvent, AuthEventType
from app.services.auth_service import auth_service
from app.services.mappers import avatar_url, map_identity, map_profile
from app.services.permission_service import Action, Actor, ensure
from app.utils.exceptions import ValidationFailedError


class ProfileService:
    """프로필 관련 비즈니스 로직을 처리하는 서비스.

    Service handling profile business logic.
    Provides update operations for the current user's own profile.
    """

    async def update_own_profile(
        self,
        db: AsyncSession,
        actor: Actor,
        identity: AuthUser,
        data: ProfileUpdate,
    ) -> UserResponse:
        """본인 이름 변경 — 관리자만 허용.

        Rename the current user. The identity metadata claims are updated
        too so the session stays in sync; issues and comments keep the old
        name snapshot.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 요청 주체 (Requesting actor)
            identity: 현재 인증 계정 (Current identity)
            data: 새 이름 (New name)

        Returns:
            UserResponse: 수정된 프로필 (Updated profile)

        Raises:
            PermissionDeniedError: 관리자가 아님 (Not an admin)
            ValidationFailedError: 빈 이름 (Blank name)
        """
        ensure(actor, Action.EDIT_OWN_PROFILE)
        name: str = data.full_name.strip()
        if not name:
            raise ValidationFailedError("Name is required")

        profile: Profile | None = await profile_repository.update(
            db, identity.id, {"full_name": name}
        )
        if profile is None:
            # 프로필 미생성 계정은 인증 클레임으로 생성 (provision from identity claims)
            fallback: UserResponse = map_identity(identity)
            profile = await profile_repository.create(
                db,
                {
                    "id": identity.id,
                    "email": identity.email,
                    "full_name": name,
                    "role": fallback.role,
                    "avatar_url": fallback.avatar_url or avatar_url(name),
                },
            )

        metadata: dict[str, Any] = dict(identity.user_metadata or {})
        metadata["full_name"] = name
        # JSON 컬럼 변경 감지를 위해 새 dict 할당 (reassign so the change is tracked)
        identity.user_metadata = metadata
        await db.flush()
        await auth_service.events.emit(
            AuthEvent(AuthEventType.USER_UPDATED, user_id=str(identity.id), email=identity.email)
        )
        return map_profile(profile)

    async def change_own_password(
        self,
        db: AsyncSession,
        actor: Actor,
        identity: AuthUser,
        data: PasswordChange,
    ) -> None:
        """본인 비밀번호 변경 — 관리자만 허용, 불일치/길이 검사 선행."""
        ensure(actor, Action.CHANGE_OWN_PASSWORD)
        await auth_service.update_password(
            db, identity, data.new_password, data.confirm_password
        )


# 싱글턴 인스턴스 / Singleton instance
profile_service: ProfileService = ProfileService()
