"""프로필 라우터 — 본인 프로필 조회/이름 변경/비밀번호 변경 API.

Profile Router — API endpoints for the current user's own profile.
Renaming and password change are admin-only.
Follows 3-layer architecture: Router → Service → Repository.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor, get_current_identity, get_current_user
from app.database import get_db
from app.models.auth import AuthUser
from app.schemas.common import MessageResponse
from app.schemas.user import PasswordChange, ProfileUpdate, UserResponse
from app.services.permission_service import Actor
from app.services.profile_service import profile_service

router: APIRouter = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_my_profile(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
) -> UserResponse:
    """내 프로필을 조회합니다.

    Get the current user's profile.
    """
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_my_profile(
    data: ProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[AuthUser, Depends(get_current_identity)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> UserResponse:
    """내 이름을 변경합니다 (관리자 전용).

    Update the current user's display name. Admin only.

    Args:
        data: 새 이름 (New name)
        db: 비동기 데이터베이스 세션 (Async database session)
        identity: 인증 계정 (Authenticated identity)
        actor: 요청 주체 (Policy actor)

    Returns:
        UserResponse: 업데이트된 프로필 정보 (Updated profile information)
    """
    result: UserResponse = await profile_service.update_own_profile(db, actor, identity, data)
    await db.commit()
    return result


@router.put("/profile/password", response_model=MessageResponse)
async def change_my_password(
    data: PasswordChange,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[AuthUser, Depends(get_current_identity)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> MessageResponse:
    """내 비밀번호를 변경합니다 (관리자 전용)."""
    await profile_service.change_own_password(db, actor, identity, data)
    await db.commit()
    return MessageResponse(message="Password updated successfully")
