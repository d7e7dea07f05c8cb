"""관리자 사용자 라우터 — 사용자 목록/생성/역할 변경/비밀번호 재설정/삭제.

Admin User Router — User management endpoints. Every route requires the
ADMIN role; an admin can never change their own role or delete their own
account.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.user import AdminUserCreate, PasswordReset, RoleUpdate, UserResponse
from app.services.permission_service import Actor
from app.services.user_service import user_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> list[UserResponse]:
    """사용자 목록 — 이름순.

    List every user ordered by name.
    """
    return await user_service.list_users(db)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    data: AdminUserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> UserResponse:
    """새 사용자를 생성합니다.

    Create a user with a chosen role. The calling admin's session is not
    touched.

    Args:
        data: 이메일, 비밀번호, 이름, 역할 (Email, password, name, role)
        db: 비동기 데이터베이스 세션 (Async database session)
        actor: 요청 관리자 (Requesting admin)

    Returns:
        UserResponse: 생성된 사용자 (Created user)
    """
    result: UserResponse = await user_service.create_user_as_admin(db, actor, data)
    await db.commit()
    return result


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: UUID,
    data: RoleUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> UserResponse:
    """역할 변경 — 본인 역할은 변경 불가."""
    result: UserResponse = await user_service.update_role(db, actor, user_id, data.role)
    await db.commit()
    return result


@router.post("/{user_id}/password", response_model=MessageResponse)
async def reset_user_password(
    user_id: UUID,
    data: PasswordReset,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> MessageResponse:
    """다른 사용자의 비밀번호 재설정 (admin_reset_password 프로시저)."""
    await user_service.reset_password(db, actor, user_id, data.new_password)
    await db.commit()
    return MessageResponse(message="Password reset successfully")


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> None:
    """사용자 삭제 — 본인 계정은 삭제 불가."""
    await user_service.delete_user(db, actor, user_id)
    await db.commit()
