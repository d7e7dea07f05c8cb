"""인증 라우터 — 회원가입, 로그인, 토큰 갱신, 로그아웃, 비밀번호 복구.

Auth Router — Sign-up, sign-in, token refresh, sign-out, password recovery
and current-user endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor, get_current_user
from app.database import get_db
from app.schemas.auth import (
    PasswordRecoveryComplete,
    PasswordRecoveryRequest,
    RefreshRequest,
    SignInRequest,
    SignUpRequest,
    TokenResponse,
)
from app.schemas.common import MessageResponse
from app.schemas.user import CurrentUserResponse, UserResponse
from app.services.auth_service import auth_service
from app.services.mappers import action_names
from app.services.permission_service import Actor, permitted_actions

router: APIRouter = APIRouter()


@router.post("/sign-up", response_model=TokenResponse, status_code=201)
async def sign_up(
    data: SignUpRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """자가 회원가입 — STAFF 계정 생성 후 세션 발급.

    Self-registration. Creates a STAFF account and signs it in.
    """
    result: TokenResponse = await auth_service.sign_up(db, data)
    await db.commit()
    return result


@router.post("/sign-in", response_model=TokenResponse)
async def sign_in(
    data: SignInRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """이메일/비밀번호 로그인."""
    result: TokenResponse = await auth_service.sign_in(db, data)
    await db.commit()
    return result


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """토큰 갱신 — 리프레시 토큰으로 새 토큰 쌍 발급.

    Refresh token endpoint. Issues a new token pair using a refresh token.
    """
    result: TokenResponse = await auth_service.refresh(db, data)
    await db.commit()
    return result


@router.post("/sign-out", status_code=204)
async def sign_out(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """로그아웃 — 리프레시 토큰 폐기.

    Sign-out endpoint. Revokes the given refresh token.
    """
    await auth_service.sign_out(db, data.refresh_token)
    await db.commit()


@router.post("/password-recovery", response_model=MessageResponse, status_code=202)
async def request_password_recovery(
    data: PasswordRecoveryRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """비밀번호 복구 메일 요청 — 등록 여부와 무관하게 같은 응답.

    Always answers the same way, registered or not.
    """
    await auth_service.request_password_recovery(db, data.email)
    return MessageResponse(message="If the email is registered, a reset link has been sent.")


@router.post("/password-recovery/complete", response_model=MessageResponse)
async def complete_password_recovery(
    data: PasswordRecoveryComplete,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """복구 토큰으로 새 비밀번호 설정."""
    await auth_service.complete_password_recovery(db, data)
    await db.commit()
    return MessageResponse(message="Password updated successfully")


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> CurrentUserResponse:
    """현재 사용자 조회 — 프로필이 없으면 인증 클레임으로 대체.

    Get the current user; falls back to identity claims when the profile
    row is missing. Includes the role-level actions the client may offer.
    """
    return CurrentUserResponse(
        **current_user.model_dump(),
        permitted_actions=action_names(permitted_actions(actor)),
    )
