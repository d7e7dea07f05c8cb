"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.
Provides reusable dependencies for resolving the current session from a
JWT and enforcing the access policy on API endpoints.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출, 없으면 401 (HTTPBearer extracts the token; missing → 401)
    3. auth_service.get_session()이 JWT를 검증하고 계정을 조회
       (get_session verifies the JWT and loads the identity)
    4. 프로필 또는 인증 클레임으로 현재 사용자 구성
       (Current user built from the profile, or identity claims as fallback)

Authorization Flow (require_action):
    1. 현재 사용자의 역할로 Actor 구성 (Actor built from the current role)
    2. 권한 정책 can()으로 동작 허용 여부 확인 (Policy check)
    3. 거부 시 403 Forbidden (403 when the policy rejects the action)
"""

from typing import Annotated, Awaitable, Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.auth import AuthUser
from app.models.enums import UserRole
from app.schemas.user import UserResponse
from app.services.auth_service import auth_service
from app.services.permission_service import Action, Actor, ensure
from app.utils.exceptions import NotAuthenticatedError

# HTTP Bearer 토큰 추출기 / 헤더 누락도 401로 처리 (missing header is reported as 401)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthUser:
    """JWT 토큰에서 현재 인증 계정을 추출합니다.

    Raises:
        NotAuthenticatedError(401): 토큰 없음, 만료, 위조, 계정 없음
    """
    if credentials is None or not credentials.credentials:
        raise NotAuthenticatedError("Authentication required")
    return await auth_service.get_session(db, credentials.credentials)


async def get_current_user(
    identity: Annotated[AuthUser, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    """현재 사용자 — 프로필 우선, 없으면 인증 클레임 (role defaults to STAFF)."""
    return await auth_service.get_current_user(db, identity)


async def get_actor(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
) -> Actor:
    """정책 검사용 요청 주체 (Actor for policy checks)."""
    return Actor(id=current_user.id, role=UserRole.coerce(current_user.role))


def require_action(action: Action) -> Callable[..., Awaitable[Actor]]:
    """권한 정책 기반 의존성 팩토리.

    Dependency factory enforcing a role-level action of the access policy.
    Ownership-dependent actions are checked in the services, which know the
    resource.

    Args:
        action: 필요한 동작 (Required action)

    Returns:
        FastAPI 의존성 함수 — Actor 반환 또는 403 발생
        (FastAPI dependency that returns the Actor or raises 403)
    """
    async def _check(actor: Annotated[Actor, Depends(get_actor)]) -> Actor:
        ensure(actor, action)
        return actor
    return _check


# 편의 의존성 / Pre-configured dependencies
require_admin = require_action(Action.MANAGE_USERS)  # 관리자만 허용 (Admins only)
