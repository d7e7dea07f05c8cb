"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - users: 사용자 관리 (User management: list, create, role, password, delete)
"""

from fastapi import APIRouter

from app.api.admin.users import router as users_router

admin_router: APIRouter = APIRouter()

admin_router.include_router(users_router, prefix="/users", tags=["Admin Users"])
