"""앱 API 라우터 패키지 — 모든 앱 엔드포인트 통합.

App API Router package — Aggregates all signed-in user endpoints
into a single router for inclusion in the FastAPI application.

Included routers (Accounts):
    - auth: 인증 및 회원가입, 비밀번호 복구 (Authentication, sign-up, recovery)
    - profile: 내 프로필 조회/수정 (My profile read/update)

Included routers (Issues):
    - issues: 이슈 목록/상세/생성/수정/배정/코멘트 (Issue lifecycle)
    - ai: AI Smart-Fill

Included routers (Reports):
    - reports: 대시보드, 기간 리포트, CSV/XLSX (Dashboard, range report, exports)
"""

from fastapi import APIRouter

# Accounts 라우터 임포트
from app.api.app.auth import router as auth_router
from app.api.app.profile import router as profile_router

# Issues 라우터 임포트
from app.api.app.issues import router as issues_router
from app.api.app.ai import router as ai_router

# Reports 라우터 임포트
from app.api.app.reports import router as reports_router

app_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# Accounts 라우터 등록 / Register account routers
# ---------------------------------------------------------------------------
app_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
# 프로필: /profile 엔드포인트 (GET/PUT my profile)
app_router.include_router(profile_router, tags=["Profile"])

# ---------------------------------------------------------------------------
# Issues 라우터 등록 / Register issue routers
# ---------------------------------------------------------------------------
app_router.include_router(issues_router, prefix="/issues", tags=["Issues"])
app_router.include_router(ai_router, prefix="/ai", tags=["AI"])

# ---------------------------------------------------------------------------
# Reports 라우터 등록 / Register report routers
# ---------------------------------------------------------------------------
app_router.include_router(reports_router, prefix="/reports", tags=["Reports"])
