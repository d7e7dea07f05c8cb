"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 및 라우터 등록.

FastAPI application entry point — Middleware and router registration.
Configures logging, CORS, health check, the recovery-mail subscription
and includes the app and admin routers.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.services.auth_events import Subscription, auth_events
from app.utils.email import send_recovery_email

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """복구 메일 발송기를 인증 이벤트에 구독하고 종료 시 해제.

    Subscribes the recovery-mail sender to auth events on startup and
    releases the subscription on shutdown.
    """
    subscription: Subscription = auth_events.subscribe(send_recovery_email)
    try:
        yield
    finally:
        subscription.unsubscribe()


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Axiom API 로깅 미들웨어 / Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 / Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 / Router registration
# ---------------------------------------------------------------------------
# app_router: auth, profile, issues, ai, reports
# admin_router: users
from app.api.admin import admin_router  # noqa: E402
from app.api.app import app_router  # noqa: E402

app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(app_router, prefix="/api/v1")
