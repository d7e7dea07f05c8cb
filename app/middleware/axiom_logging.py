"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Captures request/response data and sends structured logs to Axiom.
Logs: API endpoint, method, data (body/params), status code, error reason.
Sensitive fields (password, token, secret) are masked and long strings
such as base64 attachment data are truncated.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

logger = logging.getLogger("issue-tracker.http")

# 마스킹 대상 필드 패턴 / Fields to mask in request/response bodies
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 / Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# 문자열 최대 길이 / Longest string kept in a log event (attachment data URLs exceed it)
MAX_VALUE_LENGTH: int = 500
MAX_DEPTH: int = 5
MAX_LIST_ITEMS: int = 20


def _truncate(value: Any, max_len: int = MAX_VALUE_LENGTH) -> Any:
    """로그 크기 제한 — Truncate large strings to prevent oversized logs."""
    if isinstance(value, str) and len(value) > max_len:
        return value[:max_len] + f"...(truncated {len(value) - max_len} chars)"
    return value


def scrub(data: Any, depth: int = 0) -> Any:
    """민감 필드 마스킹 및 긴 값 절단.

    Recursively mask sensitive keys and truncate long strings in dicts
    and lists.
    """
    if depth > MAX_DEPTH:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else scrub(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [scrub(item, depth + 1) for item in data[:MAX_LIST_ITEMS]]
    return _truncate(data)


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs all API requests and responses to Axiom.
    Captures: method, path, query params, request body, status code, error detail.
    Passes requests straight through when Axiom is not configured.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 제외 경로 스킵 / Skip excluded paths
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        # Axiom 미설정시 패스스루 / Pass through if Axiom not configured
        if not self._client:
            return await call_next(request)

        start_time = time.time()

        method = request.method
        path = request.url.path
        query_params = dict(request.query_params) if request.query_params else None
        path_params = dict(request.path_params) if request.path_params else None

        # Request body 읽기 / Read request body (only for methods with body)
        request_body: Any = None
        if method in ("POST", "PUT", "PATCH"):
            try:
                body_bytes = await request.body()
                if body_bytes:
                    request_body = scrub(json.loads(body_bytes))
            except (json.JSONDecodeError, UnicodeDecodeError):
                request_body = "(non-json body)"

        error_detail: str | None = None
        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code

            # 에러 응답시 body에서 사유 추출 / Extract error detail from error responses
            if status_code >= 400:
                resp_body = b""
                async for chunk in response.body_iterator:
                    if isinstance(chunk, bytes):
                        resp_body += chunk
                    else:
                        resp_body += chunk.encode("utf-8")

                try:
                    error_data = json.loads(resp_body)
                    error_detail = _truncate(str(error_data.get("detail", error_data)))
                except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
                    error_detail = resp_body.decode("utf-8", errors="replace")[:MAX_VALUE_LENGTH]

                # 소비한 body를 다시 응답으로 반환 / Re-wrap consumed body
                response = Response(
                    content=resp_body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            error_detail = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            duration_ms = round((time.time() - start_time) * 1000, 2)

            log_event: dict[str, Any] = {
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
            }
            if query_params:
                log_event["query_params"] = scrub(query_params)
            if path_params:
                log_event["path_params"] = path_params
            if request_body is not None:
                log_event["request_body"] = request_body
            if error_detail:
                log_event["error"] = error_detail

            # 로깅 실패가 요청 처리에 영향주지 않도록 / Never break a request on log failure
            try:
                self._client.ingest_events(self._dataset, [log_event])
            except Exception as exc:
                logger.warning("Axiom ingest failed: %s", exc)

        return response
