"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token creation and verification utility module.
Provides functions for creating access/refresh/recovery tokens and decoding them.

JWT Payload Structure:
    {
        "sub": "user_uuid",          # 계정 ID (Identity identifier)
        "email": "a@b.com",          # 로그인 이메일 (Login email)
        "role": "ADMIN",             # 가입 클레임의 역할 (Role claim)
        "exp": 1234567890,           # 만료 시간 UNIX timestamp (Expiration)
        "type": "access"|"refresh"|"recovery"
    }
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from app.config import settings


def _encode(data: dict[str, Any], expires_in: timedelta, token_type: str) -> str:
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + expires_in
    # jti / 같은 초에 발급된 토큰도 서로 다르게 (unique even within the same second)
    to_encode.update({"exp": expire, "type": token_type, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: dict[str, Any]) -> str:
    """JWT 액세스 토큰을 생성합니다.

    Generate a JWT access token; expires after JWT_ACCESS_TOKEN_EXPIRE_MINUTES.

    Args:
        data: JWT 페이로드 데이터 (Payload, typically {"sub", "email", "role"})

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    return _encode(data, timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES), "access")


def create_refresh_token(data: dict[str, Any]) -> str:
    """JWT 리프레시 토큰을 생성합니다 (JWT_REFRESH_TOKEN_EXPIRE_DAYS)."""
    return _encode(data, timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS), "refresh")


def create_recovery_token(data: dict[str, Any]) -> str:
    """비밀번호 복구용 단기 토큰을 생성합니다.

    Generate a short-lived password recovery token (JWT_RECOVERY_TOKEN_EXPIRE_MINUTES).
    """
    return _encode(data, timedelta(minutes=settings.JWT_RECOVERY_TOKEN_EXPIRE_MINUTES), "recovery")


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (When token is invalid)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
