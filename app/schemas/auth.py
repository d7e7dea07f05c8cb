"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers sign-up, sign-in, token issuance/refresh, sign-out and password
recovery.
"""

from pydantic import BaseModel, EmailStr


class SignUpRequest(BaseModel):
    """자가 회원가입 요청 스키마.

    Self-registration request schema. New accounts always start as STAFF;
    only an admin can grant another role.

    Attributes:
        email: 로그인 이메일 (Login email, globally unique)
        password: 비밀번호 (Plain text, bcrypt-hashed on server, at least 6 chars)
        full_name: 표시 이름 (Display name)
    """

    email: EmailStr  # 로그인 이메일 (Login email)
    password: str  # 비밀번호 / 평문, 서버에서 bcrypt 해싱 (Plain text, server hashes with bcrypt)
    full_name: str  # 표시 이름 (Display name)


class SignInRequest(BaseModel):
    """이메일/비밀번호 로그인 요청 스키마.

    Attributes:
        email: 로그인 이메일 (Login email)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema.
    Returned after successful sign-in, sign-up or token refresh.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str  # JWT 액세스 토큰 / 만료: 60분 기본 (Access token, default TTL: 60min)
    refresh_token: str  # JWT 리프레시 토큰 / 만료: 7일 기본 (Refresh token, default TTL: 7 days)
    token_type: str = "bearer"  # 토큰 유형 / 항상 "bearer" (Token type for Authorization header)


class RefreshRequest(BaseModel):
    """토큰 갱신/로그아웃 요청 스키마.

    Exchanges a refresh token for a new pair, or revokes it on sign-out.
    """

    refresh_token: str  # 기존 리프레시 토큰 (Current refresh token)


class PasswordRecoveryRequest(BaseModel):
    """비밀번호 복구 메일 요청 스키마."""

    email: EmailStr


class PasswordRecoveryComplete(BaseModel):
    """비밀번호 복구 완료 요청 스키마.

    Attributes:
        token: 메일로 받은 복구 토큰 (Recovery token from the reset link)
        password: 새 비밀번호 (New password)
        confirm_password: 새 비밀번호 확인 (Must equal password)
    """

    token: str
    password: str
    confirm_password: str
