"""사용자 및 프로필 관련 Pydantic 요청/응답 스키마 정의.

User and Profile Pydantic request/response schema definitions.
Covers admin user management (create, role change, password reset) and
self-service profile management.
"""

from pydantic import BaseModel, EmailStr


# === 사용자 (User) 스키마 ===

class UserResponse(BaseModel):
    """사용자 응답 스키마.

    Attributes:
        id: 사용자 UUID (User unique identifier)
        email: 이메일 (Email address)
        name: 표시 이름, 없으면 "User" (Display name, "User" when missing)
        role: 역할 (ADMIN / MANAGER / TECHNICIAN / STAFF)
        avatar_url: 아바타 URI (Optional avatar URI)
    """

    id: str  # 사용자 UUID 문자열 (User UUID as string)
    email: str  # 이메일 (Email)
    name: str  # 표시 이름 (Display name)
    role: str  # 역할 / 알 수 없는 값은 STAFF (Unknown roles read as STAFF)
    avatar_url: str | None = None  # 아바타 URI (Avatar URI, optional)


class CurrentUserResponse(UserResponse):
    """현재 사용자 응답 — 역할 기준 허용 동작 포함.

    Attributes:
        permitted_actions: 역할만으로 허용된 동작 (Actions granted by role, for UI gating)
    """

    permitted_actions: list[str] = []


class AdminUserCreate(BaseModel):
    """사용자 생성 요청 스키마 (관리자용).

    User creation request schema (admin-only operation).
    Creating a user never replaces the calling admin's own session.

    Attributes:
        email: 로그인 이메일 (Login email, unique)
        password: 비밀번호 (Plain text, at least 6 chars)
        full_name: 표시 이름 (Display name)
        role: 부여할 역할 (Role to grant, default STAFF)
    """

    email: EmailStr
    password: str
    full_name: str
    role: str = "STAFF"


class RoleUpdate(BaseModel):
    """역할 변경 요청 스키마 (관리자용)."""

    role: str  # 새 역할 (ADMIN / MANAGER / TECHNICIAN / STAFF)


class PasswordReset(BaseModel):
    """관리자 비밀번호 재설정 요청 스키마."""

    new_password: str


# === 프로필 (Profile) 스키마 ===

class ProfileUpdate(BaseModel):
    """본인 프로필 업데이트 스키마 — 이름만 변경 가능.

    Self-service profile update schema. Email is not editable here.
    """

    full_name: str  # 변경할 표시 이름 (New display name)


class PasswordChange(BaseModel):
    """본인 비밀번호 변경 요청 스키마.

    Attributes:
        new_password: 새 비밀번호 (New password, at least 6 chars)
        confirm_password: 확인 입력 (Confirmation, must match)
    """

    new_password: str
    confirm_password: str
