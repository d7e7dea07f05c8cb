"""비밀번호 해싱, 검증 및 정책 검사 유틸리티 모듈.

Password hashing, verification and policy utilities.
Uses bcrypt directly; passwords are never stored in plain text.
Policy checks run before any database call.
"""

import bcrypt

from app.config import settings
from app.utils.exceptions import ValidationFailedError


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다 (salted, ~60 chars)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 bcrypt 해시를 비교 검증합니다 (constant-time)."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


def validate_new_password(password: str, confirm: str | None = None) -> None:
    """새 비밀번호 정책 검사 — 불일치, 최소 길이.

    Validate a new password before it reaches the repository layer.

    Args:
        password: 새 비밀번호 (New password)
        confirm: 확인 입력, None이면 불일치 검사 생략 (Confirmation; None skips the match check)

    Raises:
        ValidationFailedError: 불일치 또는 길이 부족 (Mismatch or too short)
    """
    if confirm is not None and password != confirm:
        raise ValidationFailedError("Passwords do not match")
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationFailedError(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )
