"""도메인 열거형 — 역할, 이슈 상태, 이슈 우선순위.

Domain enumerations — User role, issue status and issue priority.
These are closed sets. Values read back from the store are coerced
(case-insensitively) and unknown values fall back to a documented default
instead of raising, so a partially migrated store still loads.
"""

from enum import Enum


class _CoercibleEnum(str, Enum):
    """저장소 값을 관대하게 해석하는 문자열 열거형 베이스."""

    @classmethod
    def default(cls) -> "_CoercibleEnum":
        raise NotImplementedError

    @classmethod
    def coerce(cls, raw: object) -> "_CoercibleEnum":
        """저장된 값을 열거형으로 변환. 인식 불가 값은 기본값.

        Coerce a stored value to a member; unknown or empty values yield the default.
        """
        if isinstance(raw, cls):
            return raw
        if raw is None:
            return cls.default()
        text = str(raw).strip().upper().replace(" ", "_")
        try:
            return cls(text)
        except ValueError:
            return cls.default()


class UserRole(_CoercibleEnum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    TECHNICIAN = "TECHNICIAN"
    STAFF = "STAFF"

    @classmethod
    def default(cls) -> "UserRole":
        return cls.STAFF


class IssueStatus(_CoercibleEnum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"

    @classmethod
    def default(cls) -> "IssueStatus":
        return cls.OPEN

    @property
    def label(self) -> str:
        """표시용 텍스트 — "IN_PROGRESS" → "IN PROGRESS"."""
        return self.value.replace("_", " ", 1)


class IssuePriority(_CoercibleEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @classmethod
    def default(cls) -> "IssuePriority":
        return cls.MEDIUM
