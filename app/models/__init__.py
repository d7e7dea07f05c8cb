"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package registers every model with the metadata,
which Alembic and relationship resolution rely on.

Modules:
    enums: 역할, 이슈 상태, 우선순위 (UserRole, IssueStatus, IssuePriority)
    auth: 인증 계정 (AuthUser identities)
    token: 리프레시 토큰 (Refresh tokens)
    profile: 사용자 프로필 (Profiles)
    issue: 이슈 티켓 (Issues)
"""

from app.models.enums import IssuePriority, IssueStatus, UserRole
from app.models.auth import AuthUser
from app.models.token import RefreshToken
from app.models.profile import Profile
from app.models.issue import Issue

__all__ = [
    "IssuePriority", "IssueStatus", "UserRole",
    "AuthUser", "RefreshToken",
    "Profile",
    "Issue",
]
