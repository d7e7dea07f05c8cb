"""ORM 행 → 응답 모델 변환.

Row-to-domain mapping with the tolerant defaults a partially migrated store
needs: unknown enum values are coerced, missing place reads as "Outlet",
missing reporter name as "Unknown", missing arrays as [], missing profile
name as "User", and naive timestamps as UTC.
"""

from typing import Any
from urllib.parse import quote

from app.models.auth import AuthUser
from app.models.enums import IssuePriority, IssueStatus, UserRole
from app.models.issue import Issue
from app.models.profile import Profile
from app.schemas.issue import Attachment, Comment, IssueResponse
from app.schemas.user import UserResponse
from app.services.permission_service import ISSUE_ACTIONS, Action, Actor, permitted_actions
from app.utils.dates import as_utc

DEFAULT_PLACE: str = "Outlet"
UNKNOWN_REPORTER: str = "Unknown"
DEFAULT_USER_NAME: str = "User"


def avatar_url(name: str) -> str:
    """이니셜 아바타 URL (Generated initials avatar)."""
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=random"


def _comment(raw: dict[str, Any]) -> Comment:
    # 저장 형식은 camelCase (stored as {id, userId, userName, content, timestamp})
    return Comment(
        id=str(raw.get("id") or ""),
        user_id=str(raw.get("userId") or raw.get("user_id") or ""),
        user_name=str(raw.get("userName") or raw.get("user_name") or UNKNOWN_REPORTER),
        content=str(raw.get("content") or ""),
        timestamp=int(raw.get("timestamp") or 0),
    )


def _attachment(raw: dict[str, Any]) -> Attachment:
    return Attachment(
        id=str(raw.get("id") or ""),
        name=str(raw.get("name") or ""),
        type=str(raw.get("type") or ""),
        data=str(raw.get("data") or ""),
    )


def map_issue(issue: Issue) -> IssueResponse:
    """이슈 행을 응답 모델로 변환합니다."""
    return IssueResponse(
        id=str(issue.id),
        title=issue.title or "",
        description=issue.description or "",
        status=IssueStatus.coerce(issue.status),
        priority=IssuePriority.coerce(issue.priority),
        category=issue.category,
        sub_category=issue.sub_category or None,
        place=issue.place or DEFAULT_PLACE,
        location=issue.location,
        reported_by=str(issue.reported_by),
        reported_by_name=issue.reported_by_name or UNKNOWN_REPORTER,
        assigned_to=str(issue.assigned_to) if issue.assigned_to else None,
        assigned_to_name=issue.assigned_to_name,
        created_at=as_utc(issue.created_at),
        updated_at=as_utc(issue.updated_at),
        comments=[_comment(c) for c in (issue.comments or []) if isinstance(c, dict)],
        attachments=[_attachment(a) for a in (issue.attachments or []) if isinstance(a, dict)],
        ai_analysis=issue.ai_analysis,
    )


def action_names(actions: frozenset[Action]) -> list[str]:
    return sorted(action.value for action in actions)


def with_permissions(issue: IssueResponse, actor: Actor) -> IssueResponse:
    """주체 기준 허용 동작을 붙인 사본 (Copy carrying the caller's permitted issue actions)."""
    actions: frozenset[Action] = permitted_actions(actor, owner_id=issue.reported_by) & ISSUE_ACTIONS
    return issue.model_copy(update={"permitted_actions": action_names(actions)})


def map_profile(profile: Profile) -> UserResponse:
    return UserResponse(
        id=str(profile.id),
        email=profile.email,
        name=profile.full_name or DEFAULT_USER_NAME,
        role=UserRole.coerce(profile.role).value,
        avatar_url=profile.avatar_url,
    )


def map_identity(identity: AuthUser) -> UserResponse:
    """프로필이 없을 때 인증 클레임으로 사용자 구성 (metadata fallback)."""
    metadata: dict[str, Any] = identity.user_metadata or {}
    return UserResponse(
        id=str(identity.id),
        email=identity.email or "",
        name=metadata.get("full_name") or DEFAULT_USER_NAME,
        role=UserRole.coerce(metadata.get("role")).value,
        avatar_url=metadata.get("avatar_url"),
    )
