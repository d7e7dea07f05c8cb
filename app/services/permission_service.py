"""권한 정책 — (역할, 소유 관계) → 허용 동작 매핑.

Access policy — Pure functions mapping (actor role, actor id, resource
ownership) to permitted actions. No database access; the same rules are
exposed to clients for UI gating and enforced by the API on every request.

Rule table:
    | Action               | ADMIN | MANAGER | TECHNICIAN | STAFF        |
    |----------------------|-------|---------|------------|--------------|
    | VIEW_ALL_ISSUES      | yes   | yes     | yes        | own only     |
    | CREATE_ISSUE         | yes   | yes     | no         | yes          |
    | EDIT_ISSUE           | yes   | no      | no         | if reporter  |
    | EDIT_OWN_PROFILE     | yes   | no      | no         | no           |
    | CHANGE_OWN_PASSWORD  | yes   | no      | no         | no           |
    | CHANGE_ISSUE_STATUS  | yes   | yes     | yes        | no           |
    | ASSIGN_TECHNICIAN    | yes   | yes     | no         | no           |
    | ASSIGN_TO_SELF       | yes   | no      | no         | no           |
    | DELETE_ISSUE         | yes   | no      | yes        | no           |
    | REQUEST_AI_ANALYSIS  | yes   | yes     | yes        | no           |
    | MANAGE_USERS         | yes   | no      | no         | no           |

Changing one's own role and deleting one's own account are rejected for
every role, admins included.
"""

from dataclasses import dataclass
from enum import Enum

from app.models.enums import UserRole
from app.utils.exceptions import PermissionDeniedError


class Action(str, Enum):
    VIEW_ALL_ISSUES = "VIEW_ALL_ISSUES"
    VIEW_ISSUE = "VIEW_ISSUE"
    COMMENT_ON_ISSUE = "COMMENT_ON_ISSUE"
    CREATE_ISSUE = "CREATE_ISSUE"
    EDIT_ISSUE = "EDIT_ISSUE"
    EDIT_OWN_PROFILE = "EDIT_OWN_PROFILE"
    CHANGE_OWN_PASSWORD = "CHANGE_OWN_PASSWORD"
    CHANGE_ISSUE_STATUS = "CHANGE_ISSUE_STATUS"
    ASSIGN_TECHNICIAN = "ASSIGN_TECHNICIAN"
    ASSIGN_TO_SELF = "ASSIGN_TO_SELF"
    DELETE_ISSUE = "DELETE_ISSUE"
    REQUEST_AI_ANALYSIS = "REQUEST_AI_ANALYSIS"
    MANAGE_USERS = "MANAGE_USERS"
    CHANGE_USER_ROLE = "CHANGE_USER_ROLE"
    RESET_USER_PASSWORD = "RESET_USER_PASSWORD"
    DELETE_USER = "DELETE_USER"


@dataclass(frozen=True)
class Actor:
    """요청 주체 (The user performing an action)."""

    id: str
    role: UserRole


# 역할별 무조건 허용 동작 / Actions granted by role alone
_ROLE_GRANTS: dict[UserRole, frozenset[Action]] = {
    UserRole.ADMIN: frozenset({
        Action.VIEW_ALL_ISSUES, Action.CREATE_ISSUE, Action.EDIT_ISSUE,
        Action.EDIT_OWN_PROFILE, Action.CHANGE_OWN_PASSWORD,
        Action.CHANGE_ISSUE_STATUS, Action.ASSIGN_TECHNICIAN,
        Action.ASSIGN_TO_SELF, Action.DELETE_ISSUE, Action.MANAGE_USERS,
        Action.RESET_USER_PASSWORD,
        Action.REQUEST_AI_ANALYSIS,
    }),
    UserRole.MANAGER: frozenset({
        Action.VIEW_ALL_ISSUES, Action.CREATE_ISSUE,
        Action.CHANGE_ISSUE_STATUS, Action.ASSIGN_TECHNICIAN, Action.REQUEST_AI_ANALYSIS,
    }),
    UserRole.TECHNICIAN: frozenset({
        Action.VIEW_ALL_ISSUES, Action.CHANGE_ISSUE_STATUS, Action.DELETE_ISSUE,
        Action.REQUEST_AI_ANALYSIS,
    }),
    UserRole.STAFF: frozenset({
        Action.CREATE_ISSUE,
    }),
}

# 이슈 응답에 포함되는 동작 / Actions reported on each issue for UI gating
ISSUE_ACTIONS: frozenset[Action] = frozenset({
    Action.VIEW_ISSUE, Action.COMMENT_ON_ISSUE, Action.EDIT_ISSUE,
    Action.CHANGE_ISSUE_STATUS, Action.ASSIGN_TECHNICIAN, Action.ASSIGN_TO_SELF,
    Action.DELETE_ISSUE, Action.REQUEST_AI_ANALYSIS,
})

# 대상 사용자가 본인이면 항상 거부 / Never allowed against one's own account
_SELF_FORBIDDEN: frozenset[Action] = frozenset({Action.CHANGE_USER_ROLE, Action.DELETE_USER})


def can(
    actor: Actor,
    action: Action,
    *,
    owner_id: str | None = None,
    target_user_id: str | None = None,
) -> bool:
    """주체가 동작을 수행할 수 있는지 판단합니다.

    Decide whether the actor may perform the action.

    Args:
        actor: 요청 주체 (Actor performing the action)
        action: 검사할 동작 (Action to check)
        owner_id: 대상 이슈의 보고자 ID (Reporter id of the target issue, if any)
        target_user_id: 대상 사용자 ID (Target user id for user management)

    Returns:
        bool: 허용 여부 (Whether the action is permitted)
    """
    grants: frozenset[Action] = _ROLE_GRANTS.get(actor.role, frozenset())
    is_owner: bool = owner_id is not None and owner_id == actor.id

    if action in _SELF_FORBIDDEN:
        if target_user_id is not None and target_user_id == actor.id:
            return False
        return Action.MANAGE_USERS in grants
    if action in (Action.VIEW_ISSUE, Action.COMMENT_ON_ISSUE):
        return Action.VIEW_ALL_ISSUES in grants or is_owner
    if action is Action.EDIT_ISSUE:
        return action in grants or (actor.role is UserRole.STAFF and is_owner)
    return action in grants


def permitted_actions(
    actor: Actor,
    *,
    owner_id: str | None = None,
    target_user_id: str | None = None,
) -> frozenset[Action]:
    """주체에게 허용된 모든 동작 (Every action the actor may perform on the resource)."""
    return frozenset(
        action
        for action in Action
        if can(actor, action, owner_id=owner_id, target_user_id=target_user_id)
    )


def ensure(
    actor: Actor,
    action: Action,
    *,
    owner_id: str | None = None,
    target_user_id: str | None = None,
    detail: str = "Insufficient permissions",
) -> None:
    """허용되지 않으면 PermissionDeniedError (403) 발생."""
    if not can(actor, action, owner_id=owner_id, target_user_id=target_user_id):
        raise PermissionDeniedError(detail)
