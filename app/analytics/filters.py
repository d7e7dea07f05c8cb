"""이슈 필터 — 범위, 보기, 검색, 패싯, 날짜.

Issue filters over an in-memory list. Filters compose by logical AND in
this order: scope (role/ownership), view, search, facets, creation day.
"""

from collections.abc import Iterable
from datetime import date
from enum import Enum
from zoneinfo import ZoneInfo

from app.schemas.issue import IssueResponse
from app.services.permission_service import Action, Actor, can
from app.utils.dates import local_day

# 패싯 와일드카드 / Facet wildcard
ALL: str = "ALL"


class IssueView(str, Enum):
    ALL = "ALL"
    ASSIGNED_TO_ME = "ASSIGNED_TO_ME"
    MY_REPORTS = "MY_REPORTS"


def scope_issues(issues: Iterable[IssueResponse], actor: Actor) -> list[IssueResponse]:
    """주체가 볼 수 있는 이슈만 반환 (STAFF는 본인 보고 건만).

    ADMIN/MANAGER/TECHNICIAN see everything; anyone else sees only the
    issues they reported.
    """
    if can(actor, Action.VIEW_ALL_ISSUES):
        return list(issues)
    return [issue for issue in issues if issue.reported_by == actor.id]


def apply_view(
    issues: Iterable[IssueResponse],
    view: IssueView,
    actor_id: str,
) -> list[IssueResponse]:
    if view is IssueView.ASSIGNED_TO_ME:
        return [issue for issue in issues if issue.assigned_to == actor_id]
    if view is IssueView.MY_REPORTS:
        return [issue for issue in issues if issue.reported_by == actor_id]
    return list(issues)


def matches_search(issue: IssueResponse, term: str) -> bool:
    """대소문자 무시 부분 일치 — 제목, 설명, ID, 보고자 이름, 하위 카테고리.

    Case-insensitive substring match against title, description, id,
    reporter name and sub-category. The term is trimmed first, so a blank or
    whitespace-only term matches everything.
    """
    needle: str = term.strip().lower()
    if not needle:
        return True
    haystacks: list[str] = [
        issue.title,
        issue.description,
        issue.id,
        issue.reported_by_name,
    ]
    if issue.sub_category:
        haystacks.append(issue.sub_category)
    return any(needle in value.lower() for value in haystacks)


def _facet_matches(value: str | None, wanted: str | None) -> bool:
    if wanted is None or wanted == ALL:
        return True
    return value == wanted


def filter_issues(
    issues: Iterable[IssueResponse],
    actor: Actor,
    *,
    view: IssueView = IssueView.ALL,
    search: str = "",
    status: str | None = ALL,
    location: str | None = ALL,
    place: str | None = ALL,
    created_on: date | None = None,
    tz: ZoneInfo | None = None,
) -> list[IssueResponse]:
    """모든 필터를 순서대로 적용합니다.

    Apply scope, view, search, facet and date filters. Input order is
    preserved, so a list sorted by updated_at stays sorted.

    Args:
        issues: 전체 이슈 목록 (Every issue in the store)
        actor: 요청 주체 (Actor whose scope applies)
        view: ALL / ASSIGNED_TO_ME / MY_REPORTS
        search: 검색어 (Search term, blank disables)
        status: 상태 패싯, "ALL"이면 전체 (Status facet)
        location: 지점 패싯 (Branch facet)
        place: 장소 패싯 (Place facet)
        created_on: 생성 로컬 일자 (Local calendar day of creation)
        tz: 일자 계산 시간대, None이면 설정값 (Time zone for day bucketing)

    Returns:
        list[IssueResponse]: 필터링된 이슈 (Filtered issues)
    """
    result: list[IssueResponse] = apply_view(scope_issues(issues, actor), view, actor.id)
    return [
        issue
        for issue in result
        if matches_search(issue, search)
        and _facet_matches(issue.status.value, status)
        and _facet_matches(issue.location, location)
        and _facet_matches(issue.place, place)
        and (created_on is None or local_day(issue.created_at, tz) == created_on)
    ]
