"""대시보드 통계 및 기간 리포트 집계.

Dashboard statistics and date-range report aggregation. Day bucketing uses
the same local calendar as the single-day list filter.
"""

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from zoneinfo import ZoneInfo

from app.models.enums import IssuePriority, IssueStatus
from app.schemas.issue import IssueResponse
from app.schemas.report import DailyCount, DashboardStats, RangeReportResponse, StatusSlice
from app.utils.dates import local_day

RESOLVED_STATUSES: frozenset[IssueStatus] = frozenset({IssueStatus.RESOLVED, IssueStatus.CLOSED})

# 파이 차트 순서와 라벨 / Pie chart order and labels
_BREAKDOWN_LABELS: list[tuple[IssueStatus, str]] = [
    (IssueStatus.RESOLVED, "Resolved"),
    (IssueStatus.IN_PROGRESS, "In Progress"),
    (IssueStatus.OPEN, "Open"),
    (IssueStatus.CLOSED, "Closed"),
]

RECENT_LIMIT: int = 5


def dashboard_stats(issues: Sequence[IssueResponse]) -> DashboardStats:
    """상태 4종, 우선순위 4종 버킷 집계 (zero buckets included)."""
    statuses: Counter = Counter(issue.status for issue in issues)
    priorities: Counter = Counter(issue.priority for issue in issues)
    return DashboardStats(
        total=len(issues),
        by_status={status.value: statuses.get(status, 0) for status in IssueStatus},
        by_priority={priority.value: priorities.get(priority, 0) for priority in IssuePriority},
    )


def recent_issues(issues: Iterable[IssueResponse], limit: int = RECENT_LIMIT) -> list[IssueResponse]:
    return sorted(issues, key=lambda issue: issue.updated_at, reverse=True)[:limit]


def resolution_rate(resolved: int, total: int) -> int:
    """해결률 — 반올림 정수 %, total=0이면 0 (round half up)."""
    if total <= 0:
        return 0
    return math.floor(resolved * 100 / total + 0.5)


def issues_in_range(
    issues: Iterable[IssueResponse],
    start: date,
    end: date,
    tz: ZoneInfo | None = None,
) -> list[IssueResponse]:
    """생성 로컬 일자가 [start, end]에 속하는 이슈 (inclusive on both ends)."""
    return [issue for issue in issues if start <= local_day(issue.created_at, tz) <= end]


def daily_series(
    issues: Iterable[IssueResponse],
    start: date,
    end: date,
    tz: ZoneInfo | None = None,
) -> list[DailyCount]:
    """기간 내 모든 날짜의 건수 — 0건인 날 포함 (dense series)."""
    counts: Counter = Counter(local_day(issue.created_at, tz) for issue in issues)
    series: list[DailyCount] = []
    day: date = start
    while day <= end:
        series.append(DailyCount(day=day, label=f"{day:%b} {day.day}", count=counts.get(day, 0)))
        day += timedelta(days=1)
    return series


def status_breakdown(issues: Iterable[IssueResponse]) -> list[StatusSlice]:
    """상태 분포 — 0건 버킷 제외 (sparse)."""
    counts: Counter = Counter(issue.status for issue in issues)
    return [
        StatusSlice(status=status.value, label=label, count=counts[status])
        for status, label in _BREAKDOWN_LABELS
        if counts.get(status, 0) > 0
    ]


def range_report(
    issues: Iterable[IssueResponse],
    start: date,
    end: date,
    tz: ZoneInfo | None = None,
) -> RangeReportResponse:
    """기간 리포트 계산.

    Compute the range report over issues already restricted to the caller's
    scope.

    Args:
        issues: 범위 적용된 이슈 (Scoped issues)
        start: 시작일, 포함 (First calendar day, inclusive)
        end: 종료일, 포함 (Last calendar day, inclusive)
        tz: 일자 계산 시간대 (Time zone for day bucketing)

    Returns:
        RangeReportResponse: 합계, 해결률, 일별 건수, 상태 분포
    """
    in_range: list[IssueResponse] = issues_in_range(issues, start, end, tz)
    total: int = len(in_range)
    resolved: int = sum(1 for issue in in_range if issue.status in RESOLVED_STATUSES)
    open_count: int = sum(1 for issue in in_range if issue.status is IssueStatus.OPEN)
    return RangeReportResponse(
        start_date=start,
        end_date=end,
        total=total,
        resolved=resolved,
        open=open_count,
        resolution_rate=resolution_rate(resolved, total),
        daily=daily_series(in_range, start, end, tz),
        status_breakdown=status_breakdown(in_range),
    )
