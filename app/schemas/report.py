"""리포트 관련 Pydantic 응답 스키마 정의.

Report response schemas: dashboard statistics and the date-range
performance report.
"""

from datetime import date

from pydantic import BaseModel, Field

from app.schemas.issue import IssueResponse


class DashboardStats(BaseModel):
    """상태별/우선순위별 이슈 수 (4 status buckets and 4 priority buckets)."""

    total: int
    by_status: dict[str, int]
    by_priority: dict[str, int]


class DashboardResponse(BaseModel):
    """대시보드 응답 — 통계와 최근 수정된 이슈 5건.

    Attributes:
        stats: 상태/우선순위 집계 (Counts within the caller's scope)
        recent_issues: 최근 수정 순 5건 (Five most recently updated issues)
        refresh_interval_seconds: 클라이언트 폴링 주기 (Client poll interval)
    """

    stats: DashboardStats
    recent_issues: list[IssueResponse]
    refresh_interval_seconds: int


class DailyCount(BaseModel):
    day: date = Field(serialization_alias="date")  # 로컬 달력 일자 (Local calendar day)
    label: str  # 차트 라벨, 예: "Mar 5" (Chart label)
    count: int


class StatusSlice(BaseModel):
    status: str
    label: str  # Resolved / In Progress / Open / Closed
    count: int


class RangeReportResponse(BaseModel):
    """기간 리포트 응답.

    Attributes:
        total: 기간 내 이슈 수 (Issues created within the range)
        resolved: RESOLVED + CLOSED 수 (Resolved or closed)
        open: OPEN 수 (OPEN only)
        resolution_rate: 해결률 % 정수, total=0이면 0 (Rounded percentage)
        daily: 기간 내 모든 날짜의 일별 건수 (Dense per-day series)
        status_breakdown: 0건 제외 상태 분포 (Sparse status distribution)
    """

    start_date: date
    end_date: date
    total: int
    resolved: int
    open: int
    resolution_rate: int
    daily: list[DailyCount]
    status_breakdown: list[StatusSlice]
