"""리포트 서비스 — 대시보드 통계, 기간 리포트, CSV/XLSX 내보내기.

Report Service — Loads the issue list once, restricts it to the caller's
scope and hands it to the pure aggregation/export functions.
"""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from app.analytics import export, reports
from app.analytics.filters import scope_issues
from app.config import settings
from app.schemas.issue import IssueResponse
from app.schemas.report import DashboardResponse, RangeReportResponse
from app.services.issue_service import issue_service
from app.services.mappers import with_permissions
from app.services.permission_service import Actor
from app.utils.dates import report_zone, utcnow
from app.utils.exceptions import NotFoundError, ValidationFailedError

NO_DATA: str = "No data available to download for this period."


def default_range() -> tuple[date, date]:
    """이번 달 1일부터 오늘까지 (first of the current local month through today)."""
    today: date = utcnow().astimezone(report_zone()).date()
    return today.replace(day=1), today


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationFailedError("Start date must be on or before end date")


class ReportService:

    async def _scoped(self, db: AsyncSession, actor: Actor) -> list[IssueResponse]:
        return scope_issues(await issue_service.load_all(db), actor)

    async def dashboard(self, db: AsyncSession, actor: Actor) -> DashboardResponse:
        """대시보드 — 범위 내 통계와 최근 수정 5건."""
        issues: list[IssueResponse] = await self._scoped(db, actor)
        return DashboardResponse(
            stats=reports.dashboard_stats(issues),
            recent_issues=[with_permissions(issue, actor) for issue in reports.recent_issues(issues)],
            refresh_interval_seconds=settings.POLL_INTERVAL_SECONDS,
        )

    async def range_report(
        self,
        db: AsyncSession,
        actor: Actor,
        start: date,
        end: date,
    ) -> RangeReportResponse:
        _check_range(start, end)
        issues: list[IssueResponse] = await self._scoped(db, actor)
        return reports.range_report(issues, start, end, report_zone())

    async def _range_issues(
        self,
        db: AsyncSession,
        actor: Actor,
        start: date,
        end: date,
    ) -> list[IssueResponse]:
        _check_range(start, end)
        in_range: list[IssueResponse] = reports.issues_in_range(
            await self._scoped(db, actor), start, end, report_zone()
        )
        if not in_range:
            raise NotFoundError(NO_DATA)
        return in_range

    async def export_csv(
        self,
        db: AsyncSession,
        actor: Actor,
        start: date,
        end: date,
    ) -> tuple[str, str]:
        """CSV 내보내기.

        Returns:
            tuple[str, str]: (파일명, BOM 포함 CSV 본문) (filename, document text)

        Raises:
            NotFoundError: 기간 내 데이터 없음 (No issues in the period)
        """
        issues: list[IssueResponse] = await self._range_issues(db, actor, start, end)
        return export.report_filename(start, end), export.build_csv(issues, report_zone())

    async def export_xlsx(
        self,
        db: AsyncSession,
        actor: Actor,
        start: date,
        end: date,
    ) -> tuple[str, bytes]:
        """Excel 내보내기 — CSV와 같은 컬럼."""
        issues: list[IssueResponse] = await self._range_issues(db, actor, start, end)
        return (
            export.report_filename(start, end, "xlsx"),
            export.build_xlsx(issues, start, end, report_zone()),
        )


# 싱글턴 인스턴스
report_service: ReportService = ReportService()
