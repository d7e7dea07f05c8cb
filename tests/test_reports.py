"""리포트 테스트 — 대시보드 통계, 해결률, 일별 건수, 상태 분포, 리포트 API.

Report tests — Dashboard statistics, resolution rate, daily series and
status breakdown, plus the report and download endpoints.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from httpx import AsyncClient

from app.analytics import reports
from app.models.enums import IssuePriority, IssueStatus
from tests.conftest import auth_header, make_issue, make_record

COLOMBO = ZoneInfo("Asia/Colombo")
REPORTS = "/api/v1/reports"


def _at(day: int, hour: int = 6) -> datetime:
    return datetime(2024, 3, day, hour, 0, tzinfo=timezone.utc)


class TestDashboardStats:

    def test_buckets_include_zero_counts(self):
        issues = [
            make_record(status=IssueStatus.OPEN, priority=IssuePriority.HIGH),
            make_record(status=IssueStatus.OPEN, priority=IssuePriority.LOW),
            make_record(status=IssueStatus.CLOSED, priority=IssuePriority.HIGH),
        ]
        stats = reports.dashboard_stats(issues)
        assert stats.total == 3
        assert stats.by_status == {"OPEN": 2, "IN_PROGRESS": 0, "RESOLVED": 0, "CLOSED": 1}
        assert stats.by_priority == {"LOW": 1, "MEDIUM": 0, "HIGH": 2, "CRITICAL": 0}

    def test_recent_issues_are_five_latest_updates(self):
        issues = [make_record(title=str(n), updated_at=_at(n + 1)) for n in range(7)]
        recent = reports.recent_issues(issues)
        assert [i.title for i in recent] == ["6", "5", "4", "3", "2"]


class TestResolutionRate:

    def test_rounds_to_nearest_integer(self):
        assert reports.resolution_rate(7, 10) == 70
        assert reports.resolution_rate(2, 3) == 67
        assert reports.resolution_rate(1, 3) == 33
        assert reports.resolution_rate(1, 8) == 13

    def test_zero_total(self):
        assert reports.resolution_rate(0, 0) == 0


class TestRangeReport:

    def test_seventy_percent_resolved(self):
        statuses = [IssueStatus.RESOLVED] * 5 + [IssueStatus.CLOSED] * 2 + [IssueStatus.OPEN] * 3
        issues = [make_record(status=s, created_at=_at(10)) for s in statuses]
        report = reports.range_report(issues, date(2024, 3, 1), date(2024, 3, 31), COLOMBO)
        assert report.total == 10
        assert report.resolved == 7
        assert report.open == 3
        assert report.resolution_rate == 70

    def test_daily_series_is_dense(self):
        issues = [make_record(created_at=_at(1)), make_record(created_at=_at(1)), make_record(created_at=_at(3))]
        report = reports.range_report(issues, date(2024, 3, 1), date(2024, 3, 3), COLOMBO)
        assert [(d.day, d.label, d.count) for d in report.daily] == [
            (date(2024, 3, 1), "Mar 1", 2),
            (date(2024, 3, 2), "Mar 2", 0),
            (date(2024, 3, 3), "Mar 3", 1),
        ]

    def test_range_is_inclusive_and_local(self):
        # 2월 29일 20:00 UTC → 콜롬보 3월 1일
        edge = make_record(created_at=datetime(2024, 2, 29, 20, 0, tzinfo=timezone.utc))
        before = make_record(created_at=datetime(2024, 2, 29, 10, 0, tzinfo=timezone.utc))
        report = reports.range_report([edge, before], date(2024, 3, 1), date(2024, 3, 1), COLOMBO)
        assert report.total == 1

    def test_status_breakdown_is_sparse_and_ordered(self):
        issues = [
            make_record(status=IssueStatus.OPEN, created_at=_at(2)),
            make_record(status=IssueStatus.RESOLVED, created_at=_at(2)),
            make_record(status=IssueStatus.RESOLVED, created_at=_at(2)),
        ]
        report = reports.range_report(issues, date(2024, 3, 1), date(2024, 3, 31), COLOMBO)
        assert [(s.label, s.count) for s in report.status_breakdown] == [("Resolved", 2), ("Open", 1)]

    def test_empty_range(self):
        report = reports.range_report([], date(2024, 3, 1), date(2024, 3, 2), COLOMBO)
        assert report.total == 0
        assert report.resolution_rate == 0
        assert report.status_breakdown == []
        assert [d.count for d in report.daily] == [0, 0]


class TestReportApi:
    """리포트 API 테스트."""

    async def test_dashboard_scoped_for_staff(
        self, client: AsyncClient, db, staff_user, other_staff_user, staff_token
    ):
        await make_issue(db, staff_user)
        await make_issue(db, other_staff_user)
        res = await client.get(f"{REPORTS}/dashboard", headers=auth_header(staff_token))
        assert res.status_code == 200
        body = res.json()
        assert body["stats"]["total"] == 1
        assert len(body["recent_issues"]) == 1
        assert body["refresh_interval_seconds"] == 30

    async def test_range_report(self, client: AsyncClient, db, staff_user, admin_token):
        await make_issue(db, staff_user, status="RESOLVED", created_at=_at(1))
        await make_issue(db, staff_user, status="OPEN", created_at=_at(3))
        res = await client.get(
            f"{REPORTS}/range",
            headers=auth_header(admin_token),
            params={"start_date": "2024-03-01", "end_date": "2024-03-03"},
        )
        assert res.status_code == 200
        body = res.json()
        assert body["total"] == 2
        assert body["resolution_rate"] == 50
        assert body["daily"][1] == {"date": "2024-03-02", "label": "Mar 2", "count": 0}

    async def test_range_report_defaults_to_current_month(self, client: AsyncClient, db, staff_user, admin_token):
        await make_issue(db, staff_user)
        res = await client.get(f"{REPORTS}/range", headers=auth_header(admin_token))
        assert res.status_code == 200
        body = res.json()
        assert body["start_date"].endswith("-01")
        assert body["total"] == 1

    async def test_inverted_range_rejected(self, client: AsyncClient, admin_token):
        res = await client.get(
            f"{REPORTS}/range",
            headers=auth_header(admin_token),
            params={"start_date": "2024-03-05", "end_date": "2024-03-01"},
        )
        assert res.status_code == 400

    async def test_csv_download(self, client: AsyncClient, db, staff_user, admin_token):
        await make_issue(db, staff_user, created_at=_at(2))
        res = await client.get(
            f"{REPORTS}/range/csv",
            headers=auth_header(admin_token),
            params={"start_date": "2024-03-01", "end_date": "2024-03-31"},
        )
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("text/csv")
        assert "Performance_Report_2024-03-01_to_2024-03-31.csv" in res.headers["content-disposition"]
        assert res.content.startswith("\ufeff".encode("utf-8"))
        assert len(res.text.lstrip("\ufeff").split("\n")) == 2

    async def test_csv_empty_period(self, client: AsyncClient, admin_token):
        res = await client.get(
            f"{REPORTS}/range/csv",
            headers=auth_header(admin_token),
            params={"start_date": "2020-01-01", "end_date": "2020-01-31"},
        )
        assert res.status_code == 404
        assert res.json()["detail"] == "No data available to download for this period."

    async def test_xlsx_download(self, client: AsyncClient, db, staff_user, admin_token):
        await make_issue(db, staff_user)
        res = await client.get(f"{REPORTS}/range/xlsx", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert res.content[:2] == b"PK"
