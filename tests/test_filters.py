"""이슈 필터 유닛 테스트 — 범위, 보기, 검색, 패싯, 날짜.

Issue filter unit tests over in-memory records.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from app.analytics.filters import IssueView, filter_issues, matches_search, scope_issues
from app.models.enums import IssueStatus, UserRole
from app.services.permission_service import Actor
from tests.conftest import make_record

COLOMBO = ZoneInfo("Asia/Colombo")
STAFF = Actor(id="staff-1", role=UserRole.STAFF)
MANAGER = Actor(id="manager-1", role=UserRole.MANAGER)
TECH = Actor(id="tech-1", role=UserRole.TECHNICIAN)


class TestScope:

    def test_staff_scope(self):
        own = make_record(reported_by="staff-1")
        other = make_record(reported_by="staff-2")
        assert scope_issues([own, other], STAFF) == [own]

    def test_manager_scope(self):
        issues = [make_record(reported_by="staff-1"), make_record(reported_by="staff-2")]
        assert scope_issues(issues, MANAGER) == issues


class TestSearch:

    def test_search_is_case_insensitive_over_fields(self):
        issue = make_record(
            title="Walk-in freezer",
            description="Temperature rising",
            sub_category="Chillers & freezers",
            reported_by_name="Nimal Perera",
        )
        assert matches_search(issue, "FREEZER")
        assert matches_search(issue, "rising")
        assert matches_search(issue, "nimal")
        assert matches_search(issue, issue.id[:8].upper())
        assert not matches_search(issue, "plumbing")

    def test_subcategory_only_match(self):
        """제목/설명에 없어도 하위 카테고리로 검색됨."""
        issue = make_record(title="Unit broken", description="Makes noise", sub_category="Cooling coil")
        assert matches_search(issue, "cooling")

    def test_blank_term_matches_everything(self):
        assert matches_search(make_record(), "")
        assert matches_search(make_record(), "   ")


class TestFilterIssues:

    def test_facets_combine_with_and(self):
        a = make_record(status=IssueStatus.OPEN, location="Galle", place="Outlet")
        b = make_record(status=IssueStatus.OPEN, location="Galle", place="Accommodation")
        c = make_record(status=IssueStatus.CLOSED, location="Galle", place="Outlet")
        result = filter_issues([a, b, c], MANAGER, status="OPEN", location="Galle", place="Outlet")
        assert result == [a]

    def test_all_facets_is_identity(self):
        issues = [make_record(), make_record(status=IssueStatus.RESOLVED)]
        assert filter_issues(issues, MANAGER) == issues

    def test_views(self):
        assigned = make_record(assigned_to="tech-1")
        reported = make_record(reported_by="tech-1")
        neither = make_record()
        issues = [assigned, reported, neither]
        assert filter_issues(issues, TECH, view=IssueView.ASSIGNED_TO_ME) == [assigned]
        assert filter_issues(issues, TECH, view=IssueView.MY_REPORTS) == [reported]

    def test_created_on_uses_local_day(self):
        late = make_record(created_at=datetime(2024, 3, 5, 20, 0, tzinfo=timezone.utc))
        early = make_record(created_at=datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc))
        result = filter_issues([late, early], MANAGER, created_on=date(2024, 3, 5), tz=COLOMBO)
        assert result == [early]

    def test_scope_applies_before_view(self):
        """STAFF는 ASSIGNED_TO_ME 보기에서도 본인 보고 건만."""
        foreign = make_record(reported_by="staff-2", assigned_to="staff-1")
        assert filter_issues([foreign], STAFF, view=IssueView.ASSIGNED_TO_ME) == []

    def test_order_is_preserved(self):
        issues = [make_record(title=f"Issue {n}") for n in range(5)]
        assert filter_issues(list(reversed(issues)), MANAGER) == list(reversed(issues))
