"""이슈 API 테스트 — 생성, 조회 범위, 수정, 상태, 배정, 코멘트, AI 진단, 삭제.

Issue API tests — Create, visibility scope, sparse edit, status change,
technician assignment, comments, AI analysis caching and delete.
"""

import base64
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from app.config import settings
from app.repositories.issue_repository import issue_repository
from app.services.ai_service import NOT_CONFIGURED, ai_service
from tests.conftest import auth_header, make_issue

ISSUES = "/api/v1/issues"

NEW_ISSUE: dict = {
    "title": "Flickering lights",
    "description": "Dining area lights flicker every few seconds.",
    "category": "Electrical",
    "sub_category": "Lighting and switches",
    "place": "Outlet",
    "location": "Kotte",
    "priority": "HIGH",
}


# ===== Create =====

class TestCreateIssue:
    """이슈 생성 테스트."""

    async def test_staff_creates_open_issue(self, client: AsyncClient, staff_user, staff_token):
        res = await client.post(ISSUES, headers=auth_header(staff_token), json=NEW_ISSUE)
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == "OPEN"
        assert data["priority"] == "HIGH"
        assert data["reported_by"] == str(staff_user.id)
        assert data["reported_by_name"] == "Sunil Staff"
        assert data["comments"] == []
        assert data["created_at"] == data["updated_at"]

    async def test_priority_defaults_to_medium(self, client: AsyncClient, staff_token):
        body = {k: v for k, v in NEW_ISSUE.items() if k != "priority"}
        res = await client.post(ISSUES, headers=auth_header(staff_token), json=body)
        assert res.json()["priority"] == "MEDIUM"

    async def test_technician_cannot_create(self, client: AsyncClient, technician_token):
        res = await client.post(ISSUES, headers=auth_header(technician_token), json=NEW_ISSUE)
        assert res.status_code == 403

    async def test_blank_required_field(self, client: AsyncClient, staff_token):
        res = await client.post(ISSUES, headers=auth_header(staff_token), json={**NEW_ISSUE, "title": "  "})
        assert res.status_code == 400
        assert res.json()["detail"] == "Please fill in all required fields"

    async def test_subcategory_outside_category(self, client: AsyncClient, staff_token):
        res = await client.post(
            ISSUES,
            headers=auth_header(staff_token),
            json={**NEW_ISSUE, "sub_category": "Drain blockages"},
        )
        assert res.status_code == 400

    async def test_unknown_branch(self, client: AsyncClient, staff_token):
        res = await client.post(ISSUES, headers=auth_header(staff_token), json={**NEW_ISSUE, "location": "Jaffna"})
        assert res.status_code == 400

    async def test_small_attachment_gets_id(self, client: AsyncClient, staff_token):
        attachment = {"name": "photo.txt", "type": "text/plain", "data": "data:text/plain;base64,aGVsbG8="}
        res = await client.post(
            ISSUES, headers=auth_header(staff_token), json={**NEW_ISSUE, "attachments": [attachment]}
        )
        assert res.status_code == 201
        stored = res.json()["attachments"][0]
        assert stored["name"] == "photo.txt"
        assert stored["id"]

    async def test_oversized_attachment_rejected(self, client: AsyncClient, staff_token):
        payload = base64.b64encode(b"\0" * (1024 * 1024 + 1)).decode()
        attachment = {"name": "huge.jpg", "type": "image/jpeg", "data": f"data:image/jpeg;base64,{payload}"}
        res = await client.post(
            ISSUES, headers=auth_header(staff_token), json={**NEW_ISSUE, "attachments": [attachment]}
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "File 'huge.jpg' is too large. Maximum size is 1MB."

    async def test_requires_session(self, client: AsyncClient):
        res = await client.post(ISSUES, json=NEW_ISSUE)
        assert res.status_code == 401


# ===== Read / scope =====

class TestIssueScope:
    """조회 범위 테스트 — STAFF는 본인 보고 건만."""

    async def test_staff_sees_only_own_reports(
        self, client: AsyncClient, db, staff_user, other_staff_user, staff_token
    ):
        mine = await make_issue(db, staff_user, title="Mine")
        await make_issue(db, other_staff_user, title="Theirs")

        res = await client.get(ISSUES, headers=auth_header(staff_token))
        assert res.status_code == 200
        body = res.json()
        assert [i["id"] for i in body["items"]] == [str(mine.id)]
        assert body["total"] == 1
        assert body["refresh_interval_seconds"] == 30

    async def test_technician_sees_everything(
        self, client: AsyncClient, db, staff_user, other_staff_user, technician_token
    ):
        await make_issue(db, staff_user)
        await make_issue(db, other_staff_user)
        res = await client.get(ISSUES, headers=auth_header(technician_token))
        assert res.json()["total"] == 2

    async def test_issue_reports_permitted_actions(
        self, client: AsyncClient, db, staff_user, staff_token, technician_token
    ):
        """이슈별 허용 동작 — UI 제어용."""
        issue = await make_issue(db, staff_user)

        own = await client.get(f"{ISSUES}/{issue.id}", headers=auth_header(staff_token))
        actions = own.json()["permitted_actions"]
        assert "EDIT_ISSUE" in actions
        assert "COMMENT_ON_ISSUE" in actions
        assert "REQUEST_AI_ANALYSIS" not in actions
        assert "CHANGE_ISSUE_STATUS" not in actions

        listed = await client.get(ISSUES, headers=auth_header(technician_token))
        tech_actions = listed.json()["items"][0]["permitted_actions"]
        assert "DELETE_ISSUE" in tech_actions
        assert "REQUEST_AI_ANALYSIS" in tech_actions
        assert "EDIT_ISSUE" not in tech_actions

    async def test_staff_cannot_open_foreign_issue(
        self, client: AsyncClient, db, other_staff_user, staff_token
    ):
        issue = await make_issue(db, other_staff_user)
        res = await client.get(f"{ISSUES}/{issue.id}", headers=auth_header(staff_token))
        assert res.status_code == 403

    async def test_missing_issue(self, client: AsyncClient, admin_token):
        res = await client.get(
            f"{ISSUES}/00000000-0000-0000-0000-0000000000aa", headers=auth_header(admin_token)
        )
        assert res.status_code == 404

    async def test_list_most_recently_updated_first(self, client: AsyncClient, db, staff_user, admin_token):
        older = await make_issue(db, staff_user, updated_at=datetime(2024, 3, 1, tzinfo=timezone.utc))
        newer = await make_issue(db, staff_user, updated_at=datetime(2024, 3, 9, tzinfo=timezone.utc))
        res = await client.get(ISSUES, headers=auth_header(admin_token))
        assert [i["id"] for i in res.json()["items"]] == [str(newer.id), str(older.id)]

    async def test_list_filters(self, client: AsyncClient, db, staff_user, admin_token):
        await make_issue(db, staff_user, title="AC leaking", status="IN_PROGRESS", location="Galle")
        await make_issue(db, staff_user, title="Door hinge", status="OPEN", location="Galle")
        await make_issue(db, staff_user, title="AC noisy", status="IN_PROGRESS", location="Kotte")

        res = await client.get(
            ISSUES,
            headers=auth_header(admin_token),
            params={"status": "in_progress", "location": "Galle"},
        )
        assert [i["title"] for i in res.json()["items"]] == ["AC leaking"]

        res = await client.get(ISSUES, headers=auth_header(admin_token), params={"search": " NOISY "})
        assert [i["title"] for i in res.json()["items"]] == ["AC noisy"]

    async def test_list_date_uses_local_calendar(self, client: AsyncClient, db, staff_user, admin_token):
        """20:00 UTC는 Asia/Colombo 기준 다음 날."""
        await make_issue(db, staff_user, created_at=datetime(2024, 3, 5, 20, 0, tzinfo=timezone.utc))

        res = await client.get(ISSUES, headers=auth_header(admin_token), params={"date": "2024-03-06"})
        assert res.json()["total"] == 1
        res = await client.get(ISSUES, headers=auth_header(admin_token), params={"date": "2024-03-05"})
        assert res.json()["total"] == 0

    async def test_views(self, client: AsyncClient, db, staff_user, technician_user, technician_token):
        await make_issue(db, staff_user, assigned_to=technician_user.id, assigned_to_name="Tharindu Tech")
        await make_issue(db, staff_user)

        res = await client.get(ISSUES, headers=auth_header(technician_token), params={"view": "ASSIGNED_TO_ME"})
        assert res.json()["total"] == 1
        res = await client.get(ISSUES, headers=auth_header(technician_token), params={"view": "MY_REPORTS"})
        assert res.json()["total"] == 0

    async def test_catalog(self, client: AsyncClient, staff_token):
        res = await client.get(f"{ISSUES}/catalog", headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert "Electrical" in data["categories"]
        assert data["places"] == ["Outlet", "Accommodation"]
        assert "Dematagoda CK" in data["branches"]


# ===== Edit =====

class TestEditIssue:
    """이슈 수정 테스트 — 관리자 또는 보고자 본인(STAFF)."""

    async def test_owner_edits_title_only(self, client: AsyncClient, db, staff_user, staff_token):
        issue = await make_issue(db, staff_user, created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
                                 updated_at=datetime(2024, 3, 1, tzinfo=timezone.utc))
        res = await client.put(f"{ISSUES}/{issue.id}", headers=auth_header(staff_token), json={"title": "Fryer dead"})
        assert res.status_code == 200
        data = res.json()
        assert data["title"] == "Fryer dead"
        assert data["description"] == "The left fryer stays cold after ignition."
        assert data["reported_by_name"] == "Sunil Staff"
        assert data["updated_at"] > data["created_at"]

    async def test_other_staff_cannot_edit(self, client: AsyncClient, db, staff_user, other_staff_token):
        issue = await make_issue(db, staff_user)
        res = await client.put(f"{ISSUES}/{issue.id}", headers=auth_header(other_staff_token), json={"title": "x"})
        assert res.status_code == 403

    async def test_manager_cannot_edit(self, client: AsyncClient, db, staff_user, manager_token):
        issue = await make_issue(db, staff_user)
        res = await client.put(f"{ISSUES}/{issue.id}", headers=auth_header(manager_token), json={"title": "x"})
        assert res.status_code == 403

    async def test_category_change_clears_stale_subcategory(self, client: AsyncClient, db, staff_user, admin_token):
        issue = await make_issue(db, staff_user)
        res = await client.put(
            f"{ISSUES}/{issue.id}", headers=auth_header(admin_token), json={"category": "Electrical"}
        )
        assert res.status_code == 200
        assert res.json()["category"] == "Electrical"
        assert res.json()["sub_category"] is None

    async def test_category_change_rejects_mismatched_subcategory(
        self, client: AsyncClient, db, staff_user, admin_token
    ):
        issue = await make_issue(db, staff_user)
        res = await client.put(
            f"{ISSUES}/{issue.id}",
            headers=auth_header(admin_token),
            json={"category": "Plumbing & Drainage", "sub_category": "Wiring and cabling"},
        )
        assert res.status_code == 400

        detail = await client.get(f"{ISSUES}/{issue.id}", headers=auth_header(admin_token))
        assert detail.json()["category"] == "Kitchen Equipment / Machinery"
        assert detail.json()["sub_category"] == "Fryers, grills, ovens"

    async def test_invalid_subcategory_for_current_category(self, client: AsyncClient, db, staff_user, admin_token):
        issue = await make_issue(db, staff_user)
        res = await client.put(
            f"{ISSUES}/{issue.id}", headers=auth_header(admin_token), json={"sub_category": "Wiring and cabling"}
        )
        assert res.status_code == 400

    async def test_attachments_replaced_wholesale(self, client: AsyncClient, db, staff_user, staff_token):
        issue = await make_issue(
            db, staff_user, attachments=[{"id": "a1", "name": "old.txt", "type": "text/plain", "data": "b2xk"}]
        )
        new = {"name": "new.txt", "type": "text/plain", "data": "bmV3"}
        res = await client.put(
            f"{ISSUES}/{issue.id}", headers=auth_header(staff_token), json={"attachments": [new]}
        )
        assert [a["name"] for a in res.json()["attachments"]] == ["new.txt"]

        res = await client.put(f"{ISSUES}/{issue.id}", headers=auth_header(staff_token), json={"title": "Still"})
        assert [a["name"] for a in res.json()["attachments"]] == ["new.txt"]


# ===== Status / assignment =====

class TestStatusAndAssignment:
    """상태 변경 및 배정 테스트."""

    async def test_technician_changes_status(self, client: AsyncClient, db, staff_user, technician_token):
        issue = await make_issue(db, staff_user)
        res = await client.patch(
            f"{ISSUES}/{issue.id}/status", headers=auth_header(technician_token), json={"status": "RESOLVED"}
        )
        assert res.status_code == 200
        assert res.json()["status"] == "RESOLVED"

    async def test_staff_cannot_change_status(self, client: AsyncClient, db, staff_user, staff_token):
        issue = await make_issue(db, staff_user)
        res = await client.patch(
            f"{ISSUES}/{issue.id}/status", headers=auth_header(staff_token), json={"status": "CLOSED"}
        )
        assert res.status_code == 403

    async def test_issue_deleted_mid_update(
        self, client: AsyncClient, db, staff_user, admin_token, monkeypatch: pytest.MonkeyPatch
    ):
        """조회 후 패치 전에 삭제된 이슈는 404."""
        async def vanished(*args, **kwargs):
            return None

        monkeypatch.setattr(issue_repository, "patch", vanished)
        issue = await make_issue(db, staff_user)
        res = await client.patch(
            f"{ISSUES}/{issue.id}/status", headers=auth_header(admin_token), json={"status": "RESOLVED"}
        )
        assert res.status_code == 404
        assert res.json()["detail"] == "Issue not found"

    async def test_unknown_status_value(self, client: AsyncClient, db, staff_user, admin_token):
        issue = await make_issue(db, staff_user)
        res = await client.patch(
            f"{ISSUES}/{issue.id}/status", headers=auth_header(admin_token), json={"status": "DONE"}
        )
        assert res.status_code == 422

    async def test_manager_assigns_and_unassigns(
        self, client: AsyncClient, db, staff_user, technician_user, manager_token
    ):
        issue = await make_issue(db, staff_user)
        res = await client.patch(
            f"{ISSUES}/{issue.id}/assignment",
            headers=auth_header(manager_token),
            json={"technician_id": str(technician_user.id)},
        )
        assert res.status_code == 200
        assert res.json()["assigned_to"] == str(technician_user.id)
        assert res.json()["assigned_to_name"] == "Tharindu Tech"

        res = await client.patch(
            f"{ISSUES}/{issue.id}/assignment", headers=auth_header(manager_token), json={"technician_id": None}
        )
        assert res.json()["assigned_to"] is None
        assert res.json()["assigned_to_name"] is None

    async def test_assign_non_technician(self, client: AsyncClient, db, staff_user, other_staff_user, admin_token):
        issue = await make_issue(db, staff_user)
        res = await client.patch(
            f"{ISSUES}/{issue.id}/assignment",
            headers=auth_header(admin_token),
            json={"technician_id": str(other_staff_user.id)},
        )
        assert res.status_code == 400

    async def test_technician_cannot_assign(self, client: AsyncClient, db, staff_user, technician_user, technician_token):
        issue = await make_issue(db, staff_user)
        res = await client.patch(
            f"{ISSUES}/{issue.id}/assignment",
            headers=auth_header(technician_token),
            json={"technician_id": str(technician_user.id)},
        )
        assert res.status_code == 403

    async def test_admin_assigns_to_self(self, client: AsyncClient, db, staff_user, admin_user, admin_token):
        issue = await make_issue(db, staff_user)
        res = await client.post(f"{ISSUES}/{issue.id}/assign-to-me", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["assigned_to"] == str(admin_user.id)
        assert res.json()["assigned_to_name"] == "Asha Admin"

    async def test_manager_cannot_assign_to_self(self, client: AsyncClient, db, staff_user, manager_token):
        issue = await make_issue(db, staff_user)
        res = await client.post(f"{ISSUES}/{issue.id}/assign-to-me", headers=auth_header(manager_token))
        assert res.status_code == 403


# ===== Comments =====

class TestComments:
    """코멘트 테스트 — append-only."""

    async def test_owner_and_technician_comment(
        self, client: AsyncClient, db, staff_user, staff_token, technician_token
    ):
        issue = await make_issue(db, staff_user)
        res = await client.post(
            f"{ISSUES}/{issue.id}/comments", headers=auth_header(staff_token), json={"content": "Still broken"}
        )
        assert res.status_code == 201
        res = await client.post(
            f"{ISSUES}/{issue.id}/comments", headers=auth_header(technician_token), json={"content": " On my way "}
        )
        comments = res.json()["comments"]
        assert [c["content"] for c in comments] == ["Still broken", "On my way"]
        assert [c["user_name"] for c in comments] == ["Sunil Staff", "Tharindu Tech"]
        assert comments[0]["timestamp"] <= comments[1]["timestamp"]

    async def test_blank_comment(self, client: AsyncClient, db, staff_user, staff_token):
        issue = await make_issue(db, staff_user)
        res = await client.post(
            f"{ISSUES}/{issue.id}/comments", headers=auth_header(staff_token), json={"content": "   "}
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "Comment cannot be empty"

    async def test_foreign_staff_cannot_comment(self, client: AsyncClient, db, staff_user, other_staff_token):
        issue = await make_issue(db, staff_user)
        res = await client.post(
            f"{ISSUES}/{issue.id}/comments", headers=auth_header(other_staff_token), json={"content": "hi"}
        )
        assert res.status_code == 403


# ===== AI analysis =====

class TestAIAnalysis:
    """AI 진단 캐싱 테스트."""

    async def test_not_configured_is_not_cached(
        self, client: AsyncClient, db, staff_user, admin_token, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
        issue = await make_issue(db, staff_user)
        res = await client.post(f"{ISSUES}/{issue.id}/ai-analysis", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json() == {"ai_analysis": NOT_CONFIGURED, "cached": False}

        detail = await client.get(f"{ISSUES}/{issue.id}", headers=auth_header(admin_token))
        assert detail.json()["ai_analysis"] is None

    async def test_suggestion_is_stored_and_reused(
        self, client: AsyncClient, db, staff_user, admin_token, monkeypatch: pytest.MonkeyPatch
    ):
        calls: list[str] = []

        async def fake_suggest(title: str, description: str) -> str:
            calls.append(title)
            return "1. Check the thermostat."

        monkeypatch.setattr(ai_service, "suggest_solution", fake_suggest)
        issue = await make_issue(db, staff_user)

        first = await client.post(f"{ISSUES}/{issue.id}/ai-analysis", headers=auth_header(admin_token))
        assert first.json() == {"ai_analysis": "1. Check the thermostat.", "cached": False}

        second = await client.post(f"{ISSUES}/{issue.id}/ai-analysis", headers=auth_header(admin_token))
        assert second.json()["cached"] is True
        assert len(calls) == 1

        third = await client.post(
            f"{ISSUES}/{issue.id}/ai-analysis", headers=auth_header(admin_token), params={"refresh": "true"}
        )
        assert third.json()["cached"] is False
        assert len(calls) == 2

    async def test_staff_owner_cannot_request_analysis(
        self, client: AsyncClient, db, staff_user, staff_token, monkeypatch: pytest.MonkeyPatch
    ):
        calls: list[str] = []

        async def fake_suggest(title: str, description: str) -> str:
            calls.append(title)
            return "1. Check the thermostat."

        monkeypatch.setattr(ai_service, "suggest_solution", fake_suggest)
        issue = await make_issue(db, staff_user)
        res = await client.post(f"{ISSUES}/{issue.id}/ai-analysis", headers=auth_header(staff_token))
        assert res.status_code == 403
        assert calls == []

        detail = await client.get(f"{ISSUES}/{issue.id}", headers=auth_header(staff_token))
        assert detail.json()["ai_analysis"] is None

    async def test_manager_may_request_analysis(
        self, client: AsyncClient, db, staff_user, manager_token, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
        issue = await make_issue(db, staff_user)
        res = await client.post(f"{ISSUES}/{issue.id}/ai-analysis", headers=auth_header(manager_token))
        assert res.status_code == 200

    async def test_expand_description_not_configured(
        self, client: AsyncClient, staff_token, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
        res = await client.post(
            "/api/v1/ai/expand-description",
            headers=auth_header(staff_token),
            json={"title": "Leaking tap", "category": "Plumbing & Drainage"},
        )
        assert res.status_code == 200
        assert res.json()["text"] == NOT_CONFIGURED


# ===== Delete =====

class TestDeleteIssue:
    """이슈 삭제 테스트 — ADMIN/TECHNICIAN."""

    async def test_technician_deletes(self, client: AsyncClient, db, staff_user, technician_token):
        issue = await make_issue(db, staff_user)
        res = await client.delete(f"{ISSUES}/{issue.id}", headers=auth_header(technician_token))
        assert res.status_code == 204

        res = await client.get(f"{ISSUES}/{issue.id}", headers=auth_header(technician_token))
        assert res.status_code == 404

    async def test_manager_cannot_delete(self, client: AsyncClient, db, staff_user, manager_token):
        issue = await make_issue(db, staff_user)
        res = await client.delete(f"{ISSUES}/{issue.id}", headers=auth_header(manager_token))
        assert res.status_code == 403

    async def test_owner_staff_cannot_delete(self, client: AsyncClient, db, staff_user, staff_token):
        issue = await make_issue(db, staff_user)
        res = await client.delete(f"{ISSUES}/{issue.id}", headers=auth_header(staff_token))
        assert res.status_code == 403
