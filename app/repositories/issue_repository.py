"""이슈 레포지토리.

Issue repository — Sole writer of persisted issue state.
Sparse-patch updates: only supplied columns are written, and every
mutation stamps a fresh updated_at.
"""

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import IssueStatus
from app.models.issue import Issue
from app.repositories.base import BaseRepository, store_errors
from app.utils.dates import as_utc, utcnow

# 수정 가능한 컬럼 / reported_by/reported_by_name/created_at 제외 (immutable after creation)
MUTABLE_COLUMNS: frozenset[str] = frozenset({
    "title", "description", "status", "priority", "category", "sub_category",
    "place", "location", "assigned_to", "assigned_to_name", "comments",
    "attachments", "ai_analysis",
})


class IssueRepository(BaseRepository[Issue]):

    def __init__(self) -> None:
        super().__init__(Issue, label="issues")

    async def list_recent_first(self, db: AsyncSession) -> Sequence[Issue]:
        """전체 이슈 — 최근 수정 순 (most recently updated first)."""
        query: Select = select(Issue).order_by(Issue.updated_at.desc(), Issue.created_at.desc())
        async with store_errors("list issues"):
            result = await db.execute(query)
        return result.scalars().all()

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> Issue:
        # 생성 시 created_at == updated_at, 상태 기본값 OPEN
        now: datetime = utcnow()
        data: dict[str, Any] = {
            "status": IssueStatus.OPEN.value,
            "comments": [],
            "attachments": [],
            **obj_data,
            "created_at": now,
            "updated_at": now,
        }
        return await super().create(db, data)

    async def patch(
        self,
        db: AsyncSession,
        issue_id: UUID,
        fields: dict[str, Any],
    ) -> Issue | None:
        """희소 패치 — 전달된 필드만 기록하고 updated_at 갱신.

        Sparse patch: unknown or immutable keys are ignored, updated_at is
        always refreshed and never earlier than created_at.
        """
        issue: Issue | None = await self.get_by_id(db, issue_id)
        if issue is None:
            return None

        for column, value in fields.items():
            if column in MUTABLE_COLUMNS:
                setattr(issue, column, value)

        now: datetime = utcnow()
        created: datetime = as_utc(issue.created_at)
        issue.updated_at = now if now >= created else created

        async with store_errors("update issue"):
            await db.flush()
            await db.refresh(issue)
        return issue


issue_repository: IssueRepository = IssueRepository()
