"""이슈 모델 — 시설/IT 지원 요청 티켓.

Issue model — Facilities/IT support ticket.

Tables:
    - issues: 이슈 티켓 (Issue tickets with JSON comment/attachment arrays)

Name columns (reported_by_name, assigned_to_name) are point-in-time
snapshots, not foreign keys; renaming or deleting a user leaves them as-is.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, JSONType


class Issue(Base):
    """이슈 티켓 모델.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        title / description: 제목 / 설명 (Subject / details)
        status: 상태 문자열, 기본 OPEN (Status text, coerced on read)
        priority: 우선순위 문자열, 기본 MEDIUM (Priority text, coerced on read)
        category / sub_category: 카테고리 / 하위 카테고리
        place: 장소 (Outlet / Accommodation)
        location: 지점 (Branch location)
        reported_by / reported_by_name: 보고자 ID / 이름 스냅샷 (생성 후 불변)
        assigned_to / assigned_to_name: 담당 기술자 ID / 이름 스냅샷
        comments: 코멘트 JSON 배열 (append-only)
        attachments: 첨부 JSON 배열 (replaced wholesale on edit)
        ai_analysis: 캐시된 AI 제안 (Cached AI suggestion)
        created_at / updated_at: 생성 / 수정 일시 UTC
    """

    __tablename__ = "issues"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="OPEN")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="MEDIUM")
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sub_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    place: Mapped[str | None] = mapped_column(String(50), nullable=True)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # 보고자 / 스냅샷, FK 아님 (snapshot, not a live reference)
    reported_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    reported_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    assigned_to_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    comments: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    attachments: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    ai_analysis: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_issues_updated_at", "updated_at"),
        Index("ix_issues_reported_by", "reported_by"),
        Index("ix_issues_assigned_to", "assigned_to"),
    )
