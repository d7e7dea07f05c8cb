"""이슈 서비스 — 이슈 생명주기 비즈니스 로직.

Issue Service — Issue lifecycle: create, edit (sparse patch), status
change, technician assignment, comment append, AI analysis caching and
delete. Every operation checks the access policy first; form-level
validation (required fields, catalog membership, attachment size) happens
here, before the repository is called.
"""

import base64
import binascii
import uuid
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.enums import IssueStatus, UserRole
from app.models.issue import Issue
from app.models.profile import Profile
from app.repositories.issue_repository import issue_repository
from app.repositories.profile_repository import profile_repository
from app.schemas.issue import (
    AIAnalysisResponse,
    Attachment,
    IssueCreate,
    IssueResponse,
    IssueUpdate,
)
from app.schemas.user import UserResponse
from app.services.ai_service import ai_service, is_placeholder
from app.services.mappers import map_issue, with_permissions
from app.services.permission_service import Action, Actor, ensure
from app.utils.catalog import Catalog, load_catalog
from app.utils.dates import to_epoch_ms, utcnow
from app.utils.exceptions import NotFoundError, ValidationFailedError

# 생성 시 필수 텍스트 필드 / Required, non-empty on create and when edited
REQUIRED_FIELDS: tuple[str, ...] = (
    "title", "description", "category", "sub_category", "place", "location",
)


def attachment_size(data: str) -> int:
    """base64 data URL의 디코딩된 바이트 수.

    Decoded byte size of a base64 payload, with or without the
    "data:<mime>;base64," prefix.

    Raises:
        ValidationFailedError: base64가 아님 (Not base64)
    """
    payload: str = data.split(",", 1)[1] if data.startswith("data:") and "," in data else data
    try:
        return len(base64.b64decode(payload, validate=True))
    except (binascii.Error, ValueError):
        raise ValidationFailedError("Attachment data must be base64 encoded")


class IssueService:
    """이슈 관련 비즈니스 로직."""

    def __init__(self, catalog: Catalog | None = None) -> None:
        self._catalog: Catalog | None = catalog

    @property
    def catalog(self) -> Catalog:
        return self._catalog or load_catalog()

    # --- 조회 (Reads) ---

    async def load_all(self, db: AsyncSession) -> list[IssueResponse]:
        """저장소의 전체 이슈 — 최근 수정 순 (whole store, most recently updated first)."""
        issues: Sequence[Issue] = await issue_repository.list_recent_first(db)
        return [map_issue(issue) for issue in issues]

    async def _get_row(self, db: AsyncSession, issue_id: UUID) -> Issue:
        issue: Issue | None = await issue_repository.get_by_id(db, issue_id)
        if issue is None:
            raise NotFoundError("Issue not found")
        return issue

    async def get_issue(self, db: AsyncSession, actor: Actor, issue_id: UUID) -> IssueResponse:
        """이슈 상세 — STAFF는 본인 보고 건만 (STAFF may only open their own reports)."""
        issue: IssueResponse = map_issue(await self._get_row(db, issue_id))
        ensure(actor, Action.VIEW_ISSUE, owner_id=issue.reported_by)
        return with_permissions(issue, actor)

    async def _patched(
        self, db: AsyncSession, actor: Actor, issue_id: UUID, fields: dict[str, Any]
    ) -> IssueResponse:
        """패치 후 응답 변환. 도중에 삭제된 행은 NotFoundError (row deleted mid-request)."""
        updated: Issue | None = await issue_repository.patch(db, issue_id, fields)
        if updated is None:
            raise NotFoundError("Issue not found")
        return with_permissions(map_issue(updated), actor)

    # --- 검증 (Validation) ---

    def _validate_catalog_fields(self, values: dict[str, Any]) -> None:
        catalog: Catalog = self.catalog
        category: str | None = values.get("category")
        if category is not None and category not in catalog.structure:
            raise ValidationFailedError(f"Unknown category: {category}")
        sub_category: str | None = values.get("sub_category")
        if sub_category is not None and not catalog.is_valid_subcategory(category, sub_category):
            raise ValidationFailedError(
                f"Sub-category '{sub_category}' does not belong to category '{category}'"
            )
        place: str | None = values.get("place")
        if place is not None and place not in catalog.places:
            raise ValidationFailedError(f"Unknown place: {place}")
        location: str | None = values.get("location")
        if location is not None and location not in catalog.branches:
            raise ValidationFailedError(f"Unknown branch location: {location}")

    def _prepare_attachments(self, attachments: list[Attachment]) -> list[dict[str, str]]:
        """첨부 크기 검사 후 저장 형식으로 변환 (size cap, ids assigned)."""
        stored: list[dict[str, str]] = []
        for attachment in attachments:
            if attachment_size(attachment.data) > settings.ATTACHMENT_MAX_BYTES:
                limit_mb: float = settings.ATTACHMENT_MAX_BYTES / (1024 * 1024)
                raise ValidationFailedError(
                    f"File '{attachment.name}' is too large. Maximum size is {limit_mb:g}MB."
                )
            stored.append({
                "id": attachment.id or str(uuid.uuid4()),
                "name": attachment.name,
                "type": attachment.type,
                "data": attachment.data,
            })
        return stored

    # --- 변경 (Mutations) ---

    async def create_issue(
        self,
        db: AsyncSession,
        actor: Actor,
        reporter: UserResponse,
        data: IssueCreate,
    ) -> IssueResponse:
        """이슈 생성.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 요청 주체 (Requesting actor)
            reporter: 보고자 — 이름 스냅샷 출처 (Reporter, source of the name snapshot)
            data: 생성 요청 (Creation request)

        Returns:
            IssueResponse: 생성된 이슈, 상태 OPEN (Created issue, status OPEN)

        Raises:
            PermissionDeniedError: TECHNICIAN 등 생성 권한 없음
            ValidationFailedError: 필수 필드 누락, 카탈로그 불일치, 첨부 초과
        """
        ensure(actor, Action.CREATE_ISSUE)

        values: dict[str, Any] = {name: getattr(data, name).strip() for name in REQUIRED_FIELDS}
        if any(not value for value in values.values()):
            raise ValidationFailedError("Please fill in all required fields")
        self._validate_catalog_fields(values)

        issue: Issue = await issue_repository.create(
            db,
            {
                **values,
                "priority": data.priority.value,
                "status": IssueStatus.OPEN.value,
                "reported_by": UUID(actor.id),
                "reported_by_name": reporter.name,
                "attachments": self._prepare_attachments(data.attachments),
            },
        )
        return with_permissions(map_issue(issue), actor)

    async def update_issue(
        self,
        db: AsyncSession,
        actor: Actor,
        issue_id: UUID,
        data: IssueUpdate,
    ) -> IssueResponse:
        """이슈 수정 (희소 패치).

        Only fields present in the request are written. Changing the category
        clears a stored sub-category that does not belong to the new category;
        a sub-category sent in the same request must belong to it.
        Attachments, when supplied, replace the stored list.

        Raises:
            PermissionDeniedError: 관리자 또는 보고자 본인(STAFF)만 가능
            ValidationFailedError: 빈 필수 필드, 카탈로그 불일치, 첨부 초과
        """
        row: Issue = await self._get_row(db, issue_id)
        ensure(actor, Action.EDIT_ISSUE, owner_id=str(row.reported_by))

        fields: dict[str, Any] = data.model_dump(exclude_unset=True)
        for name in REQUIRED_FIELDS:
            if name not in fields:
                continue
            value: str | None = fields[name]
            if name == "sub_category" and value is None:
                continue
            if value is None or not value.strip():
                raise ValidationFailedError("Please fill in all required fields")
            fields[name] = value.strip()

        category: str | None = fields.get("category", row.category)
        category_changed: bool = "category" in fields and fields["category"] != row.category
        sub_category: str | None = fields.get("sub_category", row.sub_category)
        if sub_category and not self.catalog.is_valid_subcategory(category, sub_category):
            if category_changed and "sub_category" not in fields:
                # 카테고리 변경 시 저장된 하위 카테고리 무효화 (stale stored sub-category is cleared)
                fields["sub_category"] = None
            else:
                raise ValidationFailedError(
                    f"Sub-category '{sub_category}' does not belong to category '{category}'"
                )
        # 하위 카테고리는 위에서 검사 완료 (sub-category already checked above)
        self._validate_catalog_fields({
            "category": fields.get("category"),
            "place": fields.get("place"),
            "location": fields.get("location"),
        })

        if "priority" in fields:
            if fields["priority"] is None:
                del fields["priority"]
            else:
                fields["priority"] = data.priority.value  # type: ignore[union-attr]
        if "attachments" in fields:
            fields["attachments"] = self._prepare_attachments(data.attachments or [])

        return await self._patched(db, actor, issue_id, fields)

    async def change_status(
        self,
        db: AsyncSession,
        actor: Actor,
        issue_id: UUID,
        status: IssueStatus,
    ) -> IssueResponse:
        """상태 변경 — ADMIN/MANAGER/TECHNICIAN."""
        ensure(actor, Action.CHANGE_ISSUE_STATUS)
        await self._get_row(db, issue_id)
        return await self._patched(db, actor, issue_id, {"status": status.value})

    async def assign_technician(
        self,
        db: AsyncSession,
        actor: Actor,
        issue_id: UUID,
        technician_id: str | None,
    ) -> IssueResponse:
        """담당 기술자 지정 — 빈 값이면 배정 해제.

        The assignee must hold the TECHNICIAN role; their current name is
        stored as a snapshot.

        Raises:
            PermissionDeniedError: ADMIN/MANAGER가 아님
            ValidationFailedError: 대상이 기술자가 아님
        """
        ensure(actor, Action.ASSIGN_TECHNICIAN)
        await self._get_row(db, issue_id)

        if not technician_id:
            fields: dict[str, Any] = {"assigned_to": None, "assigned_to_name": None}
        else:
            try:
                technician_uuid: UUID = UUID(technician_id)
            except ValueError:
                raise ValidationFailedError("Invalid technician id")
            profile: Profile | None = await profile_repository.get_by_id(db, technician_uuid)
            if profile is None:
                raise NotFoundError("Technician not found")
            if UserRole.coerce(profile.role) is not UserRole.TECHNICIAN:
                raise ValidationFailedError("Issues can only be assigned to technicians")
            fields = {"assigned_to": profile.id, "assigned_to_name": profile.full_name or "User"}

        return await self._patched(db, actor, issue_id, fields)

    async def assign_to_me(
        self,
        db: AsyncSession,
        actor: Actor,
        assignee: UserResponse,
        issue_id: UUID,
    ) -> IssueResponse:
        """관리자 본인에게 배정 (ADMIN only)."""
        ensure(actor, Action.ASSIGN_TO_SELF)
        await self._get_row(db, issue_id)
        return await self._patched(
            db, actor, issue_id, {"assigned_to": UUID(actor.id), "assigned_to_name": assignee.name}
        )

    async def add_comment(
        self,
        db: AsyncSession,
        actor: Actor,
        author: UserResponse,
        issue_id: UUID,
        content: str,
    ) -> IssueResponse:
        """코멘트 추가 — 기존 코멘트는 변경하지 않음 (append-only)."""
        row: Issue = await self._get_row(db, issue_id)
        ensure(actor, Action.COMMENT_ON_ISSUE, owner_id=str(row.reported_by))
        text: str = content.strip()
        if not text:
            raise ValidationFailedError("Comment cannot be empty")

        comment: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "userId": actor.id,
            "userName": author.name,
            "content": text,
            "timestamp": to_epoch_ms(utcnow()),
        }
        comments: list[dict[str, Any]] = [*(row.comments or []), comment]
        return await self._patched(db, actor, issue_id, {"comments": comments})

    async def ai_analysis(
        self,
        db: AsyncSession,
        actor: Actor,
        issue_id: UUID,
        refresh: bool = False,
    ) -> AIAnalysisResponse:
        """AI 진단 — 저장된 결과가 있으면 재사용.

        A stored analysis is returned as-is unless refresh is requested. A
        new suggestion is written to the issue only when one was actually
        obtained; placeholder text is returned but never cached.
        """
        row: Issue = await self._get_row(db, issue_id)
        ensure(actor, Action.VIEW_ISSUE, owner_id=str(row.reported_by))
        ensure(actor, Action.REQUEST_AI_ANALYSIS)
        if row.ai_analysis and not refresh:
            return AIAnalysisResponse(ai_analysis=row.ai_analysis, cached=True)

        suggestion: str = await ai_service.suggest_solution(row.title, row.description or "")
        if not is_placeholder(suggestion):
            await issue_repository.patch(db, issue_id, {"ai_analysis": suggestion})
        return AIAnalysisResponse(ai_analysis=suggestion, cached=False)

    async def delete_issue(self, db: AsyncSession, actor: Actor, issue_id: UUID) -> None:
        """이슈 삭제 — ADMIN/TECHNICIAN."""
        ensure(actor, Action.DELETE_ISSUE)
        if not await issue_repository.delete(db, issue_id):
            raise NotFoundError("Issue not found")


# 싱글턴 인스턴스 / Singleton instance
issue_service: IssueService = IssueService()
