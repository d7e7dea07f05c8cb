"""이슈 관련 Pydantic 요청/응답 스키마 정의.

Issue request/response schemas. IssueResponse doubles as the in-memory
domain record the filtering and reporting functions operate on: values
are already coerced (status/priority enums, UTC timestamps, defaults for
missing place and reporter name).
"""

from datetime import datetime

from pydantic import BaseModel

from app.models.enums import IssuePriority, IssueStatus


class Comment(BaseModel):
    """코멘트 — 생성 후 불변 (Immutable once created, append-only).

    Attributes:
        id: 코멘트 UUID (Comment identifier)
        user_id: 작성자 ID (Author id)
        user_name: 작성자 이름 스냅샷 (Author name snapshot)
        content: 내용 (Text)
        timestamp: 작성 시각, epoch 밀리초 (Epoch milliseconds)
    """

    id: str
    user_id: str
    user_name: str
    content: str
    timestamp: int


class Attachment(BaseModel):
    """첨부 파일 — data는 base64 data URL (inline-encoded, size-capped)."""

    id: str | None = None  # 없으면 서버에서 생성 (Assigned by the server when missing)
    name: str
    type: str
    data: str


class IssueResponse(BaseModel):
    """이슈 응답 스키마.

    Attributes:
        id: 이슈 UUID (Issue identifier)
        status / priority: 정규화된 열거형 (Coerced enums)
        place: 장소, 없으면 "Outlet" (Defaults to "Outlet")
        reported_by_name: 보고자 이름 스냅샷, 없으면 "Unknown"
        created_at / updated_at: UTC 일시 (UTC timestamps)
        permitted_actions: 요청 주체에게 허용된 이슈 동작 (Issue actions the caller may perform)
    """

    id: str
    title: str
    description: str
    status: IssueStatus
    priority: IssuePriority
    category: str | None = None
    sub_category: str | None = None
    place: str
    location: str | None = None
    reported_by: str
    reported_by_name: str
    assigned_to: str | None = None
    assigned_to_name: str | None = None
    created_at: datetime
    updated_at: datetime
    comments: list[Comment] = []
    attachments: list[Attachment] = []
    ai_analysis: str | None = None
    permitted_actions: list[str] = []


class IssueListResponse(BaseModel):
    """이슈 목록 응답 — 폴링 주기 포함.

    Attributes:
        items: 필터 적용된 이슈 (Filtered issues, most recently updated first)
        total: 항목 수 (Item count)
        refresh_interval_seconds: 클라이언트 폴링 주기 (Client poll interval)
    """

    items: list[IssueResponse]
    total: int
    refresh_interval_seconds: int


class IssueCreate(BaseModel):
    """이슈 생성 요청 스키마.

    All text fields are required and must be non-empty; the service rejects
    blanks and a sub-category outside its category.
    """

    title: str
    description: str
    category: str
    sub_category: str
    place: str
    location: str
    priority: IssuePriority = IssuePriority.MEDIUM
    attachments: list[Attachment] = []


class IssueUpdate(BaseModel):
    """이슈 수정 요청 스키마 (희소 패치).

    Sparse patch: only fields present in the request body are written.
    attachments, when supplied, replace the stored list wholesale.
    """

    title: str | None = None
    description: str | None = None
    category: str | None = None
    sub_category: str | None = None
    place: str | None = None
    location: str | None = None
    priority: IssuePriority | None = None
    attachments: list[Attachment] | None = None


class StatusUpdate(BaseModel):
    status: IssueStatus


class AssignmentUpdate(BaseModel):
    """담당 기술자 지정 — None이면 배정 해제 (None unassigns)."""

    technician_id: str | None = None


class CommentCreate(BaseModel):
    content: str


class AIAnalysisResponse(BaseModel):
    """AI 진단 응답.

    Attributes:
        ai_analysis: 제안 텍스트 또는 안내 문구 (Suggestion or placeholder text)
        cached: 저장된 결과를 재사용했는지 (Whether the stored analysis was reused)
    """

    ai_analysis: str
    cached: bool


class ExpandDescriptionRequest(BaseModel):
    title: str
    category: str


class AITextResponse(BaseModel):
    text: str


class CatalogResponse(BaseModel):
    """카테고리/장소/지점 설정 테이블 (Category, place and branch configuration)."""

    categories: dict[str, list[str]]
    places: list[str]
    branches: list[str]
