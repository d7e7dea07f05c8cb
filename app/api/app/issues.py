"""이슈 라우터 — 이슈 목록/상세/생성/수정/상태/배정/코멘트/AI 진단/삭제 API.

Issue Router — Issue lifecycle endpoints. The list endpoint applies scope,
view, search, facet and date filters; every response listing issues
carries the client poll interval, and each issue carries the actions the
caller may take on it.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.analytics.filters import ALL, IssueView, filter_issues
from app.api.deps import get_actor, get_current_user, require_action
from app.config import settings
from app.database import get_db
from app.schemas.issue import (
    AIAnalysisResponse,
    AssignmentUpdate,
    CatalogResponse,
    CommentCreate,
    IssueCreate,
    IssueListResponse,
    IssueResponse,
    IssueUpdate,
    StatusUpdate,
)
from app.schemas.user import UserResponse
from app.services.issue_service import issue_service
from app.services.mappers import with_permissions
from app.services.permission_service import Action, Actor
from app.services.user_service import user_service
from app.utils.catalog import load_catalog
from app.utils.dates import report_zone

router: APIRouter = APIRouter()


@router.get("", response_model=IssueListResponse)
async def list_issues(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
    view: IssueView = IssueView.ALL,
    search: str = "",
    status: Annotated[str, Query(description="상태 또는 ALL (Status or ALL)")] = ALL,
    location: Annotated[str, Query(description="지점 또는 ALL (Branch or ALL)")] = ALL,
    place: Annotated[str, Query(description="장소 또는 ALL (Place or ALL)")] = ALL,
    created_on: Annotated[date | None, Query(alias="date")] = None,
) -> IssueListResponse:
    """이슈 목록 — 최근 수정 순, 필터는 AND로 결합.

    List issues in the caller's scope, most recently updated first.
    """
    issues: list[IssueResponse] = filter_issues(
        await issue_service.load_all(db),
        actor,
        view=view,
        search=search,
        status=status.upper(),
        location=location,
        place=place,
        created_on=created_on,
        tz=report_zone(),
    )
    return IssueListResponse(
        items=[with_permissions(issue, actor) for issue in issues],
        total=len(issues),
        refresh_interval_seconds=settings.POLL_INTERVAL_SECONDS,
    )


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
) -> dict:
    """카테고리/하위 카테고리/장소/지점 목록."""
    return load_catalog().as_dict()


@router.get("/technicians", response_model=list[UserResponse])
async def list_technicians(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_action(Action.ASSIGN_TECHNICIAN))],
) -> list[UserResponse]:
    """배정 가능한 기술자 목록 (ADMIN/MANAGER)."""
    return await user_service.list_technicians(db)


@router.post("", response_model=IssueResponse, status_code=201)
async def create_issue(
    data: IssueCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> IssueResponse:
    """이슈 생성 — 상태 OPEN, 보고자 이름 스냅샷."""
    result: IssueResponse = await issue_service.create_issue(db, actor, current_user, data)
    await db.commit()
    return result


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> IssueResponse:
    """이슈 상세 조회."""
    return await issue_service.get_issue(db, actor, issue_id)


@router.put("/{issue_id}", response_model=IssueResponse)
async def update_issue(
    issue_id: UUID,
    data: IssueUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> IssueResponse:
    """이슈 수정 — 전달된 필드만 변경 (sparse patch)."""
    result: IssueResponse = await issue_service.update_issue(db, actor, issue_id, data)
    await db.commit()
    return result


@router.patch("/{issue_id}/status", response_model=IssueResponse)
async def change_issue_status(
    issue_id: UUID,
    data: StatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_action(Action.CHANGE_ISSUE_STATUS))],
) -> IssueResponse:
    """상태 변경 (ADMIN/MANAGER/TECHNICIAN)."""
    result: IssueResponse = await issue_service.change_status(db, actor, issue_id, data.status)
    await db.commit()
    return result


@router.patch("/{issue_id}/assignment", response_model=IssueResponse)
async def assign_issue(
    issue_id: UUID,
    data: AssignmentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_action(Action.ASSIGN_TECHNICIAN))],
) -> IssueResponse:
    """담당 기술자 지정 — technician_id가 비어 있으면 배정 해제."""
    result: IssueResponse = await issue_service.assign_technician(
        db, actor, issue_id, data.technician_id
    )
    await db.commit()
    return result


@router.post("/{issue_id}/assign-to-me", response_model=IssueResponse)
async def assign_issue_to_me(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    actor: Annotated[Actor, Depends(require_action(Action.ASSIGN_TO_SELF))],
) -> IssueResponse:
    """관리자 본인에게 배정."""
    result: IssueResponse = await issue_service.assign_to_me(db, actor, current_user, issue_id)
    await db.commit()
    return result


@router.post("/{issue_id}/comments", response_model=IssueResponse, status_code=201)
async def add_comment(
    issue_id: UUID,
    data: CommentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> IssueResponse:
    """코멘트 추가 (append-only)."""
    result: IssueResponse = await issue_service.add_comment(
        db, actor, current_user, issue_id, data.content
    )
    await db.commit()
    return result


@router.post("/{issue_id}/ai-analysis", response_model=AIAnalysisResponse)
async def analyze_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_action(Action.REQUEST_AI_ANALYSIS))],
    refresh: bool = False,
) -> AIAnalysisResponse:
    """AI 진단 (ADMIN/MANAGER/TECHNICIAN) — 저장된 결과가 있으면 재사용, refresh=true면 재생성."""
    result: AIAnalysisResponse = await issue_service.ai_analysis(db, actor, issue_id, refresh)
    await db.commit()
    return result


@router.delete("/{issue_id}", status_code=204)
async def delete_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_action(Action.DELETE_ISSUE))],
) -> None:
    """이슈 삭제 (ADMIN/TECHNICIAN)."""
    await issue_service.delete_issue(db, actor, issue_id)
    await db.commit()
