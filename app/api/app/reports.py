"""리포트 라우터 — 대시보드, 기간 리포트, CSV/XLSX 다운로드.

Report Router — Dashboard statistics, the date-range performance report
and its CSV/XLSX downloads. Dates default to the current local month.
"""

from datetime import date
from io import BytesIO
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.analytics.export import CSV_MEDIA_TYPE, XLSX_MEDIA_TYPE
from app.api.deps import get_actor
from app.database import get_db
from app.schemas.report import DashboardResponse, RangeReportResponse
from app.services.permission_service import Actor
from app.services.report_service import default_range, report_service

router: APIRouter = APIRouter()


def _resolve_range(start: date | None, end: date | None) -> tuple[date, date]:
    default_start, default_end = default_range()
    return start or default_start, end or default_end


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> DashboardResponse:
    """대시보드 — 상태/우선순위 집계와 최근 수정 5건."""
    return await report_service.dashboard(db, actor)


@router.get("/range", response_model=RangeReportResponse)
async def get_range_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
    start_date: Annotated[date | None, Query(description="시작일 (inclusive)")] = None,
    end_date: Annotated[date | None, Query(description="종료일 (inclusive)")] = None,
) -> RangeReportResponse:
    """기간 리포트 — 합계, 해결률, 일별 건수, 상태 분포."""
    start, end = _resolve_range(start_date, end_date)
    return await report_service.range_report(db, actor, start, end)


@router.get("/range/csv")
async def download_range_csv(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
    start_date: date | None = None,
    end_date: date | None = None,
) -> Response:
    """기간 리포트 CSV 다운로드 (UTF-8 BOM)."""
    start, end = _resolve_range(start_date, end_date)
    filename, content = await report_service.export_csv(db, actor, start, end)
    return Response(
        content=content.encode("utf-8"),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/range/xlsx")
async def download_range_xlsx(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
    start_date: date | None = None,
    end_date: date | None = None,
) -> StreamingResponse:
    """기간 리포트 Excel 다운로드."""
    start, end = _resolve_range(start_date, end_date)
    filename, content = await report_service.export_xlsx(db, actor, start, end)
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
