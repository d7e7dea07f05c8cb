"""리포트 내보내기 — CSV (Excel 호환) 및 XLSX.

Report export — Excel-friendly CSV and an openpyxl workbook with the same
13 columns. Rows are sorted by creation time, newest first.

CSV format:
    - UTF-8 with a byte-order mark so Excel detects the encoding
    - header row unquoted, every value quoted with "" escaping
    - Markdown stars stripped, line breaks collapsed to one space
    - rows joined by "\\n"
"""

import re
from collections.abc import Iterable
from datetime import date
from io import BytesIO
from typing import Any
from zoneinfo import ZoneInfo

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from app.schemas.issue import IssueResponse
from app.utils.dates import local_day

CSV_HEADERS: list[str] = [
    "Issue ID",
    "Logged Date",
    "Subject",
    "Description",
    "Category",
    "Sub-Category",
    "Area/Place",
    "Branch Location",
    "Priority Level",
    "Current Status",
    "Reported By",
    "Assigned Technician",
    "AI Support Notes",
]

BOM: str = "\ufeff"
CSV_MEDIA_TYPE: str = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_LINE_BREAKS = re.compile(r"[\r\n]+")


def report_filename(start: date, end: date, extension: str = "csv") -> str:
    """예: Performance_Report_2024-03-01_to_2024-03-31.csv"""
    return f"Performance_Report_{start.isoformat()}_to_{end.isoformat()}.{extension}"


def sanitize(value: Any) -> str:
    """마크다운 별표 제거, 줄바꿈을 공백으로 (strip stars, collapse line breaks, trim)."""
    if value is None:
        return ""
    text: str = str(value).replace("**", "").replace("*", "")
    return _LINE_BREAKS.sub(" ", text).strip()


def _quote(value: Any) -> str:
    return '"' + sanitize(value).replace('"', '""') + '"'


def report_row(issue: IssueResponse, tz: ZoneInfo | None = None) -> list[str]:
    """이슈 하나를 13개 컬럼 값으로 변환 (placeholders for missing values)."""
    return [
        issue.id[:8],
        local_day(issue.created_at, tz).isoformat(),
        issue.title,
        issue.description,
        issue.category or "",
        issue.sub_category or "N/A",
        issue.place or "Outlet",
        issue.location or "N/A",
        issue.priority.value,
        issue.status.label,
        issue.reported_by_name,
        issue.assigned_to_name or "Not Assigned",
        issue.ai_analysis or "No analysis available",
    ]


def _newest_first(issues: Iterable[IssueResponse]) -> list[IssueResponse]:
    return sorted(issues, key=lambda issue: issue.created_at, reverse=True)


def build_csv(issues: Iterable[IssueResponse], tz: ZoneInfo | None = None) -> str:
    """CSV 문서 생성 — BOM 접두, 헤더 + 행 (BOM-prefixed document text)."""
    lines: list[str] = [",".join(CSV_HEADERS)]
    for issue in _newest_first(issues):
        lines.append(",".join(_quote(value) for value in report_row(issue, tz)))
    return BOM + "\n".join(lines)


def build_xlsx(
    issues: Iterable[IssueResponse],
    start: date,
    end: date,
    tz: ZoneInfo | None = None,
) -> bytes:
    """같은 컬럼의 Excel 워크북 생성."""
    wb = Workbook()
    ws = wb.active
    ws.title = f"{start.isoformat()} to {end.isoformat()}"

    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")
    for col_idx, header in enumerate(CSV_HEADERS, 1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")

    for issue in _newest_first(issues):
        ws.append([sanitize(value) for value in report_row(issue, tz)])

    for i, w in enumerate([12, 13, 30, 50, 22, 28, 16, 22, 14, 16, 20, 22, 50], 1):
        ws.column_dimensions[ws.cell(row=1, column=i).column_letter].width = w

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
