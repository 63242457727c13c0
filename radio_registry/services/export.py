"""Spreadsheet export of the whole registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from typing import Iterable, List
from zoneinfo import ZoneInfo

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from ..core.choices import ACTION_EXPORT
from ..crud.logs import log_action
from ..crud.radios import list_radios
from ..models.radio import Radio
from .timeutil import format_local

LOGGER = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Radio Registry"
EXPORT_OPERATOR = "System"
MAX_COLUMN_WIDTH = 50

EXPORT_COLUMNS = (
    "Serial Number",
    "Radio ID",
    "Model",
    "Version",
    "Status",
    "Assigned User",
    "Department",
    "Shift",
    "Location",
    "Notes",
    "Last Updated By",
    "Created Date",
    "Updated Date",
)


@dataclass
class ExportResult:
    filename: str
    content: bytes
    row_count: int


def radio_to_row(radio: Radio, tz: str) -> List[str]:
    """Project a radio onto the export columns, in ``EXPORT_COLUMNS`` order."""

    return [
        radio.serial_number,
        radio.radio_id or "",
        radio.model,
        radio.version or "",
        radio.status or "Active",
        radio.user_name or "",
        radio.department or "",
        radio.shift or "",
        radio.location or "",
        radio.notes or "",
        radio.operator_name or "",
        format_local(radio.created_at, tz),
        format_local(radio.updated_at, tz),
    ]


def build_workbook(radios: Iterable[Radio], tz: str) -> bytes:
    """Serialise radios into a single-sheet xlsx workbook with a bold header row."""

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    sheet.append(list(EXPORT_COLUMNS))

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    for cell in sheet[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")

    widths = [len(label) for label in EXPORT_COLUMNS]
    for radio in radios:
        row = radio_to_row(radio, tz)
        sheet.append(row)
        for index, value in enumerate(row):
            widths[index] = max(widths[index], len(value))

    for index, width in enumerate(widths, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = min(width + 2, MAX_COLUMN_WIDTH)
    sheet.freeze_panes = "A2"

    output = BytesIO()
    workbook.save(output)
    return output.getvalue()


def export_filename(now: datetime, tz: str) -> str:
    return f"radio_registry_{now.astimezone(ZoneInfo(tz)).strftime('%Y-%m-%d_%H-%M-%S')}.xlsx"


def export_radios(
    db: Session,
    *,
    tz: str = "UTC",
    ip_address: str | None = None,
    now: datetime | None = None,
) -> ExportResult:
    """Export every radio (newest first) and record one ``EXPORT`` audit entry."""

    radios = list_radios(db)
    content = build_workbook(radios, tz)
    filename = export_filename(now or datetime.now(timezone.utc), tz)
    LOGGER.info("Exported registry", extra={"extra_data": {"rows": len(radios), "filename": filename}})
    log_action(
        db,
        ACTION_EXPORT,
        details=f"Exported {len(radios)} radios to Excel",
        operator_name=EXPORT_OPERATOR,
        ip_address=ip_address,
    )
    return ExportResult(filename=filename, content=content, row_count=len(radios))
