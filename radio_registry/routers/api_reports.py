"""Read-only views over the registry: export, audit log, stats and presets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..core.choices import RADIO_TEMPLATES
from ..crud.logs import DEFAULT_LOG_LIMIT, list_logs
from ..db.session import get_db
from ..deps.client import client_ip
from ..schemas.audit_log import AuditLogOut, StatsOut
from ..schemas.radio import RadioTemplate
from ..services.export import XLSX_MEDIA_TYPE, export_radios
from ..services.stats import calculate_stats

router = APIRouter(prefix="/api", tags=["reports"])


@router.get("/export")
def api_export(request: Request, db: Session = Depends(get_db)):
    result = export_radios(db, tz=request.app.state.settings.TZ, ip_address=client_ip(request))
    return Response(
        content=result.content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.get("/logs", response_model=list[AuditLogOut])
def api_logs(limit: int = Query(default=DEFAULT_LOG_LIMIT, ge=1), db: Session = Depends(get_db)):
    return list_logs(db, limit=limit)


@router.get("/stats", response_model=StatsOut)
def api_stats(db: Session = Depends(get_db)):
    return calculate_stats(db)


@router.get("/templates", response_model=list[RadioTemplate])
def api_templates():
    return list(RADIO_TEMPLATES)
