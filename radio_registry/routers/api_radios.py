from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..crud.radios import (
    bulk_create_radios,
    create_radio,
    delete_radio,
    get_radio_by_serial,
    list_radios,
    update_radio,
)
from ..db.session import get_db
from ..deps.client import client_ip
from ..schemas.radio import (
    BulkImportIn,
    BulkImportOut,
    MessageOut,
    OperatorIn,
    RadioCreated,
    RadioIn,
    RadioOut,
)

router = APIRouter(prefix="/api/radios", tags=["radios"])


@router.get("", response_model=list[RadioOut])
def api_list_radios(
    search: Optional[str] = None,
    department: Optional[str] = None,
    model: Optional[str] = None,
    user: Optional[str] = None,
    version: Optional[str] = None,
    status: Optional[str] = None,
    shift: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    return list_radios(
        db,
        search=search,
        department=department,
        model=model,
        user=user,
        version=version,
        status=status,
        shift=shift,
        limit=limit,
    )


@router.get("/serial/{serial_number}", response_model=Optional[RadioOut])
def api_get_by_serial(serial_number: str, db: Session = Depends(get_db)):
    return get_radio_by_serial(db, serial_number)


@router.post("", response_model=RadioCreated, status_code=201)
def api_create_radio(payload: RadioIn, request: Request, db: Session = Depends(get_db)):
    radio = create_radio(db, payload.model_dump(), ip_address=client_ip(request))
    return {"message": "Radio added successfully", "id": radio.id, "serial_number": radio.serial_number}


@router.post("/bulk", response_model=BulkImportOut, response_model_exclude_none=True)
def api_bulk_import(payload: BulkImportIn, request: Request, db: Session = Depends(get_db)):
    rows = [row.model_dump() for row in payload.radios or []]
    result = bulk_create_radios(db, rows, payload.operator_name, ip_address=client_ip(request))
    return {
        "message": "Bulk import completed",
        "success_count": result["success_count"],
        "error_count": result["error_count"],
        "errors": result["errors"] or None,
    }


@router.put("/{radio_id}", response_model=MessageOut)
def api_update_radio(radio_id: str, payload: RadioIn, request: Request, db: Session = Depends(get_db)):
    update_radio(db, radio_id, payload.model_dump(), ip_address=client_ip(request))
    return {"message": "Radio updated successfully"}


@router.delete("/{radio_id}", response_model=MessageOut)
def api_delete_radio(
    radio_id: str,
    request: Request,
    payload: Optional[OperatorIn] = None,
    db: Session = Depends(get_db),
):
    operator_name = payload.operator_name if payload else None
    delete_radio(db, radio_id, operator_name, ip_address=client_ip(request))
    return {"message": "Radio deleted successfully"}
