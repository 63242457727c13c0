"""Radio CRUD helpers.

Every successful create, update and delete appends exactly one audit entry
after the change itself has been committed.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable
from uuid import uuid4

from sqlalchemy import desc, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.choices import (
    ACTION_ADD,
    ACTION_BULK_IMPORT,
    ACTION_DELETE,
    ACTION_UPDATE,
    STATUS_ACTIVE,
    normalize_serial,
)
from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..models.radio import Radio
from ..services.timeutil import utcnow_iso
from .logs import log_action

logger = logging.getLogger(__name__)

# Columns copied verbatim from a payload onto a row.
EDITABLE_FIELDS = (
    "radio_id",
    "model",
    "version",
    "user_name",
    "department",
    "location",
    "shift",
    "status",
    "notes",
)

# (column, label) pairs reported in UPDATE audit details, in this order.
DIFF_FIELDS = (
    ("radio_id", "radio_id"),
    ("model", "model"),
    ("version", "version"),
    ("user_name", "user"),
    ("department", "department"),
    ("location", "location"),
    ("shift", "shift"),
    ("status", "status"),
)

SEARCH_COLUMNS = (
    Radio.serial_number,
    Radio.radio_id,
    Radio.model,
    Radio.user_name,
    Radio.department,
    Radio.location,
)

REQUIRED_MESSAGE = "Serial number, model, and operator name are required"
DUPLICATE_MESSAGE = "Radio with this serial number already exists"
NOT_FOUND_MESSAGE = "Radio not found"


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_payload(payload: dict[str, Any]) -> dict[str, str | None]:
    data = {field: _clean(payload.get(field)) for field in EDITABLE_FIELDS}
    data["serial_number"] = normalize_serial(payload.get("serial_number")) or None
    data["status"] = data["status"] or STATUS_ACTIVE
    return data


def _like_pattern(term: str) -> str:
    escaped = term.replace("/", "//").replace("%", "/%").replace("_", "/_")
    return f"%{escaped}%"


def list_radios(
    db: Session,
    *,
    search: str | None = None,
    department: str | None = None,
    model: str | None = None,
    user: str | None = None,
    version: str | None = None,
    status: str | None = None,
    shift: str | None = None,
    limit: int | None = None,
) -> list[Radio]:
    """Return radios newest first, optionally narrowed by search text and exact filters."""

    stmt = select(Radio)
    term = (search or "").strip()
    if term:
        pattern = _like_pattern(term)
        stmt = stmt.where(or_(*(column.ilike(pattern, escape="/") for column in SEARCH_COLUMNS)))

    filters = (
        (Radio.department, department),
        (Radio.model, model),
        (Radio.user_name, user),
        (Radio.version, version),
        (Radio.status, status),
        (Radio.shift, shift),
    )
    for column, value in filters:
        if value:
            stmt = stmt.where(column == value)

    stmt = stmt.order_by(desc(Radio.created_at))
    if limit:
        stmt = stmt.limit(limit)
    return db.execute(stmt).scalars().all()


def get_radio(db: Session, radio_id: str) -> Radio | None:
    return db.get(Radio, radio_id)


def get_radio_by_serial(db: Session, serial_number: str | None) -> Radio | None:
    serial = normalize_serial(serial_number)
    if not serial:
        return None
    stmt = select(Radio).where(Radio.serial_number == serial)
    return db.execute(stmt).scalars().first()


def _insert_radio(db: Session, data: dict[str, str | None], operator_name: str, ip_address: str | None) -> Radio:
    now = utcnow_iso()
    radio = Radio(
        id=str(uuid4()),
        serial_number=data["serial_number"],
        operator_name=operator_name,
        created_at=now,
        updated_at=now,
        created_by_ip=ip_address,
        **{field: data[field] for field in EDITABLE_FIELDS},
    )
    db.add(radio)
    db.commit()
    db.refresh(radio)
    return radio


def create_radio(db: Session, payload: dict[str, Any], *, ip_address: str | None = None) -> Radio:
    """Insert a new radio and audit it with an ``ADD`` entry.

    Raises ``ValidationError`` when serial number, model or operator name is
    missing and ``ConflictError`` (carrying the existing row) when the serial
    number is already registered.
    """

    data = _clean_payload(payload)
    operator_name = _clean(payload.get("operator_name"))
    if not data["serial_number"] or not data["model"] or not operator_name:
        raise ValidationError(REQUIRED_MESSAGE)

    existing = get_radio_by_serial(db, data["serial_number"])
    if existing:
        raise ConflictError(DUPLICATE_MESSAGE, existing)

    try:
        radio = _insert_radio(db, data, operator_name, ip_address)
    except IntegrityError:
        # Lost a race with another insert of the same serial.
        db.rollback()
        existing = get_radio_by_serial(db, data["serial_number"])
        if existing:
            raise ConflictError(DUPLICATE_MESSAGE, existing)
        raise

    logger.info("Radio added", extra={"extra_data": {"radio_id": radio.id, "serial_number": radio.serial_number}})
    log_action(
        db,
        ACTION_ADD,
        radio_id=radio.id,
        radio_serial=radio.serial_number,
        details=f"Added radio: {radio.model}",
        operator_name=operator_name,
        ip_address=ip_address,
    )
    return radio


def describe_changes(before: dict[str, str | None], after: dict[str, str | None]) -> list[str]:
    """Return ``"<label>: <old> → <new>"`` tokens for every tracked field that changed."""

    changes = []
    for field, label in DIFF_FIELDS:
        old, new = before.get(field), after.get(field)
        if old != new:
            changes.append(f"{label}: {old or ''} → {new or ''}")
    return changes


def update_radio(
    db: Session,
    radio_id: str,
    payload: dict[str, Any],
    *,
    ip_address: str | None = None,
) -> Radio:
    """Replace every editable field of a radio and audit the field-level diff."""

    data = _clean_payload(payload)
    operator_name = _clean(payload.get("operator_name"))
    if not data["serial_number"] or not data["model"] or not operator_name:
        raise ValidationError(REQUIRED_MESSAGE)

    radio = get_radio(db, radio_id)
    if not radio:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    if data["serial_number"] != radio.serial_number:
        clash = get_radio_by_serial(db, data["serial_number"])
        if clash and clash.id != radio.id:
            raise ConflictError(DUPLICATE_MESSAGE, clash)

    # Stored rows may hold "" where newer writes store NULL.
    before = {field: _clean(getattr(radio, field)) for field, _ in DIFF_FIELDS}
    radio.serial_number = data["serial_number"]
    for field in EDITABLE_FIELDS:
        setattr(radio, field, data[field])
    radio.operator_name = operator_name
    radio.updated_at = utcnow_iso()
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        clash = get_radio_by_serial(db, data["serial_number"])
        if clash and clash.id != radio_id:
            raise ConflictError(DUPLICATE_MESSAGE, clash)
        raise
    db.refresh(radio)

    changes = describe_changes(before, data)
    summary = ", ".join(changes) if changes else "no tracked field changes"
    logger.info("Radio updated", extra={"extra_data": {"radio_id": radio.id, "changes": len(changes)}})
    log_action(
        db,
        ACTION_UPDATE,
        radio_id=radio.id,
        radio_serial=radio.serial_number,
        details=f"Updated radio: {summary}",
        operator_name=operator_name,
        ip_address=ip_address,
    )
    return radio


def delete_radio(
    db: Session,
    radio_id: str,
    operator_name: str | None,
    *,
    ip_address: str | None = None,
) -> None:
    """Remove a radio permanently and audit it with a ``DELETE`` entry."""

    operator = _clean(operator_name)
    if not operator:
        raise ValidationError("Operator name is required for deletion logging")

    radio = get_radio(db, radio_id)
    if not radio:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    serial, model = radio.serial_number, radio.model
    db.delete(radio)
    db.commit()

    logger.info("Radio deleted", extra={"extra_data": {"radio_id": radio_id, "serial_number": serial}})
    log_action(
        db,
        ACTION_DELETE,
        radio_id=radio_id,
        radio_serial=serial,
        details=f"Deleted radio: {model}",
        operator_name=operator,
        ip_address=ip_address,
    )


def bulk_create_radios(
    db: Session,
    rows: Iterable[dict[str, Any]] | None,
    operator_name: str | None,
    *,
    ip_address: str | None = None,
) -> dict[str, Any]:
    """Create many radios, collecting per-row failures instead of aborting.

    Returns ``success_count``, ``error_count`` and ``errors`` (``"Row <n>: ..."``
    messages with 1-based row numbers).
    """

    operator = _clean(operator_name)
    if not operator:
        raise ValidationError("Operator name is required for bulk import")
    rows = list(rows or [])
    if not rows:
        raise ValidationError("Radios array is required and must not be empty")

    success_count = 0
    errors: list[str] = []
    for index, row in enumerate(rows, start=1):
        data = _clean_payload(row)
        serial = data["serial_number"]
        if not serial or not data["model"]:
            errors.append(f"Row {index}: Serial number and model are required")
            continue
        if get_radio_by_serial(db, serial):
            errors.append(f"Row {index}: Radio {serial} already exists")
            continue
        try:
            radio = _insert_radio(db, data, operator, ip_address)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Bulk import insert failed", extra={"extra_data": {"row": index, "serial_number": serial}})
            errors.append(f"Row {index}: Error inserting radio {serial}")
            continue
        log_action(
            db,
            ACTION_ADD,
            radio_id=radio.id,
            radio_serial=radio.serial_number,
            details=f"Bulk import: Added radio {radio.model}",
            operator_name=operator,
            ip_address=ip_address,
        )
        success_count += 1

    error_count = len(errors)
    logger.info(
        "Bulk import completed",
        extra={"extra_data": {"success_count": success_count, "error_count": error_count}},
    )
    log_action(
        db,
        ACTION_BULK_IMPORT,
        details=f"Bulk import completed: {success_count} success, {error_count} errors",
        operator_name=operator,
        ip_address=ip_address,
    )
    return {"success_count": success_count, "error_count": error_count, "errors": errors}
