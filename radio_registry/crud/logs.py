"""Audit log helpers.

Writes here are best-effort: the mutation they describe has already been
committed, and a failed audit insert is logged instead of raised.
"""

from __future__ import annotations

import logging

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog
from ..services.timeutil import utcnow_iso

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 100


def log_action(
    db: Session,
    action: str,
    *,
    radio_id: str | None = None,
    radio_serial: str | None = None,
    details: str | None = None,
    operator_name: str | None = None,
    ip_address: str | None = None,
) -> AuditLog | None:
    """Append one audit entry, returning ``None`` if the write failed."""

    entry = AuditLog(
        action=action,
        radio_id=radio_id,
        radio_serial=radio_serial,
        details=details,
        operator_name=operator_name,
        ip_address=ip_address,
        timestamp=utcnow_iso(),
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Error logging action",
            extra={"extra_data": {"action": action, "radio_serial": radio_serial}},
        )
        return None
    return entry


def list_logs(db: Session, limit: int = DEFAULT_LOG_LIMIT) -> list[AuditLog]:
    """Most recent audit entries first."""

    stmt = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id)).limit(limit)
    return db.execute(stmt).scalars().all()
