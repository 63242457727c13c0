from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog
from ..models.radio import Radio
from .timeutil import to_storage

RECENT_ACTIVITY_WINDOW = timedelta(days=7)


def calculate_stats(db: Session, now: datetime | None = None) -> Dict[str, Any]:
    """Summarise the registry for the dashboard.

    ``by_department`` skips radios with no department and is ordered by count,
    largest first. ``recent_activity`` counts audit entries newer than seven
    days before ``now``.
    """

    total = db.execute(select(func.count()).select_from(Radio)).scalar_one()

    count = func.count(Radio.id).label("count")
    dept_stmt = (
        select(Radio.department, count)
        .where(Radio.department.is_not(None), Radio.department != "")
        .group_by(Radio.department)
        .order_by(desc(count), Radio.department)
    )
    by_department = [
        {"department": row.department, "count": int(row.count)}
        for row in db.execute(dept_stmt).all()
    ]

    since = to_storage((now or datetime.now(timezone.utc)) - RECENT_ACTIVITY_WINDOW)
    recent_activity = db.execute(
        select(func.count()).select_from(AuditLog).where(AuditLog.timestamp >= since)
    ).scalar_one()

    return {
        "total": int(total),
        "by_department": by_department,
        "recent_activity": int(recent_activity),
    }
