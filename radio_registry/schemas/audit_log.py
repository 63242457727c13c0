from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    radio_id: Optional[str] = None
    radio_serial: Optional[str] = None
    details: Optional[str] = None
    operator_name: Optional[str] = None
    ip_address: Optional[str] = None
    timestamp: str


class DepartmentCount(BaseModel):
    department: str
    count: int


class StatsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    by_department: list[DepartmentCount] = Field(alias="byDepartment")
    recent_activity: int = Field(alias="recentActivity")
