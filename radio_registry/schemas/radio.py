"""Pydantic schemas that describe radio payloads for the API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RadioIn(BaseModel):
    # Required fields are checked by the CRUD layer so a missing value is
    # reported with the same 400 message whichever client sent it.
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    serial_number: Optional[str] = None
    radio_id: Optional[str] = None
    model: Optional[str] = None
    version: Optional[str] = None
    user_name: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    shift: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    operator_name: Optional[str] = None


class OperatorIn(BaseModel):
    operator_name: Optional[str] = None


class BulkImportIn(BaseModel):
    radios: Optional[list[RadioIn]] = None
    operator_name: Optional[str] = None


class RadioOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    serial_number: str
    radio_id: Optional[str] = None
    model: str
    version: Optional[str] = None
    user_name: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    shift: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    operator_name: Optional[str] = None
    created_at: str
    updated_at: str
    created_by_ip: Optional[str] = None


class RadioCreated(BaseModel):
    message: str
    id: str
    serial_number: str


class MessageOut(BaseModel):
    message: str


class BulkImportOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    success_count: int = Field(alias="successCount")
    error_count: int = Field(alias="errorCount")
    errors: Optional[list[str]] = None


class RadioTemplate(BaseModel):
    id: str
    name: str
    model: str
    version: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
