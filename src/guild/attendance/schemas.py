"""Schemas for attendance marking."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MarkAttendanceRequest(BaseModel):
    """Same status for a list of accounts."""

    session_id: str
    account_ids: list[str] = Field(..., min_length=1, max_length=500)
    status: str


class AttendanceEntry(BaseModel):
    account_id: str
    status: str


class BulkAttendanceRequest(BaseModel):
    """Individual status per account."""

    session_id: str
    records: list[AttendanceEntry] = Field(..., min_length=1, max_length=500)


class AttendanceRecordResponse(BaseModel):
    account_id: str
    session_id: str
    program_id: str | None
    status: str
    marked_by: str
    marked_at: datetime

    model_config = {"from_attributes": True}


class AttendanceMarkResponse(BaseModel):
    session_id: str
    marked: int
    records: list[AttendanceRecordResponse]
