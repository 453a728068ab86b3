"""Attendance marking endpoints (staff; closed to guests)."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, Depends

from guild.attendance.schemas import (
    AttendanceMarkResponse,
    AttendanceRecordResponse,
    BulkAttendanceRequest,
    MarkAttendanceRequest,
)
from guild.attendance.service import bulk_mark_attendance, mark_attendance
from guild.db.models import Account, AttendanceRecord
from guild.db.ports import MembershipStore
from guild.dependencies import get_store
from guild.identity.dependencies import get_current_account

router = APIRouter(prefix="/api/v1/attendance/mark", tags=["Attendance"])


def _response(session_id: str, records: Sequence[AttendanceRecord]) -> AttendanceMarkResponse:
    return AttendanceMarkResponse(
        session_id=session_id,
        marked=len(records),
        records=[AttendanceRecordResponse.model_validate(r) for r in records],
    )


@router.post("", response_model=AttendanceMarkResponse)
async def mark(
    body: MarkAttendanceRequest,
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> AttendanceMarkResponse:
    records = await mark_attendance(store, actor, body.session_id, body.account_ids, body.status)
    return _response(body.session_id, records)


@router.post("/bulk", response_model=AttendanceMarkResponse)
async def mark_bulk(
    body: BulkAttendanceRequest,
    actor: Account = Depends(get_current_account),
    store: MembershipStore = Depends(get_store),
) -> AttendanceMarkResponse:
    records = await bulk_mark_attendance(
        store, actor, body.session_id, [(entry.account_id, entry.status) for entry in body.records]
    )
    return _response(body.session_id, records)
