"""Read-only export of shifts with their owners and swap history."""
from __future__ import annotations
import csv
import io
import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shift.models import Shift, ShiftStatus
from swaplog.models import ShiftSwapLog


class ExportFormat(str, Enum):
    csv = "csv"
    json = "json"


CSV_HEADERS = [
    "Date", "Start Time", "End Time", "Shift Title", "Status",
    "Original Staff", "Original Role", "Original Email",
    "Covered By", "Covered By Role", "Covered By Email",
    "Reason", "Posted By", "Claimed At", "Approved At", "Created At",
]

MEDIA_TYPES = {
    ExportFormat.csv: "text/csv",
    ExportFormat.json: "application/json",
}


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def get_export_rows(
    db: Session,
    *,
    org_id: int,
    status: Optional[ShiftStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[Shift]:
    stmt = (
        select(Shift)
        .where(Shift.org_id == org_id)
        .options(
            selectinload(Shift.original_owner),
            selectinload(Shift.claimed_by),
            selectinload(Shift.posted_by),
            selectinload(Shift.swap_logs).selectinload(ShiftSwapLog.actor),
        )
    )
    if status is not None:
        stmt = stmt.where(Shift.status == status)
    if date_from is not None:
        stmt = stmt.where(Shift.date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Shift.date <= date_to)
    stmt = stmt.order_by(Shift.date, Shift.start_time, Shift.id)
    return list(db.scalars(stmt))


def shift_to_record(s: Shift) -> dict[str, Any]:
    owner, cover = s.original_owner, s.claimed_by
    return {
        "shift_title": s.title,
        "date": s.date.isoformat(),
        "start_time": s.start_time.strftime("%H:%M"),
        "end_time": s.end_time.strftime("%H:%M"),
        "status": s.status.value,
        "original_staff": owner.name,
        "original_staff_role": owner.staff_title or "",
        "original_staff_email": owner.email,
        "covered_by": cover.name if cover else "",
        "covered_by_role": (cover.staff_title or "") if cover else "",
        "covered_by_email": cover.email if cover else "",
        "posted_by": s.posted_by.name,
        "reason": s.reason or "",
        "claimed_at": _iso(s.claimed_at),
        "approved_at": _iso(s.approved_at),
        "created_at": _iso(s.created_at),
        "history": [
            {
                "action": log.action.value,
                "by": log.actor.name,
                "at": _iso(log.created_at),
                "details": log.details,
            }
            for log in sorted(s.swap_logs, key=lambda l: (l.created_at, l.id))
        ],
    }


def render_json(shifts: list[Shift]) -> bytes:
    return json.dumps([shift_to_record(s) for s in shifts], indent=2).encode("utf-8")


def render_csv(shifts: list[Shift]) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_HEADERS)
    for s in shifts:
        r = shift_to_record(s)
        writer.writerow([
            r["date"], r["start_time"], r["end_time"], r["shift_title"], r["status"],
            r["original_staff"], r["original_staff_role"], r["original_staff_email"],
            r["covered_by"], r["covered_by_role"], r["covered_by_email"],
            r["reason"], r["posted_by"], r["claimed_at"], r["approved_at"], r["created_at"],
        ])
    return buf.getvalue().encode("utf-8")


def export_shifts(
    db: Session,
    *,
    org_id: int,
    status: Optional[ShiftStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    fmt: ExportFormat = ExportFormat.csv,
) -> bytes:
    shifts = get_export_rows(db, org_id=org_id, status=status, date_from=date_from, date_to=date_to)
    if ExportFormat(fmt) == ExportFormat.json:
        return render_json(shifts)
    return render_csv(shifts)


def export_filename(fmt: ExportFormat, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"shiftswap-export-{today.isoformat()}.{ExportFormat(fmt).value}"
