from __future__ import annotations
from typing import Any, List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session, joinedload

from .models import ShiftSwapLog, SwapAction
from shift.models import Shift


def append_log(
    db: Session,
    *,
    shift_id: int,
    actor_id: int,
    action: SwapAction,
    details: Optional[dict[str, Any]] = None,
) -> ShiftSwapLog:
    # no commit: the row rides in the caller's shift transaction
    row = ShiftSwapLog(shift_id=shift_id, actor_id=actor_id, action=action, details=details or {})
    db.add(row)
    db.flush()
    return row


# Newest first, scoped to one org
def get_history(db: Session, *, org_id: int, limit: int = 100) -> List[ShiftSwapLog]:
    stmt = (
        select(ShiftSwapLog)
        .join(Shift, Shift.id == ShiftSwapLog.shift_id)
        .where(Shift.org_id == org_id)
        .options(
            joinedload(ShiftSwapLog.actor),
            joinedload(ShiftSwapLog.shift).joinedload(Shift.original_owner),
        )
        .order_by(ShiftSwapLog.created_at.desc(), ShiftSwapLog.id.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt).unique())


def get_logs_for_shift(db: Session, shift_id: int) -> List[ShiftSwapLog]:
    stmt = (
        select(ShiftSwapLog)
        .where(ShiftSwapLog.shift_id == shift_id)
        .order_by(ShiftSwapLog.created_at.asc(), ShiftSwapLog.id.asc())
    )
    return list(db.scalars(stmt))


def count_logs_for_shift(db: Session, shift_id: int) -> int:
    return db.scalar(
        select(func.count(ShiftSwapLog.id)).where(ShiftSwapLog.shift_id == shift_id)
    ) or 0
