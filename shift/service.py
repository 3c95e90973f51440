# shift/service.py
from __future__ import annotations
from typing import Optional
from sqlalchemy import Select, select, func, or_
from sqlalchemy.orm import Session, selectinload

from .models import Shift, ShiftStatus
from member.models import MemberRole

_MEMBER_LOADS = (
    selectinload(Shift.original_owner),
    selectinload(Shift.claimed_by),
    selectinload(Shift.posted_by),
)


def get_shift(db: Session, shift_id: int) -> Shift | None:
    return db.get(Shift, shift_id)


def get_shift_for_org(db: Session, shift_id: int, org_id: int) -> Optional[Shift]:
    stmt = select(Shift).where(Shift.id == shift_id, Shift.org_id == org_id).options(*_MEMBER_LOADS)
    return db.scalars(stmt).first()


def _visible_shifts(
    *,
    org_id: int,
    status: Optional[ShiftStatus],
    viewer_role: MemberRole,
    viewer_id: Optional[int],
) -> Select:
    stmt = select(Shift).where(Shift.org_id == org_id)
    if viewer_role != MemberRole.manager:
        # staff see the open pool plus anything they own or have claimed
        stmt = stmt.where(
            or_(
                Shift.status == ShiftStatus.posted,
                Shift.original_owner_id == viewer_id,
                Shift.claimed_by_id == viewer_id,
            )
        )
    if status is not None:
        stmt = stmt.where(Shift.status == status)
    return stmt


def get_shifts(
    db: Session,
    *,
    org_id: int,
    viewer_role: MemberRole,
    viewer_id: Optional[int] = None,
    status: Optional[ShiftStatus] = None,
    page: int = 1,
    page_size: int = 50,
) -> list[Shift]:
    stmt = _visible_shifts(org_id=org_id, status=status, viewer_role=viewer_role, viewer_id=viewer_id)
    stmt = (
        stmt.options(*_MEMBER_LOADS)
        .order_by(Shift.date, Shift.start_time, Shift.id)
        .offset((max(page, 1) - 1) * page_size)
        .limit(page_size)
    )
    return list(db.scalars(stmt))


def count_shifts(
    db: Session,
    *,
    org_id: int,
    viewer_role: MemberRole,
    viewer_id: Optional[int] = None,
    status: Optional[ShiftStatus] = None,
) -> int:
    stmt = _visible_shifts(org_id=org_id, status=status, viewer_role=viewer_role, viewer_id=viewer_id)
    return db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
