from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import select, or_, exists
from sqlalchemy.orm import Session, selectinload

from .models import Member
from orgrole.models import OrgRole
from shift.models import Shift
from swaplog.models import ShiftSwapLog


def get_members(db: Session, *, org_id: int) -> List[Member]:
    stmt = (
        select(Member)
        .where(Member.org_id == org_id)
        .options(selectinload(Member.org_roles))
        .order_by(Member.role.asc(), Member.name.asc())
    )
    return list(db.scalars(stmt))


def get_member_for_org(db: Session, member_id: int, org_id: int) -> Optional[Member]:
    stmt = select(Member).where(Member.id == member_id, Member.org_id == org_id)
    return db.scalars(stmt).first()


def has_shift_history(db: Session, member_id: int) -> bool:
    in_shifts = exists().where(
        or_(
            Shift.original_owner_id == member_id,
            Shift.posted_by_id == member_id,
            Shift.claimed_by_id == member_id,
        )
    )
    in_logs = exists().where(ShiftSwapLog.actor_id == member_id)
    return bool(db.scalar(select(or_(in_shifts, in_logs))))


def delete_member(db: Session, member_id: int, *, org_id: int, actor_id: int) -> None:
    if member_id == actor_id:
        raise HTTPException(status_code=400, detail="You can't remove yourself")
    row = get_member_for_org(db, member_id, org_id)
    if not row:
        raise HTTPException(status_code=404, detail="Member not found")
    # the swap log is append-only and keeps its actor references
    if has_shift_history(db, member_id):
        raise HTTPException(status_code=409, detail="Member has shift history and cannot be removed")
    db.delete(row)
    db.commit()


def set_member_roles(db: Session, member: Member, role_ids: list[int]) -> Member:
    valid = list(db.scalars(
        select(OrgRole).where(OrgRole.id.in_(role_ids), OrgRole.org_id == member.org_id)
    )) if role_ids else []
    member.org_roles = valid
    db.commit()
    db.refresh(member)
    return member
