from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException

from auth.utils.auth_utils import generate_join_code
from .models import Organization
from member.models import Member
from shift.models import Shift

MAX_JOIN_CODE_ATTEMPTS = 10

def get_organization(db: Session, org_id: int) -> Optional[Organization]:
    return db.get(Organization, org_id)

def get_organization_by_join_code(db: Session, join_code: str) -> Optional[Organization]:
    stmt = select(Organization).where(Organization.join_code == join_code.strip().upper())
    return db.scalars(stmt).first()

def new_join_code(db: Session) -> str:
    code = generate_join_code()
    for _ in range(MAX_JOIN_CODE_ATTEMPTS):
        if get_organization_by_join_code(db, code) is None:
            break
        code = generate_join_code()
    # the unique index has the final say if all attempts collided
    return code

def regenerate_join_code(db: Session, org_id: int) -> Organization:
    org = db.get(Organization, org_id)
    if not org:
        raise HTTPException(status_code=404, detail="organization not found")
    org.join_code = new_join_code(db)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="could not generate a unique join code, please retry")
    db.refresh(org)
    return org

def get_counts(db: Session, org_id: int) -> tuple[int, int]:
    members = db.scalar(select(func.count(Member.id)).where(Member.org_id == org_id)) or 0
    shifts = db.scalar(select(func.count(Shift.id)).where(Shift.org_id == org_id)) or 0
    return members, shifts
