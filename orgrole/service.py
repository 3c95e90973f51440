from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from .models import OrgRole
from .schemas import OrgRoleCreate
from member.models import member_org_roles

def get_orgroles(db: Session, *, org_id: int) -> List[OrgRole]:
    stmt = select(OrgRole).where(OrgRole.org_id == org_id).order_by(OrgRole.name.asc())
    return list(db.scalars(stmt))

def get_orgroles_with_counts(db: Session, *, org_id: int) -> List[tuple[OrgRole, int]]:
    stmt = (
        select(OrgRole, func.count(member_org_roles.c.member_id))
        .outerjoin(member_org_roles, member_org_roles.c.org_role_id == OrgRole.id)
        .where(OrgRole.org_id == org_id)
        .group_by(OrgRole.id)
        .order_by(OrgRole.name.asc())
    )
    return [(role, count) for role, count in db.execute(stmt).all()]

def get_orgrole_for_org(db: Session, orgrole_id: int, org_id: int) -> Optional[OrgRole]:
    stmt = select(OrgRole).where(OrgRole.id == orgrole_id, OrgRole.org_id == org_id)
    return db.scalars(stmt).first()

def create_orgrole(db: Session, dto: OrgRoleCreate) -> OrgRole:
    existing = db.scalars(
        select(OrgRole).where(OrgRole.org_id == dto.org_id, OrgRole.name == dto.name)
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="A role with this name already exists")
    row = OrgRole(org_id=dto.org_id, name=dto.name)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A role with this name already exists")
    db.refresh(row)
    return row

# Shifts keep their required_role_id; it simply stops matching anyone
def delete_orgrole(db: Session, orgrole_id: int) -> None:
    row = db.get(OrgRole, orgrole_id)
    if row:
        db.delete(row)
        db.commit()
    return
