from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_manager
from member.models import MemberRole

from .schema import OrganizationSchema, JoinCodeSchema
from . import service

organization_router = APIRouter(prefix="/organizations", tags=["organizations"])

@organization_router.get("/me", response_model=OrganizationSchema)
def my_organization(
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    ):
    obj = service.get_organization(db, user.org_id)
    if not obj:
        raise HTTPException(status_code=404, detail="organization not found")
    members, shifts = service.get_counts(db, user.org_id)
    # only managers see the join code
    if user.role != MemberRole.manager:
        return OrganizationSchema(id=obj.id, name=obj.name, member_count=members, shift_count=shifts)
    return OrganizationSchema(
        id=obj.id,
        name=obj.name,
        member_count=members,
        shift_count=shifts,
        join_code=obj.join_code,
        created_at=obj.created_at,
    )

# Regenerate join code; the old one stops working immediately
@organization_router.post("/me/join-code", response_model=JoinCodeSchema)
def regenerate_join_code(
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _mgr = Depends(require_manager),
    ):
    org = service.regenerate_join_code(db, user.org_id)
    return JoinCodeSchema(join_code=org.join_code)
