from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_manager
from organization import service as org_service
from .schemas import OrgRoleSchema, PublicOrgRoleSchema, OrgRoleCreatePayload, OrgRoleCreate
from . import service

orgrole_router = APIRouter(prefix="/roles", tags=["roles"])

# List roles with how many members hold each
@orgrole_router.get("", response_model=list[OrgRoleSchema])
def list_orgroles(db: Session = Depends(get_db), user=Depends(get_current_active_user)):
    return [
        OrgRoleSchema(id=role.id, org_id=role.org_id, name=role.name, member_count=count)
        for role, count in service.get_orgroles_with_counts(db, org_id=user.org_id)
    ]

# Roles offered on the join screen (no auth)
@orgrole_router.get("/public", response_model=list[PublicOrgRoleSchema])
def list_public_orgroles(join_code: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    org = org_service.get_organization_by_join_code(db, join_code)
    if not org:
        raise HTTPException(status_code=404, detail="Invalid join code")
    return service.get_orgroles(db, org_id=org.id)

# Create role
@orgrole_router.post("", response_model=OrgRoleSchema, status_code=status.HTTP_201_CREATED)
def orgrole_post(payload: OrgRoleCreatePayload, db: Session = Depends(get_db), user=Depends(get_current_active_user), _mgr = Depends(require_manager)):
    internal = OrgRoleCreate(org_id=user.org_id, name=payload.name)
    return service.create_orgrole(db, internal)

# Delete role
@orgrole_router.delete("/{orgrole_id}")
def orgrole_delete(orgrole_id: int, db: Session = Depends(get_db), user=Depends(get_current_active_user), _mgr = Depends(require_manager)):
    obj = service.get_orgrole_for_org(db, orgrole_id, user.org_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Role not found")
    service.delete_orgrole(db, orgrole_id)
    return {"message": "role deleted"}
