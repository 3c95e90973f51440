from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_manager

from .schemas import MemberSchema, MemberRolesUpdate
from . import service

member_router = APIRouter(prefix="/members", tags=["Members"])

# List members of the caller's org
@member_router.get("", response_model=list[MemberSchema])
def list_members(db: Session = Depends(get_db), user = Depends(get_current_active_user)):
    return service.get_members(db, org_id=user.org_id)

# Current member
@member_router.get("/me", response_model=MemberSchema)
def me(user = Depends(get_current_active_user)):
    return user

# Opt in to org roles (replaces the current set)
@member_router.put("/me/roles", response_model=MemberSchema)
def update_my_roles(
    payload: MemberRolesUpdate,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
):
    return service.set_member_roles(db, user, payload.role_ids)

# Remove a member (manager only, never yourself)
@member_router.delete("/{member_id}")
def delete_member(
    member_id: int,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _mgr = Depends(require_manager),
):
    service.delete_member(db, member_id, org_id=user.org_id, actor_id=user.id)
    return {"message": "member deleted"}
