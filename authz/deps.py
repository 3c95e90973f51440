from fastapi import Depends, HTTPException
from auth.services.auth_service import get_current_active_user
from member.models import Member, MemberRole

# Gate for manager-only routes; yields the caller's org id
def require_manager(user: Member = Depends(get_current_active_user)) -> int:
    if user.role != MemberRole.manager:
        raise HTTPException(status_code=403, detail="Manager role required")
    return user.org_id
