from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_manager

from .schema import ShiftSwapLogSchema
from . import service

history_router = APIRouter(prefix="/history", tags=["History"])

# Swap history, newest first (manager only)
@history_router.get("", response_model=list[ShiftSwapLogSchema])
def list_history(
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _mgr = Depends(require_manager),
):
    return service.get_history(db, org_id=user.org_id, limit=limit)
