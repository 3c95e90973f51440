from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_manager
from shift.models import ShiftStatus

from . import service
from .service import ExportFormat

export_router = APIRouter(prefix="/export", tags=["Export"])

# Download shifts as CSV or JSON (manager only)
@export_router.get("")
def export_shifts(
    format: ExportFormat = Query(ExportFormat.csv),
    status: Optional[ShiftStatus] = Query(None),
    date_from: Optional[date] = Query(None, description="Shift date >= date_from"),
    date_to: Optional[date] = Query(None, description="Shift date <= date_to"),
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _mgr = Depends(require_manager),
):
    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=422, detail="date_from must be on or before date_to")
    content = service.export_shifts(
        db, org_id=user.org_id, status=status, date_from=date_from, date_to=date_to, fmt=format
    )
    return Response(
        content=content,
        media_type=service.MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{service.export_filename(format)}"'},
    )
