from typing import Optional
from fastapi import APIRouter, Depends, Query, status, HTTPException
from sqlalchemy.orm import Session
from core.database import get_db
from auth.services.auth_service import get_current_active_user
from notification.service import Notifier, get_notifier
from .errors import ShiftError
from .models import ShiftStatus
from .schemas import ShiftSchema, ShiftListSchema, ShiftPostPayload, ShiftPost, ShiftTransitionPayload
from shift import service, lifecycle

shift_router = APIRouter(prefix="/shifts", tags=["Shifts"])


def _http_error(exc: ShiftError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


@shift_router.get("", response_model=ShiftListSchema)
def list_shifts(
    status: Optional[ShiftStatus] = Query(None, description="Filter by status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
):
    scope = dict(org_id=user.org_id, viewer_role=user.role, viewer_id=user.id, status=status)
    return ShiftListSchema(
        shifts=service.get_shifts(db, page=page, page_size=page_size, **scope),
        total=service.count_shifts(db, **scope),
        page=page,
        page_size=page_size,
    )

@shift_router.get("/{shift_id}", response_model=ShiftSchema)
def get_shift(shift_id: int, db: Session = Depends(get_db), user = Depends(get_current_active_user)):
    obj = service.get_shift_for_org(db, shift_id, user.org_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Shift not found")
    return obj

# Post a shift for swapping
@shift_router.post("", response_model=ShiftSchema, status_code=status.HTTP_201_CREATED)
def post_shift(
    payload: ShiftPostPayload,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    notifier: Notifier = Depends(get_notifier),
):
    internal = ShiftPost(org_id=user.org_id, **payload.model_dump())
    try:
        return lifecycle.post_shift(db, internal, user, notifier=notifier)
    except ShiftError as exc:
        raise _http_error(exc)

# Claim / approve / decline / cancel, guarded by the version the caller last saw
@shift_router.patch("/{shift_id}", response_model=ShiftSchema)
def transition_shift(
    shift_id: int,
    payload: ShiftTransitionPayload,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return lifecycle.apply_transition(db, shift_id, payload.action, payload.version, user, notifier=notifier)
    except ShiftError as exc:
        raise _http_error(exc)
