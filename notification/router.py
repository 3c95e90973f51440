from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user

from .schema import PushSubscriptionPayload, PushUnsubscribePayload
from . import service

push_router = APIRouter(prefix="/push", tags=["Push"])

# Subscribe this browser for the current member
@push_router.post("")
def subscribe(
    payload: PushSubscriptionPayload,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
):
    service.upsert_subscription(db, user.id, payload.subscription)
    return {"subscribed": True}

# Unsubscribe (only the caller's own endpoints)
@push_router.delete("")
def unsubscribe(
    payload: PushUnsubscribePayload,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
):
    service.delete_subscription(db, user.id, payload.endpoint)
    return {"unsubscribed": True}
