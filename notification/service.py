"""Push notifications for shift events.

Delivery is best-effort and always runs after the shift transaction has
committed: nothing here may raise back into the lifecycle.
"""
from __future__ import annotations
import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional

import structlog
from pywebpush import WebPushException, webpush
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config_loader import settings
from member.models import Member, MemberRole, member_org_roles
from shift.events import ShiftEvent
from swaplog.models import SwapAction
from .models import PushSubscription
from .schema import PushSubscriptionCreate

log = structlog.get_logger(__name__)

# push services answer these for subscriptions that are gone for good
_GONE = (404, 410)


@dataclass(frozen=True)
class NotificationPayload:
    title: str
    body: str
    tag: Optional[str] = None
    url: Optional[str] = None


# ---------- subscriptions ----------

def get_subscriptions_for_member(db: Session, member_id: int) -> List[PushSubscription]:
    stmt = select(PushSubscription).where(PushSubscription.member_id == member_id).order_by(PushSubscription.id)
    return list(db.scalars(stmt))


def upsert_subscription(db: Session, member_id: int, dto: PushSubscriptionCreate) -> PushSubscription:
    row = db.scalars(select(PushSubscription).where(PushSubscription.endpoint == dto.endpoint)).first()
    if row is None:
        row = PushSubscription(endpoint=dto.endpoint, member_id=member_id, p256dh=dto.keys.p256dh, auth=dto.keys.auth)
        db.add(row)
    else:
        # endpoint moved to another member on this browser, or keys rotated
        row.member_id = member_id
        row.p256dh = dto.keys.p256dh
        row.auth = dto.keys.auth
    try:
        db.commit()
    except IntegrityError:
        # a concurrent subscribe for the same endpoint won; take its row
        db.rollback()
        return upsert_subscription(db, member_id, dto)
    db.refresh(row)
    return row


def delete_subscription(db: Session, member_id: int, endpoint: str) -> int:
    rows = db.scalars(
        select(PushSubscription).where(PushSubscription.endpoint == endpoint, PushSubscription.member_id == member_id)
    ).all()
    for row in rows:
        db.delete(row)
    db.commit()
    return len(rows)


def prune_subscription(db: Session, subscription_id: int) -> None:
    row = db.get(PushSubscription, subscription_id)
    if row:
        db.delete(row)
        db.commit()


# ---------- delivery ----------

class Notifier(ABC):
    """Sends a payload to every device a member subscribed."""

    @abstractmethod
    def notify_member(self, db: Session, member_id: int, payload: NotificationPayload) -> None:
        ...

    def notify_members(self, db: Session, member_ids: Iterable[int], payload: NotificationPayload) -> None:
        for member_id in member_ids:
            try:
                self.notify_member(db, member_id, payload)
            except Exception:
                # drop whatever the failed send left pending on the shared session
                db.rollback()
                log.warning("notification_failed", member_id=member_id, tag=payload.tag, exc_info=True)


class PushNotifier(Notifier):
    """Web Push (VAPID) delivery through pywebpush."""

    def __init__(
        self,
        vapid_private_key: Optional[str] = None,
        vapid_subject: Optional[str] = None,
        ttl: int = 60 * 60 * 24,
    ):
        self.vapid_private_key = vapid_private_key or settings.VAPID_PRIVATE_KEY
        self.vapid_subject = vapid_subject or settings.VAPID_SUBJECT
        self.ttl = ttl

    @property
    def enabled(self) -> bool:
        return bool(self.vapid_private_key)

    def notify_member(self, db: Session, member_id: int, payload: NotificationPayload) -> None:
        if not self.enabled:
            log.debug("push_disabled", member_id=member_id, tag=payload.tag)
            return
        data = json.dumps({k: v for k, v in asdict(payload).items() if v is not None})
        for sub in get_subscriptions_for_member(db, member_id):
            try:
                webpush(
                    subscription_info={"endpoint": sub.endpoint, "keys": {"p256dh": sub.p256dh, "auth": sub.auth}},
                    data=data,
                    vapid_private_key=self.vapid_private_key,
                    vapid_claims={"sub": self.vapid_subject},
                    ttl=self.ttl,
                )
            except WebPushException as exc:
                status = getattr(exc.response, "status_code", None)
                if status in _GONE:
                    log.info("push_subscription_pruned", subscription_id=sub.id, status=status)
                    prune_subscription(db, sub.id)
                else:
                    log.warning("push_delivery_failed", subscription_id=sub.id, status=status, error=str(exc))


# ---------- audiences ----------

def staff_audience(
    db: Session,
    *,
    org_id: int,
    exclude_member_id: Optional[int] = None,
    required_role_id: Optional[int] = None,
) -> List[int]:
    """Staff to tell about an open shift.

    When the shift names a role and at least one eligible staff member holds
    it, only they are told; otherwise every staff member is.
    """
    stmt = select(Member.id).where(Member.org_id == org_id, Member.role == MemberRole.staff)
    if exclude_member_id is not None:
        stmt = stmt.where(Member.id != exclude_member_id)

    if required_role_id is not None:
        holders = list(db.scalars(
            stmt.join(member_org_roles, member_org_roles.c.member_id == Member.id)
            .where(member_org_roles.c.org_role_id == required_role_id)
            .order_by(Member.id)
        ))
        if holders:
            return holders
    return list(db.scalars(stmt.order_by(Member.id)))


def role_audience(
    db: Session, *, org_id: int, role: MemberRole, exclude_member_id: Optional[int] = None
) -> List[int]:
    stmt = select(Member.id).where(Member.org_id == org_id, Member.role == role)
    if exclude_member_id is not None:
        stmt = stmt.where(Member.id != exclude_member_id)
    return list(db.scalars(stmt.order_by(Member.id)))


def _when(event: ShiftEvent) -> str:
    day = event.date.strftime("%A %d %B %Y")
    return f"{day} ({event.start_time.strftime('%H:%M')} - {event.end_time.strftime('%H:%M')})"


def plan_notifications(db: Session, event: ShiftEvent) -> list[tuple[list[int], NotificationPayload]]:
    """Who hears about ``event`` and what they are told."""
    when = _when(event)

    if event.action == SwapAction.posted:
        return [(
            staff_audience(db, org_id=event.org_id, exclude_member_id=event.original_owner_id,
                           required_role_id=event.required_role_id),
            NotificationPayload(
                title="Shift Available!",
                body=f"{event.owner_name}'s {event.title} on {when} is up for grabs!",
                tag=f"shift-{event.shift_id}",
            ),
        )]

    if event.action == SwapAction.claimed:
        return [(
            role_audience(db, org_id=event.org_id, role=MemberRole.manager),
            NotificationPayload(
                title="Shift Claimed!",
                body=f"{event.claimant_name} wants to cover {event.owner_name}'s {event.title} on {when}. Approve?",
                tag=f"claim-{event.shift_id}",
            ),
        )]

    if event.action == SwapAction.approved:
        plan = []
        if event.claimed_by_id is not None:
            plan.append(([event.claimed_by_id], NotificationPayload(
                title="Shift Approved!",
                body=f"Your claim for {event.title} on {when} has been approved!",
                tag=f"approved-{event.shift_id}",
            )))
        plan.append(([event.original_owner_id], NotificationPayload(
            title="Shift Swap Confirmed",
            body=f"{event.claimant_name} will cover your {event.title} on {when}.",
            tag=f"approved-{event.shift_id}",
        )))
        return plan

    if event.action == SwapAction.declined:
        return [(
            staff_audience(db, org_id=event.org_id, exclude_member_id=event.original_owner_id,
                           required_role_id=event.required_role_id),
            NotificationPayload(
                title="Shift Available Again!",
                body=f"{event.title} on {when} is available for claiming again.",
                tag=f"shift-{event.shift_id}",
            ),
        )]

    # cancelled: nobody is told
    return []


def dispatch_shift_event(db: Session, notifier: Notifier, event: ShiftEvent) -> None:
    """Fan ``event`` out; failures are logged and dropped."""
    try:
        for member_ids, payload in plan_notifications(db, event):
            notifier.notify_members(db, member_ids, payload)
    except Exception:
        db.rollback()
        log.warning(
            "shift_notification_failed",
            shift_id=event.shift_id,
            action=event.action.value,
            exc_info=True,
        )


def get_notifier() -> Notifier:
    return PushNotifier()
