"""Shift lifecycle: post, claim, approve, decline, cancel.

    posted --claim--> claimed --approve--> approved
      ^                  |
      +-----decline------+
    posted|claimed --cancel--> cancelled

Each accepted transition runs in one transaction: the version-guarded shift
write plus exactly one swap-log row. Notifications go out only after commit
and can never undo or fail a transition.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from .errors import (
    AlreadyClaimed, Forbidden, InvalidTransition, NotFound, SelfClaimForbidden, ShiftError, VersionConflict,
)
from .events import ShiftEvent
from .models import Shift, ShiftStatus, TERMINAL_STATUSES
from .schemas import ShiftPost, TransitionAction
from .versioning import atomic, conditional_update, load_current, stale
from member.models import Member, MemberRole
from notification.service import Notifier, dispatch_shift_event
from swaplog.models import SwapAction
from swaplog.service import append_log

log = structlog.get_logger(__name__)

# statuses in which someone else has (or had) the shift
_TAKEN = frozenset({ShiftStatus.claimed, ShiftStatus.approved})


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _is_manager(actor) -> bool:
    return actor.role == MemberRole.manager


def _announce(db: Session, notifier: Optional[Notifier], event: ShiftEvent) -> None:
    if notifier is not None:
        dispatch_shift_event(db, notifier, event)


# ---------- POST ----------

def post_shift(db: Session, payload: ShiftPost, actor, notifier: Optional[Notifier] = None) -> Shift:
    """Create a shift in the open pool at version 0.

    Staff may only post their own shifts; managers may post for anyone in
    their organization.
    """
    if not _is_manager(actor) and payload.original_owner_id != actor.id:
        raise Forbidden("You can only post your own shifts")

    with atomic(db):
        owner = db.scalars(
            select(Member).where(Member.id == payload.original_owner_id, Member.org_id == payload.org_id)
        ).first()
        if owner is None:
            raise NotFound("Staff member not found")

        shift = Shift(
            org_id=payload.org_id,
            title=payload.title,
            date=payload.date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            reason=payload.reason,
            required_role_id=payload.required_role_id,
            original_owner_id=owner.id,
            posted_by_id=actor.id,
            status=ShiftStatus.posted,
            version=0,
        )
        db.add(shift)
        db.flush()
        append_log(
            db,
            shift_id=shift.id,
            actor_id=actor.id,
            action=SwapAction.posted,
            details={
                "title": shift.title,
                "date": shift.date.isoformat(),
                "start_time": shift.start_time.strftime("%H:%M"),
                "end_time": shift.end_time.strftime("%H:%M"),
                "reason": shift.reason,
                "owner_id": owner.id,
                "owner_name": owner.name,
                "posted_by": actor.name,
            },
        )
        event = ShiftEvent.from_shift(shift, action=SwapAction.posted, actor=actor)

    log.info("shift_transition", shift_id=event.shift_id, action="posted", version=0, actor_id=actor.id)
    _announce(db, notifier, event)
    return shift


# ---------- transitions ----------

def _transition(
    db: Session,
    *,
    shift_id: int,
    expected_version: int,
    actor,
    action: SwapAction,
    predicate: Callable[[Shift], bool],
    mutation: Callable[[Shift], dict[str, Any]],
    describe: Callable[[Shift, dict[str, Any]], dict[str, Any]],
    precheck: Optional[Callable[[Shift], None]] = None,
    reject: Optional[Callable[[Shift], ShiftError]] = None,
    on_conflict: Optional[Callable[[Shift, int], VersionConflict]] = None,
    notifier: Optional[Notifier] = None,
) -> Shift:
    before: dict[str, Any] = {}

    def _mutate(row: Shift) -> dict[str, Any]:
        before.update(status=row.status, claimed_by_id=row.claimed_by_id)
        return mutation(row)

    try:
        with atomic(db):
            if precheck is not None:
                precheck(load_current(db, shift_id, actor.org_id))
            shift = conditional_update(
                db,
                shift_id,
                expected_version,
                predicate,
                _mutate,
                org_id=actor.org_id,
                reject=reject,
                on_conflict=on_conflict,
            )
            append_log(db, shift_id=shift.id, actor_id=actor.id, action=action, details=describe(shift, before))
            event = ShiftEvent.from_shift(
                shift, action=action, actor=actor, previous_claimant_id=before.get("claimed_by_id")
            )
    except ShiftError as exc:
        log.info(
            "shift_transition_rejected",
            shift_id=shift_id,
            action=action.value,
            expected_version=expected_version,
            actor_id=actor.id,
            code=exc.code,
        )
        raise

    log.info(
        "shift_transition",
        shift_id=shift_id,
        action=action.value,
        version=event.version,
        actor_id=actor.id,
    )
    _announce(db, notifier, event)
    return shift


def _terminal_or(error: type[ShiftError]) -> Callable[[Shift], ShiftError]:
    def reject(row: Shift) -> ShiftError:
        if row.status in TERMINAL_STATUSES:
            return InvalidTransition(
                f"Shift is already {row.status.value}", shift_id=row.id
            )
        return error(shift_id=row.id)
    return reject


def claim_shift(
    db: Session, shift_id: int, expected_version: int, actor, notifier: Optional[Notifier] = None
) -> Shift:
    def precheck(row: Shift) -> None:
        # owner never changes, so this holds whatever version the caller saw
        if row.original_owner_id == actor.id:
            raise SelfClaimForbidden(shift_id=row.id)

    def on_conflict(row: Shift, expected: int) -> VersionConflict:
        if row.status in _TAKEN:
            return AlreadyClaimed(shift_id=row.id, expected_version=expected, current_version=row.version)
        return stale(row, expected)

    def reject(row: Shift) -> ShiftError:
        if row.status == ShiftStatus.claimed:
            return AlreadyClaimed(shift_id=row.id, expected_version=row.version, current_version=row.version)
        return _terminal_or(InvalidTransition)(row)

    return _transition(
        db,
        shift_id=shift_id,
        expected_version=expected_version,
        actor=actor,
        action=SwapAction.claimed,
        precheck=precheck,
        predicate=lambda row: row.status == ShiftStatus.posted,
        mutation=lambda row: {
            "status": ShiftStatus.claimed,
            "claimed_by_id": actor.id,
            "claimed_at": _now(),
        },
        describe=lambda row, before: {"claimed_by": actor.name, "claimed_by_id": actor.id},
        reject=reject,
        on_conflict=on_conflict,
        notifier=notifier,
    )


def approve_shift(
    db: Session, shift_id: int, expected_version: int, actor, notifier: Optional[Notifier] = None
) -> Shift:
    if not _is_manager(actor):
        raise Forbidden("Only managers can approve shifts")

    return _transition(
        db,
        shift_id=shift_id,
        expected_version=expected_version,
        actor=actor,
        action=SwapAction.approved,
        predicate=lambda row: row.status == ShiftStatus.claimed,
        mutation=lambda row: {"status": ShiftStatus.approved, "approved_at": _now()},
        describe=lambda row, before: {"approved_by": actor.name, "claimed_by_id": row.claimed_by_id},
        reject=_terminal_or(InvalidTransition),
        notifier=notifier,
    )


def decline_shift(
    db: Session, shift_id: int, expected_version: int, actor, notifier: Optional[Notifier] = None
) -> Shift:
    if not _is_manager(actor):
        raise Forbidden("Only managers can decline shifts")

    return _transition(
        db,
        shift_id=shift_id,
        expected_version=expected_version,
        actor=actor,
        action=SwapAction.declined,
        predicate=lambda row: row.status == ShiftStatus.claimed,
        mutation=lambda row: {
            "status": ShiftStatus.posted,
            "claimed_by_id": None,
            "claimed_at": None,
            "declined_at": _now(),
        },
        describe=lambda row, before: {
            "declined_by": actor.name,
            "previous_claimant_id": before.get("claimed_by_id"),
        },
        reject=_terminal_or(InvalidTransition),
        notifier=notifier,
    )


def cancel_shift(
    db: Session, shift_id: int, expected_version: int, actor, notifier: Optional[Notifier] = None
) -> Shift:
    # NOTE: the owner may cancel while someone else's claim is pending; that
    # claimant is not notified.
    def precheck(row: Shift) -> None:
        if not _is_manager(actor) and row.original_owner_id != actor.id:
            raise Forbidden("Only a manager or the shift's owner can cancel it", shift_id=row.id)

    return _transition(
        db,
        shift_id=shift_id,
        expected_version=expected_version,
        actor=actor,
        action=SwapAction.cancelled,
        precheck=precheck,
        predicate=lambda row: row.status in (ShiftStatus.posted, ShiftStatus.claimed),
        mutation=lambda row: {"status": ShiftStatus.cancelled, "cancelled_at": _now()},
        describe=lambda row, before: {
            "cancelled_by": actor.name,
            "previous_status": before["status"].value,
            "previous_claimant_id": before.get("claimed_by_id"),
        },
        reject=_terminal_or(InvalidTransition),
        notifier=notifier,
    )


_HANDLERS = {
    TransitionAction.claim: claim_shift,
    TransitionAction.approve: approve_shift,
    TransitionAction.decline: decline_shift,
    TransitionAction.cancel: cancel_shift,
}


def apply_transition(
    db: Session,
    shift_id: int,
    action: TransitionAction,
    expected_version: int,
    actor,
    notifier: Optional[Notifier] = None,
) -> Shift:
    try:
        handler = _HANDLERS[TransitionAction(action)]
    except ValueError:
        raise InvalidTransition(f"Unknown action {action!r}", shift_id=shift_id)
    return handler(db, shift_id, expected_version, actor, notifier=notifier)
