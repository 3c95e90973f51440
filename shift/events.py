from __future__ import annotations
import datetime as dt
from dataclasses import dataclass
from typing import Optional

from .models import Shift
from swaplog.models import SwapAction


@dataclass(frozen=True)
class ShiftEvent:
    """Snapshot of a committed transition, handed to collaborators after commit."""
    action: SwapAction
    shift_id: int
    org_id: int
    version: int
    title: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    original_owner_id: int
    owner_name: str
    actor_id: int
    actor_name: str
    claimed_by_id: Optional[int] = None
    claimant_name: Optional[str] = None
    previous_claimant_id: Optional[int] = None
    required_role_id: Optional[int] = None

    @classmethod
    def from_shift(cls, shift: Shift, *, action: SwapAction, actor, previous_claimant_id: Optional[int] = None) -> "ShiftEvent":
        return cls(
            action=action,
            shift_id=shift.id,
            org_id=shift.org_id,
            version=shift.version,
            title=shift.title,
            date=shift.date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            original_owner_id=shift.original_owner_id,
            owner_name=shift.original_owner.name,
            actor_id=actor.id,
            actor_name=actor.name,
            claimed_by_id=shift.claimed_by_id,
            claimant_name=shift.claimed_by.name if shift.claimed_by is not None else None,
            previous_claimant_id=previous_claimant_id,
            required_role_id=shift.required_role_id,
        )
