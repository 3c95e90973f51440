from __future__ import annotations
import datetime as dt
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict

from .models import SwapAction
from member.models import MemberRole


class LogActorSchema(BaseModel):
    id: int
    name: str
    role: MemberRole
    model_config = ConfigDict(from_attributes=True)


class LogOwnerSchema(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


class LogShiftSchema(BaseModel):
    id: int
    title: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    original_owner: Optional[LogOwnerSchema] = None
    model_config = ConfigDict(from_attributes=True)


class ShiftSwapLogSchema(BaseModel):
    id: int
    shift_id: int
    actor_id: int
    action: SwapAction
    details: dict[str, Any]
    created_at: dt.datetime
    actor: Optional[LogActorSchema] = None
    shift: Optional[LogShiftSchema] = None
    model_config = ConfigDict(from_attributes=True)
