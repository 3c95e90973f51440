import datetime as dt
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from .models import ShiftStatus


class TransitionAction(str, Enum):
    claim = "claim"
    approve = "approve"
    decline = "decline"
    cancel = "cancel"


class MemberBrief(BaseModel):
    id: int
    name: str
    staff_title: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class ShiftSchema(BaseModel):
    id: int
    org_id: int
    title: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    reason: Optional[str] = None
    status: ShiftStatus
    version: int
    original_owner_id: int
    posted_by_id: int
    claimed_by_id: Optional[int] = None
    required_role_id: Optional[int] = None
    created_at: Optional[dt.datetime] = None
    claimed_at: Optional[dt.datetime] = None
    approved_at: Optional[dt.datetime] = None
    declined_at: Optional[dt.datetime] = None
    cancelled_at: Optional[dt.datetime] = None

    original_owner: Optional[MemberBrief] = None
    claimed_by: Optional[MemberBrief] = None
    posted_by: Optional[MemberBrief] = None

    model_config = ConfigDict(from_attributes=True)


class ShiftListSchema(BaseModel):
    shifts: list[ShiftSchema]
    total: int
    page: int
    page_size: int


class ShiftPostPayload(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    date: dt.date
    start_time: dt.time = Field(..., description="Local wall-clock time, e.g. 09:00")
    end_time: dt.time = Field(..., description="Local wall-clock time, e.g. 17:00")
    original_owner_id: int
    required_role_id: Optional[int] = None
    reason: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    # overnight shifts (end < start) are allowed; zero-length ones are not
    @model_validator(mode="after")
    def start_differs_from_end(self):
        if self.start_time == self.end_time:
            raise ValueError("start_time and end_time must differ")
        return self


# Internal DTO the lifecycle uses
class ShiftPost(BaseModel):
    org_id: int
    title: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    original_owner_id: int
    required_role_id: Optional[int] = None
    reason: Optional[str] = None


class ShiftTransitionPayload(BaseModel):
    action: TransitionAction
    version: int = Field(..., ge=0, description="The shift version the caller last saw")

    model_config = ConfigDict(extra="forbid")
