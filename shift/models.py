from __future__ import annotations
import datetime as dt
from enum import Enum
from sqlalchemy import (
    CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ShiftStatus(str, Enum):
    posted = "posted"
    claimed = "claimed"
    approved = "approved"
    declined = "declined"
    cancelled = "cancelled"


TERMINAL_STATUSES = frozenset({ShiftStatus.approved, ShiftStatus.cancelled})


class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(primary_key=True)

    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), index=True, nullable=False
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date(), nullable=False)
    start_time: Mapped[dt.time] = mapped_column(Time(), nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time(), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text(), nullable=True)

    status: Mapped[ShiftStatus] = mapped_column(
        SAEnum(ShiftStatus, name="shift_status"), nullable=False, default=ShiftStatus.posted
    )
    # optimistic concurrency token; only shift.versioning writes it
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    original_owner_id: Mapped[int] = mapped_column(ForeignKey("members.id"), index=True, nullable=False)
    posted_by_id: Mapped[int] = mapped_column(ForeignKey("members.id"), nullable=False)
    claimed_by_id: Mapped[int | None] = mapped_column(ForeignKey("members.id"), index=True, nullable=True)

    # notification hint only; no FK so a deleted role leaves the historic id behind
    required_role_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    claimed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    declined_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("status != 'claimed' OR claimed_by_id IS NOT NULL", name="ck_shift_claimed_has_claimant"),
        CheckConstraint("status != 'posted' OR claimed_by_id IS NULL", name="ck_shift_posted_unclaimed"),
        CheckConstraint("version >= 0", name="ck_shift_version_non_negative"),
    )

    # relationships
    org = relationship("Organization", back_populates="shifts")
    original_owner = relationship("Member", foreign_keys=[original_owner_id])
    posted_by = relationship("Member", foreign_keys=[posted_by_id])
    claimed_by = relationship("Member", foreign_keys=[claimed_by_id])
    swap_logs = relationship("ShiftSwapLog", back_populates="shift", order_by="ShiftSwapLog.id")

# helpful composite index: org + date
Index("ix_shifts_org_date", Shift.org_id, Shift.date)
Index("ix_shifts_org_status", Shift.org_id, Shift.status)
