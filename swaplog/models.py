from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Any
from sqlalchemy import DateTime, ForeignKey, JSON, Index, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base
from shift.models import utcnow

class SwapAction(str, Enum):
    posted = "posted"
    claimed = "claimed"
    approved = "approved"
    declined = "declined"
    cancelled = "cancelled"

class ShiftSwapLog(Base):
    """Append-only audit row; one per accepted shift transition."""
    __tablename__ = "shift_swap_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    shift_id: Mapped[int] = mapped_column(ForeignKey("shifts.id"), index=True, nullable=False)
    actor_id: Mapped[int] = mapped_column(ForeignKey("members.id"), index=True, nullable=False)
    action: Mapped[SwapAction] = mapped_column(SAEnum(SwapAction, name="swap_action"), nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    # relationships
    shift = relationship("Shift", back_populates="swap_logs")
    actor = relationship("Member")

Index("ix_swap_logs_shift_created", ShiftSwapLog.shift_id, ShiftSwapLog.created_at)
