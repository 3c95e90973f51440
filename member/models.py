from __future__ import annotations
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, DateTime, ForeignKey, String, Table, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

class MemberRole(str, Enum):
    manager = "manager"
    staff = "staff"

# many-to-many: which org roles a member has opted into
member_org_roles = Table(
    "member_org_roles",
    Base.metadata,
    Column("member_id", ForeignKey("members.id", ondelete="CASCADE"), primary_key=True),
    Column("org_role_id", ForeignKey("org_roles.id", ondelete="CASCADE"), primary_key=True, index=True),
)

class Member(Base):
    __tablename__ = "members"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[MemberRole] = mapped_column(
        SAEnum(MemberRole, name="member_role"), nullable=False, default=MemberRole.staff, index=True
    )
    staff_title: Mapped[str | None] = mapped_column(String(128), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("org_id", "email", name="uq_member_org_email"),
    )

    # relationships
    org = relationship("Organization", back_populates="members")
    org_roles = relationship("OrgRole", secondary=member_org_roles, back_populates="members")
    push_subscriptions = relationship("PushSubscription", back_populates="member", cascade="all, delete-orphan")

    @property
    def is_manager(self) -> bool:
        return self.role == MemberRole.manager
