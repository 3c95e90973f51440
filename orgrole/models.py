from __future__ import annotations
from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base
from member.models import member_org_roles

class OrgRole(Base):
    __tablename__ = "org_roles"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)

    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_orgrole_org_name"),
    )

    #relationship
    org = relationship("Organization", back_populates="org_roles")
    members = relationship("Member", secondary=member_org_roles, back_populates="org_roles")
