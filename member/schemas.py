from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from .models import MemberRole

class MemberOrgRoleSchema(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)

class MemberSchema(BaseModel):
    id: int
    org_id: int
    name: str
    email: str
    role: MemberRole
    staff_title: Optional[str] = None
    created_at: Optional[datetime] = None
    org_roles: list[MemberOrgRoleSchema] = []
    model_config = ConfigDict(from_attributes=True)

class MemberRolesUpdate(BaseModel):
    role_ids: list[int]
    model_config = ConfigDict(extra="forbid")
