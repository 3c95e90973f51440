from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from member.models import MemberRole


class CreateOrgPayload(BaseModel):
    org_name: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=6)
    model_config = ConfigDict(extra="forbid")


class JoinOrgPayload(BaseModel):
    join_code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=6)
    staff_title: str = Field(..., min_length=1, max_length=128)
    role_ids: list[int] = []
    model_config = ConfigDict(extra="forbid")

    @field_validator("join_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class LoginPayload(BaseModel):
    email: EmailStr
    password: str
    model_config = ConfigDict(extra="forbid")


class SessionMember(BaseModel):
    id: int
    name: str
    email: str
    role: MemberRole
    staff_title: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class SessionOrganization(BaseModel):
    id: int
    name: str
    join_code: Optional[str] = None


class AuthResponse(BaseModel):
    member: SessionMember
    organization: SessionOrganization
    token: str


class SessionResponse(BaseModel):
    authenticated: bool
    member: Optional[SessionMember] = None
    org_id: Optional[int] = None
