from pydantic import BaseModel, ConfigDict, Field, field_validator

class OrgRoleSchema(BaseModel):
    id: int
    org_id: int
    name: str
    member_count: int = 0
    model_config = ConfigDict(from_attributes=True)

class PublicOrgRoleSchema(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)

# PUBLIC payload, what clients send
class OrgRoleCreatePayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Role name is required")
        return v

# INTERNAL DTO for the service
class OrgRoleCreate(BaseModel):
    org_id: int
    name: str
