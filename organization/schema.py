from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

class OrganizationSchema(BaseModel):
    id: int
    name: str
    member_count: int
    shift_count: int
    # manager-only fields
    join_code: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class JoinCodeSchema(BaseModel):
    join_code: str
