"""Project schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from backend.app.schemas.user import UserSummary


class ProjectCreate(BaseModel):
    name: str = Field(min_length=2)
    description: Optional[str] = None
    hourly_rate: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class ProjectSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    hourly_rate: Decimal
    owner_id: int

    model_config = ConfigDict(from_attributes=True)


class ProjectRead(ProjectSummary):
    created_at: datetime
    updated_at: datetime
    owner: UserSummary
    members: List[UserSummary] = []


class MemberAdd(BaseModel):
    email: EmailStr
