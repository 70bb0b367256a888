"""Time entry schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from backend.app.core.time import ensure_utc
from backend.app.schemas.project import ProjectSummary
from backend.app.schemas.user import UserSummary


class TimeEntryBase(BaseModel):
    description: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time is not None and ensure_utc(self.end_time) < ensure_utc(self.start_time):
            raise ValueError("End time must be after start time")
        return self


class TimeEntryCreate(TimeEntryBase):
    project_id: int


class TimeEntryUpdate(TimeEntryBase):
    pass


class TimeEntryRead(BaseModel):
    id: int
    user_id: int
    project_id: int
    payment_id: Optional[int] = None
    description: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TimeEntryDetail(TimeEntryRead):
    project: ProjectSummary
    user: UserSummary
    hours: float
