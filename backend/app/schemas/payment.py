"""Payment schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from backend.app.models.payment import PaymentStatus
from backend.app.schemas.project import ProjectSummary
from backend.app.schemas.time_entry import TimeEntryRead
from backend.app.schemas.user import UserSummary


class PaymentCreate(BaseModel):
    project_id: int
    receiver_id: int
    time_entry_ids: List[int] = Field(min_length=1, description="At least one time entry is required")
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    requires_signed_document: bool = False


class ReceiptUpload(BaseModel):
    receipt_url: HttpUrl


class SignedDocumentUpload(BaseModel):
    signed_document_url: str = Field(min_length=1)


class StatusUpdate(BaseModel):
    status: Literal["PENDING", "COMPLETED", "CANCELLED"]


class PaymentRead(BaseModel):
    id: int
    project_id: int
    sender_id: int
    receiver_id: int
    amount: Decimal
    status: PaymentStatus
    requires_signed_document: bool
    receipt_url: Optional[str] = None
    signed_document_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentWithRelations(PaymentRead):
    project: ProjectSummary
    sender: UserSummary
    receiver: UserSummary
    time_entries: List[TimeEntryRead] = []


class PaymentDetail(PaymentWithRelations):
    total_hours: float
    calculated_amount: Decimal
    available_actions: List[str] = []
