from decimal import Decimal
from typing import List

from pydantic import BaseModel

from backend.app.schemas.payment import PaymentRead
from backend.app.schemas.project import ProjectSummary
from backend.app.schemas.time_entry import TimeEntryRead


class DashboardOverview(BaseModel):
    total_projects: int
    recent_projects: List[ProjectSummary]
    recent_time_entries: List[TimeEntryRead]
    total_hours: float
    total_payments: int
    total_payment_amount: Decimal
    recent_payments: List[PaymentRead]
