"""Time tracking arithmetic shared by payments, projects and the dashboard."""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from backend.app.core.time import ensure_utc, utc_now
from backend.app.models.time_entry import TimeEntry


def entry_hours(entry: TimeEntry, now: datetime | None = None) -> Decimal:
    """Elapsed hours for an entry; in-progress entries are measured up to ``now``."""
    start = ensure_utc(entry.start_time)
    end = ensure_utc(entry.end_time) or ensure_utc(now) or utc_now()
    seconds = Decimal(str((end - start).total_seconds()))
    if seconds <= 0:
        return Decimal("0")
    return seconds / Decimal("3600")


def total_hours(entries: Iterable[TimeEntry], now: datetime | None = None) -> Decimal:
    return sum((entry_hours(entry, now) for entry in entries), Decimal("0"))


def calculate_entries_amount(entries: Iterable[TimeEntry], now: datetime | None = None) -> Decimal:
    """Sum of hours x project hourly rate, rounded to cents."""
    amount = Decimal("0")
    for entry in entries:
        rate = Decimal(str(entry.project.hourly_rate or 0))
        amount += entry_hours(entry, now) * rate
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def round_hours(hours: Decimal) -> float:
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
