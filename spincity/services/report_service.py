"""Activity reports bucketed by day, month or year."""

from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Optional, Tuple

from spincity.core.utils import Clock, parse_day, system_clock
from spincity.domain.entities import REPAIR_COMPLETED
from spincity.repositories.base import CollectionStore

PERIODS = ("daily", "monthly", "yearly")

METRIC_LABELS = (
    ("newContacts", "Contacts"),
    ("newRentals", "Rentals"),
    ("newRepairs", "New Repairs"),
    ("completedRepairs", "Done Repairs"),
)


class ReportError(ValueError):
    pass


def in_period(day: Optional[date], period: str, today: date) -> bool:
    if day is None:
        return False
    if period == "daily":
        return day == today
    if period == "monthly":
        return (day.year, day.month) == (today.year, today.month)
    if period == "yearly":
        return day.year == today.year
    raise ReportError(f"Unknown report period: {period}")


def _count(records: Iterable[dict], field: str, period: str, today: date) -> int:
    return sum(1 for r in records if in_period(parse_day(r.get(field)), period, today))


class ReportService:
    def __init__(
        self,
        contacts: CollectionStore,
        rentals: CollectionStore,
        repairs: CollectionStore,
        clock: Optional[Clock] = None,
    ) -> None:
        self._contacts = contacts
        self._rentals = rentals
        self._repairs = repairs
        self._clock = clock or system_clock

    async def activity(self, period: str) -> dict:
        if period not in PERIODS:
            raise ReportError(f"Unknown report period: {period}")
        today = self._clock().date()
        repairs = await self._repairs.list()
        completed = [r for r in repairs if r.get("status") == REPAIR_COMPLETED]
        return {
            "period": period,
            "newContacts": _count(await self._contacts.list(), "createdAt", period, today),
            "newRentals": _count(await self._rentals.list(), "startDate", period, today),
            "newRepairs": _count(repairs, "reportedDate", period, today),
            "completedRepairs": _count(completed, "reportedDate", period, today),
        }

    async def activity_csv(self, period: str) -> Tuple[str, str]:
        """Return (filename, csv text) for the period's report."""
        data = await self.activity(period)
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(["Metric", "Value"])
        for key, label in METRIC_LABELS:
            writer.writerow([label, data[key]])
        filename = f"report_{period}_{self._clock().strftime('%Y-%m-%d')}.csv"
        return filename, buf.getvalue()
