"""
Utility helpers shared across stores/services.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Callable, Optional

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now()


def today_string(clock: Optional[Clock] = None) -> str:
    """Return the current local date as 'YYYY-MM-DD'."""
    now = (clock or system_clock)()
    return now.strftime("%Y-%m-%d")


def parse_day(value: Any) -> Optional[date]:
    """Parse a 'YYYY-MM-DD' string; anything else yields None."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def new_record_id() -> str:
    return uuid.uuid4().hex


def same_id(left: Any, right: Any) -> bool:
    """Compare record ids tolerating legacy numeric ids next to string ids."""
    if left is None or right is None:
        return False
    return str(left) == str(right)
