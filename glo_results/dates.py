from __future__ import annotations

import datetime as dt
from typing import List

from .types import DateRequest

# The lottery draws on the 1st and the 16th of each month.
DRAW_DAYS = (1, 16)


def format_draw_key(day: str, month: str, year: str) -> str:
    """Return the canonical ``YYYY-MM-DD`` storage key for a draw date."""
    return f"{year}-{str(month).zfill(2)}-{str(day).zfill(2)}"


def is_draw_key(value: object) -> bool:
    """True for a real calendar date written exactly as ``YYYY-MM-DD``."""
    if not isinstance(value, str) or len(value) != 10:
        return False
    try:
        parsed = dt.date.fromisoformat(value)
    except ValueError:
        return False
    return parsed.isoformat() == value


def request_key(request: DateRequest) -> str:
    return format_draw_key(request.day, request.month, request.year)


def parse_cli_date(value: str) -> DateRequest:
    """Parse ``DD-MM-YYYY`` (or ``DD/MM/YYYY``) into a request."""
    parts = value.replace("/", "-").split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Expected DD-MM-YYYY, got {value!r}")
    day, month, year = parts
    dt.date(int(year), int(month), int(day))
    return DateRequest(day.zfill(2), month.zfill(2), year)


def generate_draw_dates(year: int) -> List[DateRequest]:
    dates: List[DateRequest] = []
    for month in range(1, 13):
        for day in DRAW_DAYS:
            date = dt.date(year, month, day)
            dates.append(DateRequest(f"{date.day:02d}", f"{date.month:02d}", str(date.year)))
    return dates
