"""Utility helpers for cohort_graph.

Pure functions with no dependencies for:
- Whitespace cleanup
- Timestamps and safe ratios
- Month/year date handling for profile records
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional


MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


def collapse_whitespace(value: str) -> str:
    """Trim and collapse internal whitespace to single spaces."""
    return " ".join(value.split())


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 for an empty denominator."""
    if not denominator:
        return 0.0
    return numerator / denominator


def month_to_number(month: Any) -> int:
    """Convert a month name or number to 1-12 (0 when unknown).

    Accepts "Jan", "january", "3" or 3.
    """
    if month is None or month == "":
        return 0
    if isinstance(month, int):
        return month if 1 <= month <= 12 else 0
    text = str(month).strip().lower()
    if text.isdigit():
        number = int(text)
        return number if 1 <= number <= 12 else 0
    return MONTHS.get(text[:3], 0)


def date_key(value: Optional[dict[str, Any]]) -> Optional[tuple[int, int]]:
    """Return a sortable (year, month) tuple for a profile date dict.

    Profile dates look like {"year": 2020, "month": "Mar"}. Returns None
    when the date or its year is missing.
    """
    if not value or not isinstance(value, dict):
        return None
    year = value.get("year")
    try:
        year = int(year)
    except (TypeError, ValueError):
        return None
    return (year, month_to_number(value.get("month")))


def months_between(
    start: Optional[dict[str, Any]],
    end: Optional[dict[str, Any]],
    today: Optional[date] = None,
) -> int:
    """Count whole months between two profile dates.

    A missing end date means the position is current and runs until
    ``today``. A missing start date yields 0.
    """
    start_key = date_key(start)
    if start_key is None:
        return 0
    end_key = date_key(end)
    if end_key is None:
        today = today or date.today()
        end_key = (today.year, today.month)
    start_months = start_key[0] * 12 + max(start_key[1], 1)
    end_months = end_key[0] * 12 + max(end_key[1], 1)
    return max(0, end_months - start_months)
