"""Calendar-date helpers shared by the projectors and the share summary.

Everything here works on whole calendar days (``datetime.date``); time of
day never enters a comparison.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

NOT_AVAILABLE = "N/A"


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def days_between(a: date, b: date) -> int:
    """Absolute number of whole days between two dates."""
    return abs((b - a).days)


def parse_date(value: object) -> date | None:
    """Coerce a stored value to a calendar date.

    Accepts ``date``, ``datetime`` (truncated to its date) and ISO-8601
    strings (``YYYY-MM-DD`` or a full timestamp).  Returns None for missing
    or unparseable input instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None



def pretty_format(value: object) -> str:
    """Long display form, e.g. ``January 5, 2024``.  ``N/A`` if unparseable."""
    d = parse_date(value)
    if d is None:
        return NOT_AVAILABLE
    return f"{d:%B} {d.day}, {d.year}"
