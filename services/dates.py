"""Date token handling shared by every parsing path."""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Optional

_DATE_TOKEN = re.compile(r"[0-9]{8}")
_DATE_KEY = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


def is_date_token(token: str) -> bool:
    """Return True when ``token`` has the shape of a ``YYYYMMDD`` date."""
    return _DATE_TOKEN.fullmatch(token) is not None


def is_valid_date_token(token: str) -> bool:
    """Check an 8-digit token against the month and day bounds.

    Only ``1 <= month <= 12`` and ``1 <= day <= 31`` are enforced, so
    ``20230230`` is accepted. Month lengths and leap years are not checked.
    """
    if not is_date_token(token):
        return False
    month = int(token[4:6])
    day = int(token[6:8])
    return 1 <= month <= 12 and 1 <= day <= 31


def format_date_key(token: str) -> str:
    """Render ``YYYYMMDD`` as the ``YYYY-MM-DD`` key used for grouping."""
    return f"{token[0:4]}-{token[4:6]}-{token[6:8]}"


def resolve_date(date_key: str) -> date:
    """Turn a ``YYYY-MM-DD`` key into a calendar date.

    Days past the end of the month roll into the next month, so
    ``2023-02-30`` resolves to ``2023-03-02``.
    """
    match = _DATE_KEY.fullmatch(date_key)
    if match is None:
        raise ValueError(f"Malformed date key {date_key!r}.")
    year, month, day = (int(part) for part in match.groups())
    first = date(year, month, 1)
    return first + timedelta(days=day - 1)


def month_bounds(year: int, month: int) -> tuple[date, Optional[date]]:
    """First day of the month (inclusive) and of the following month (exclusive).

    The end is None for December of the last representable year.
    """
    start = date(year, month, 1)
    if month == 12:
        if year == date.max.year:
            return start, None
        return start, date(year + 1, 1, 1)
    return start, date(year, month + 1, 1)


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"
