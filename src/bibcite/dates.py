"""Date parsing and display formatting for bibliography records.

Zotero and Better BibTeX exports carry dates in a handful of shapes:

- ISO-8601 timestamps (``2020-03-15T10:00:00Z``, optionally with
  fractional seconds or a numeric offset), mostly in ``accessDate``
- bare ISO dates (``2020-03-15``)
- US-style dates (``03/15/2020`` or ``3/15/2020``)
- free text that merely starts with a year (``2020``, ``2020-03``,
  ``2020 Spring``)

Full dates render as ``"2020, March 15"``; anything that only yields a
leading year renders as ``"2020"``; everything else is ``"n.d."``.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from bibcite.config import MONTH_NAMES, NO_DATE

# Tried in order; the first format that parses wins
DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d",
    "%m/%d/%Y",
)

_LEADING_YEAR = re.compile(r"\d{4}")
_YEAR_MONTH = re.compile(r"(\d{4})-(\d{1,2})")


def parse_date(value: object) -> date | None:
    """Parse a record date into a calendar date.

    Args:
        value: Raw ``date`` or ``accessDate`` field.

    Returns:
        The parsed date, or None if no known format matches.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def leading_year(value: object) -> str | None:
    """Return the leading 4-digit run of a date string, if any."""
    if not isinstance(value, str):
        return None
    match = _LEADING_YEAR.match(value.strip())
    return match.group(0) if match else None


def format_display_year(value: object) -> str:
    """Derive the display year shown in citations and the reference list.

    Examples:
        >>> format_display_year("2020-03-15T10:00:00Z")
        '2020, March 15'
        >>> format_display_year("2020-03")
        '2020'
        >>> format_display_year("not-a-date")
        'n.d.'
    """
    parsed = parse_date(value)
    if parsed is not None:
        return f"{parsed.year}, {MONTH_NAMES[parsed.month - 1]} {parsed.day}"
    return leading_year(value) or NO_DATE


def normalize_year(display_year: str) -> str:
    """Strip month/day detail, keeping just the 4-digit year or ``n.d.``."""
    return leading_year(display_year) or NO_DATE


def format_access_date(value: object) -> str | None:
    """Format an access date as ``"March 15, 2020"``.

    Year-month values render as ``"March 2020"`` and bare years as
    ``"2020"``. Returns None when the value cannot be interpreted.
    """
    parsed = parse_date(value)
    if parsed is not None:
        return f"{MONTH_NAMES[parsed.month - 1]} {parsed.day}, {parsed.year}"
    if not isinstance(value, str):
        return None
    text = value.strip()
    match = _YEAR_MONTH.fullmatch(text)
    if match and 1 <= int(match.group(2)) <= 12:
        return f"{MONTH_NAMES[int(match.group(2)) - 1]} {match.group(1)}"
    if _LEADING_YEAR.fullmatch(text):
        return text
    return None
