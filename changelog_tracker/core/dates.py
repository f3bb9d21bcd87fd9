"""
Date normalization for changelog entries.

Handles:
- Absolute dates with a year ("28th October 2025", "2025-10-28T09:00:00Z")
- Partial month + day dates ("Jan 5", "25 November")
- Relative expressions ("yesterday", "3 days ago")

Every input resolves to an ISO calendar date string. Nothing here raises;
unusable input falls back to the reference date.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

import structlog
from dateutil import parser as date_parser

logger = structlog.get_logger(__name__)


# Partial dates further ahead than this are assumed to belong to last year
FUTURE_TOLERANCE_DAYS = 30

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

MONTH_NAME_PATTERN = (
    r"(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_ORDINAL = r"(\d{1,2})(?:st|nd|rd|th)?"

# "Jan 5", "January 5th", "Nov. 25"
MONTH_DAY_PATTERN = re.compile(rf"^{MONTH_NAME_PATTERN}\.?\s+{_ORDINAL}$", re.IGNORECASE)
# "5 Jan", "25th of November"
DAY_MONTH_PATTERN = re.compile(rf"^{_ORDINAL}\s+(?:of\s+)?{MONTH_NAME_PATTERN}\.?$", re.IGNORECASE)

RELATIVE_PATTERN = re.compile(r"^(\d+|an?|one)\s+(day|week)s?\s+ago$", re.IGNORECASE)
YEAR_PATTERN = re.compile(r"\b(19|20)\d{2}\b")
ORDINAL_SUFFIX_PATTERN = re.compile(r"(\d)(st|nd|rd|th)\b", re.IGNORECASE)

DateInput = Union[str, date, datetime, None]


def reference_date(reference: Union[date, datetime]) -> date:
    """Day of the reference instant."""
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def normalize_date(raw: DateInput, reference: Union[date, datetime]) -> str:
    """
    Resolve a free-text date expression into an ISO calendar date.

    Args:
        raw: Raw date text, an already-resolved date, or None
        reference: "Now" used for year inference and as fallback

    Returns:
        Date string in YYYY-MM-DD form
    """
    return resolve_date(raw, reference).isoformat()


def resolve_date(raw: DateInput, reference: Union[date, datetime]) -> date:
    """Same as normalize_date() but returns a ``datetime.date``."""
    today = reference_date(reference)

    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not raw or not isinstance(raw, str):
        return today

    text = " ".join(raw.split()).strip(" ,.")
    if not text:
        return today

    partial = parse_partial_date(text, today)
    if partial is not None:
        return partial

    relative = parse_relative_date(text, today)
    if relative is not None:
        return relative

    absolute = parse_absolute_date(text)
    if absolute is not None:
        return absolute

    logger.debug("date_fallback_to_reference", text=text[:80])
    return today


def parse_partial_date(text: str, today: date) -> Optional[date]:
    """
    Parse a month + day expression without a year.

    The year is the reference year unless that puts the date more than
    FUTURE_TOLERANCE_DAYS ahead of the reference, in which case the
    previous year is used.

    Args:
        text: Whitespace-normalized date text
        today: Reference date

    Returns:
        Resolved date, or None if the text is not a month/day expression
    """
    match = MONTH_DAY_PATTERN.match(text)
    if match:
        month_name, day = match.groups()
    else:
        match = DAY_MONTH_PATTERN.match(text)
        if not match:
            return None
        day, month_name = match.groups()

    month = MONTHS.get(month_name.lower()[:3])
    if month is None:
        return None

    try:
        candidate = date(today.year, month, int(day))
    except ValueError:
        # Feb 29 outside a leap year; last year's occurrence may exist
        try:
            return date(today.year - 1, month, int(day))
        except ValueError:
            logger.warning("invalid_partial_date", text=text)
            return today

    if (candidate - today).days > FUTURE_TOLERANCE_DAYS:
        try:
            return date(today.year - 1, month, int(day))
        except ValueError:
            logger.warning("invalid_partial_date", text=text)
            return today

    return candidate


def parse_relative_date(text: str, today: date) -> Optional[date]:
    """Parse "today", "yesterday" and "N days/weeks ago"."""
    lowered = text.lower()
    if lowered == "today":
        return today
    if lowered == "yesterday":
        return today - timedelta(days=1)

    match = RELATIVE_PATTERN.match(lowered)
    if not match:
        return None

    count_text, unit = match.groups()
    count = 1 if count_text in ("a", "an", "one") else int(count_text)
    days = count * 7 if unit == "week" else count
    return today - timedelta(days=days)


def parse_absolute_date(text: str) -> Optional[date]:
    """
    Parse a date expression that carries an explicit year.

    Missing month/day components default to January / the 1st, and any
    time-of-day component is dropped.

    Args:
        text: Date text

    Returns:
        Parsed date or None
    """
    if not YEAR_PATTERN.search(text):
        return None

    cleaned = ORDINAL_SUFFIX_PATTERN.sub(r"\1", text)
    default = datetime(2000, 1, 1)

    try:
        parsed = date_parser.parse(cleaned, default=default, fuzzy=True)
    except (ValueError, OverflowError) as e:
        logger.debug("unparseable_date", text=text[:80], error=str(e))
        return None

    return parsed.date()
