"""
Pure input checks for the task engine.

Every validator either returns the (normalized) value or raises
ValidationError describing the first violation found. None of them touch a
repository; callers run them before any mutation.
"""
from __future__ import annotations

import calendar
import re
from datetime import date
from typing import Tuple

from .exceptions import ValidationError

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000
MIN_YEAR = 2000
MAX_YEAR = 2100
DUE_DATE_PAST_YEARS = 1
DUE_DATE_FUTURE_YEARS = 10
MAX_PAGE_SIZE = 100
SEARCH_MIN_LENGTH = 2
SEARCH_MAX_LENGTH = 100
ID_MIN_LENGTH = 10

FORBIDDEN_TEXT_CHARS = frozenset("<>\"'&")
SEARCH_FORBIDDEN_TOKENS = ("'", '"', ";", "--", "/*", "*/")
_SEARCH_FORBIDDEN_KEYWORDS = re.compile(r"drop|delete|insert|update|select", re.IGNORECASE)
_DATE_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_ID_PATTERN = re.compile(r"[0-9a-fA-F-]+")

ALLOWED_TIMEZONES = (
    "UTC",
    "Asia/Colombo",
    "Asia/Kolkata",
    "Asia/Singapore",
    "Asia/Tokyo",
    "Australia/Sydney",
    "Europe/London",
    "Europe/Berlin",
    "America/New_York",
    "America/Chicago",
    "America/Los_Angeles",
)


def _reject_forbidden_chars(field: str, value: str) -> None:
    if any(ch in FORBIDDEN_TEXT_CHARS for ch in value):
        raise ValidationError(f"{field} must not contain any of < > \" ' &")


# PUBLIC_INTERFACE
def validate_title(title: str) -> str:
    """Return the trimmed title, or raise if it is empty, too short/long or has forbidden characters."""
    s = (title or "").strip()
    if not s:
        raise ValidationError("Title is required")
    if not (TITLE_MIN_LENGTH <= len(s) <= TITLE_MAX_LENGTH):
        raise ValidationError(
            f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters"
        )
    _reject_forbidden_chars("Title", s)
    return s


# PUBLIC_INTERFACE
def validate_description(description: str) -> str:
    """Descriptions may be empty; otherwise at most 2000 characters without forbidden characters."""
    s = description or ""
    if len(s) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")
    _reject_forbidden_chars("Description", s)
    return s


# PUBLIC_INTERFACE
def parse_calendar_date(value: str, field: str = "Date") -> date:
    """
    Parse a strict YYYY-MM-DD string into a date.

    The year must lie in [2000, 2100] and the day must exist in that month,
    taking leap years into account.
    """
    match = _DATE_PATTERN.fullmatch(value or "")
    if match is None:
        raise ValidationError(f"{field} must use the format YYYY-MM-DD")
    year, month, day = (int(part) for part in match.groups())
    if not (MIN_YEAR <= year <= MAX_YEAR):
        raise ValidationError(f"{field} year must be between {MIN_YEAR} and {MAX_YEAR}")
    if not (1 <= month <= 12):
        raise ValidationError(f"{field} month must be between 1 and 12")
    days_in_month = calendar.monthrange(year, month)[1]
    if not (1 <= day <= days_in_month):
        raise ValidationError(f"{field} day is not valid for {year}-{month:02d}")
    return date(year, month, day)


def _shift_years(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return d.replace(year=d.year + years, day=28)


# PUBLIC_INTERFACE
def validate_due_date(value: str, today: date) -> str:
    """
    Validate a due date against calendar rules and the allowed window around
    ``today``: at most one calendar year in the past and ten years ahead.
    Returns the normalized YYYY-MM-DD string.
    """
    due = parse_calendar_date(value, "Due date")
    earliest = _shift_years(today, -DUE_DATE_PAST_YEARS)
    latest = _shift_years(today, DUE_DATE_FUTURE_YEARS)
    if due < earliest:
        raise ValidationError(f"Due date cannot be more than {DUE_DATE_PAST_YEARS} year in the past")
    if due > latest:
        raise ValidationError(
            f"Due date cannot be more than {DUE_DATE_FUTURE_YEARS} years in the future"
        )
    return due.isoformat()


# PUBLIC_INTERFACE
def validate_pagination(page: int, page_size: int) -> Tuple[int, int]:
    """Raise unless page >= 1 and 1 <= page_size <= 100."""
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if not (1 <= page_size <= MAX_PAGE_SIZE):
        raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
    return page, page_size


# PUBLIC_INTERFACE
def validate_search_query(query: str) -> str:
    """
    Return the trimmed query if it is 2..100 characters long and free of the
    blacklisted tokens and SQL keywords.

    The blacklist is a compatibility heuristic only. Repository access is
    parameterized regardless of what passes here.
    """
    s = (query or "").strip()
    if not (SEARCH_MIN_LENGTH <= len(s) <= SEARCH_MAX_LENGTH):
        raise ValidationError(
            f"Search query must be between {SEARCH_MIN_LENGTH} and {SEARCH_MAX_LENGTH} characters"
        )
    if any(token in s for token in SEARCH_FORBIDDEN_TOKENS) or _SEARCH_FORBIDDEN_KEYWORDS.search(s):
        raise ValidationError("Search query contains invalid characters or keywords")
    return s


# PUBLIC_INTERFACE
def validate_identifier(value: str, field: str = "Task id") -> str:
    """Identifiers are at least 10 characters of hex digits and dashes."""
    if not value:
        raise ValidationError(f"{field} is required")
    if len(value) < ID_MIN_LENGTH or not _ID_PATTERN.fullmatch(value):
        raise ValidationError(f"{field} '{value}' is not a valid identifier")
    return value


# PUBLIC_INTERFACE
def validate_timezone(value: str) -> str:
    if value not in ALLOWED_TIMEZONES:
        raise ValidationError(f"Timezone '{value}' is not supported")
    return value
