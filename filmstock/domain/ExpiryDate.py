"""ExpiryDate value object: parse, normalize and compare user-entered expiry dates.

Accepted shapes are ``YYYY``, ``MM/YYYY`` (or the slash-less ``MMYYYY`` kept by
older records) and the legacy ``MM/DD/YYYY``. A date stands for a whole period:
a bare year expires at the end of December, a month at the end of that month.
"""
import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date
from functools import total_ordering
from typing import Iterable, List, Optional

from filmstock.domain.errors import ExpiryDateError
from filmstock.utilities.config import EXPIRY_YEAR_MAX, EXPIRY_YEAR_MIN

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")
_YEAR = re.compile(r"\d{4}")
_MONTH_YEAR = re.compile(r"(\d{1,2})/(\d{4})")
_MONTH_DAY_YEAR = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")


def sanitize_input(raw: str) -> str:
    """Turn free typing into a candidate date string.

    Non-digits are stripped and at most six digits kept; six digits become
    ``MM/YYYY``, anything shorter is returned as bare digits.
    """
    digits = _NON_DIGITS.sub("", raw or "")[:6]
    if len(digits) == 6:
        return f"{digits[:2]}/{digits[2:]}"
    return digits


@total_ordering
@dataclass(frozen=True)
class ExpiryDate:
    year: int
    month: Optional[int] = None
    day: Optional[int] = None

    @classmethod
    def parse(cls, text: str, index: Optional[int] = None) -> "ExpiryDate":
        value = (text or "").strip()
        month = day = None
        if _YEAR.fullmatch(value):
            year = int(value)
        elif len(value) == 6 and value.isdigit():
            month, year = int(value[:2]), int(value[2:])
        elif _MONTH_YEAR.fullmatch(value):
            m = _MONTH_YEAR.fullmatch(value)
            month, year = int(m.group(1)), int(m.group(2))
        elif _MONTH_DAY_YEAR.fullmatch(value):
            m = _MONTH_DAY_YEAR.fullmatch(value)
            month, day, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        else:
            raise ExpiryDateError("format", value, index)

        if month is not None and not 1 <= month <= 12:
            raise ExpiryDateError("month", value, index)
        if not EXPIRY_YEAR_MIN <= year <= EXPIRY_YEAR_MAX:
            raise ExpiryDateError("year", value, index)
        if day is not None and not 1 <= day <= calendar.monthrange(year, month)[1]:
            raise ExpiryDateError("day", value, index)
        return cls(year, month, day)

    @property
    def start(self) -> date:
        return date(self.year, self.month or 1, self.day or 1)

    @property
    def end_of_period(self) -> date:
        if self.month is None:
            return date(self.year, 12, 31)
        if self.day is None:
            return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])
        return date(self.year, self.month, self.day)

    def is_past(self, today: Optional[date] = None) -> bool:
        return self.end_of_period < (today or date.today())

    def normalized(self) -> str:
        # Legacy day precision collapses to its month
        if self.month is None:
            return f"{self.year:04d}"
        return f"{self.month:02d}/{self.year:04d}"

    def _sort_key(self):
        return (self.end_of_period, self.start)

    def __lt__(self, other):
        if not isinstance(other, ExpiryDate):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return self.normalized()


def normalize(text: str) -> str:
    '''Canonical ``YYYY`` / ``MM/YYYY`` form of a date string.'''
    return ExpiryDate.parse(text).normalized()


def is_valid(text: str) -> bool:
    try:
        ExpiryDate.parse(text)
    except ExpiryDateError:
        return False
    return True


def validate_expiry_dates(values: Iterable[str]) -> List[str]:
    """Validate a list of raw dates and return their canonical forms.

    Blank entries are dropped. The first invalid entry raises
    ExpiryDateError carrying its position in the input list.
    """
    normalized: List[str] = []
    for index, raw in enumerate(values or []):
        if raw is None or not str(raw).strip():
            continue
        normalized.append(ExpiryDate.parse(str(raw), index=index).normalized())
    return normalized


def parse_many(values: Iterable[str]) -> List[ExpiryDate]:
    """Parse stored dates, skipping any that no longer parse."""
    parsed: List[ExpiryDate] = []
    for raw in values or []:
        try:
            parsed.append(ExpiryDate.parse(raw))
        except ExpiryDateError as e:
            logger.debug(f"Skipping unparsable stored expiry date {raw!r}: {e}")
    return parsed


def closest_to_today(values: Iterable[str], today: Optional[date] = None) -> Optional[ExpiryDate]:
    '''The date whose period ends nearest to today (earlier one wins ties).'''
    today = today or date.today()
    parsed = parse_many(values)
    if not parsed:
        return None
    return min(parsed, key=lambda d: (abs((d.end_of_period - today).days), d._sort_key()))


def any_past(values: Iterable[str], today: Optional[date] = None) -> bool:
    today = today or date.today()
    return any(d.is_past(today) for d in parse_many(values))


__all__ = [
    "ExpiryDate", "sanitize_input", "normalize", "is_valid", "validate_expiry_dates",
    "parse_many", "closest_to_today", "any_past",
]
