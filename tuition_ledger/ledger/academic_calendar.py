"""
Academic calendar vocabulary.

An academic year runs from SETEMBRO of its start year to JULHO of its end year.
AGOSTO is a holiday month and never billed. Month names are stored in Portuguese
upper case, as they appear on the payment ledger.
"""

import re
from typing import Optional, Protocol, Tuple

from tuition_ledger.core.exceptions import MalformedMonthFieldError

FIRST_TERM_MONTHS: Tuple[str, ...] = ("SETEMBRO", "OUTUBRO", "NOVEMBRO", "DEZEMBRO")
SECOND_TERM_MONTHS: Tuple[str, ...] = (
    "JANEIRO",
    "FEVEREIRO",
    "MARÇO",
    "ABRIL",
    "MAIO",
    "JUNHO",
    "JULHO",
)
ACADEMIC_MONTHS: Tuple[str, ...] = FIRST_TERM_MONTHS + SECOND_TERM_MONTHS

CALENDAR_MONTHS: Tuple[str, ...] = (
    "JANEIRO",
    "FEVEREIRO",
    "MARÇO",
    "ABRIL",
    "MAIO",
    "JUNHO",
    "JULHO",
    "AGOSTO",
    "SETEMBRO",
    "OUTUBRO",
    "NOVEMBRO",
    "DEZEMBRO",
)

_COMBINED_LABEL = re.compile(r"^\s*([^\W\d_]+)\s*-\s*(\d{4})\s*$")
_BARE_MONTH = re.compile(r"^\s*([^\W\d_]+)\s*$")


class YearSpan(Protocol):
    start_year: int
    end_year: int


def academic_months() -> Tuple[str, ...]:
    return ACADEMIC_MONTHS


def expected_calendar_year(month: str, academic_year: YearSpan) -> int:
    """Calendar year a month must carry to belong to ``academic_year``."""
    name = (month or "").strip().upper()
    if name in FIRST_TERM_MONTHS:
        return int(academic_year.start_year)
    if name in SECOND_TERM_MONTHS:
        return int(academic_year.end_year)
    raise MalformedMonthFieldError(month)


def is_in_academic_year(month: str, year: Optional[int], academic_year: YearSpan) -> bool:
    if year is None or month not in ACADEMIC_MONTHS:
        return False
    return int(year) == expected_calendar_year(month, academic_year)


def parse_payment_month(raw_month: Optional[str], raw_year: object = None) -> Tuple[str, int]:
    """
    Normalise a ledger month field to ``(MONTH, year)``.

    Two encodings exist: the combined "SETEMBRO-2024" label, and a bare month name
    with the year stored separately. The combined label wins when both are present.
    """
    if raw_month is None:
        raise MalformedMonthFieldError(raw_month, raw_year)

    match = _COMBINED_LABEL.match(raw_month)
    if match:
        return match.group(1).upper(), int(match.group(2))

    match = _BARE_MONTH.match(raw_month)
    if match and raw_year is not None:
        try:
            year = int(str(raw_year).strip())
        except ValueError:
            raise MalformedMonthFieldError(raw_month, raw_year)
        return match.group(1).upper(), year

    raise MalformedMonthFieldError(raw_month, raw_year)


def month_label(month: str, year: int) -> str:
    return f"{month.strip().upper()}-{int(year)}"


def month_index(month: str) -> int:
    """1-based calendar index (JANEIRO=1 .. DEZEMBRO=12)."""
    name = (month or "").strip().upper()
    if name not in CALENDAR_MONTHS:
        raise MalformedMonthFieldError(month)
    return CALENDAR_MONTHS.index(name) + 1
