"""Unit tests for the academic calendar helpers."""

from types import SimpleNamespace

import pytest

from tuition_ledger.core.exceptions import MalformedMonthFieldError
from tuition_ledger.ledger.academic_calendar import (
    academic_months,
    expected_calendar_year,
    is_in_academic_year,
    month_index,
    month_label,
    parse_payment_month,
)

YEAR_2024 = SimpleNamespace(start_year=2024, end_year=2025)


def test_academic_months_run_september_to_july() -> None:
    months = academic_months()
    assert len(months) == 11
    assert months[0] == "SETEMBRO"
    assert months[-1] == "JULHO"
    assert "AGOSTO" not in months


def test_expected_calendar_year_by_half() -> None:
    assert expected_calendar_year("SETEMBRO", YEAR_2024) == 2024
    assert expected_calendar_year("DEZEMBRO", YEAR_2024) == 2024
    assert expected_calendar_year("JANEIRO", YEAR_2024) == 2025
    assert expected_calendar_year("JULHO", YEAR_2024) == 2025


def test_expected_calendar_year_rejects_august_and_garbage() -> None:
    with pytest.raises(MalformedMonthFieldError):
        expected_calendar_year("AGOSTO", YEAR_2024)
    with pytest.raises(MalformedMonthFieldError):
        expected_calendar_year("SEPTEMBER", YEAR_2024)


def test_parse_combined_label() -> None:
    assert parse_payment_month("SETEMBRO-2024") == ("SETEMBRO", 2024)
    # combined label wins over the separate year column
    assert parse_payment_month(" março - 2025 ", 1999) == ("MARÇO", 2025)


def test_parse_bare_month_with_year_field() -> None:
    assert parse_payment_month("outubro", 2024) == ("OUTUBRO", 2024)
    assert parse_payment_month("  JANEIRO ", "2025") == ("JANEIRO", 2025)


@pytest.mark.parametrize(
    "raw_month, raw_year",
    [
        (None, 2024),
        ("", 2024),
        ("SETEMBRO", None),
        ("SETEMBRO-24", None),
        ("2024-SETEMBRO", None),
        ("SETEMBRO", "vinte"),
    ],
)
def test_parse_malformed(raw_month, raw_year) -> None:
    with pytest.raises(MalformedMonthFieldError):
        parse_payment_month(raw_month, raw_year)


def test_is_in_academic_year_checks_year_half() -> None:
    assert is_in_academic_year("SETEMBRO", 2024, YEAR_2024)
    assert not is_in_academic_year("SETEMBRO", 2023, YEAR_2024)
    assert not is_in_academic_year("SETEMBRO", 2025, YEAR_2024)
    assert is_in_academic_year("JULHO", 2025, YEAR_2024)
    assert not is_in_academic_year("AGOSTO", 2025, YEAR_2024)
    assert not is_in_academic_year("JANEIRO", None, YEAR_2024)


def test_month_label_and_index() -> None:
    assert month_label(" novembro", 2024) == "NOVEMBRO-2024"
    assert month_index("JANEIRO") == 1
    assert month_index("março") == 3
    assert month_index("DEZEMBRO") == 12
    with pytest.raises(MalformedMonthFieldError):
        month_index("FOO")
