"""
tests/test_value_normalizer.py

Pure-function tests for the tolerant numeric/date parsers.
"""

from __future__ import annotations

import math

import pytest

from app.scraping.normalization.values import clean_text, parse_date, parse_int, parse_number


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1,250,000 ₪", 1_250_000.0),
        ("₪ 2,100,000", 2_100_000.0),
        ("3.5", 3.5),
        ("85 מ\"ר", 85.0),
        ("1.2.3", 1.23),
        ("-450", 450.0),
        (1200, 1200.0),
        (3.5, 3.5),
    ],
)
def test_parse_number_extracts_value(text: object, expected: float) -> None:
    assert parse_number(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", [None, "", "   ", "לא ידוע", ".", "₪", True, float("inf"), float("nan"), -5])
def test_parse_number_absent_values(text: object) -> None:
    assert parse_number(text) is None


@pytest.mark.parametrize("text", ["1,250,000 ₪", "3.5 חדרים", "1.2.3", "72"])
def test_parse_number_is_idempotent(text: str) -> None:
    once = parse_number(text)
    assert once is not None
    assert parse_number(str(once)) == once
    assert math.isfinite(once) and once >= 0


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("15/03/2023", "2023-03-15"),
        ("5/3/2023", "2023-03-05"),
        ("05-03-2023", "2023-03-05"),
        ("05.03.2023", "2023-03-05"),
        ("נמכר ב-01/12/2021", "2021-12-01"),
    ],
)
def test_parse_date_to_iso(text: str, expected: str) -> None:
    assert parse_date(text) == expected


@pytest.mark.parametrize("text", [None, "", "2023-03-15", "31/02/2023", "15/13/2023", "yesterday"])
def test_parse_date_absent_values(text: str | None) -> None:
    assert parse_date(text) is None


def test_parse_int_reads_leading_digits() -> None:
    assert parse_int("12") == 12
    assert parse_int("עסקה 7") == 7
    assert parse_int(4) == 4
    assert parse_int("") is None
    assert parse_int(None) is None


def test_clean_text_collapses_whitespace() -> None:
    assert clean_text("  הרצל \n 10 ") == "הרצל 10"
    assert clean_text("   ") is None
    assert clean_text(None) is None
    assert clean_text(3) == "3"
