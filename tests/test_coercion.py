"""
tests/test_coercion.py

Unit tests for the raw cell coercion helpers.
"""

from __future__ import annotations

import pytest

from app.parsers.coercion import (
    clean_string,
    extract_date_range,
    is_iso_date,
    parse_boolean,
    parse_currency,
    parse_date,
    parse_float,
    parse_int,
    parse_percentage,
    safe_ratio,
    split_csv_line,
    split_lines,
    split_tsv_line,
)


class TestCleanString:
    def test_strips_edge_quotes_and_whitespace(self) -> None:
        assert clean_string('"  B00TEST  "') == "B00TEST"
        assert clean_string("'sku-1'") == "sku-1"

    def test_empty_and_none(self) -> None:
        assert clean_string("") == ""
        assert clean_string(None) == ""

    def test_inner_quotes_survive(self) -> None:
        assert clean_string('a "quoted" word') == 'a "quoted" word'


class TestParseDate:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1/5/24", "2024-01-05"),
            ("12/31/2024", "2024-12-31"),
            ('"03/07/2025"', "2025-03-07"),
            ("2025-01-31", "2025-01-31"),
            ("2024-01-05 12:00", "2024-01-05"),
            ("2024-01-05T08:30:00Z", "2024-01-05"),
        ],
    )
    def test_normalizes_known_formats(self, raw: str, expected: str) -> None:
        assert parse_date(raw) == expected

    def test_unknown_format_is_returned_unchanged(self) -> None:
        assert parse_date("Jan 5 2024") == "Jan 5 2024"

    def test_empty(self) -> None:
        assert parse_date("") == ""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-02-29", True),
            ("2023-02-29", False),
            ("2025-13-01", False),
            ("20250101", False),
            ("Jan 5 2024", False),
            ("", False),
        ],
    )
    def test_is_iso_date(self, value: str, expected: bool) -> None:
        assert is_iso_date(value) is expected


class TestNumbers:
    def test_currency(self) -> None:
        assert parse_currency("$1,234.56") == pytest.approx(1234.56)
        assert parse_currency("n/a") == 0.0
        assert parse_currency("") == 0.0

    def test_percentage_is_not_rescaled(self) -> None:
        assert parse_percentage("12.5%") == pytest.approx(12.5)
        assert parse_percentage("0.25") == pytest.approx(0.25)
        assert parse_percentage("--") == 0.0

    def test_int_accepts_numeric_prefix(self) -> None:
        assert parse_int("1,024") == 1024
        assert parse_int("12abc") == 12
        assert parse_int("3.9") == 3
        assert parse_int("abc") == 0

    def test_float(self) -> None:
        assert parse_float("1,000.5") == pytest.approx(1000.5)
        assert parse_float("4.5 out of 5") == pytest.approx(4.5)
        assert parse_float("") == 0.0

    @pytest.mark.parametrize("raw", ["true", "YES", "1", "y", " Y "])
    def test_boolean_truthy(self, raw: str) -> None:
        assert parse_boolean(raw) is True

    @pytest.mark.parametrize("raw", ["false", "no", "0", "", "maybe"])
    def test_boolean_falsy(self, raw: str) -> None:
        assert parse_boolean(raw) is False

    def test_safe_ratio_guards_zero_denominator(self) -> None:
        assert safe_ratio(10, 0) == 0.0
        assert safe_ratio(3, 30) == pytest.approx(0.1)


class TestLineSplitting:
    def test_csv_respects_quoted_commas(self) -> None:
        assert split_csv_line('a,"1,234",c') == ["a", "1,234", "c"]

    def test_tsv_cleans_each_field(self) -> None:
        assert split_tsv_line('sku-1\t"Title"\t B0001 ') == ["sku-1", "Title", "B0001"]

    def test_split_lines_drops_blank_lines(self) -> None:
        assert split_lines("h1,h2\n\n1,2\n   \n3,4") == ["h1,h2", "1,2", "3,4"]

    def test_extract_date_range(self) -> None:
        assert extract_date_range(["2024-02-01", "", "2024-01-15", "2024-03-01"]) == (
            "2024-01-15",
            "2024-03-01",
        )
        assert extract_date_range(["", ""]) is None
