"""Tests for amount parsing and display."""

import pytest

from simple_ledger.utils.money import format_currency, money, parse_positive_amount


@pytest.mark.parametrize("raw, expected", [
    ("100", 100.0),
    (" 1,250.50 ", 1250.5),
    (12.5, 12.5),
    ("0.005", 0.01),
    ("19.999", 20.0),
])
def test_parse_positive_amount_rounds_to_cents(raw, expected):
    assert parse_positive_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, True, "", "abc", "0", "-1", "0.001", "0.004", "nan", "inf", "1e999999"])
def test_parse_positive_amount_rejects(raw):
    assert parse_positive_amount(raw) is None


def test_money_rounds_half_up():
    assert money(2.675) == 2.68
    assert money(None) == 0.0


def test_format_currency():
    assert format_currency(1250) == "₹1,250"
    assert format_currency(1250.5) == "₹1,250.50"
    assert format_currency(3, "Rs. ") == "Rs. 3"
