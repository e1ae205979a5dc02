import pytest

from app.services.validation import parse_amount, validate_amount, validate_currency_code


@pytest.mark.parametrize("raw,expected", [("10", 10.0), (" 2.5 ", 2.5), ("1e3", 1000.0)])
def test_parse_amount_accepts_plain_numbers(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "1_000", "1_0.5", "1,000"])
def test_parse_amount_rejects_non_numbers(raw):
    assert parse_amount(raw) is None


def test_validate_amount_bounds():
    assert validate_amount(0.01)
    assert not validate_amount(0)
    assert not validate_amount(float("nan"))
    assert not validate_amount(None)


def test_validate_currency_code():
    assert validate_currency_code("USD")
    assert not validate_currency_code("usd")
    assert not validate_currency_code(None)
