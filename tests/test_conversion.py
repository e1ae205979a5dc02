import pytest

from app.models import RateSnapshot
from app.services.money import round6
from app.services.rates.conversion import convert_amount, list_currencies


def _snapshot(rates=None, base="USD"):
    return RateSnapshot(
        base_currency=base,
        rates=rates if rates is not None else {"USD": 1.0, "EUR": 0.9, "JPY": 150.0},
        last_updated="2024-05-01T00:00:00.000Z",
    )


def test_cross_rate_routes_through_base():
    res = convert_amount(_snapshot(), "EUR", "JPY", 100)
    assert res is not None
    assert res.result == 16666.666667
    assert res.rate == 166.666667
    assert res.last_updated == "2024-05-01T00:00:00.000Z"


def test_from_base_multiplies():
    res = convert_amount(_snapshot(), "USD", "EUR", 10)
    assert res.result == 9.0
    assert res.rate == 0.9


def test_to_base_divides():
    res = convert_amount(_snapshot(), "EUR", "USD", 9)
    assert res.result == 10.0
    assert res.rate == pytest.approx(1.111111, abs=1e-6)


def test_base_to_base_is_identity():
    res = convert_amount(_snapshot(), "USD", "USD", 250)
    assert res.result == 250
    assert res.rate == 1.0


def test_unknown_currency_returns_none():
    assert convert_amount(_snapshot(), "USD", "XYZ", 10) is None
    assert convert_amount(_snapshot(), "XYZ", "USD", 10) is None


def test_base_missing_from_rates_is_unknown():
    snap = _snapshot({"EUR": 0.9, "JPY": 150.0})
    assert convert_amount(snap, "USD", "EUR", 1) is None
    # cross rates not touching the base still work
    assert convert_amount(snap, "EUR", "JPY", 100).result == 16666.666667


@pytest.mark.parametrize("amount", [1, 3.5, 1000, 123456.789])
def test_result_scales_with_amount(amount):
    unit = convert_amount(_snapshot(), "EUR", "JPY", 1).result
    res = convert_amount(_snapshot(), "EUR", "JPY", amount)
    assert res.result / amount == pytest.approx(unit, abs=1e-6)


def test_rate_is_derived_from_rounded_result():
    res = convert_amount(_snapshot({"USD": 1.0, "ABC": 0.3333333333}), "USD", "ABC", 7)
    assert res.result == round6(7 * 0.3333333333)
    assert res.rate == round6(res.result / 7)


def test_round6_rounds_half_up():
    assert round6(1.2345665) == 1.234567
    assert round6(0.0000005) == 0.000001
    assert round6(2.0000004) == 2.0


def test_round6_handles_values_beyond_default_precision():
    assert round6(9.99999999e22) == 9.99999999e22
    assert round6(1e300) == 1e300


def test_huge_amount_against_huge_rate_converts():
    snap = _snapshot({"USD": 1.0, "ZWX": 1e14})
    res = convert_amount(snap, "USD", "ZWX", 999_999_999)
    assert res.result == 999_999_999 * 1e14
    assert res.rate == pytest.approx(1e14)


def test_list_currencies_filters_and_sorts():
    snap = _snapshot({"GBP": 0.8, "jpy99": 1.0, "EUR": 0.9})
    names = {"EUR": "Euro", "GBP": "British Pound"}
    out = list_currencies(snap, names.get)
    assert [c.code for c in out.currencies] == ["EUR", "GBP"]
    assert [c.name for c in out.currencies] == ["Euro", "British Pound"]
    assert out.last_updated == snap.last_updated


def test_list_currencies_falls_back_to_code():
    out = list_currencies(_snapshot({"ZZZ": 2.0}), lambda code: None)
    assert out.currencies[0].name == "ZZZ"
