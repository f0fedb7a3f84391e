from decimal import Decimal

from storefront_pricing.services import pricing
from storefront_pricing.services.calculation_settings import CalculationSettings, parse_calculation_settings


def test_quantize_money_rounding_modes() -> None:
    assert pricing.quantize_money(Decimal("1.005")) == Decimal("1.01")
    assert pricing.quantize_money(Decimal("1.005"), rounding="half_even") == Decimal("1.00")
    assert pricing.quantize_money(Decimal("1.001"), rounding="up") == Decimal("1.01")
    assert pricing.quantize_money(Decimal("1.009"), rounding="down") == Decimal("1.00")
    assert pricing.quantize_money(Decimal("1.23456"), precision=3) == Decimal("1.235")


def test_to_decimal_tolerates_loose_input() -> None:
    assert pricing.to_decimal(" 12.5 ") == Decimal("12.5")
    assert pricing.to_decimal(0.1) == Decimal("0.1")
    assert pricing.to_decimal("abc") == Decimal("0")
    assert pricing.to_decimal("") == Decimal("0")
    assert pricing.to_decimal(None, fallback=Decimal("1")) == Decimal("1")
    assert pricing.to_decimal(True) == Decimal("0")
    assert pricing.to_decimal(float("nan")) == Decimal("0")
    assert pricing.to_decimal("Infinity") == Decimal("0")


def test_safe_div_never_returns_non_finite() -> None:
    assert pricing.safe_div(Decimal("1"), Decimal("0")) == Decimal("0")
    assert pricing.safe_div(Decimal("10"), Decimal("4")) == Decimal("2.5")


def test_round_whole_half_up() -> None:
    assert pricing.round_whole(Decimal("10.5")) == Decimal("11")
    assert pricing.round_whole(Decimal("10.49")) == Decimal("10")


def test_settings_money_uses_precision_and_mode() -> None:
    settings = CalculationSettings(precision=0, money_rounding="down")
    assert settings.money(Decimal("9.99")) == Decimal("9")
    assert settings.tolerance == Decimal("1")


def test_parse_calculation_settings_accepts_storefront_keys() -> None:
    parsed = parse_calculation_settings({"itemWiseShippingTax": "true", "roundOff": "3", "spr": 1})
    assert parsed.item_wise_shipping_tax is True
    assert parsed.precision == 3
    assert parsed.spr_enabled is True
    assert parsed.rounding_adjustment is False


def test_parse_calculation_settings_falls_back_on_bad_values() -> None:
    defaults = CalculationSettings(rounding_adjustment=True, precision=4)
    parsed = parse_calculation_settings(
        {"precision": "99", "money_rounding": "weird", "roundingAdjustment": "maybe"}, defaults=defaults
    )
    assert parsed.precision == 6
    assert parsed.money_rounding == "half_up"
    assert parsed.rounding_adjustment is True

    assert parse_calculation_settings(None, defaults=defaults) == defaults
    assert parse_calculation_settings({"precision": "-1"}).precision == 2


def test_parse_calculation_settings_rejects_infinite_precision() -> None:
    assert parse_calculation_settings({"precision": float("inf")}).precision == 2
    assert parse_calculation_settings({"roundOff": float("nan")}).precision == 2
