from decimal import Decimal

import pytest

from storefront_pricing.models.calculation import LineItem, SprDetails
from storefront_pricing.services.calculation_settings import CalculationSettings
from storefront_pricing.services.target_discount import (
    TargetDiscountState,
    discount_to_price,
    price_to_discount,
)


PRODUCTS = (
    LineItem(product_id="a", quantity=Decimal("2"), unit_price=Decimal("300.00"), total_price=Decimal("600.00")),
    LineItem(product_id="b", quantity=Decimal("4"), unit_price=Decimal("100.00"), total_price=Decimal("400.00")),
)


def test_discount_to_price() -> None:
    assert discount_to_price(Decimal("1000"), Decimal("20")) == Decimal("800.00")
    assert discount_to_price(Decimal("1000"), Decimal("150")) == Decimal("-500.00")


def test_price_to_discount_is_clamped() -> None:
    assert price_to_discount(Decimal("1000"), Decimal("800")) == Decimal("20.00")
    assert price_to_discount(Decimal("1000"), Decimal("1500")) == Decimal("0")
    assert price_to_discount(Decimal("1000"), Decimal("-100")) == Decimal("100")
    assert price_to_discount(Decimal("0"), Decimal("50")) == Decimal("0")


@pytest.mark.parametrize("discount", [Decimal("0"), Decimal("12.5"), Decimal("33.33"), Decimal("99.99")])
def test_discount_survives_price_round_trip(discount: Decimal) -> None:
    total = Decimal("1234.56")
    recovered = price_to_discount(total, discount_to_price(total, discount))
    assert abs(recovered - discount) <= Decimal("0.01")


def test_change_discount_redistributes_lines() -> None:
    state = TargetDiscountState(total_value=Decimal("1000"), products=PRODUCTS).change_discount(Decimal("10"))
    assert state.target_price == Decimal("900.00")
    assert state.spr.is_spr_requested is True
    assert state.spr.spr is False

    first, second = state.products
    assert first.contribution == Decimal("60.00")
    assert first.revised_value == Decimal("540.00")
    assert first.buyer_requested_price == Decimal("270.00")
    assert first.buyer_requested_discount == Decimal("10.00")
    assert second.contribution == Decimal("40.00")
    assert second.buyer_requested_price == Decimal("90.00")


def test_spr_flag_follows_setting() -> None:
    state = TargetDiscountState(
        total_value=Decimal("1000"), products=PRODUCTS, settings=CalculationSettings(spr_enabled=True)
    )
    assert state.change_discount(Decimal("5")).spr.spr is True
    assert state.change_discount(Decimal("0")).spr.spr is False


def test_change_target_price() -> None:
    state = TargetDiscountState(total_value=Decimal("1000"), products=PRODUCTS)
    requested = state.change_target_price(Decimal("800"))
    assert requested.discount == Decimal("20.00")
    assert requested.spr.is_spr_requested is True

    above = state.change_target_price(Decimal("1500"))
    assert above.discount == Decimal("0")
    assert above.spr.is_spr_requested is False


def test_total_change_keeps_requested_discount() -> None:
    state = TargetDiscountState(
        total_value=Decimal("1000"),
        spr=SprDetails(target_price=Decimal("800"), spr_requested_discount=Decimal("20")),
    )
    changed = state.change_total_value(Decimal("900"))
    assert changed.total_value == Decimal("900")
    assert changed.target_price == Decimal("720.00")
    assert changed.discount == Decimal("20")


def test_total_change_without_discount_tracks_total() -> None:
    state = TargetDiscountState(total_value=Decimal("1000"), products=PRODUCTS)
    changed = state.change_total_value(Decimal("900"))
    assert changed.target_price == Decimal("900")
    assert changed.discount == Decimal("0")
    assert changed.spr.is_spr_requested is False


def test_total_change_with_cash_discount_reports_discount_from_original_total() -> None:
    state = TargetDiscountState(
        total_value=Decimal("1000"), cash_discount=True, cash_discount_value=Decimal("10")
    )
    changed = state.change_total_value(Decimal("900"))
    assert changed.target_price == Decimal("900")
    assert changed.discount == Decimal("10.00")


def test_small_or_invalid_total_changes() -> None:
    state = TargetDiscountState(total_value=Decimal("1000"), products=PRODUCTS).change_discount(Decimal("10"))
    assert state.change_total_value(Decimal("1000.005")) is state

    zeroed = state.change_total_value(Decimal("0"))
    assert zeroed.total_value == Decimal("0")
    assert zeroed.spr == state.spr
    assert zeroed.products == state.products


def test_zero_priced_lines_do_not_break_redistribution() -> None:
    products = (LineItem(product_id="free", quantity=Decimal("0")),)
    state = TargetDiscountState(total_value=Decimal("0"), products=products).change_discount(Decimal("10"))
    (line,) = state.products
    assert line.contribution == Decimal("0.00")
    assert line.buyer_requested_price == Decimal("0.00")
    assert line.buyer_requested_discount == Decimal("0.00")
