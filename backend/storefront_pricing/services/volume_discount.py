from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from storefront_pricing.models.calculation import CartValue, LineItem, VolumeDiscountRecord
from storefront_pricing.services import cart_totals, line_discount, pricing, shipping, tax_breakup
from storefront_pricing.services.calculation_settings import CalculationSettings


logger = logging.getLogger("storefront_pricing.volume_discount")

ZERO = pricing.ZERO


@dataclass(frozen=True)
class VolumeDiscountResult:
    products: tuple[LineItem, ...]
    vd_details: CartValue
    pf_rate: Decimal


def match_volume_record(line: LineItem, schedule: Sequence[VolumeDiscountRecord]) -> VolumeDiscountRecord | None:
    if line.item_no:
        for record in schedule:
            if record.item_no and record.item_no == line.item_no:
                return record
    for record in schedule:
        if record.product_id and record.product_id == line.product_id:
            return record
    return None


def is_volume_eligible(line: LineItem, record: VolumeDiscountRecord | None) -> bool:
    if record is None or pricing.to_decimal(record.volume_discount) <= 0:
        return False
    return line.disc_changed or not line.cant_combine_with_other_discounts


def _listed_tax(line: LineItem, *, is_inter: bool) -> Decimal:
    return line.hsn.rate(is_inter=is_inter) if line.hsn else ZERO


def base_line_total(line: LineItem, *, settings: CalculationSettings, is_inter: bool = False) -> Decimal:
    """Line total at the base discount only, before volume and cash discounts."""
    if line.price_hidden:
        return ZERO
    unit_price = line_discount.discounted_unit_price(
        line.unit_list_price,
        line.discount,
        settings=settings,
        tax_inclusive=line.tax_inclusive,
        tax=_listed_tax(line, is_inter=is_inter),
    )
    return settings.money(line.qty * unit_price)


def apply_volume_discount(
    line: LineItem,
    record: VolumeDiscountRecord | None,
    *,
    settings: CalculationSettings,
    is_inter: bool = False,
) -> LineItem:
    volume_discount = pricing.to_decimal(record.volume_discount) if is_volume_eligible(line, record) else ZERO
    applied_discount = volume_discount + line.discount
    qty = line.qty

    unit_price = line_discount.discounted_unit_price(
        line.unit_list_price,
        applied_discount,
        settings=settings,
        tax_inclusive=line.tax_inclusive,
        tax=_listed_tax(line, is_inter=is_inter),
    )
    if line.price_hidden:
        unit_price = ZERO
    total_price = settings.money(qty * unit_price)

    unit_volume_price: Decimal | None = None
    total_volume_discount_price: Decimal | None = None
    margin_price = unit_price
    if volume_discount > 0:
        unit_volume_price = settings.money(pricing.apply_discount(line.unit_list_price, volume_discount))
        total_volume_discount_price = settings.money(qty * unit_volume_price)
        margin_price = unit_volume_price
    dmc, margin = line_discount.line_margin(line.product_cost, line.addon_cost, margin_price, settings=settings)

    return replace(
        line,
        volume_discount=volume_discount,
        applied_discount=applied_discount,
        volume_discount_applied=volume_discount > 0,
        unit_price=unit_price,
        total_price=total_price,
        original_unit_price=None,
        cash_discounted_price=ZERO,
        pf_rate=shipping.package_forwarding_rate(total_price, line.pf_item_value, settings=settings),
        unit_volume_price=unit_volume_price,
        total_volume_discount_price=total_volume_discount_price,
        dmc=dmc,
        margin_percentage=margin,
    )


def process_line(
    line: LineItem,
    schedule: Sequence[VolumeDiscountRecord],
    *,
    settings: CalculationSettings,
    is_inter: bool,
    terms: shipping.ShippingTerms,
) -> LineItem:
    processed = apply_volume_discount(line, match_volume_record(line, schedule), settings=settings, is_inter=is_inter)
    processed = line_discount.apply_cash_discount(processed, settings=settings)
    processed = shipping.apply_package_forwarding(processed, terms=terms, settings=settings)
    return tax_breakup.calculate_line_taxes(processed, is_inter=is_inter, settings=settings, terms=terms)


def calculate_volume_discount(
    lines: Iterable[LineItem],
    schedule: Sequence[VolumeDiscountRecord] = (),
    *,
    settings: CalculationSettings | None = None,
    is_inter: bool = False,
    terms: shipping.ShippingTerms | None = None,
    insurance_charges: Decimal | None = None,
    sub_total: Decimal | None = None,
) -> VolumeDiscountResult:
    """Run volume, cash, freight and tax stages over every line, then total the cart.

    Lines are processed into a complete new tuple before any aggregation, so
    the returned cart value is always computed from a consistent set of lines.
    """
    settings = settings or CalculationSettings()
    terms = terms or shipping.ShippingTerms()
    items = tuple(lines)
    if sub_total is None:
        sub_total = sum((base_line_total(line, settings=settings, is_inter=is_inter) for line in items), start=ZERO)

    products = tuple(
        process_line(line, schedule, settings=settings, is_inter=is_inter, terms=terms) for line in items
    )
    vd_details = cart_totals.aggregate_cart(
        products,
        sub_total=sub_total,
        terms=terms,
        settings=settings,
        insurance_charges=insurance_charges,
    )
    logger.debug(
        "volume_discount_calculated",
        extra={"lines": len(products), "volume_discount_applied": str(vd_details.volume_discount_applied)},
    )
    return VolumeDiscountResult(products=products, vd_details=vd_details, pf_rate=vd_details.pf_rate)
