from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from storefront_pricing.models.calculation import CartValue, LineItem
from storefront_pricing.services import pricing, shipping
from storefront_pricing.services.calculation_settings import CalculationSettings


ZERO = pricing.ZERO


def _sum_mappings(mappings: Iterable[Mapping[str, Decimal]]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for mapping in mappings:
        for name, amount in mapping.items():
            totals[name] = totals.get(name, ZERO) + amount
    return totals


def aggregate_cart(
    lines: Iterable[LineItem],
    *,
    sub_total: Decimal | None = None,
    terms: shipping.ShippingTerms | None = None,
    settings: CalculationSettings | None = None,
    insurance_charges: Decimal | None = None,
) -> CartValue:
    """Fold fully processed lines into cart totals.

    Pure reduction: the same lines always produce the same ``CartValue``.
    ``sub_total`` is the cart value before volume discounts; when omitted it is
    taken as the post-volume value plus the cash discount, i.e. no volume
    discount is reported.
    """
    items = tuple(lines)
    terms = terms or shipping.ShippingTerms()
    settings = settings or CalculationSettings()

    sub_total_volume = sum((line.total_price for line in items), start=ZERO)
    total_cash_discount = sum((line.cash_discounted_price for line in items), start=ZERO)
    if sub_total is None:
        sub_total = sub_total_volume + total_cash_discount
    pf_rate = sum((line.pf_rate for line in items), start=ZERO)

    tax_totals = _sum_mappings(line.tax_values for line in items)
    shipping_tax_totals = _sum_mappings(line.shipping_tax_values for line in items)
    if settings.item_wise_shipping_tax:
        shipping_tax = sum((line.shipping_tax for line in items), start=ZERO)
    else:
        shipping_tax = shipping.cart_shipping_tax(terms, settings=settings)
    overall_tax = sum((line.total_tax for line in items), start=ZERO) + shipping_tax

    overall_shipping = settings.money(terms.overall_shipping)
    insurance = settings.money(insurance_charges)
    taxable_amount = sub_total_volume + pf_rate
    if terms.before_tax:
        taxable_amount += overall_shipping

    calculated_total = settings.money(sub_total_volume + overall_tax + pf_rate + overall_shipping + insurance)
    grand_total = pricing.round_whole(calculated_total) if settings.rounding_adjustment else calculated_total

    return CartValue(
        total_items=len(items),
        sub_total=sub_total,
        sub_total_volume=sub_total_volume,
        volume_discount_applied=sub_total - sub_total_volume - total_cash_discount,
        total_value=sub_total_volume,
        total_lp=sum((line.total_lp for line in items), start=ZERO),
        total_basic_discount=sum((line.basic_discounted_price for line in items), start=ZERO),
        total_cash_discount=total_cash_discount,
        cash_discount_value=max((line.cash_discount_value for line in items), default=ZERO),
        tax_totals=tax_totals,
        shipping_tax_totals=shipping_tax_totals,
        shipping_tax=shipping_tax,
        overall_tax=overall_tax,
        pf_rate=pf_rate,
        overall_shipping=overall_shipping,
        taxable_amount=taxable_amount,
        insurance_charges=insurance,
        calculated_total=calculated_total,
        grand_total=grand_total,
        rounding_adjustment=grand_total - calculated_total,
        has_products_with_negative_total_price=any(line.total_price < 0 for line in items),
        has_all_products_available_in_price_list=all(line.is_product_available_in_price_list for line in items),
    )
