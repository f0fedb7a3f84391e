from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from storefront_pricing.models.calculation import LineItem, TaxComponent
from storefront_pricing.services import pricing
from storefront_pricing.services.calculation_settings import CalculationSettings


ZERO = pricing.ZERO


@dataclass(frozen=True)
class ShippingTerms:
    """Cart-level shipping arrangement.

    ``before_tax`` means shipping is part of the taxable amount. When shipping
    tax is not item-wise, ``before_tax_percentage`` taxes ``overall_shipping``
    once for the whole cart.
    """

    overall_shipping: Decimal = ZERO
    before_tax: bool = False
    before_tax_percentage: Decimal = ZERO


def package_forwarding_rate(total_price: Decimal, pf_item_value: Decimal, *, settings: CalculationSettings) -> Decimal:
    return settings.money(pricing.percent_of(total_price, pf_item_value))


def allocate_package_forwarding(lines: Iterable[LineItem], pf_percentage: Decimal | None) -> tuple[LineItem, ...]:
    """Stamp a cart-wide packing & forwarding percentage on every line."""
    percentage = pricing.to_decimal(pf_percentage)
    return tuple(replace(line, pf_item_value=percentage) for line in lines)


def ships_item_wise_before_tax(terms: ShippingTerms, settings: CalculationSettings) -> bool:
    return terms.before_tax and settings.item_wise_shipping_tax


def item_taxable_amount(line: LineItem, *, terms: ShippingTerms, settings: CalculationSettings) -> Decimal:
    amount = line.unit_price + pricing.safe_div(line.pf_rate, line.qty)
    if ships_item_wise_before_tax(terms, settings):
        amount += line.shipping_charges
    return amount


def apply_package_forwarding(line: LineItem, *, terms: ShippingTerms, settings: CalculationSettings) -> LineItem:
    pf_rate = package_forwarding_rate(line.total_price, line.pf_item_value, settings=settings)
    priced = replace(line, pf_rate=pf_rate)
    return replace(priced, item_taxable_amount=item_taxable_amount(priced, terms=terms, settings=settings))


def line_shipping_tax(
    line: LineItem,
    breakup: Sequence[TaxComponent],
    *,
    terms: ShippingTerms,
    settings: CalculationSettings,
) -> dict[str, Decimal]:
    """Per-component shipping tax for one line when shipping tax is item-wise.

    Non-compound components tax the line's shipping charge; compound
    components tax the shipping tax accumulated so far on this line only.
    """
    if not settings.item_wise_shipping_tax:
        return {}
    shipped = line.shipping_charges * line.qty
    accumulated = ZERO
    values: dict[str, Decimal] = {}
    for component in breakup:
        if not terms.before_tax:
            values[component.tax_name] = ZERO
            continue
        if component.compound:
            amount = settings.money(pricing.percent_of(accumulated, component.tax_percentage))
        else:
            amount = settings.money(pricing.percent_of(shipped, component.tax_percentage))
            accumulated += amount
        values[component.tax_name] = values.get(component.tax_name, ZERO) + amount
    return values


def cart_shipping_tax(terms: ShippingTerms, *, settings: CalculationSettings) -> Decimal:
    if settings.item_wise_shipping_tax or not terms.before_tax:
        return ZERO
    return settings.money(pricing.percent_of(terms.overall_shipping, terms.before_tax_percentage))


def total_line_shipping(lines: Iterable[LineItem]) -> Decimal:
    return sum((line.shipping_charges * line.qty for line in lines), start=ZERO)
