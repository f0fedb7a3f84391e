from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal

from storefront_pricing.models.calculation import LineItem, TaxComponent, TaxSchedule
from storefront_pricing.services import pricing, shipping
from storefront_pricing.services.calculation_settings import CalculationSettings


ZERO = pricing.ZERO


def _normalize_state(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(value.split()).casefold()
    return cleaned or None


def is_inter_state(billing_state: str | None, warehouse_state: str | None) -> bool:
    billing = _normalize_state(billing_state)
    warehouse = _normalize_state(warehouse_state)
    if billing is None or warehouse is None:
        return False
    return billing != warehouse


def build_tax_breakup(schedule: TaxSchedule | None, *, tax_exempt: bool = False) -> tuple[TaxComponent, ...]:
    """Turn a tax schedule into ordered breakup components.

    Non-compound components come first so that every compound component sees
    the full running sum it is charged on.
    """
    if schedule is None:
        return ()
    components = [
        TaxComponent(
            tax_name=rate.tax_name,
            tax_percentage=ZERO if tax_exempt else pricing.to_decimal(rate.rate),
            compound=rate.compound,
        )
        for rate in schedule.rates
    ]
    return tuple([c for c in components if not c.compound] + [c for c in components if c.compound])


def _line_tax_rate(line: LineItem, *, is_inter: bool) -> Decimal:
    if line.tax_exempt:
        return ZERO
    if line.hsn is None:
        return line.tax
    return line.hsn.rate(is_inter=is_inter)


def calculate_line_taxes(
    line: LineItem,
    *,
    is_inter: bool,
    settings: CalculationSettings,
    terms: shipping.ShippingTerms | None = None,
) -> LineItem:
    terms = terms or shipping.ShippingTerms()
    breakup = line.breakup(is_inter=is_inter)
    base = line.total_price + line.pf_rate
    running = ZERO
    tax_values: dict[str, Decimal] = {}
    for component in breakup:
        if component.compound:
            amount = settings.money(pricing.percent_of(running, component.tax_percentage))
        else:
            amount = settings.money(pricing.percent_of(base, component.tax_percentage))
            running += amount
        tax_values[component.tax_name] = tax_values.get(component.tax_name, ZERO) + amount

    shipping_tax_values = shipping.line_shipping_tax(line, breakup, terms=terms, settings=settings)
    return replace(
        line,
        tax=_line_tax_rate(line, is_inter=is_inter),
        tax_values=tax_values,
        total_tax=sum(tax_values.values(), start=ZERO),
        shipping_tax_values=shipping_tax_values,
        shipping_tax=sum(shipping_tax_values.values(), start=ZERO),
    )


def calculate_taxes(
    lines: Iterable[LineItem],
    *,
    is_inter: bool,
    settings: CalculationSettings,
    terms: shipping.ShippingTerms | None = None,
) -> tuple[LineItem, ...]:
    return tuple(calculate_line_taxes(line, is_inter=is_inter, settings=settings, terms=terms) for line in lines)


def cart_tax_breakup(lines: Iterable[LineItem], *, is_inter: bool) -> tuple[TaxComponent, ...]:
    """Distinct components across the cart for display, first occurrence wins."""
    seen: dict[str, TaxComponent] = {}
    for line in lines:
        for component in line.breakup(is_inter=is_inter):
            seen.setdefault(component.tax_name, component)
    components = list(seen.values())
    return tuple([c for c in components if not c.compound] + [c for c in components if c.compound])
