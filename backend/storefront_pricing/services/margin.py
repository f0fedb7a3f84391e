from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from storefront_pricing.models.calculation import LineItem
from storefront_pricing.services import pricing
from storefront_pricing.services.calculation_settings import CalculationSettings


ZERO = pricing.ZERO


@dataclass(frozen=True)
class MarginResult:
    products: tuple[LineItem, ...]
    total_ho_cost: Decimal = ZERO
    total_product_cost: Decimal = ZERO
    total_ho_cost_bc: Decimal = ZERO
    total_product_cost_bc: Decimal = ZERO
    ho_profit: Decimal = ZERO
    cost_profit: Decimal = ZERO


def _breaches_range(line: LineItem, max_range: Decimal, *, discount_based: bool, settings: CalculationSettings) -> bool:
    if discount_based:
        return settings.money(line.discount) >= max_range
    return settings.money(line.margin_percentage) <= max_range


def _worsened(line: LineItem, previous: LineItem, *, discount_based: bool, settings: CalculationSettings) -> bool:
    if discount_based:
        return settings.money(previous.discount) < settings.money(line.discount)
    return settings.money(line.margin_percentage) < settings.money(previous.margin_percentage)


def needs_approval(
    line: LineItem,
    previous_lines: Sequence[LineItem],
    max_range: Decimal,
    *,
    discount_based: bool,
    previously_approved: bool,
    settings: CalculationSettings,
) -> bool:
    """Whether a line's discount or margin must go through approval.

    Once a version of the quote was approved, a line that was already on it is
    only flagged when its discount grew or its margin shrank.
    """
    if previously_approved and line.item_no:
        previous = next((prev for prev in previous_lines if prev.item_no == line.item_no), None)
        if previous is not None and not _worsened(line, previous, discount_based=discount_based, settings=settings):
            return False
    return _breaches_range(line, max_range, discount_based=discount_based, settings=settings)


def _profit_percentage(sub_total: Decimal, cost: Decimal, *, settings: CalculationSettings) -> Decimal:
    if sub_total <= 0 or cost <= 0:
        return ZERO
    return settings.money(pricing.safe_div(sub_total - cost, sub_total) * pricing.HUNDRED)


def calculate_product_wise_margin(
    lines: Iterable[LineItem],
    previous_lines: Sequence[LineItem] = (),
    *,
    sub_total: Decimal,
    max_range: Decimal,
    discount_based: bool = False,
    previously_approved: bool = False,
    settings: CalculationSettings | None = None,
) -> MarginResult:
    settings = settings or CalculationSettings()
    max_range = pricing.to_decimal(max_range)
    sub_total = pricing.to_decimal(sub_total)
    products: list[LineItem] = []
    total_ho_cost = ZERO
    total_product_cost = ZERO
    total_ho_cost_bc = ZERO
    total_product_cost_bc = ZERO

    for line in lines:
        qty = line.qty
        total_ho_cost += (line.product_cost + line.addon_cost) * qty
        total_product_cost += line.product_cost * qty
        total_ho_cost_bc += (line.bc_product_cost + line.addon_cost) * qty
        total_product_cost_bc += line.bc_product_cost * qty
        flagged = needs_approval(
            line,
            previous_lines,
            max_range,
            discount_based=discount_based,
            previously_approved=previously_approved,
            settings=settings,
        )
        products.append(replace(line, going_for_approval=flagged))

    return MarginResult(
        products=tuple(products),
        total_ho_cost=total_ho_cost,
        total_product_cost=total_product_cost,
        total_ho_cost_bc=total_ho_cost_bc,
        total_product_cost_bc=total_product_cost_bc,
        ho_profit=_profit_percentage(sub_total, total_ho_cost, settings=settings),
        cost_profit=_profit_percentage(sub_total, total_product_cost, settings=settings),
    )
