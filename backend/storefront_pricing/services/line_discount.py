from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from decimal import Decimal

from storefront_pricing.models.calculation import LineItem, PricelistDiscount, QuantityDiscountRange
from storefront_pricing.services import pricing, shipping, tax_breakup
from storefront_pricing.services.calculation_settings import CalculationSettings


ZERO = pricing.ZERO
FULL_DMC = Decimal("100")


def effective_discount(pricelist_discount: Decimal | None, manual_discount: Decimal | None = None) -> Decimal:
    return max(pricing.to_decimal(pricelist_discount), pricing.to_decimal(manual_discount))


def discounted_unit_price(
    unit_list_price: Decimal | None,
    discount: Decimal | None,
    *,
    settings: CalculationSettings,
    tax_inclusive: bool = False,
    tax: Decimal | None = None,
) -> Decimal:
    """Tax-exclusive unit price after a percentage discount.

    Tax-inclusive list prices are divided by ``1 + tax/100`` before the single
    quantization step, so stored unit prices never carry tax.
    """
    price = pricing.apply_discount(pricing.to_decimal(unit_list_price), pricing.to_decimal(discount))
    if tax_inclusive:
        price = pricing.safe_div(price, 1 + pricing.to_decimal(tax) / pricing.HUNDRED)
    return settings.money(price)


def line_margin(
    product_cost: Decimal,
    addon_cost: Decimal,
    price: Decimal | None,
    *,
    settings: CalculationSettings,
) -> tuple[Decimal, Decimal]:
    cost = pricing.to_decimal(product_cost)
    if cost > 0 and price is not None and price > 0:
        dmc = settings.money(pricing.safe_div(cost + pricing.to_decimal(addon_cost), price) * pricing.HUNDRED)
    else:
        dmc = FULL_DMC
    return dmc, FULL_DMC - dmc


def select_quantity_discount(
    quantity: object,
    ranges: Sequence[QuantityDiscountRange],
) -> tuple[QuantityDiscountRange | None, QuantityDiscountRange | None]:
    """Return the best tier covering ``quantity`` and the next tier above it."""
    qty = pricing.to_decimal(quantity, fallback=ZERO)
    if qty <= 0 or not ranges:
        return None, None
    suitable: QuantityDiscountRange | None = None
    for tier in ranges:
        if tier.min_qty <= qty <= tier.max_qty and (suitable is None or tier.value > suitable.value):
            suitable = tier
    upcoming = [tier for tier in ranges if tier.min_qty > qty]
    following = min(upcoming, key=lambda tier: tier.min_qty) if upcoming else None
    return suitable, following


def apply_pricelist_discount(line: LineItem, record: PricelistDiscount | None) -> LineItem:
    """Merge a discount-lookup record into a line: list price, tier discount, pricelist flags.

    A manually edited discount (``disc_changed``) survives when it is larger
    than the pricelist discount.
    """
    if record is None:
        return replace(line, price_not_available=True, is_product_available_in_price_list=False)

    price_not_available = (
        record.master_price is None or record.base_price is None or not record.is_product_available_in_price_list
    )
    master = pricing.to_decimal(record.master_price)
    base = pricing.to_decimal(record.base_price)
    suitable, following = select_quantity_discount(line.qty, record.discounts)
    tier_value = suitable.value if suitable else ZERO
    override_discount = pricing.safe_div(master - base, master) * pricing.HUNDRED

    if record.is_override_pricelist is False:
        unit_list_price = master
        discount = override_discount + tier_value
    else:
        unit_list_price = base
        discount = tier_value

    if line.disc_changed:
        discount = effective_discount(discount, line.discount)

    return replace(
        line,
        unit_list_price=unit_list_price,
        discount=discount,
        applied_discount=discount,
        price_not_available=price_not_available,
        is_product_available_in_price_list=record.is_product_available_in_price_list,
        cant_combine_with_other_discounts=bool(suitable and suitable.cant_combine_with_other_discounts),
        next_quantity_discount=following,
        pricing_condition_code=record.pricing_condition_code
        or (suitable.pricing_condition_code if suitable else None),
        is_approval_required=record.is_approval_required,
    )


def resolve_line(
    line: LineItem,
    *,
    settings: CalculationSettings,
    tax_exempt: bool = False,
    is_inter: bool = False,
) -> LineItem:
    qty = line.qty
    hsn = line.hsn
    listed_tax = hsn.rate(is_inter=is_inter) if hsn else ZERO
    tax = ZERO if tax_exempt else listed_tax

    unit_price = line.unit_price
    total_price = line.total_price
    applied_discount = line.applied_discount
    if not line.volume_discount_applied:
        applied_discount = line.discount
        unit_price = discounted_unit_price(
            line.unit_list_price,
            line.discount,
            settings=settings,
            tax_inclusive=line.tax_inclusive,
            tax=listed_tax,
        )
        total_price = settings.money(qty * unit_price)

    unit_list_price = line.unit_list_price
    if line.price_hidden:
        unit_price = ZERO
        total_price = ZERO
        unit_list_price = ZERO

    dmc, margin = line_margin(line.product_cost, line.addon_cost, unit_price, settings=settings)
    return replace(
        line,
        asked_quantity=qty,
        check_moq=line.min_order_quantity is not None and line.min_order_quantity > qty,
        tax=tax,
        tax_exempt=tax_exempt,
        unit_list_price=unit_list_price,
        unit_price=unit_price,
        total_price=total_price,
        applied_discount=applied_discount,
        pf_rate=shipping.package_forwarding_rate(total_price, line.pf_item_value, settings=settings),
        dmc=dmc,
        margin_percentage=margin,
        inter_tax_breakup=tax_breakup.build_tax_breakup(hsn.inter_tax if hsn else None, tax_exempt=tax_exempt),
        intra_tax_breakup=tax_breakup.build_tax_breakup(hsn.intra_tax if hsn else None, tax_exempt=tax_exempt),
        buyer_requested_price=ZERO if line.price_hidden else unit_price,
    )


def resolve_lines(
    lines: Iterable[LineItem],
    *,
    settings: CalculationSettings,
    tax_exempt: bool = False,
    is_inter: bool = False,
) -> tuple[LineItem, ...]:
    return tuple(
        resolve_line(line, settings=settings, tax_exempt=tax_exempt, is_inter=is_inter) for line in lines
    )


def apply_cash_discount(line: LineItem, *, settings: CalculationSettings) -> LineItem:
    """Apply the line's cash discount on top of the resolved price and record discount amounts.

    The cash discount is a percentage of the price after basic and volume
    discounts. ``cash_discounted_price`` is the exact drop in line total, and
    ``basic_discounted_price`` measures list price against the pre-cash price.
    """
    qty = line.qty
    pre_cash_price = line.unit_price
    unit_price = line.unit_price
    total_price = line.total_price
    cash_discounted_price = ZERO
    original_unit_price = line.original_unit_price

    if line.cash_discount_value > 0 and not line.price_hidden:
        original_unit_price = original_unit_price if original_unit_price is not None else line.unit_price
        pre_cash_price = original_unit_price
        unit_price = settings.money(original_unit_price - pricing.percent_of(original_unit_price, line.cash_discount_value))
        total_price = settings.money(qty * unit_price)
        cash_discounted_price = settings.money(qty * original_unit_price) - total_price

    basic_discounted_price = ZERO
    if line.unit_list_price > pre_cash_price:
        basic_discounted_price = settings.money((line.unit_list_price - pre_cash_price) * qty)

    return replace(
        line,
        unit_price=unit_price,
        total_price=total_price,
        original_unit_price=original_unit_price,
        cash_discounted_price=cash_discounted_price,
        basic_discounted_price=basic_discounted_price,
        total_lp=settings.money(line.unit_list_price * qty),
    )
