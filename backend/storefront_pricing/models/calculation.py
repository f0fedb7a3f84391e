from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping


ZERO = Decimal("0")


@dataclass(frozen=True)
class TaxRate:
    """One named rate as delivered by the HSN metadata service."""

    tax_name: str
    rate: Decimal = ZERO
    compound: bool = False


@dataclass(frozen=True)
class TaxSchedule:
    total_tax: Decimal = ZERO
    rates: tuple[TaxRate, ...] = ()


@dataclass(frozen=True)
class HsnDetails:
    hsn_code: str | None = None
    tax: Decimal = ZERO
    inter_tax: TaxSchedule | None = None
    intra_tax: TaxSchedule | None = None

    def schedule(self, *, is_inter: bool) -> TaxSchedule | None:
        return self.inter_tax if is_inter else self.intra_tax

    def rate(self, *, is_inter: bool) -> Decimal:
        """Total rate of the regime schedule, or the flat HSN rate when it has none."""
        schedule = self.schedule(is_inter=is_inter)
        if schedule is not None and schedule.total_tax:
            return schedule.total_tax
        return self.tax


@dataclass(frozen=True)
class TaxComponent:
    """A line's breakup entry; compound components tax the running component sum."""

    tax_name: str
    tax_percentage: Decimal = ZERO
    compound: bool = False


@dataclass(frozen=True)
class QuantityDiscountRange:
    min_qty: Decimal
    max_qty: Decimal
    value: Decimal = ZERO
    cant_combine_with_other_discounts: bool = False
    pricing_condition_code: str | None = None


@dataclass(frozen=True)
class PricelistDiscount:
    product_variant_id: str
    seller_id: str | None = None
    master_price: Decimal | None = None
    base_price: Decimal | None = None
    is_product_available_in_price_list: bool = True
    is_override_pricelist: bool | None = None
    discounts: tuple[QuantityDiscountRange, ...] = ()
    price_list_code: str | None = None
    pricing_condition_code: str | None = None
    is_approval_required: bool = False


@dataclass(frozen=True)
class VolumeDiscountRecord:
    volume_discount: Decimal
    item_no: str | None = None
    product_id: str | None = None
    applied_discount: Decimal | None = None
    discount_id: str | None = None


@dataclass(frozen=True)
class LineItem:
    product_id: str
    quantity: Decimal = Decimal("1")
    item_no: str | None = None
    asked_quantity: Decimal | None = None
    seller_id: str | None = None
    seller_name: str | None = None
    min_order_quantity: Decimal | None = None
    check_moq: bool = False

    unit_list_price: Decimal = ZERO
    unit_price: Decimal = ZERO
    total_price: Decimal = ZERO
    total_lp: Decimal = ZERO

    discount: Decimal = ZERO
    applied_discount: Decimal = ZERO
    volume_discount: Decimal = ZERO
    volume_discount_applied: bool = False
    cant_combine_with_other_discounts: bool = False
    disc_changed: bool = False
    pricing_condition_code: str | None = None
    next_quantity_discount: QuantityDiscountRange | None = None

    show_price: bool = True
    price_not_available: bool = False
    is_product_available_in_price_list: bool = True
    is_approval_required: bool = False

    cash_discount_value: Decimal = ZERO
    original_unit_price: Decimal | None = None
    cash_discounted_price: Decimal = ZERO
    basic_discounted_price: Decimal = ZERO

    hsn: HsnDetails | None = None
    tax_inclusive: bool = False
    tax_exempt: bool = False
    tax: Decimal = ZERO
    inter_tax_breakup: tuple[TaxComponent, ...] = ()
    intra_tax_breakup: tuple[TaxComponent, ...] = ()
    tax_values: Mapping[str, Decimal] = field(default_factory=dict)
    total_tax: Decimal = ZERO

    pf_item_value: Decimal = ZERO
    pf_rate: Decimal = ZERO
    item_taxable_amount: Decimal = ZERO
    shipping_charges: Decimal = ZERO
    shipping_tax_values: Mapping[str, Decimal] = field(default_factory=dict)
    shipping_tax: Decimal = ZERO

    product_cost: Decimal = ZERO
    bc_product_cost: Decimal = ZERO
    addon_cost: Decimal = ZERO
    dmc: Decimal = Decimal("100")
    margin_percentage: Decimal = ZERO
    unit_volume_price: Decimal | None = None
    total_volume_discount_price: Decimal | None = None
    going_for_approval: bool = False

    contribution: Decimal | None = None
    revised_value: Decimal | None = None
    buyer_requested_price: Decimal | None = None
    buyer_requested_discount: Decimal | None = None

    @property
    def qty(self) -> Decimal:
        return self.asked_quantity if self.asked_quantity is not None else self.quantity

    @property
    def price_hidden(self) -> bool:
        return (not self.show_price) or self.price_not_available

    def breakup(self, *, is_inter: bool) -> tuple[TaxComponent, ...]:
        return self.inter_tax_breakup if is_inter else self.intra_tax_breakup


@dataclass(frozen=True)
class CartValue:
    total_items: int = 0
    sub_total: Decimal = ZERO
    sub_total_volume: Decimal = ZERO
    volume_discount_applied: Decimal = ZERO
    total_value: Decimal = ZERO
    total_lp: Decimal = ZERO
    total_basic_discount: Decimal = ZERO
    total_cash_discount: Decimal = ZERO
    cash_discount_value: Decimal = ZERO
    tax_totals: Mapping[str, Decimal] = field(default_factory=dict)
    shipping_tax_totals: Mapping[str, Decimal] = field(default_factory=dict)
    shipping_tax: Decimal = ZERO
    overall_tax: Decimal = ZERO
    pf_rate: Decimal = ZERO
    overall_shipping: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    insurance_charges: Decimal = ZERO
    calculated_total: Decimal = ZERO
    grand_total: Decimal = ZERO
    rounding_adjustment: Decimal = ZERO
    has_products_with_negative_total_price: bool = False
    has_all_products_available_in_price_list: bool = True

    @property
    def total_tax(self) -> Decimal:
        return self.overall_tax

    @property
    def combined_tax_totals(self) -> dict[str, Decimal]:
        combined = dict(self.tax_totals)
        for name, amount in self.shipping_tax_totals.items():
            combined[name] = combined.get(name, ZERO) + amount
        return combined


@dataclass(frozen=True)
class SprDetails:
    target_price: Decimal = ZERO
    spr_requested_discount: Decimal = ZERO
    is_spr_requested: bool = False
    spr: bool = False
