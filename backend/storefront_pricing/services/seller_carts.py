from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from storefront_pricing.models.calculation import CartValue, LineItem, VolumeDiscountRecord
from storefront_pricing.services import pricing, shipping, volume_discount
from storefront_pricing.services.calculation_settings import CalculationSettings


NO_SELLER = "no-seller"
ZERO = pricing.ZERO


@dataclass(frozen=True)
class SellerCart:
    seller_id: str
    seller_name: str | None
    products: tuple[LineItem, ...]
    cart_value: CartValue

    @property
    def item_count(self) -> int:
        return len(self.products)

    @property
    def total_quantity(self) -> Decimal:
        return sum((line.qty for line in self.products), start=ZERO)


@dataclass(frozen=True)
class OverallCartSummary:
    seller_count: int = 0
    total_items: int = 0
    total_value: Decimal = ZERO
    overall_tax: Decimal = ZERO
    grand_total: Decimal = ZERO


def seller_key(line: LineItem) -> str:
    return line.seller_id or NO_SELLER


def group_lines_by_seller(lines: Iterable[LineItem]) -> dict[str, list[LineItem]]:
    grouped: dict[str, list[LineItem]] = {}
    for line in lines:
        grouped.setdefault(seller_key(line), []).append(line)
    return grouped


def calculate_seller_carts(
    lines: Iterable[LineItem],
    schedules: Mapping[str, Sequence[VolumeDiscountRecord]] | None = None,
    *,
    settings: CalculationSettings | None = None,
    is_inter: bool = False,
    terms: shipping.ShippingTerms | None = None,
) -> dict[str, SellerCart]:
    """Price each seller's lines as an independent cart.

    Volume discount schedules are looked up per seller; a seller without one
    gets no volume discount. Cart-level shipping terms apply to every seller.
    """
    schedules = schedules or {}
    carts: dict[str, SellerCart] = {}
    for key, seller_lines in group_lines_by_seller(lines).items():
        result = volume_discount.calculate_volume_discount(
            seller_lines,
            schedules.get(key, ()),
            settings=settings,
            is_inter=is_inter,
            terms=terms,
        )
        carts[key] = SellerCart(
            seller_id=key,
            seller_name=next((line.seller_name for line in seller_lines if line.seller_name), None),
            products=result.products,
            cart_value=result.vd_details,
        )
    return carts


def overall_cart_summary(carts: Mapping[str, SellerCart]) -> OverallCartSummary:
    values = [cart.cart_value for cart in carts.values()]
    return OverallCartSummary(
        seller_count=len(values),
        total_items=sum(value.total_items for value in values),
        total_value=sum((value.total_value for value in values), start=ZERO),
        overall_tax=sum((value.overall_tax for value in values), start=ZERO),
        grand_total=sum((value.grand_total for value in values), start=ZERO),
    )
