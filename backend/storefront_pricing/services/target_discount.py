from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from decimal import Decimal

from storefront_pricing.models.calculation import LineItem, SprDetails
from storefront_pricing.services import pricing
from storefront_pricing.services.calculation_settings import CalculationSettings


logger = logging.getLogger("storefront_pricing.target_discount")

ZERO = pricing.ZERO
TOTAL_CHANGE_TOLERANCE = Decimal("0.01")


def discount_to_price(total_value: Decimal, discount: Decimal, *, settings: CalculationSettings | None = None) -> Decimal:
    """Target price for a requested discount; discounts above 100% give negative prices."""
    settings = settings or CalculationSettings()
    return settings.money(pricing.apply_discount(total_value, discount))


def price_to_discount(total_value: Decimal, target_price: Decimal, *, settings: CalculationSettings | None = None) -> Decimal:
    settings = settings or CalculationSettings()
    total = pricing.to_decimal(total_value)
    if total == 0:
        return ZERO
    discount = settings.money(pricing.HUNDRED - pricing.safe_div(pricing.to_decimal(target_price), total) * pricing.HUNDRED)
    return pricing.clamp(discount, ZERO, pricing.HUNDRED)


def redistribute_target(
    lines: Iterable[LineItem],
    target_price: Decimal,
    total_value: Decimal,
    *,
    settings: CalculationSettings,
) -> tuple[LineItem, ...]:
    """Spread a target price over lines in proportion to each line's share of the total."""
    redistributed: list[LineItem] = []
    for line in lines:
        contribution = settings.money(pricing.safe_div(line.total_price, total_value) * pricing.HUNDRED)
        revised_value = settings.money(pricing.percent_of(target_price, contribution))
        quantity = line.qty or Decimal("1")
        buyer_requested_price = settings.money(pricing.safe_div(revised_value, quantity))
        buyer_requested_discount = settings.money(
            pricing.safe_div(line.unit_price - buyer_requested_price, line.unit_price) * pricing.HUNDRED
        )
        redistributed.append(
            replace(
                line,
                contribution=contribution,
                revised_value=revised_value,
                buyer_requested_price=buyer_requested_price,
                buyer_requested_discount=buyer_requested_discount,
            )
        )
    return tuple(redistributed)


def spr_flags(target_price: Decimal, total_value: Decimal, *, settings: CalculationSettings) -> tuple[bool, bool]:
    is_spr_requested = settings.money(target_price) < total_value
    return is_spr_requested, is_spr_requested and settings.spr_enabled


@dataclass(frozen=True)
class TargetDiscountState:
    """Negotiation state for a cart's special price request.

    Each transition returns a new state with redistributed lines and fresh
    request flags; the previous state is left untouched.
    """

    total_value: Decimal
    products: tuple[LineItem, ...] = ()
    spr: SprDetails = field(default_factory=SprDetails)
    settings: CalculationSettings = field(default_factory=CalculationSettings)
    cash_discount: bool = False
    cash_discount_value: Decimal = ZERO

    @property
    def target_price(self) -> Decimal:
        return self.spr.target_price

    @property
    def discount(self) -> Decimal:
        return self.spr.spr_requested_discount

    def _settle(self, *, target_price: Decimal, discount: Decimal, total_value: Decimal) -> TargetDiscountState:
        is_spr_requested, spr = spr_flags(target_price, total_value, settings=self.settings)
        products = redistribute_target(self.products, target_price, total_value, settings=self.settings)
        return replace(
            self,
            total_value=total_value,
            products=products,
            spr=SprDetails(
                target_price=target_price,
                spr_requested_discount=discount,
                is_spr_requested=is_spr_requested,
                spr=spr,
            ),
        )

    def change_discount(self, discount: Decimal | None) -> TargetDiscountState:
        value = pricing.to_decimal(discount)
        target_price = discount_to_price(self.total_value, value, settings=self.settings)
        return self._settle(target_price=target_price, discount=value, total_value=self.total_value)

    def change_target_price(self, target_price: Decimal | None) -> TargetDiscountState:
        value = pricing.to_decimal(target_price)
        discount = price_to_discount(self.total_value, value, settings=self.settings)
        return self._settle(target_price=value, discount=discount, total_value=self.total_value)

    def change_total_value(self, total_value: Decimal | None) -> TargetDiscountState:
        """React to a recalculated cart value, e.g. after a cash discount is applied.

        A non-zero requested discount is kept and the target price follows the
        new total. With no discount the target tracks the total, and with a cash
        discount the displayed discount is measured against the pre-cash total.
        """
        total = pricing.to_decimal(total_value)
        if total <= 0:
            return replace(self, total_value=total)
        if abs(total - self.total_value) <= TOTAL_CHANGE_TOLERANCE:
            return self

        if self.discount > 0:
            target_price = discount_to_price(total, self.discount, settings=self.settings)
            return self._settle(target_price=target_price, discount=self.discount, total_value=total)

        discount = self.discount
        if self.cash_discount and self.cash_discount_value > 0:
            original_total = self.settings.money(
                pricing.safe_div(total, 1 - self.cash_discount_value / pricing.HUNDRED)
            )
            if original_total > total:
                candidate = self.settings.money(pricing.safe_div(original_total - total, original_total) * pricing.HUNDRED)
                if ZERO <= candidate <= pricing.HUNDRED:
                    discount = candidate
        logger.debug("target_price_follows_total", extra={"total_value": str(total)})
        return self._settle(target_price=total, discount=discount, total_value=total)
