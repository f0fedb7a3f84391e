from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, cast

from storefront_pricing.services import pricing


DEFAULT_ITEM_WISE_SHIPPING_TAX = False
DEFAULT_ROUNDING_ADJUSTMENT = False
DEFAULT_PRECISION = pricing.DEFAULT_PRECISION
DEFAULT_MONEY_ROUNDING: Literal["half_up", "half_even", "up", "down"] = "half_up"
DEFAULT_SPR_ENABLED = False
MAX_PRECISION = 6


@dataclass(frozen=True)
class CalculationSettings:
    item_wise_shipping_tax: bool = DEFAULT_ITEM_WISE_SHIPPING_TAX
    rounding_adjustment: bool = DEFAULT_ROUNDING_ADJUSTMENT
    precision: int = DEFAULT_PRECISION
    money_rounding: Literal["half_up", "half_even", "up", "down"] = DEFAULT_MONEY_ROUNDING
    spr_enabled: bool = DEFAULT_SPR_ENABLED

    def money(self, value: Decimal | int | float | str | None) -> Decimal:
        return pricing.quantize_money(value, precision=self.precision, rounding=self.money_rounding)

    @property
    def tolerance(self) -> Decimal:
        return pricing.money_quant(self.precision)


def _parse_bool(value: object | None, *, fallback: bool) -> bool:
    if value is None:
        return fallback
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in {"1", "true", "yes", "on"}:
            return True
        if candidate in {"0", "false", "no", "off"}:
            return False
    return fallback


def _parse_int(value: object | None, *, fallback: int) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    if isinstance(value, (int, float, str)):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return fallback
    return fallback


def _normalize_money_rounding(value: object | None) -> Literal["half_up", "half_even", "up", "down"]:
    rounding_raw = str(value or DEFAULT_MONEY_ROUNDING).strip().lower()
    if rounding_raw in {"half_up", "half_even", "up", "down"}:
        return cast(Literal["half_up", "half_even", "up", "down"], rounding_raw)
    return DEFAULT_MONEY_ROUNDING


def _clamp_precision(value: int) -> int:
    if value < 0:
        return DEFAULT_PRECISION
    if value > MAX_PRECISION:
        return MAX_PRECISION
    return value


def parse_calculation_settings(
    meta: Mapping[str, object] | None,
    *,
    defaults: CalculationSettings | None = None,
) -> CalculationSettings:
    """Build settings from a loose mapping such as a company's quote settings block.

    Keys accept both snake_case and the camelCase names used by the storefront
    (``itemWiseShippingTax``, ``roundingAdjustment``, ``roundOff``, ``spr``).
    Unknown or malformed values fall back to ``defaults``.
    """
    base = defaults or CalculationSettings()
    meta = meta or {}

    def pick(*keys: str) -> object | None:
        for key in keys:
            if key in meta and meta[key] is not None:
                return meta[key]
        return None

    item_wise = _parse_bool(
        pick("item_wise_shipping_tax", "itemWiseShippingTax"), fallback=base.item_wise_shipping_tax
    )
    rounding_adjustment = _parse_bool(
        pick("rounding_adjustment", "roundingAdjustment"), fallback=base.rounding_adjustment
    )
    precision = _clamp_precision(_parse_int(pick("precision", "roundOff"), fallback=base.precision))
    money_rounding = _normalize_money_rounding(pick("money_rounding") or base.money_rounding)
    spr_enabled = _parse_bool(pick("spr_enabled", "spr"), fallback=base.spr_enabled)
    return CalculationSettings(
        item_wise_shipping_tax=item_wise,
        rounding_adjustment=rounding_adjustment,
        precision=precision,
        money_rounding=money_rounding,
        spr_enabled=spr_enabled,
    )
