from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Literal, Union

from storefront_pricing.models.calculation import (
    CartValue,
    LineItem,
    PricelistDiscount,
    TaxComponent,
    VolumeDiscountRecord,
)
from storefront_pricing.services import line_discount, pricing, shipping, tax_breakup, volume_discount
from storefront_pricing.services.calculation_settings import CalculationSettings


logger = logging.getLogger("storefront_pricing.summary")

ZERO = pricing.ZERO

WarningCode = Literal["below_moq", "price_unavailable", "negative_total"]


@dataclass(frozen=True)
class SummaryInputs:
    lines: tuple[LineItem, ...]
    discount_records: tuple[PricelistDiscount, ...] = ()
    volume_schedule: tuple[VolumeDiscountRecord, ...] = ()
    billing_state: str | None = None
    warehouse_state: str | None = None
    company_id: str | None = None
    seller_id: str | None = None
    settings: CalculationSettings = field(default_factory=CalculationSettings)
    terms: shipping.ShippingTerms = field(default_factory=shipping.ShippingTerms)
    insurance_charges: Decimal = ZERO
    pf_percentage: Decimal | None = None
    currency_factor: Decimal = Decimal("1")
    tax_exempt: bool = False


@dataclass(frozen=True)
class LineWarning:
    code: WarningCode
    product_id: str
    item_no: str | None = None


@dataclass(frozen=True)
class SummaryOk:
    products: tuple[LineItem, ...]
    cart_value: CartValue
    breakup: tuple[TaxComponent, ...]
    pf_rate: Decimal
    is_inter: bool
    warnings: tuple[LineWarning, ...] = ()
    status: Literal["ok"] = "ok"


@dataclass(frozen=True)
class SummaryDegraded:
    products: tuple[LineItem, ...]
    reason: str
    breakup: tuple[TaxComponent, ...] = ()
    status: Literal["degraded"] = "degraded"


@dataclass(frozen=True)
class SummaryPending:
    missing: tuple[str, ...]
    status: Literal["pending"] = "pending"


SummaryOutcome = Union[SummaryOk, SummaryDegraded, SummaryPending]


def missing_reference_data(inputs: SummaryInputs) -> tuple[str, ...]:
    required = {
        "company_id": inputs.company_id,
        "seller_id": inputs.seller_id,
        "billing_state": inputs.billing_state,
    }
    return tuple(name for name, value in required.items() if value is None or not str(value).strip())


def match_pricelist_record(
    line: LineItem,
    records: Sequence[PricelistDiscount],
    *,
    seller_id: str | None,
) -> PricelistDiscount | None:
    expected_seller = line.seller_id or seller_id
    for record in records:
        if record.product_variant_id != line.product_id:
            continue
        if record.seller_id and expected_seller and record.seller_id != expected_seller:
            continue
        return record
    return None


def prepare_lines(inputs: SummaryInputs) -> tuple[LineItem, ...]:
    """Attach reference data to the raw lines and resolve their base prices."""
    lines = inputs.lines
    if inputs.pf_percentage is not None:
        lines = shipping.allocate_package_forwarding(lines, inputs.pf_percentage)

    factor = pricing.to_decimal(inputs.currency_factor, fallback=Decimal("1"))
    prepared: list[LineItem] = []
    for line in lines:
        if line.product_cost == 0 and line.bc_product_cost > 0:
            line = replace(line, product_cost=line.bc_product_cost * factor)
        if inputs.discount_records:
            record = match_pricelist_record(line, inputs.discount_records, seller_id=inputs.seller_id)
            line = line_discount.apply_pricelist_discount(line, record)
        prepared.append(line)
    return line_discount.resolve_lines(
        prepared,
        settings=inputs.settings,
        tax_exempt=inputs.tax_exempt,
        is_inter=tax_breakup.is_inter_state(inputs.billing_state, inputs.warehouse_state),
    )


def line_warnings(lines: Sequence[LineItem]) -> tuple[LineWarning, ...]:
    warnings: list[LineWarning] = []
    for line in lines:
        if line.check_moq:
            warnings.append(LineWarning("below_moq", line.product_id, line.item_no))
        if line.price_not_available:
            warnings.append(LineWarning("price_unavailable", line.product_id, line.item_no))
        if line.total_price < 0:
            warnings.append(LineWarning("negative_total", line.product_id, line.item_no))
    return tuple(warnings)


def _effective_terms(inputs: SummaryInputs, lines: Sequence[LineItem]) -> shipping.ShippingTerms:
    if inputs.terms.overall_shipping:
        return inputs.terms
    return replace(inputs.terms, overall_shipping=shipping.total_line_shipping(lines))


def calculate_summary(inputs: SummaryInputs) -> SummaryOutcome:
    missing = missing_reference_data(inputs)
    if missing:
        logger.info("summary_pending", extra={"missing": list(missing)})
        return SummaryPending(missing=missing)

    is_inter = tax_breakup.is_inter_state(inputs.billing_state, inputs.warehouse_state)
    try:
        resolved = prepare_lines(inputs)
        result = volume_discount.calculate_volume_discount(
            resolved,
            inputs.volume_schedule,
            settings=inputs.settings,
            is_inter=is_inter,
            terms=_effective_terms(inputs, resolved),
            insurance_charges=inputs.insurance_charges,
        )
    except Exception as exc:
        logger.exception("summary_calculation_failed", extra={"error": str(exc), "lines": len(inputs.lines)})
        return SummaryDegraded(products=inputs.lines, reason=f"{type(exc).__name__}: {exc}")

    return SummaryOk(
        products=result.products,
        cart_value=result.vd_details,
        breakup=tax_breakup.cart_tax_breakup(result.products, is_inter=is_inter),
        pf_rate=result.pf_rate,
        is_inter=is_inter,
        warnings=line_warnings(result.products),
    )
