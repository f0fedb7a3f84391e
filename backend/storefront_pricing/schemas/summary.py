from dataclasses import replace
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from storefront_pricing.models.calculation import (
    HsnDetails,
    LineItem,
    PricelistDiscount,
    QuantityDiscountRange,
    TaxRate,
    TaxSchedule,
    VolumeDiscountRecord,
)
from storefront_pricing.services.calculation_settings import CalculationSettings
from storefront_pricing.services.shipping import ShippingTerms
from storefront_pricing.services.summary import SummaryInputs, SummaryOutcome


ZERO = Decimal("0")


class TaxRateIn(BaseModel):
    tax_name: str = Field(min_length=1, max_length=64)
    rate: Decimal = ZERO
    compound: bool = False


class TaxScheduleIn(BaseModel):
    total_tax: Decimal = ZERO
    rates: list[TaxRateIn] = []

    def to_domain(self) -> TaxSchedule:
        return TaxSchedule(
            total_tax=self.total_tax,
            rates=tuple(TaxRate(tax_name=r.tax_name, rate=r.rate, compound=r.compound) for r in self.rates),
        )


class HsnIn(BaseModel):
    hsn_code: str | None = None
    tax: Decimal = Field(default=ZERO, ge=0)
    inter_tax: TaxScheduleIn | None = None
    intra_tax: TaxScheduleIn | None = None

    def to_domain(self) -> HsnDetails:
        return HsnDetails(
            hsn_code=self.hsn_code,
            tax=self.tax,
            inter_tax=self.inter_tax.to_domain() if self.inter_tax else None,
            intra_tax=self.intra_tax.to_domain() if self.intra_tax else None,
        )


class QuantityDiscountRangeIn(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    min_qty: Decimal = Field(ge=0)
    max_qty: Decimal = Field(ge=0)
    value: Decimal = ZERO
    cant_combine_with_other_discounts: bool = False
    pricing_condition_code: str | None = None

    def to_domain(self) -> QuantityDiscountRange:
        return QuantityDiscountRange(**self.model_dump())


class PricelistDiscountIn(BaseModel):
    product_variant_id: str
    seller_id: str | None = None
    master_price: Decimal | None = None
    base_price: Decimal | None = None
    is_product_available_in_price_list: bool = True
    is_override_pricelist: bool | None = None
    discounts: list[QuantityDiscountRangeIn] = []
    price_list_code: str | None = None
    pricing_condition_code: str | None = None
    is_approval_required: bool = False

    def to_domain(self) -> PricelistDiscount:
        data = self.model_dump(exclude={"discounts"})
        return PricelistDiscount(**data, discounts=tuple(d.to_domain() for d in self.discounts))


class VolumeDiscountIn(BaseModel):
    volume_discount: Decimal
    item_no: str | None = None
    product_id: str | None = None
    applied_discount: Decimal | None = None
    discount_id: str | None = None

    def to_domain(self) -> VolumeDiscountRecord:
        return VolumeDiscountRecord(**self.model_dump())


class LineItemIn(BaseModel):
    product_id: str = Field(min_length=1)
    item_no: str | None = None
    quantity: Decimal = Field(default=Decimal("1"), ge=0)
    asked_quantity: Decimal | None = Field(default=None, ge=0)
    seller_id: str | None = None
    seller_name: str | None = None
    min_order_quantity: Decimal | None = Field(default=None, ge=0)

    unit_list_price: Decimal = ZERO
    discount: Decimal = ZERO
    cant_combine_with_other_discounts: bool = False
    disc_changed: bool = False
    show_price: bool = True
    cash_discount_value: Decimal = Field(default=ZERO, ge=0, le=100)

    hsn: HsnIn | None = None
    tax_inclusive: bool = False
    pf_item_value: Decimal = ZERO
    shipping_charges: Decimal = ZERO

    product_cost: Decimal = ZERO
    bc_product_cost: Decimal = ZERO
    addon_cost: Decimal = ZERO

    def to_domain(self) -> LineItem:
        data = self.model_dump(exclude={"hsn"})
        return LineItem(**data, hsn=self.hsn.to_domain() if self.hsn else None)


class CalculationOverrides(BaseModel):
    item_wise_shipping_tax: bool | None = None
    rounding_adjustment: bool | None = None
    precision: int | None = Field(default=None, ge=0, le=6)
    money_rounding: Literal["half_up", "half_even", "up", "down"] | None = None
    spr_enabled: bool | None = None

    def apply(self, defaults: CalculationSettings) -> CalculationSettings:
        return replace(defaults, **self.model_dump(exclude_none=True))


class ShippingTermsIn(BaseModel):
    overall_shipping: Decimal = Field(default=ZERO, ge=0)
    before_tax: bool = False
    before_tax_percentage: Decimal = Field(default=ZERO, ge=0)

    def to_domain(self) -> ShippingTerms:
        return ShippingTerms(**self.model_dump())


class SummaryRequest(BaseModel):
    lines: list[LineItemIn]
    discount_records: list[PricelistDiscountIn] = []
    volume_schedule: list[VolumeDiscountIn] = []
    billing_state: str | None = None
    warehouse_state: str | None = None
    company_id: str | None = None
    seller_id: str | None = None
    settings: CalculationOverrides | None = None
    shipping: ShippingTermsIn = ShippingTermsIn()
    insurance_charges: Decimal = Field(default=ZERO, ge=0)
    pf_percentage: Decimal | None = Field(default=None, ge=0)
    currency_factor: Decimal = Field(default=Decimal("1"), gt=0)
    tax_exempt: bool = False

    def to_inputs(self, defaults: CalculationSettings) -> SummaryInputs:
        return SummaryInputs(
            lines=tuple(line.to_domain() for line in self.lines),
            discount_records=tuple(record.to_domain() for record in self.discount_records),
            volume_schedule=tuple(record.to_domain() for record in self.volume_schedule),
            billing_state=self.billing_state,
            warehouse_state=self.warehouse_state,
            company_id=self.company_id,
            seller_id=self.seller_id,
            settings=self.settings.apply(defaults) if self.settings else defaults,
            terms=self.shipping.to_domain(),
            insurance_charges=self.insurance_charges,
            pf_percentage=self.pf_percentage,
            currency_factor=self.currency_factor,
            tax_exempt=self.tax_exempt,
        )


class TaxComponentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tax_name: str
    tax_percentage: Decimal
    compound: bool


class LineItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    item_no: str | None = None
    seller_id: str | None = None
    quantity: Decimal
    asked_quantity: Decimal | None = None
    check_moq: bool = False

    unit_list_price: Decimal
    unit_price: Decimal
    total_price: Decimal
    total_lp: Decimal

    discount: Decimal
    applied_discount: Decimal
    volume_discount: Decimal
    volume_discount_applied: bool
    next_quantity_discount: QuantityDiscountRangeIn | None = None
    price_not_available: bool = False
    is_approval_required: bool = False

    cash_discount_value: Decimal
    original_unit_price: Decimal | None = None
    cash_discounted_price: Decimal
    basic_discounted_price: Decimal

    tax: Decimal
    inter_tax_breakup: list[TaxComponentRead] = []
    intra_tax_breakup: list[TaxComponentRead] = []
    tax_values: dict[str, Decimal] = {}
    total_tax: Decimal

    pf_rate: Decimal
    item_taxable_amount: Decimal
    shipping_charges: Decimal
    shipping_tax_values: dict[str, Decimal] = {}
    shipping_tax: Decimal

    dmc: Decimal
    margin_percentage: Decimal
    unit_volume_price: Decimal | None = None
    total_volume_discount_price: Decimal | None = None

    contribution: Decimal | None = None
    revised_value: Decimal | None = None
    buyer_requested_price: Decimal | None = None
    buyer_requested_discount: Decimal | None = None


class CartValueRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_items: int
    sub_total: Decimal
    sub_total_volume: Decimal
    volume_discount_applied: Decimal
    total_value: Decimal
    total_lp: Decimal
    total_basic_discount: Decimal
    total_cash_discount: Decimal
    cash_discount_value: Decimal
    tax_totals: dict[str, Decimal]
    shipping_tax_totals: dict[str, Decimal]
    combined_tax_totals: dict[str, Decimal]
    shipping_tax: Decimal
    overall_tax: Decimal
    pf_rate: Decimal
    overall_shipping: Decimal
    taxable_amount: Decimal
    insurance_charges: Decimal
    calculated_total: Decimal
    grand_total: Decimal
    rounding_adjustment: Decimal
    has_products_with_negative_total_price: bool
    has_all_products_available_in_price_list: bool


class LineWarningRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    product_id: str
    item_no: str | None = None


class SummaryResponse(BaseModel):
    status: Literal["ok", "degraded", "pending"]
    products: list[LineItemRead] = []
    cart_value: CartValueRead | None = None
    breakup: list[TaxComponentRead] = []
    pf_rate: Decimal | None = None
    is_inter: bool | None = None
    warnings: list[LineWarningRead] = []
    missing: list[str] = []
    reason: str | None = None

    @classmethod
    def from_outcome(cls, outcome: SummaryOutcome) -> "SummaryResponse":
        if outcome.status == "pending":
            return cls(status="pending", missing=list(outcome.missing))
        if outcome.status == "degraded":
            return cls.model_validate(
                {
                    "status": "degraded",
                    "products": outcome.products,
                    "breakup": outcome.breakup,
                    "reason": outcome.reason,
                },
                from_attributes=True,
            )
        return cls.model_validate(
            {
                "status": "ok",
                "products": outcome.products,
                "cart_value": outcome.cart_value,
                "breakup": outcome.breakup,
                "pf_rate": outcome.pf_rate,
                "is_inter": outcome.is_inter,
                "warnings": outcome.warnings,
            },
            from_attributes=True,
        )


class TargetLineIn(BaseModel):
    product_id: str = Field(min_length=1)
    item_no: str | None = None
    quantity: Decimal = Field(default=Decimal("1"), ge=0)
    asked_quantity: Decimal | None = Field(default=None, ge=0)
    unit_price: Decimal = ZERO
    total_price: Decimal = ZERO

    def to_domain(self) -> LineItem:
        return LineItem(**self.model_dump())


class TargetDiscountRequest(BaseModel):
    total_value: Decimal
    target_price: Decimal = ZERO
    spr_requested_discount: Decimal = ZERO
    products: list[TargetLineIn] = []
    cash_discount: bool = False
    cash_discount_value: Decimal = Field(default=ZERO, ge=0, lt=100)
    settings: CalculationOverrides | None = None
    change: Literal["discount", "target_price", "total_value"]
    value: Decimal


class SprDetailsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    target_price: Decimal
    spr_requested_discount: Decimal
    is_spr_requested: bool
    spr: bool


class TargetDiscountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_value: Decimal
    spr: SprDetailsRead
    products: list[LineItemRead] = []
