import logging

from fastapi import APIRouter, Depends

from storefront_pricing.core.config import Settings, get_settings
from storefront_pricing.models.calculation import SprDetails
from storefront_pricing.schemas.summary import (
    SummaryRequest,
    SummaryResponse,
    TargetDiscountRequest,
    TargetDiscountResponse,
)
from storefront_pricing.services import summary as summary_service
from storefront_pricing.services.target_discount import TargetDiscountState


logger = logging.getLogger("storefront_pricing.api.summary")

router = APIRouter(prefix="/summary", tags=["summary"])


@router.post("/calculate", response_model=SummaryResponse)
def calculate_summary(payload: SummaryRequest, settings: Settings = Depends(get_settings)) -> SummaryResponse:
    inputs = payload.to_inputs(settings.calculation_defaults())
    outcome = summary_service.calculate_summary(inputs)
    logger.info("summary_calculated", extra={"status": outcome.status, "lines": len(inputs.lines)})
    return SummaryResponse.from_outcome(outcome)


@router.post("/target-discount", response_model=TargetDiscountResponse)
def change_target_discount(
    payload: TargetDiscountRequest, settings: Settings = Depends(get_settings)
) -> TargetDiscountResponse:
    defaults = settings.calculation_defaults()
    state = TargetDiscountState(
        total_value=payload.total_value,
        products=tuple(line.to_domain() for line in payload.products),
        spr=SprDetails(target_price=payload.target_price, spr_requested_discount=payload.spr_requested_discount),
        settings=payload.settings.apply(defaults) if payload.settings else defaults,
        cash_discount=payload.cash_discount,
        cash_discount_value=payload.cash_discount_value,
    )
    if payload.change == "discount":
        state = state.change_discount(payload.value)
    elif payload.change == "target_price":
        state = state.change_target_price(payload.value)
    else:
        state = state.change_total_value(payload.value)
    return TargetDiscountResponse.model_validate(state, from_attributes=True)
