from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront_pricing.services.calculation_settings import CalculationSettings


class Settings(BaseSettings):
    """Service settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "Storefront Pricing API"
    app_version: str = "0.1.0"
    environment: str = "local"

    log_json: bool = False
    log_level: str = "INFO"

    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Calculation defaults; request payloads may override them per call.
    default_precision: int = 2
    money_rounding: Literal["half_up", "half_even", "up", "down"] = "half_up"
    item_wise_shipping_tax: bool = False
    rounding_adjustment: bool = False
    spr_enabled: bool = False

    def calculation_defaults(self) -> CalculationSettings:
        return CalculationSettings(
            item_wise_shipping_tax=self.item_wise_shipping_tax,
            rounding_adjustment=self.rounding_adjustment,
            precision=self.default_precision,
            money_rounding=self.money_rounding,
            spr_enabled=self.spr_enabled,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
