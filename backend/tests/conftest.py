from collections.abc import Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront_pricing.main import app
from storefront_pricing.models.calculation import HsnDetails, TaxRate, TaxSchedule
from storefront_pricing.services.calculation_settings import CalculationSettings


@pytest.fixture
def settings() -> CalculationSettings:
    return CalculationSettings()


@pytest.fixture
def gst_hsn() -> HsnDetails:
    """18% GST: IGST across states, CGST + SGST within a state."""
    return HsnDetails(
        hsn_code="8471",
        tax=Decimal("18"),
        inter_tax=TaxSchedule(total_tax=Decimal("18"), rates=(TaxRate("IGST", Decimal("18")),)),
        intra_tax=TaxSchedule(
            total_tax=Decimal("18"),
            rates=(TaxRate("CGST", Decimal("9")), TaxRate("SGST", Decimal("9"))),
        ),
    )


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
