from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront_pricing.services import volume_discount


def _payload(**overrides) -> dict:
    payload = {
        "lines": [
            {
                "product_id": "p1",
                "item_no": "i1",
                "quantity": "2",
                "unit_list_price": "100",
                "hsn": {
                    "hsn_code": "8471",
                    "tax": "18",
                    "inter_tax": {"total_tax": "18", "rates": [{"tax_name": "IGST", "rate": "18"}]},
                    "intra_tax": {
                        "total_tax": "18",
                        "rates": [{"tax_name": "CGST", "rate": "9"}, {"tax_name": "SGST", "rate": "9"}],
                    },
                },
            }
        ],
        "volume_schedule": [{"volume_discount": "10", "item_no": "i1"}],
        "billing_state": "Kerala",
        "warehouse_state": "kerala",
        "company_id": "c1",
        "seller_id": "s1",
    }
    payload.update(overrides)
    return payload


def test_calculate_summary_ok(client: TestClient) -> None:
    res = client.post("/api/v1/summary/calculate", json=_payload())
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["status"] == "ok"
    assert body["is_inter"] is False
    assert [c["tax_name"] for c in body["breakup"]] == ["CGST", "SGST"]

    line = body["products"][0]
    assert Decimal(str(line["unit_price"])) == Decimal("90.00")
    assert Decimal(str(line["tax_values"]["CGST"])) == Decimal("16.20")

    cart = body["cart_value"]
    assert Decimal(str(cart["grand_total"])) == Decimal("212.40")
    assert Decimal(str(cart["volume_discount_applied"])) == Decimal("20.00")
    assert Decimal(str(cart["combined_tax_totals"]["SGST"])) == Decimal("16.20")


def test_calculate_summary_applies_setting_overrides(client: TestClient) -> None:
    res = client.post("/api/v1/summary/calculate", json=_payload(settings={"rounding_adjustment": True}))
    assert res.status_code == 200
    cart = res.json()["cart_value"]
    assert Decimal(str(cart["grand_total"])) == Decimal("212")
    assert Decimal(str(cart["rounding_adjustment"])) == Decimal("-0.40")


def test_calculate_summary_pending_without_reference_data(client: TestClient) -> None:
    res = client.post("/api/v1/summary/calculate", json=_payload(company_id=None))
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "pending"
    assert body["missing"] == ["company_id"]
    assert body["products"] == []
    assert body["cart_value"] is None


def test_calculate_summary_degraded_on_failure(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(*args, **kwargs):
        raise ValueError("bad schedule")

    monkeypatch.setattr(volume_discount, "calculate_volume_discount", explode)
    res = client.post("/api/v1/summary/calculate", json=_payload())
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "degraded"
    assert body["breakup"] == []
    assert body["products"][0]["product_id"] == "p1"
    assert "bad schedule" in body["reason"]


def test_calculate_summary_rejects_negative_quantity(client: TestClient) -> None:
    payload = _payload()
    payload["lines"][0]["quantity"] = "-1"
    res = client.post("/api/v1/summary/calculate", json=payload)
    assert res.status_code == 422
    body = res.json()
    assert body["code"] == "validation_error"
    assert isinstance(body["detail"], list)


def test_target_discount_transition(client: TestClient) -> None:
    res = client.post(
        "/api/v1/summary/target-discount",
        json={
            "total_value": "1000",
            "change": "discount",
            "value": "20",
            "products": [{"product_id": "a", "quantity": "2", "unit_price": "500", "total_price": "1000"}],
        },
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert Decimal(str(body["spr"]["target_price"])) == Decimal("800.00")
    assert body["spr"]["is_spr_requested"] is True
    assert body["spr"]["spr"] is False
    assert Decimal(str(body["products"][0]["buyer_requested_price"])) == Decimal("400.00")


def test_target_discount_total_change(client: TestClient) -> None:
    res = client.post(
        "/api/v1/summary/target-discount",
        json={
            "total_value": "1000",
            "target_price": "800",
            "spr_requested_discount": "20",
            "change": "total_value",
            "value": "900",
            "settings": {"spr_enabled": True},
        },
    )
    assert res.status_code == 200
    body = res.json()
    assert Decimal(str(body["total_value"])) == Decimal("900")
    assert Decimal(str(body["spr"]["target_price"])) == Decimal("720.00")
    assert body["spr"]["spr"] is True


def test_target_discount_rejects_unknown_change(client: TestClient) -> None:
    res = client.post(
        "/api/v1/summary/target-discount", json={"total_value": "1000", "change": "bogus", "value": "1"}
    )
    assert res.status_code == 422
    assert res.json()["code"] == "validation_error"
