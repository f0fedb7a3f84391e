from fastapi.testclient import TestClient


def test_http_error_shape(client: TestClient) -> None:
    res = client.get("/api/v1/does-not-exist")
    assert res.status_code == 404
    body = res.json()
    assert set(body.keys()) == {"detail", "code"}
    assert body["detail"] == "Not Found"


def test_validation_error_shape(client: TestClient) -> None:
    res = client.post("/api/v1/summary/calculate", json={"lines": "not-a-list"})
    assert res.status_code == 422
    body = res.json()
    assert body["code"] == "validation_error"
    assert body["detail"][0]["loc"][-1] == "lines"
