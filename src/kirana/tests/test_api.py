"""
Tests for the Flask API (kirana.api).
"""
import pytest

from kirana.api import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


class TestHealthAndInfo:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "healthy"
        assert data["components"]["catalog_products"] == 100
        assert data["components"]["scoring_rules"] > 0

    def test_info(self, client):
        data = client.get("/info").get_json()
        assert data["name"] == "Kirana Voice Command API"
        assert set(data["endpoints"]) == {"/parse", "/items", "/health", "/info"}

    def test_unknown_endpoint(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.get_json()["success"] is False


class TestParseEndpoint:
    """Tests for POST /parse."""

    def test_parse(self, client):
        response = client.post("/parse", json={"text": "10 kg അരി, 2 kg പഞ്ചസാര"})
        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        result = data["result"]
        assert result["intent"]["intent"] == "billing.add"
        assert [item["product_name"] for item in result["items"]] == ["Rice", "Sugar"]
        assert result["total"] == 640.0
        assert result["action"]["mode"] == "billing"

    def test_malayalam_not_escaped(self, client):
        response = client.post("/parse", json={"text": "അരി"})
        assert "അരി" in response.get_data(as_text=True)

    def test_request_id_echoed(self, client):
        response = client.post("/parse", json={"text": "ശരി"}, headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"
        assert response.get_json()["request_id"] == "abc12345"

    def test_request_id_generated(self, client):
        response = client.post("/parse", json={"text": "ശരി"})
        assert len(response.headers["X-Request-ID"]) == 8

    def test_cloud_result(self, client):
        response = client.post("/parse", json={
            "text": "stock nokku",
            "cloud_result": {"intent": "inventory.check", "confidence": 0.9,
                             "entities": {"product": "ari"}},
        })
        result = response.get_json()["result"]
        assert result["intent"]["source"] == "cloud"
        assert result["intent"]["entities"]["product"] == "Rice"

    def test_unrecognised_is_not_an_error(self, client):
        response = client.post("/parse", json={"text": "qqq zzz"})
        assert response.status_code == 200
        assert response.get_json()["result"]["intent"]["intent"] == "fallback"

    @pytest.mark.parametrize("body", [
        {},
        {"text": 42},
        {"text": "അരി", "cloud_result": "billing.add"},
        ["അരി"],
    ])
    def test_bad_requests(self, client, body):
        response = client.post("/parse", json=body)
        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_non_json_body(self, client):
        response = client.post("/parse", data="അരി", content_type="text/plain")
        assert response.status_code == 400


class TestItemsEndpoint:
    """Tests for POST /items."""

    def test_items(self, client):
        response = client.post("/items", json={"text": "10 kg അരി 10 kg ഗോതമ്പ്"})
        assert response.status_code == 200
        data = response.get_json()
        assert [item["product_name"] for item in data["items"]] == ["Rice", "Wheat"]
        assert data["total"] == 900.0

    def test_no_items(self, client):
        data = client.post("/items", json={"text": "qqq"}).get_json()
        assert data["items"] == []
        assert data["total"] is None

    def test_missing_text(self, client):
        assert client.post("/items", json={}).status_code == 400
