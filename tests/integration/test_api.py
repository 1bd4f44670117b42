"""Integration tests for the carrier API endpoints.

These tests drive the FastAPI application end to end through the test
client, with services built on a pinned approval roll and a movable clock.
"""

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from conftest import MutableClock

BASE = "/api/v1/carriers"
CARRIER = "reliable_insurance"


@pytest.fixture
def quote(client: TestClient, commercial_request_data: dict[str, Any]) -> dict:
    response = client.post(f"{BASE}/{CARRIER}/quote", json=commercial_request_data)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def policy(
    client: TestClient,
    quote: dict,
    make_bind_data: Callable[..., dict[str, Any]],
) -> dict:
    response = client.post(
        f"{BASE}/{CARRIER}/bind", json=make_bind_data(quote["quotes"][0]["quote_id"])
    )
    assert response.status_code == 201
    return response.json()["policy"]


class TestRootAndAuth:
    """Test the unauthenticated root and API key enforcement."""

    def test_root_needs_no_key(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "operational"
        assert data["environment"] == "development"

    def test_missing_key(
        self, anonymous_client: TestClient, commercial_request_data: dict[str, Any]
    ) -> None:
        response = anonymous_client.post(
            f"{BASE}/{CARRIER}/quote", json=commercial_request_data
        )

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": {
                "code": "UNAUTHORIZED",
                "message": "Missing API key. Include X-API-Key header.",
            },
        }

    def test_wrong_key(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.get(
            f"{BASE}/{CARRIER}/health", headers={"X-API-Key": "not-the-key"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid API key"


class TestQuoteEndpoint:
    """Test POST /{carrier_id}/quote."""

    def test_quote_then_cached_quote(
        self, client: TestClient, commercial_request_data: dict[str, Any]
    ) -> None:
        first = client.post(f"{BASE}/{CARRIER}/quote", json=commercial_request_data)
        second = client.post(f"{BASE}/{CARRIER}/quote", json=commercial_request_data)

        assert first.status_code == 200
        assert second.status_code == 200
        first_body, second_body = first.json(), second.json()
        assert first_body["success"] is True
        assert first_body["cached"] is False
        assert first_body["cache_key"] is None
        assert second_body["cached"] is True
        assert len(second_body["cache_key"]) == 16
        assert second_body["carrier_quote_id"] == first_body["carrier_quote_id"]
        assert second_body["quotes"] == first_body["quotes"]

    def test_validation_error(
        self, client: TestClient, commercial_request_data: dict[str, Any]
    ) -> None:
        del commercial_request_data["coverage_requests"]

        response = client.post(f"{BASE}/{CARRIER}/quote", json=commercial_request_data)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert any(
            detail["field"] == "coverage_requests" for detail in error["details"]
        )

    def test_unknown_carrier(
        self, client: TestClient, commercial_request_data: dict[str, Any]
    ) -> None:
        response = client.post(
            f"{BASE}/acme_mutual/quote", json=commercial_request_data
        )

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {
                "code": "CARRIER_NOT_FOUND",
                "message": "Carrier 'acme_mutual' not found",
            },
        }


class TestPolicyLifecycle:
    """Bind a quote and service the resulting policy."""

    def test_full_lifecycle(self, client: TestClient, policy: dict) -> None:
        policy_id = policy["policy_id"]
        base = f"{BASE}/{CARRIER}/policies/{policy_id}"

        fetched = client.get(base)
        assert fetched.status_code == 200
        assert fetched.json()["policy"]["status"] == "active"

        renewal = client.post(f"{base}/renew", json={"renewal_type": "standard"})
        assert renewal.status_code == 200
        assert renewal.json()["original_policy_id"] == policy_id

        endorsement = client.post(
            f"{base}/endorse",
            json={
                "endorsement_type": "add_location",
                "effective_date": "2025-04-01",
                "details": {"address": "200 Mission St"},
            },
        )
        assert endorsement.status_code == 200
        summary = endorsement.json()["updated_policy_summary"]
        assert summary["endorsements_count"] == 1
        assert summary["total_annual_premium"] == policy["premium"]["annual"] + 25

        certificate = client.post(
            f"{base}/certificate",
            json={
                "certificate_holder": {
                    "name": "Client Corp",
                    "address": {"city": "Oakland", "state": "CA", "zip": "94607"},
                },
                "additional_insured": False,
                "description_of_operations": "Consulting",
            },
        )
        assert certificate.status_code == 200
        assert certificate.json()["coverage_summary"]["limits"] == "1000000/2000000"

        cancel = client.post(
            f"{base}/cancel",
            json={
                "cancellation_type": "insured_request",
                "effective_date": "2025-02-01",
                "reason": "Coverage no longer needed",
                "signature": {
                    "full_name": "Ada Park",
                    "signed_at": "2025-01-20T09:00:00Z",
                    "ip_address": "203.0.113.7",
                },
            },
        )
        assert cancel.status_code == 200
        assert cancel.json()["refund"]["net_refund"] == (
            policy["premium"]["annual"] - 50
        )

        after = client.get(base).json()["policy"]
        assert after["status"] == "pending_cancellation"
        assert len(after["endorsements"]) == 1

    def test_unknown_policy(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/{CARRIER}/policies/RIC-P-2025-000000")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "POLICY_NOT_FOUND"

    def test_unknown_quote(
        self, client: TestClient, make_bind_data: Callable[..., dict[str, Any]]
    ) -> None:
        response = client.post(
            f"{BASE}/{CARRIER}/bind", json=make_bind_data("RIC-Q-2025-000000-GL")
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_expired_quote(
        self,
        client: TestClient,
        quote: dict,
        make_bind_data: Callable[..., dict[str, Any]],
        clock: MutableClock,
    ) -> None:
        clock.advance(days=31)

        response = client.post(
            f"{BASE}/{CARRIER}/bind", json=make_bind_data(quote["carrier_quote_id"])
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "QUOTE_EXPIRED"
        assert error["quote_id"] == quote["carrier_quote_id"]
        assert "expired_at" in error


class TestHealthAndCache:
    """Test carrier health and cache maintenance endpoints."""

    def test_known_carrier_health(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/techshield_underwriters/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "operational"
        assert data["carrier_name"] == "TechShield Underwriters"
        assert data["services"]["quoting"] == "operational"
        assert data["supported_insurance_types"] == ["personal", "commercial"]

    def test_unknown_carrier_health(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/acme_mutual/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "unknown",
            "carrier_id": "acme_mutual",
            "message": "Carrier not found",
        }

    def test_cache_stats_and_clear(self, client: TestClient, quote: dict) -> None:
        stats = client.get(f"{BASE}/cache/stats").json()["stats"]
        assert stats["total_cached_quotes"] == 1
        assert stats["total_quotes_by_id"] == 2
        assert stats["cache_keys"][0].endswith("...")

        cleared = client.post(f"{BASE}/cache/clear")
        assert cleared.status_code == 200
        assert cleared.json()["message"] == "Cache cleared successfully"

        stats = client.get(f"{BASE}/cache/stats").json()["stats"]
        assert stats["total_cached_quotes"] == 0
        assert stats["total_quotes_by_id"] == 2
