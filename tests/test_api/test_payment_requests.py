"""
Tests for the payment request endpoints.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_payment_request_service
from app.core.exceptions import StorageUnavailableError
from app.main import app


class TestListPaymentRequests:
    """Test cases for GET /payment-requests."""

    def test_admin_lists_requests(self, client: TestClient, api_prefix: str, admin_headers: dict):
        response = client.get(f"{api_prefix}/payment-requests", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 4
        first = data["payment_requests"][0]
        assert first["id"] == "pr-bob-yearly"
        assert first["member_name"] == "Bob Lee"
        assert first["collector_name"] == "Jones"
        assert first["amount"] == "40.00"
        assert first["status"] == "pending"

    def test_collector_is_forbidden(self, client: TestClient, api_prefix: str, collector_headers: dict):
        response = client.get(f"{api_prefix}/payment-requests", headers=collector_headers)

        assert response.status_code == 403
        assert response.json()["error_code"] == "MEM_003"

    def test_unauthenticated(self, client: TestClient, api_prefix: str):
        response = client.get(f"{api_prefix}/payment-requests")

        assert response.status_code == 401

    def test_get_single_request(self, client: TestClient, api_prefix: str, admin_headers: dict):
        response = client.get(f"{api_prefix}/payment-requests/pr-jane-yearly", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["member_name"] == "Jane Doe"
        assert data["payment_type"] == "yearly"

    def test_get_unknown_request(self, client: TestClient, api_prefix: str, admin_headers: dict):
        response = client.get(f"{api_prefix}/payment-requests/pr-missing", headers=admin_headers)

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "MEM_004"
        assert data["context"]["entity_id"] == "pr-missing"


class TestPaymentDecisions:
    """Test cases for approve and reject."""

    def test_approve(self, client: TestClient, api_prefix: str, admin_headers: dict, store):
        response = client.post(f"{api_prefix}/payment-requests/pr-jane-yearly/approve", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Payment Approved"
        assert data["payment_request"]["status"] == "approved"
        assert data["payment_request"]["approved_by"] == "U1"
        assert data["payment_request"]["approved_at"] is not None

        stored = next(r for r in store.rows("payment_requests") if r["id"] == "pr-jane-yearly")
        assert stored["status"] == "approved"

    def test_reject(self, client: TestClient, api_prefix: str, admin_headers: dict):
        response = client.post(f"{api_prefix}/payment-requests/pr-bob-yearly/reject", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Payment Rejected"
        assert data["payment_request"]["status"] == "rejected"
        assert data["payment_request"]["approved_at"] is None

    def test_second_decision_conflicts(self, client: TestClient, api_prefix: str, admin_headers: dict):
        """Deciding twice returns a conflict with a refresh hint."""
        first = client.post(f"{api_prefix}/payment-requests/pr-jane-yearly/approve", headers=admin_headers)
        second = client.post(f"{api_prefix}/payment-requests/pr-jane-yearly/reject", headers=admin_headers)

        assert first.status_code == 200
        assert second.status_code == 409
        data = second.json()
        assert data["error_code"] == "MEM_005"
        assert "Refresh" in data["message"]
        assert data["context"]["current_status"] == "approved"

    def test_collector_cannot_approve(
        self, client: TestClient, api_prefix: str, collector_headers: dict, store
    ):
        response = client.post(
            f"{api_prefix}/payment-requests/pr-jane-yearly/approve", headers=collector_headers
        )

        assert response.status_code == 403
        stored = next(r for r in store.rows("payment_requests") if r["id"] == "pr-jane-yearly")
        assert stored["status"] == "pending"

    def test_member_cannot_reject(self, client: TestClient, api_prefix: str, member_headers: dict):
        response = client.post(f"{api_prefix}/payment-requests/pr-jane-yearly/reject", headers=member_headers)

        assert response.status_code == 403

    def test_decide_unknown_request(self, client: TestClient, api_prefix: str, admin_headers: dict):
        response = client.post(f"{api_prefix}/payment-requests/pr-missing/approve", headers=admin_headers)

        assert response.status_code == 404


class TestStorageUnavailable:
    """Test cases for backend outages surfacing as 503."""

    @pytest.fixture
    def mock_payment_service(self):
        mock_service = MagicMock()
        mock_service.decide = AsyncMock(
            side_effect=StorageUnavailableError("update:payment_requests", retry_after=5)
        )
        mock_service.list_payment_requests = AsyncMock(
            side_effect=StorageUnavailableError("select:payment_requests", retry_after=5)
        )
        return mock_service

    @pytest.fixture
    def outage_client(self, client: TestClient, mock_payment_service):
        app.dependency_overrides[get_payment_request_service] = lambda: mock_payment_service
        yield client

    def test_decision_during_outage(self, outage_client: TestClient, api_prefix: str, admin_headers: dict):
        response = outage_client.post(
            f"{api_prefix}/payment-requests/pr-jane-yearly/approve", headers=admin_headers
        )

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"
        assert response.json()["error_code"] == "MEM_006"

    def test_list_during_outage(self, outage_client: TestClient, api_prefix: str, admin_headers: dict):
        response = outage_client.get(f"{api_prefix}/payment-requests", headers=admin_headers)

        assert response.status_code == 503
        assert "temporarily unavailable" in response.json()["message"]
