"""Integration tests for contingent Lambda handler."""

import json
from unittest.mock import MagicMock, patch

import pytest

from contingent.handler import lambda_handler, reset_service
from shared.exceptions import StoreUnavailableError
from shared.period import current_period
from users.handler import lambda_handler as users_lambda_handler
from users.handler import reset_service as reset_users_service

NAMESPACE = "MLT_translations_statistics"


@pytest.fixture(autouse=True)
def reset_handler():
    """Reset handler state before each test."""
    reset_service()
    yield
    reset_service()


def make_event(
    method: str,
    path: str,
    user_id: str | None = "test-user-123",
    query: dict | None = None,
) -> dict:
    """Create an API Gateway event for testing."""
    headers = {"Content-Type": "application/json"}
    if user_id:
        headers["X-User-Id"] = user_id

    return {
        "httpMethod": method,
        "path": path,
        "headers": headers,
        "pathParameters": {},
        "queryStringParameters": query,
        "body": None,
        "requestContext": {
            "stage": "dev",
            "requestId": "test-request-id",
        },
        "resource": path,
    }


def add_identity(table, user_id, display_name, kind):
    """Store an identity record directly."""
    table.put_item(
        Item={
            "PK": f"{NAMESPACE}#IDENTITIES",
            "SK": f"USER#{user_id}",
            "user_id": user_id,
            "display_name": display_name,
            "kind": kind,
            "created_at": "2024-03-01T00:00:00+00:00",
        }
    )


class TestEnsureContingent:
    """Tests for POST /contingent/ensure."""

    def test_ensure_creates_config(self, dynamodb_table):
        """The current period's config is created once."""
        first = lambda_handler(make_event("POST", "/contingent/ensure"), MagicMock())
        second = lambda_handler(make_event("POST", "/contingent/ensure"), MagicMock())

        assert first["statusCode"] == 200
        assert json.loads(first["body"])["created"] is True
        assert json.loads(second["body"])["created"] is False
        item = dynamodb_table.get_item(
            Key={"PK": f"{NAMESPACE}#PERIOD#{current_period()}", "SK": "CONFIG"}
        )["Item"]
        assert item["per_user_monthly_limit"] == 10_000

    def test_ensure_store_error_returns_503(self):
        """Write failures are reported as unavailable."""
        with patch("shared.quota_store.QuotaStore.ensure_config_exists") as mock_ensure:
            mock_ensure.side_effect = StoreUnavailableError("ensure_config_exists")
            response = lambda_handler(make_event("POST", "/contingent/ensure"), MagicMock())

        assert response["statusCode"] == 503

    def test_ensure_requires_user(self, dynamodb_table):
        """Unauthenticated callers are rejected."""
        response = lambda_handler(make_event("POST", "/contingent/ensure", user_id=None), MagicMock())

        assert response["statusCode"] == 401
        assert json.loads(response["body"])["error"] == "unauthenticated"


class TestContingentStatus:
    """Tests for GET /contingent/status."""

    def test_status_allowed(self, dynamodb_table):
        """A fresh period allows translation."""
        response = lambda_handler(make_event("GET", "/contingent/status"), MagicMock())

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["allowed"] is True
        assert body["simulate"] is False
        assert body["period"] == current_period()

    def test_status_stop_all(self, dynamodb_table):
        """A paused contingent tells the client to simulate."""
        dynamodb_table.put_item(
            Item={"PK": f"{NAMESPACE}#PERIOD#{current_period()}", "SK": "CONFIG", "stop_all": True}
        )

        body = json.loads(lambda_handler(make_event("GET", "/contingent/status"), MagicMock())["body"])

        assert body["allowed"] is False
        assert body["simulate"] is True
        assert body["reason"] == "stop_all"
        assert body["message"]

    def test_status_degrades_when_store_down(self):
        """The optimistic hint never fails on store errors."""
        with (
            patch("shared.quota_store.QuotaStore.read_config") as mock_config,
            patch("shared.quota_store.QuotaStore.read_global_usage") as mock_global,
            patch("shared.quota_store.QuotaStore.read_user_usage") as mock_user,
        ):
            mock_config.side_effect = StoreUnavailableError("read_config")
            mock_global.side_effect = StoreUnavailableError("read_global_usage")
            mock_user.side_effect = StoreUnavailableError("read_user_usage")
            response = lambda_handler(make_event("GET", "/contingent/status"), MagicMock())

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["allowed"] is True


class TestStatistics:
    """Tests for GET /statistics."""

    def test_statistics_for_privileged_user(self, dynamodb_table):
        """Privileged callers get the period report."""
        add_identity(dynamodb_table, "test-user-123", "P-1", "P")
        add_identity(dynamodb_table, "u1", "U-1", "U")
        dynamodb_table.put_item(
            Item={
                "PK": f"{NAMESPACE}#PERIOD#2024-03",
                "SK": "USER#u1",
                "user_id": "u1",
                "char_count": 42,
                "target_languages": ["en"],
            }
        )

        response = lambda_handler(
            make_event("GET", "/statistics", query={"period": "2024-03"}), MagicMock()
        )

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["period"] == "2024-03"
        assert body["users"][0]["display_name"] == "U-1"
        assert body["users"][0]["char_count"] == 42

    def test_statistics_forbidden_for_ordinary_user(self, dynamodb_table):
        """Ordinary callers are refused."""
        add_identity(dynamodb_table, "test-user-123", "U-1", "U")

        response = lambda_handler(make_event("GET", "/statistics"), MagicMock())

        assert response["statusCode"] == 403
        assert json.loads(response["body"])["error"] == "permission-denied"

    def test_statistics_invalid_period_returns_400(self, dynamodb_table):
        """Malformed periods are rejected."""
        response = lambda_handler(
            make_event("GET", "/statistics", query={"period": "March"}), MagicMock()
        )

        assert response["statusCode"] == 400
        assert json.loads(response["body"])["error"] == "invalid-argument"

    def test_statistics_forbidden_after_self_declared_registration(self, dynamodb_table):
        """Listing oneself as a privileged device at registration grants no access."""
        register_body = {
            "device_info": {"platform": "Android", "language": "de-DE"},
            "privileged_devices": [{"user_id": "test-user-123", "name": "Pixel"}],
        }
        register_event = {
            **make_event("POST", "/users"),
            "body": json.dumps(register_body),
        }
        reset_users_service()
        try:
            registered = users_lambda_handler(register_event, MagicMock())
        finally:
            reset_users_service()

        response = lambda_handler(make_event("GET", "/statistics"), MagicMock())

        assert registered["statusCode"] == 200
        assert response["statusCode"] == 403
        assert json.loads(response["body"])["error"] == "permission-denied"
