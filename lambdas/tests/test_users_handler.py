"""Integration tests for users Lambda handler."""

import json
from unittest.mock import MagicMock, patch

import pytest

from shared.config import reset_config
from shared.exceptions import StoreUnavailableError
from users.handler import lambda_handler, reset_service

IDENTITIES_PK = "MLT_translations_statistics#IDENTITIES"


@pytest.fixture(autouse=True)
def reset_handler():
    """Reset handler state before each test."""
    reset_service()
    yield
    reset_service()


def make_event(
    path: str,
    body: dict | None = None,
    user_id: str | None = "test-user-123",
) -> dict:
    """Create an API Gateway event for testing."""
    headers = {"Content-Type": "application/json"}
    if user_id:
        headers["X-User-Id"] = user_id

    return {
        "httpMethod": "POST",
        "path": path,
        "headers": headers,
        "pathParameters": {},
        "queryStringParameters": None,
        "body": json.dumps(body) if body else None,
        "requestContext": {
            "stage": "dev",
            "requestId": "test-request-id",
        },
        "resource": path,
    }


REGISTER_BODY = {
    "device_info": {
        "user_agent": "Mozilla/5.0",
        "platform": "Android",
        "language": "de-DE",
        "app_version": {"major": 1, "minor": 4, "date": "2024-02-01"},
    },
    "is_native": True,
}


class TestRegisterUser:
    """Tests for POST /users."""

    def test_register_returns_success(self, dynamodb_table):
        """Registration stores an identity with a sequential name."""
        response = lambda_handler(make_event("/users", REGISTER_BODY), MagicMock())

        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"success": True}
        item = dynamodb_table.get_item(Key={"PK": IDENTITIES_PK, "SK": "USER#test-user-123"})["Item"]
        assert item["display_name"] == "U-1"
        assert item["kind"] == "U"
        assert item["device_info"]["app_version"]["major"] == 1

    def test_register_privileged_device(self, dynamodb_table, monkeypatch):
        """A caller on the configured device list becomes privileged."""
        monkeypatch.setenv("PRIVILEGED_DEVICES", "test-user-123:Pixel")

        lambda_handler(make_event("/users", REGISTER_BODY), MagicMock())

        item = dynamodb_table.get_item(Key={"PK": IDENTITIES_PK, "SK": "USER#test-user-123"})["Item"]
        assert item["display_name"] == "P-1"
        assert item["device"] == "Pixel"

    def test_register_self_declared_device_stays_ordinary(self, dynamodb_table):
        """A device list in the request body grants nothing."""
        body = {
            **REGISTER_BODY,
            "privileged_devices": [{"user_id": "test-user-123", "name": "Pixel"}],
        }

        response = lambda_handler(make_event("/users", body), MagicMock())

        assert response["statusCode"] == 200
        item = dynamodb_table.get_item(Key={"PK": IDENTITIES_PK, "SK": "USER#test-user-123"})["Item"]
        assert item["display_name"] == "U-1"
        assert item["kind"] == "U"

    def test_register_without_user_returns_401(self, dynamodb_table):
        """Unauthenticated callers are rejected."""
        response = lambda_handler(make_event("/users", REGISTER_BODY, user_id=None), MagicMock())

        assert response["statusCode"] == 401
        assert json.loads(response["body"])["error"] == "unauthenticated"

    def test_register_missing_device_info_returns_400(self, dynamodb_table):
        """Device info is required."""
        response = lambda_handler(make_event("/users", {"is_native": False}), MagicMock())

        assert response["statusCode"] == 400
        assert json.loads(response["body"])["error"] == "invalid-argument"

    def test_register_store_error_returns_503(self):
        """Store failures are reported as unavailable."""
        with patch("shared.quota_store.QuotaStore.get_user_identity") as mock_get:
            mock_get.side_effect = StoreUnavailableError("get_user_identity")
            response = lambda_handler(make_event("/users", REGISTER_BODY), MagicMock())

        assert response["statusCode"] == 503
        assert json.loads(response["body"])["message"] == "Error adding user."


class TestSyncPrivilegedDevices:
    """Tests for POST /users/privileged-devices."""

    def test_sync_creates_and_promotes(self, dynamodb_table, monkeypatch):
        """Configured users end up privileged."""
        lambda_handler(make_event("/users", REGISTER_BODY), MagicMock())
        reset_service()
        monkeypatch.setenv("PRIVILEGED_DEVICES", "test-user-123:Pixel,new-device:iPad")
        reset_config()

        response = lambda_handler(make_event("/users/privileged-devices"), MagicMock())

        assert response["statusCode"] == 200
        result = json.loads(response["body"])
        assert result == {"success": True, "created": ["new-device"], "promoted": ["test-user-123"]}

    def test_sync_ignores_body_device_list(self, dynamodb_table):
        """Devices sent by the caller are not synced."""
        body = {"privileged_devices": [{"user_id": "test-user-123", "name": "Pixel"}]}

        response = lambda_handler(make_event("/users/privileged-devices", body), MagicMock())

        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"success": True, "created": [], "promoted": []}
        assert "Item" not in dynamodb_table.get_item(
            Key={"PK": IDENTITIES_PK, "SK": "USER#test-user-123"}
        )
