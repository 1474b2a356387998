"""Integration tests for translate Lambda handler."""

import json
from unittest.mock import MagicMock, patch

import pytest

from shared.exceptions import TranslationProviderError
from shared.period import current_period
from translate.handler import lambda_handler, reset_service


@pytest.fixture(autouse=True)
def reset_handler():
    """Reset handler state before each test."""
    reset_service()
    yield
    reset_service()


@pytest.fixture
def mock_translator():
    """Patch the provider client used by the handler."""
    translator = MagicMock()
    translator.translate_all.side_effect = lambda text, source, targets: {
        t: f"{t}:{text}" for t in targets
    }
    with (
        patch("translate.handler.get_translate_api_key", return_value="test-key"),
        patch("translate.handler.GoogleTranslateClient", return_value=translator),
    ):
        yield translator


def make_event(
    body: dict | None = None,
    user_id: str | None = "test-user-123",
) -> dict:
    """Create an API Gateway event for testing."""
    headers = {"Content-Type": "application/json"}
    if user_id:
        headers["X-User-Id"] = user_id

    return {
        "httpMethod": "POST",
        "path": "/translate",
        "headers": headers,
        "pathParameters": {},
        "queryStringParameters": None,
        "body": json.dumps(body) if body else None,
        "requestContext": {
            "stage": "dev",
            "requestId": "test-request-id",
        },
        "resource": "/translate",
    }


VALID_BODY = {"text": "Hallo", "source_lang": "de", "target_languages": ["en", "fr"]}


def seed_config(table, **values):
    """Store a contingent config for the current period."""
    table.put_item(
        Item={
            "PK": f"MLT_translations_statistics#PERIOD#{current_period()}",
            "SK": "CONFIG",
            **values,
        }
    )


class TestTranslate:
    """Tests for POST /translate."""

    def test_translate_returns_200(self, dynamodb_table, mock_translator):
        """Allowed requests return one translation per language."""
        response = lambda_handler(make_event(VALID_BODY), MagicMock())

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["translations"] == {"en": "en:Hallo", "fr": "fr:Hallo"}
        assert body["simulated"] is False

    def test_translate_records_usage(self, dynamodb_table, mock_translator):
        """Usage is charged as text length times languages."""
        lambda_handler(make_event(VALID_BODY), MagicMock())

        item = dynamodb_table.get_item(
            Key={
                "PK": f"MLT_translations_statistics#PERIOD#{current_period()}",
                "SK": "USER#test-user-123",
            }
        )["Item"]
        assert item["char_count"] == 10

    def test_missing_user_returns_401(self, dynamodb_table, mock_translator):
        """Unauthenticated callers are rejected."""
        response = lambda_handler(make_event(VALID_BODY, user_id=None), MagicMock())

        assert response["statusCode"] == 401
        assert json.loads(response["body"])["error"] == "unauthenticated"
        mock_translator.translate_all.assert_not_called()

    def test_empty_text_returns_400(self, dynamodb_table, mock_translator):
        """Empty text is an invalid argument."""
        response = lambda_handler(make_event({**VALID_BODY, "text": ""}), MagicMock())

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert body["error"] == "invalid-argument"
        assert body["message"]

    def test_no_languages_returns_400(self, dynamodb_table, mock_translator):
        """An empty language list is an invalid argument."""
        response = lambda_handler(
            make_event({**VALID_BODY, "target_languages": []}), MagicMock()
        )

        assert response["statusCode"] == 400

    def test_too_long_returns_400(self, dynamodb_table, mock_translator):
        """Text over the configured maximum is rejected."""
        response = lambda_handler(make_event({**VALID_BODY, "text": "x" * 1001}), MagicMock())

        assert response["statusCode"] == 400

    def test_stop_all_returns_429(self, dynamodb_table, mock_translator):
        """Denials are a distinct resource-exhausted response."""
        seed_config(dynamodb_table, stop_all=True)

        response = lambda_handler(make_event(VALID_BODY), MagicMock())

        assert response["statusCode"] == 429
        body = json.loads(response["body"])
        assert body["error"] == "resource-exhausted"
        assert body["reason"] == "stop_all"
        assert body["message"]
        mock_translator.translate_all.assert_not_called()

    def test_user_limit_returns_429_without_charge(self, dynamodb_table, mock_translator):
        """A denied request leaves the counters untouched."""
        seed_config(dynamodb_table, per_user_monthly_limit=0)

        response = lambda_handler(make_event(VALID_BODY), MagicMock())

        assert response["statusCode"] == 429
        assert json.loads(response["body"])["reason"] == "user_limit"
        result = dynamodb_table.get_item(
            Key={
                "PK": f"MLT_translations_statistics#PERIOD#{current_period()}",
                "SK": "GLOBAL_USAGE",
            }
        )
        assert "Item" not in result

    def test_provider_error_returns_502(self, dynamodb_table, mock_translator):
        """Provider failures are not reported as quota errors."""
        mock_translator.translate_all.side_effect = TranslationProviderError(
            "Translation API error: Forbidden", status_code=403, target_language="en"
        )

        response = lambda_handler(make_event(VALID_BODY), MagicMock())

        assert response["statusCode"] == 502
        body = json.loads(response["body"])
        assert body["error"] == "translation-provider-error"
        assert body["target_language"] == "en"

    def test_store_unavailable_returns_503(self, mock_translator):
        """Without a reachable store the request fails closed."""
        with patch("shared.quota_store.QuotaStore.get_config") as mock_get_config:
            from shared.exceptions import StoreUnavailableError

            mock_get_config.side_effect = StoreUnavailableError("get_config", "timeout")
            response = lambda_handler(make_event(VALID_BODY), MagicMock())

        assert response["statusCode"] == 503
        mock_translator.translate_all.assert_not_called()

    def test_simulate_mode_returns_placeholders(self, dynamodb_table, monkeypatch):
        """Simulation needs neither the provider nor the API key."""
        monkeypatch.setenv("SIMULATE_TRANSLATION", "true")

        with patch("translate.handler.get_translate_api_key") as mock_key:
            response = lambda_handler(make_event(VALID_BODY), MagicMock())

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["simulated"] is True
        assert body["translations"]["en"] == "[en] Hallo"
        mock_key.assert_not_called()
