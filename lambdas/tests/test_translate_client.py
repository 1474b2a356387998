"""Tests for the Google Translate client."""

import json

import httpx
import pytest

from shared.exceptions import TranslationProviderError
from translate.client import GoogleTranslateClient


def make_client(handler) -> GoogleTranslateClient:
    """Client whose requests are answered by handler."""
    return GoogleTranslateClient(
        api_key="test-key",
        base_url="https://translate.test/v2",
        transport=httpx.MockTransport(handler),
    )


def ok(text: str) -> httpx.Response:
    """Successful provider payload."""
    return httpx.Response(200, json={"data": {"translations": [{"translatedText": text}]}})


class TestTranslate:
    """Tests for single-language translation."""

    def test_sends_expected_request(self):
        """Request carries key, text and languages."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return ok("Hello")

        result = make_client(handler).translate("Hallo", "de", "en")

        assert result == "Hello"
        request = seen[0]
        assert request.method == "POST"
        assert request.url.params["key"] == "test-key"
        assert json.loads(request.content) == {
            "q": "Hallo",
            "source": "de",
            "target": "en",
            "format": "text",
        }

    def test_non_2xx_raises(self):
        """Provider errors are not quota errors."""
        client = make_client(lambda request: httpx.Response(403, json={"error": {}}))

        with pytest.raises(TranslationProviderError) as exc_info:
            client.translate("Hallo", "de", "en")

        assert exc_info.value.status_code == 403
        assert exc_info.value.target_language == "en"

    def test_unexpected_payload_raises(self):
        """Malformed bodies surface as provider errors."""
        client = make_client(lambda request: httpx.Response(200, json={"data": {}}))

        with pytest.raises(TranslationProviderError):
            client.translate("Hallo", "de", "en")

    def test_transport_error_raises(self):
        """Network failures surface as provider errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(TranslationProviderError) as exc_info:
            make_client(handler).translate("Hallo", "de", "en")

        assert exc_info.value.status_code is None


class TestTranslateAll:
    """Tests for multi-language translation."""

    def test_one_request_per_language(self):
        """Each target language is a separate call."""
        targets = []

        def handler(request: httpx.Request) -> httpx.Response:
            target = json.loads(request.content)["target"]
            targets.append(target)
            return ok(f"{target}:Hallo")

        client = make_client(handler)
        result = client.translate_all("Hallo", "de", ["en", "fr"])
        client.close()

        assert targets == ["en", "fr"]
        assert result == {"en": "en:Hallo", "fr": "fr:Hallo"}

    def test_stops_on_first_failure(self):
        """A failing language aborts the batch."""

        def handler(request: httpx.Request) -> httpx.Response:
            if json.loads(request.content)["target"] == "fr":
                return httpx.Response(500)
            return ok("x")

        with pytest.raises(TranslationProviderError) as exc_info:
            make_client(handler).translate_all("Hallo", "de", ["en", "fr", "es"])

        assert exc_info.value.target_language == "fr"
