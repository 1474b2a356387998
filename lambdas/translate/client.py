"""Google Translate v2 REST client."""

import httpx
from aws_lambda_powertools import Logger

from shared.config import DEFAULT_TRANSLATE_API_URL
from shared.exceptions import TranslationProviderError

logger = Logger(child=True)


class GoogleTranslateClient:
    """Wrapper for the Google Translate v2 API.

    Issues one request per target language.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_TRANSLATE_API_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize translation client.

        Args:
            api_key: Google Translate API key
            base_url: Translate v2 endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used in tests)
        """
        self.api_key = api_key
        self.base_url = base_url
        self.client = httpx.Client(timeout=httpx.Timeout(timeout), transport=transport)

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """Translate text into one language.

        Args:
            text: Source text
            source_lang: Source language code
            target_lang: Target language code

        Returns:
            Translated text

        Raises:
            TranslationProviderError: On transport errors, non-2xx responses
                or unexpected payloads
        """
        try:
            response = self.client.post(
                self.base_url,
                params={"key": self.api_key},
                json={
                    "q": text,
                    "source": source_lang,
                    "target": target_lang,
                    "format": "text",
                },
            )
        except httpx.RequestError as e:
            logger.error(
                "Translation API request failed",
                extra={"target_lang": target_lang, "error": str(e)},
            )
            raise TranslationProviderError(
                f"Translation API request failed: {e}", target_language=target_lang
            ) from e

        if not response.is_success:
            logger.error(
                "Translation API error",
                extra={"target_lang": target_lang, "status_code": response.status_code},
            )
            raise TranslationProviderError(
                f"Translation API error: {response.reason_phrase}",
                status_code=response.status_code,
                target_language=target_lang,
            )

        try:
            return str(response.json()["data"]["translations"][0]["translatedText"])
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TranslationProviderError(
                "Unexpected translation API response",
                status_code=response.status_code,
                target_language=target_lang,
            ) from e

    def translate_all(
        self, text: str, source_lang: str, target_languages: list[str]
    ) -> dict[str, str]:
        """Translate text into every target language.

        Args:
            text: Source text
            source_lang: Source language code
            target_languages: Target language codes

        Returns:
            Mapping of language code to translated text

        Raises:
            TranslationProviderError: If any single translation fails
        """
        translations = {
            target: self.translate(text, source_lang, target) for target in target_languages
        }
        logger.info(
            "Translation API usage",
            extra={"source_lang": source_lang, "targets": len(target_languages), "chars": len(text)},
        )
        return translations

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()
