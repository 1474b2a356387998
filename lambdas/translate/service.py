"""Translate service - contingent-enforced pass-through to the provider."""

from aws_lambda_powertools import Logger

from shared.enforcement import EnforcementCoordinator, simulated_translations
from shared.exceptions import InvalidRequestError
from shared.period import current_period
from shared.usage_recorder import UsageRecorder, text_length
from translate.client import GoogleTranslateClient
from translate.models import TranslateRequest, TranslateResponse

logger = Logger()


class TranslateService:
    """Service layer for the translate operation.

    Per request: validate, enforce the contingent, call the provider,
    then charge usage. A denial or provider failure charges nothing.
    """

    def __init__(
        self,
        coordinator: EnforcementCoordinator,
        recorder: UsageRecorder,
        translator: GoogleTranslateClient | None,
        max_input_length: int = 1000,
        max_target_languages: int = 5,
    ) -> None:
        """Initialize translate service.

        Args:
            coordinator: Contingent enforcement coordinator
            recorder: Usage recorder for successful translations
            translator: Provider client. May be None in simulate mode.
            max_input_length: Maximum characters of source text
            max_target_languages: Maximum target languages per request
        """
        self.coordinator = coordinator
        self.recorder = recorder
        self.translator = translator
        self.max_input_length = max_input_length
        self.max_target_languages = max_target_languages

    def translate(self, user_id: str, request: TranslateRequest) -> TranslateResponse:
        """Translate text for a user.

        Args:
            user_id: Opaque user ID of the caller
            request: Validated translate request

        Returns:
            TranslateResponse with one translation per target language

        Raises:
            InvalidRequestError: If the request exceeds configured limits
            QuotaExceededError: If the contingent is exhausted
            StoreUnavailableError: If the contingent cannot be determined
            TranslationProviderError: If the provider call fails
        """
        self._validate_limits(request)

        if self.coordinator.simulate_translation or self.translator is None:
            logger.info(
                "Simulating translation",
                extra={"user_id": user_id, "targets": request.target_languages},
            )
            return TranslateResponse(
                translations=simulated_translations(request.text, request.target_languages),
                simulated=True,
            )

        # Check and charge against the same period even across a month boundary
        period = current_period()
        self.coordinator.mandatory_check(user_id, period)

        translations = self.translator.translate_all(
            request.text, request.source_lang, request.target_languages
        )

        self.recorder.record_translation(
            user_id, period, request.text, request.target_languages
        )

        logger.info(
            "Translation completed",
            extra={
                "user_id": user_id,
                "period": period,
                "source_lang": request.source_lang,
                "targets": request.target_languages,
            },
        )
        return TranslateResponse(translations=translations)

    def _validate_limits(self, request: TranslateRequest) -> None:
        if text_length(request.text) > self.max_input_length:
            raise InvalidRequestError(
                f"text must be at most {self.max_input_length} characters", field="text"
            )
        if len(request.target_languages) > self.max_target_languages:
            raise InvalidRequestError(
                f"at most {self.max_target_languages} target languages are allowed",
                field="target_languages",
            )
