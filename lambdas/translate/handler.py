"""Translate Lambda handler for contingent-enforced translations."""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.event_handler import APIGatewayRestResolver, CORSConfig, Response
from aws_lambda_powertools.event_handler.exceptions import (
    BadRequestError,
    UnauthorizedError,
)
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from shared.config import get_config
from shared.contingent_policy import ContingentGuard
from shared.db import DynamoDBClient
from shared.enforcement import EnforcementCoordinator
from shared.exceptions import (
    InvalidRequestError,
    QuotaExceededError,
    StoreUnavailableError,
    TranslationProviderError,
)
from shared.quota_store import QuotaStore
from shared.secrets import get_translate_api_key
from shared.usage_recorder import UsageRecorder
from shared.utils import (
    error_response,
    extract_user_id,
    json_response,
    register_error_handlers,
)
from translate.client import GoogleTranslateClient
from translate.models import TranslateRequest
from translate.service import TranslateService

logger = Logger()
tracer = Tracer()
metrics = Metrics(namespace="MultiLangTranslate")

cors_config = CORSConfig(allow_origin="*", allow_headers=["Content-Type", "X-User-Id"], max_age=300)
app = APIGatewayRestResolver(cors=cors_config)
register_error_handlers(app)

# Initialize service lazily
_service: TranslateService | None = None


def get_service() -> TranslateService:
    """Get or create the translate service instance."""
    global _service
    if _service is None:
        config = get_config()
        store = QuotaStore(DynamoDBClient(config.table_name), config.namespace, config.limits)
        coordinator = EnforcementCoordinator(
            ContingentGuard(store), simulate_translation=config.simulate_translation
        )
        translator = None
        if not config.simulate_translation:
            translator = GoogleTranslateClient(
                api_key=get_translate_api_key(),
                base_url=config.translate_api_url,
                timeout=config.translate_timeout_seconds,
            )
        _service = TranslateService(
            coordinator,
            UsageRecorder(store),
            translator,
            max_input_length=config.max_input_length,
            max_target_languages=config.max_target_languages,
        )
    return _service


def reset_service() -> None:
    """Reset the service instance (for testing)."""
    global _service
    _service = None


def get_user_id() -> str:
    """Extract and validate user ID from headers.

    Returns:
        The user ID from the X-User-Id header

    Raises:
        UnauthorizedError: If header is missing or invalid
    """
    user_id = extract_user_id(app.current_event.headers)
    if not user_id:
        raise UnauthorizedError("User must be authenticated.")
    return user_id


@app.post("/translate")
@tracer.capture_method
def post_translate() -> Response:
    """Translate text into the requested languages.

    Returns:
        200 response with translations, 429 when the contingent is exhausted
    """
    user_id = get_user_id()

    try:
        body = app.current_event.json_body or {}
        request = TranslateRequest(**body)
    except ValidationError as e:
        error_msg = e.errors()[0].get("msg", "Missing required parameters.")
        raise BadRequestError(error_msg) from None

    try:
        result = get_service().translate(user_id, request)
    except InvalidRequestError as e:
        raise BadRequestError(e.message) from None
    except QuotaExceededError as e:
        logger.info(
            "Translation blocked by contingent",
            extra={"user_id": user_id, "reason": e.reason},
        )
        return error_response(
            429,
            "resource-exhausted",
            e.message,
            details={"reason": e.reason},
        )
    except StoreUnavailableError as e:
        # Fail closed: no translation without a verified contingent
        logger.error("Contingent check unavailable", extra={"user_id": user_id, "error": e.message})
        return error_response(503, "unavailable", "Translation temporarily unavailable.")
    except TranslationProviderError as e:
        return error_response(
            502,
            "translation-provider-error",
            e.message,
            details={"target_language": e.target_language},
        )

    return json_response(200, result.model_dump())


@logger.inject_lambda_context
@tracer.capture_lambda_handler
@metrics.log_metrics
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Main Lambda entry point."""
    return app.resolve(event, context)
