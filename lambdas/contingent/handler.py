"""Contingent Lambda handler for maintenance and reporting endpoints."""

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.event_handler import APIGatewayRestResolver, CORSConfig, Response
from aws_lambda_powertools.event_handler.exceptions import (
    BadRequestError,
    UnauthorizedError,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from contingent.service import ContingentService
from shared.config import get_config
from shared.contingent_policy import ContingentGuard
from shared.db import DynamoDBClient
from shared.enforcement import EnforcementCoordinator
from shared.exceptions import StoreUnavailableError
from shared.period import is_valid_period
from shared.quota_store import QuotaStore
from shared.utils import (
    error_response,
    extract_user_id,
    json_response,
    register_error_handlers,
)

logger = Logger()
tracer = Tracer()
cors_config = CORSConfig(allow_origin="*", allow_headers=["Content-Type", "X-User-Id"], max_age=300)
app = APIGatewayRestResolver(cors=cors_config)
register_error_handlers(app)

# Initialize service lazily
_service: ContingentService | None = None


def get_service() -> ContingentService:
    """Get or create the contingent service instance."""
    global _service
    if _service is None:
        config = get_config()
        store = QuotaStore(DynamoDBClient(config.table_name), config.namespace, config.limits)
        coordinator = EnforcementCoordinator(
            ContingentGuard(store), simulate_translation=config.simulate_translation
        )
        _service = ContingentService(store, coordinator)
    return _service


def reset_service() -> None:
    """Reset the service instance (for testing)."""
    global _service
    _service = None


def get_user_id() -> str:
    """Extract and validate user ID from headers.

    Raises:
        UnauthorizedError: If header is missing or invalid
    """
    user_id = extract_user_id(app.current_event.headers)
    if not user_id:
        raise UnauthorizedError("User must be authenticated.")
    return user_id


@app.post("/contingent/ensure")
@tracer.capture_method
def ensure_contingent() -> Response:
    """Create the current period's contingent config if missing.

    Returns:
        200 response with the period and whether it was created
    """
    get_user_id()

    try:
        result = get_service().ensure_contingent()
    except StoreUnavailableError as e:
        logger.error("Error creating missing contingent data", extra={"error": e.message})
        return error_response(503, "unavailable", "Error creating missing contingent data.")

    return json_response(200, result.model_dump())


@app.get("/contingent/status")
@tracer.capture_method
def get_contingent_status() -> Response:
    """Non-binding contingent status for the caller.

    Returns:
        200 response with allowed/simulate hints and remaining characters
    """
    user_id = get_user_id()
    result = get_service().get_status(user_id)
    return json_response(200, result.model_dump())


@app.get("/statistics")
@tracer.capture_method
def get_statistics() -> Response:
    """Usage statistics for privileged users.

    Returns:
        200 response with contingent summary and per-user usage
    """
    user_id = get_user_id()

    params = app.current_event.query_string_parameters or {}
    period = params.get("period")
    if period is not None and not is_valid_period(period):
        raise BadRequestError("period must be formatted YYYY-MM")

    service = get_service()
    try:
        if not service.is_privileged(user_id):
            return error_response(403, "permission-denied", "Statistics are restricted.")
        result = service.get_statistics(period)
    except StoreUnavailableError as e:
        logger.error("Error loading statistics", extra={"error": e.message})
        return error_response(503, "unavailable", "Statistics temporarily unavailable.")

    return json_response(200, result.model_dump())


@logger.inject_lambda_context
@tracer.capture_lambda_handler
def lambda_handler(event: dict, context: LambdaContext) -> dict:
    """Main Lambda entry point.

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    return app.resolve(event, context)
