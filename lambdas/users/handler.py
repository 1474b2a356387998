"""Users Lambda handler for identity registration."""

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.event_handler import APIGatewayRestResolver, CORSConfig, Response
from aws_lambda_powertools.event_handler.exceptions import (
    BadRequestError,
    UnauthorizedError,
)
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from shared.config import get_config
from shared.db import DynamoDBClient
from shared.exceptions import InvalidRequestError, StoreUnavailableError
from shared.quota_store import QuotaStore
from shared.utils import (
    error_response,
    extract_user_id,
    json_response,
    register_error_handlers,
)
from users.models import RegisterUserRequest
from users.service import UserService

logger = Logger()
tracer = Tracer()
cors_config = CORSConfig(allow_origin="*", allow_headers=["Content-Type", "X-User-Id"], max_age=300)
app = APIGatewayRestResolver(cors=cors_config)
register_error_handlers(app)

# Initialize service lazily
_service: UserService | None = None


def get_service() -> UserService:
    """Get or create the user service instance."""
    global _service
    if _service is None:
        config = get_config()
        store = QuotaStore(DynamoDBClient(config.table_name), config.namespace, config.limits)
        _service = UserService(store, config.privileged_devices)
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


@app.post("/users")
@tracer.capture_method
def register_user() -> Response:
    """Register the calling user.

    Returns:
        200 response with success marker
    """
    user_id = get_user_id()

    try:
        body = app.current_event.json_body or {}
        request = RegisterUserRequest(**body)
    except ValidationError as e:
        raise BadRequestError(str(e)) from None

    try:
        result = get_service().register_user(user_id, request)
    except InvalidRequestError as e:
        raise BadRequestError(e.message) from None
    except StoreUnavailableError as e:
        logger.error("Error adding user", extra={"user_id": user_id, "error": e.message})
        return error_response(503, "unavailable", "Error adding user.")

    return json_response(200, result)


@app.post("/users/privileged-devices")
@tracer.capture_method
def sync_privileged_devices() -> Response:
    """Sync the deploy-time privileged device list into identity records.

    Request bodies are ignored; the list comes from configuration only.

    Returns:
        200 response with created and promoted user IDs
    """
    user_id = get_user_id()

    try:
        result = get_service().sync_privileged_devices()
    except StoreUnavailableError as e:
        logger.error(
            "Error updating privileged devices", extra={"user_id": user_id, "error": e.message}
        )
        return error_response(503, "unavailable", "Error updating privileged devices.")

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
