"""Utility functions for translation backend Lambda handlers."""
import json
import os
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, Response
from aws_lambda_powertools.event_handler.exceptions import (
    BadRequestError,
    UnauthorizedError,
)

from .exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def utc_now() -> str:
    """Get current UTC timestamp in ISO format.

    Returns:
        ISO formatted timestamp string
    """
    return datetime.now(UTC).isoformat()


def extract_user_id(headers: dict[str, str] | None) -> str | None:
    """Extract user ID from request headers.

    Looks for the X-User-Id header (case-insensitive).

    Args:
        headers: Request headers dict

    Returns:
        User ID string or None if not found or blank
    """
    # Headers may be case-insensitive
    for key, value in (headers or {}).items():
        if key.lower() == "x-user-id":
            return value.strip() if value and value.strip() else None
    return None


def env_int(key: str, default: int) -> int:
    """Read an integer environment variable.

    Args:
        key: Environment variable name
        default: Value used when the variable is unset or blank

    Returns:
        Parsed integer

    Raises:
        ConfigurationError: If the value is not an integer
    """
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"{key} must be an integer, got {value!r}", config_key=key
        ) from None


def parse_bool(value: Any) -> bool | None:
    """Interpret a loosely typed boolean.

    Accepts real booleans, numbers and the usual string spellings
    ("true"/"false", "yes"/"no", "1"/"0", "on"/"off").

    Args:
        value: Value to interpret

    Returns:
        The boolean, or None if the value is not recognized
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    return None


def env_bool(key: str, default: bool = False) -> bool:
    """Read a boolean environment variable.

    Args:
        key: Environment variable name
        default: Value used when the variable is unset or blank

    Returns:
        Parsed boolean

    Raises:
        ConfigurationError: If the value is not a recognized boolean
    """
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return default
    parsed = parse_bool(value)
    if parsed is None:
        raise ConfigurationError(
            f"{key} must be a boolean, got {value!r}", config_key=key
        )
    return parsed


def json_response(status_code: int, body: dict[str, Any]) -> Response:
    """Build a JSON API Gateway response.

    Args:
        status_code: HTTP status code
        body: Response body dict

    Returns:
        Powertools Response with serialized body
    """
    return Response(
        status_code=status_code,
        content_type="application/json",
        body=json.dumps(body),
    )


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> Response:
    """Format an error response.

    Args:
        status_code: HTTP status code
        error: Error category (e.g., 'resource-exhausted')
        message: Human-readable error message
        details: Optional additional error details

    Returns:
        Powertools Response with error body
    """
    body: dict[str, Any] = {
        "error": error,
        "message": message,
    }
    if details:
        body.update(details)

    return json_response(status_code, body)


def register_error_handlers(app: APIGatewayRestResolver) -> None:
    """Give 401 and 400 responses the same body shape as other errors.

    Routes keep raising powertools' UnauthorizedError / BadRequestError;
    these handlers render them as ``{"error", "message"}`` bodies.

    Args:
        app: Resolver to register the handlers on
    """

    @app.exception_handler(UnauthorizedError)
    def handle_unauthorized(ex: UnauthorizedError) -> Response:
        return error_response(401, "unauthenticated", ex.msg)

    @app.exception_handler(BadRequestError)
    def handle_bad_request(ex: BadRequestError) -> Response:
        return error_response(400, "invalid-argument", ex.msg)
