"""
Error translation for API Gateway Lambda handlers.

Handlers raise domain errors from ``core.models.errors``; the
``api_gateway_handler`` decorator turns them into JSON error responses so
that handler bodies only deal with the success path.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger

from core.models.errors import (
    ConfigurationError,
    FilterError,
    ImageServiceError,
    NotFoundError,
    ProcessingError,
    S3Error,
    ValidationError,
)
from core.utils.response import JsonDict, ResponseBuilder

logger = Logger(service="api-gateway-handler", utc=True)

# First match wins, so subclasses come before their parents.
_ERROR_STATUS: tuple[tuple[type[ImageServiceError], HTTPStatus], ...] = (
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (FilterError, HTTPStatus.BAD_REQUEST),
    (ValidationError, HTTPStatus.UNPROCESSABLE_ENTITY),
    (ProcessingError, HTTPStatus.UNPROCESSABLE_ENTITY),
    (ConfigurationError, HTTPStatus.INTERNAL_SERVER_ERROR),
    (S3Error, HTTPStatus.INTERNAL_SERVER_ERROR),
)

_CLIENT_ERRORS = (ValueError, KeyError, TypeError, AttributeError)

# Messages starting with one of these are already fit for API clients.
_READABLE_PREFIXES = (
    "Invalid",
    "Missing",
    "Required",
    "Must",
    "Cannot",
    "Unable to",
    "Failed to",
    "Image",
    "File",
)

_GENERIC_MESSAGES: tuple[tuple[type[Exception], str], ...] = (
    (ValueError, "The provided data is invalid. Please check your input and try again."),
    (KeyError, "A required field is missing. Please ensure all required fields are provided."),
    (AttributeError, "A required field is missing. Please ensure all required fields are provided."),
    (TypeError, "The data format is incorrect. Please check the request format."),
)

_UNEXPECTED_MESSAGE = "We're experiencing technical difficulties. Please try again in a few moments."


def status_for_error(exc: ImageServiceError) -> HTTPStatus:
    """HTTP status for a domain error; unknown subclasses are server errors."""
    for error_type, status in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return HTTPStatus.INTERNAL_SERVER_ERROR


def _client_message(exc: Exception) -> str:
    text = str(exc)
    if text.startswith(_READABLE_PREFIXES):
        return text

    for error_type, message in _GENERIC_MESSAGES:
        if isinstance(exc, error_type):
            return message
    return "We encountered an issue processing your request. Please try again."


def _log_failure(message: str, exc: Exception, *, handler: str, request_id: str | None, server_side: bool) -> None:
    extra: JsonDict = {
        "handler": handler,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }
    if isinstance(exc, ImageServiceError):
        extra["error_code"] = exc.error_code

    if server_side:
        logger.exception(message, extra=extra)
    else:
        extra["traceback"] = traceback.format_exc()
        logger.warning(message, extra=extra)


def api_gateway_handler(func: Callable[..., JsonDict]) -> Callable[..., JsonDict]:
    """
    Wrap an API Gateway Lambda handler.

    - OPTIONS requests get a CORS preflight answer without calling ``func``
    - ``ImageServiceError`` becomes the status from ``status_for_error``,
      with details hidden on 5xx
    - ``ValueError``/``KeyError``/``TypeError``/``AttributeError`` become 400
    - anything else becomes a 500 with a generic message

    Example:
        @api_gateway_handler
        def handler(event, context):
            return ResponseBuilder.ok({"status": "up"})
    """

    @wraps(func)
    def wrapper(event: Any, context: Any, *, cors_origin: str | None = None) -> JsonDict:
        if event.get("httpMethod") == "OPTIONS":
            return ResponseBuilder.preflight(cors_origin=cors_origin)

        request_id = getattr(context, "aws_request_id", None)
        handler_name = func.__name__

        try:
            return func(event, context)

        except ImageServiceError as exc:
            status = status_for_error(exc)
            _log_failure(
                "Service error in handler",
                exc,
                handler=handler_name,
                request_id=request_id,
                server_side=status >= HTTPStatus.INTERNAL_SERVER_ERROR,
            )
            return ResponseBuilder.from_service_error(
                exc, status=status, request_id=request_id, cors_origin=cors_origin
            )

        except _CLIENT_ERRORS as exc:
            _log_failure(
                "Validation error in handler",
                exc,
                handler=handler_name,
                request_id=request_id,
                server_side=False,
            )
            return ResponseBuilder.bad_request(
                _client_message(exc), request_id=request_id, cors_origin=cors_origin
            )

        except Exception as exc:
            _log_failure(
                "Unexpected error in handler",
                exc,
                handler=handler_name,
                request_id=request_id,
                server_side=True,
            )
            return ResponseBuilder.internal_error(
                _UNEXPECTED_MESSAGE, request_id=request_id, cors_origin=cors_origin
            )

    return wrapper
