"""
API Gateway proxy responses for the image endpoints.

Every response is a JSON document carrying CORS headers. Errors share one
envelope: ``error`` (machine code), ``message``, ``timestamp`` and, for
client errors only, ``details``.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any

from core.models.errors import ImageServiceError
from core.utils.constants import (
    CORS_HEADERS,
    CORS_METHODS,
    CORS_ORIGIN,
    DEFAULT_CONTENT_TYPE,
    ERROR_CODE_VALIDATION_FAILED,
    EXPOSE_HEADERS,
)
from core.utils.time import utc_now_iso

JsonDict = dict[str, Any]


def _headers(cors_origin: str | None, request_id: str | None = None) -> dict[str, str]:
    headers = {
        "Content-Type": DEFAULT_CONTENT_TYPE,
        "Access-Control-Allow-Origin": cors_origin or CORS_ORIGIN,
        "Access-Control-Allow-Headers": CORS_HEADERS,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Expose-Headers": EXPOSE_HEADERS,
    }
    if request_id:
        headers["X-Request-Id"] = request_id
    return headers


class ResponseBuilder:
    """Factory for API Gateway-compatible HTTP responses."""

    @staticmethod
    def build(
        status: HTTPStatus,
        body: JsonDict | None = None,
        *,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = dict(body or {})
        if request_id:
            payload["request_id"] = request_id

        # Pydantic dumps may still hold datetimes or enums.
        return {
            "statusCode": status.value,
            "headers": _headers(cors_origin, request_id),
            "body": json.dumps(payload, default=str),
        }

    @staticmethod
    def ok(body: JsonDict, **kwargs: Any) -> JsonDict:
        return ResponseBuilder.build(HTTPStatus.OK, body, **kwargs)

    @staticmethod
    def created(body: JsonDict, **kwargs: Any) -> JsonDict:
        return ResponseBuilder.build(HTTPStatus.CREATED, body, **kwargs)

    @staticmethod
    def preflight(*, cors_origin: str | None = None) -> JsonDict:
        """Empty 204 answer to a CORS preflight request."""
        return {
            "statusCode": HTTPStatus.NO_CONTENT.value,
            "headers": _headers(cors_origin),
            "body": "",
        }

    @staticmethod
    def error(
        *,
        status: HTTPStatus,
        message: str,
        error: str | None = None,
        details: Any = None,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = {
            "error": error or status.name,
            "message": message,
            "timestamp": utc_now_iso(),
        }
        if details:
            payload["details"] = details

        return ResponseBuilder.build(
            status, payload, request_id=request_id, cors_origin=cors_origin
        )

    @staticmethod
    def bad_request(message: str, *, details: Any = None, **kwargs: Any) -> JsonDict:
        return ResponseBuilder.error(
            status=HTTPStatus.BAD_REQUEST, message=message, details=details, **kwargs
        )

    @staticmethod
    def validation_error(
        *,
        message: str,
        error: str = ERROR_CODE_VALIDATION_FAILED,
        details: Any = None,
        **kwargs: Any,
    ) -> JsonDict:
        """422 Unprocessable Entity: the request was well-formed but rejected."""
        return ResponseBuilder.error(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            error=error,
            message=message,
            details=details,
            **kwargs,
        )

    @staticmethod
    def not_found(message: str = "Resource not found", **kwargs: Any) -> JsonDict:
        return ResponseBuilder.error(status=HTTPStatus.NOT_FOUND, message=message, **kwargs)

    @staticmethod
    def internal_error(
        message: str = "Internal server error", *, error: str | None = None, **kwargs: Any
    ) -> JsonDict:
        return ResponseBuilder.error(
            status=HTTPStatus.INTERNAL_SERVER_ERROR, error=error, message=message, **kwargs
        )

    @staticmethod
    def from_service_error(
        exc: ImageServiceError,
        *,
        status: HTTPStatus,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        """Render a domain error; details are only exposed for client errors."""
        return ResponseBuilder.error(
            status=status,
            error=exc.error_code,
            message=exc.message,
            details=exc.details if status < HTTPStatus.INTERNAL_SERVER_ERROR else None,
            request_id=request_id,
            cors_origin=cors_origin,
        )
