"""
Lambda handler responsible for image upload and variant creation.
"""

import asyncio
import base64
import json
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.services.image_storage import ImageStorageService
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import ImageUploadRequest, ImageUploadResponse

logger = Logger(utc=True)
tracer = Tracer()
metrics = Metrics()


def _read_body(event: dict[str, Any]) -> dict[str, Any]:
    raw = event.get("body") or "{}"
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(raw).decode("utf-8")

    body = json.loads(raw)
    if not isinstance(body, dict):
        raise ValueError("Invalid JSON body: expected an object")
    return body


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image upload requests.

    The handler decodes the base64-encoded image, hands it to the storage
    service (which validates it, produces every size variant and writes
    them), and returns the signed URL of each stored variant.

    Expected API Gateway event structure:
    {
        "body": "{\"file\": \"...\", \"filename\": \"cat.png\", \"mime_type\": \"image/png\"}",
        "isBase64Encoded": false
    }

    Args:
        event: API Gateway Lambda proxy event containing the upload payload
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response describing the created image
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Received image upload request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
        },
    )

    try:
        body = _read_body(event)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
        logger.warning("Invalid JSON body received", extra={"error": str(exc)})
        return ResponseBuilder.bad_request("Invalid JSON body", request_id=request_id)

    try:
        request = validate_request(ImageUploadRequest, body)
    except ValidationError as exc:
        logger.warning("Request validation failed", extra={"errors": exc.errors()})
        return ResponseBuilder.bad_request(
            "Invalid request payload",
            details={"errors": sanitize_validation_errors(exc.errors())},
            request_id=request_id,
        )

    service = ImageStorageService.from_env()
    result = asyncio.run(service.upload_image(request.to_upload_file()))

    response = ImageUploadResponse(
        **result.model_dump(),
        message="Image uploaded successfully",
    )
    return ResponseBuilder.created(response.model_dump(), request_id=request_id)
