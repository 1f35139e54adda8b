"""
Lambda handler responsible for deleting an image and all of its variants.
"""

import asyncio
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.models.errors import NotFoundError
from core.services.image_storage import ImageStorageService
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import DeleteImageRequest, DeleteImageResponse

logger = Logger(utc=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image deletion requests.

    This function:
    - Extracts the image identifier from API Gateway path parameters
    - Validates the incoming request payload
    - Deletes every object under the image's prefix

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Received image delete request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
        },
    )

    path_params = event.get("pathParameters") or {}

    try:
        request = validate_request(
            DeleteImageRequest,
            {"image_id": path_params.get("image_id")},
        )
    except ValidationError as exc:
        logger.warning("Request validation failed", extra={"errors": exc.errors()})
        return ResponseBuilder.bad_request(
            "Invalid request payload",
            details={"errors": sanitize_validation_errors(exc.errors())},
            request_id=request_id,
        )

    service = ImageStorageService.from_env()

    try:
        delete_result = asyncio.run(service.delete_image(request.image_id))
    except NotFoundError:
        logger.info("Image not found during delete", extra={"image_id": request.image_id})
        return ResponseBuilder.not_found(
            f"Image not found: {request.image_id}",
            request_id=request_id,
        )

    response = DeleteImageResponse(
        image_id=delete_result.image_id,
        message="Image deleted successfully",
        deleted_at=delete_result.deleted_at,
        deleted_keys=delete_result.deleted_keys,
    )

    return ResponseBuilder.ok(response.model_dump(), request_id=request_id)
