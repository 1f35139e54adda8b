"""
Lambda handler responsible for listing stored images page by page.
"""

import asyncio
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.services.image_storage import ImageStorageService
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import ListImagesRequest

logger = Logger(utc=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle requests to list images.

    Supports 1-indexed page/limit pagination over the images discovered
    in the bucket. Every item carries freshly signed URLs.

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response

    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Received image list request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
        },
    )

    params = event.get("queryStringParameters") or {}

    try:
        request = validate_request(
            ListImagesRequest,
            {key: value for key, value in params.items() if key in ("page", "limit")},
        )
    except ValidationError as exc:
        logger.warning("Request validation failed", extra={"errors": exc.errors()})
        return ResponseBuilder.bad_request(
            "Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
            request_id=request_id,
        )

    service = ImageStorageService.from_env()
    page = asyncio.run(service.get_images_list(page=request.page, limit=request.limit))

    return ResponseBuilder.ok(page.model_dump(), request_id=request_id)
