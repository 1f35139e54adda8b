"""
Lambda handler responsible for image URL retrieval.
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

from .models import GetImageRequest, GetImageResponse

logger = Logger(utc=True)
tracer = Tracer()
metrics = Metrics()


async def _fetch(service: ImageStorageService, request: GetImageRequest) -> GetImageResponse:
    response = GetImageResponse(image_id=request.image_id, variant=request.variant)

    if request.metadata:
        metadata = await service.get_image_metadata(request.image_id)
        response.metadata = metadata
        response.urls = metadata.urls
    elif request.variant is None:
        response.urls = await service.get_image_urls(request.image_id)

    if request.variant is not None:
        response.url = await service.get_image_url(request.image_id, request.variant)

    return response


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image URL requests.

    This function:
     - Default: return a signed URL for every variant
        - variant=<label>: return the signed URL of that variant only
        - metadata=true: include the image metadata in the response
    Args:
        event: API Gateway event payload.
        context: AWS Lambda runtime context.

    Returns:
        API Gateway-compatible response dictionary.
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Received image URL request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
        },
    )

    path_params = event.get("pathParameters") or {}
    query_params = event.get("queryStringParameters") or {}

    params = {
        "image_id": path_params.get("image_id"),
        "variant": query_params.get("variant"),
        "metadata": str(query_params.get("metadata", "false")).lower() == "true",
    }

    try:
        request = validate_request(GetImageRequest, params)
    except ValidationError as exc:
        logger.warning("Request validation failed", extra={"errors": exc.errors()})
        return ResponseBuilder.bad_request(
            "Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
            request_id=request_id,
        )

    service = ImageStorageService.from_env()
    response = asyncio.run(_fetch(service, request))

    return ResponseBuilder.ok(response.model_dump(exclude_none=True), request_id=request_id)
