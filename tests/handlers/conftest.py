import base64
import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest


@pytest.fixture
def lambda_context():
    return SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )


@pytest.fixture
def make_upload_event() -> Callable[..., dict[str, Any]]:
    """
    Factory for upload events carrying a base64 image in a JSON body.

    Usage:
        event = make_upload_event(png_bytes, filename="cat.png")
    """

    def _make(
        data: bytes,
        *,
        filename: str = "cat.png",
        mime_type: str = "image/png",
        **extra: Any,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "file": base64.b64encode(data).decode("utf-8"),
            "filename": filename,
            "mime_type": mime_type,
        }
        body.update(extra)
        return {
            "httpMethod": "POST",
            "path": "/images",
            "body": json.dumps(body),
            "headers": {"Content-Type": "application/json"},
        }

    return _make


@pytest.fixture
def uploaded_image_id(s3_bucket, lambda_context, make_upload_event, sample_png) -> str:
    """Upload one PNG through the upload handler and return its id."""
    from handlers.upload_image.handler import handler

    response = handler(make_upload_event(sample_png), lambda_context)
    assert response["statusCode"] == 201
    return json.loads(response["body"])["id"]
