import json

import pytest

from handlers.list_images.handler import handler


def _event(**query: str) -> dict:
    return {"httpMethod": "GET", "path": "/images", "queryStringParameters": query or None}


class TestListImagesHandler:
    def test_empty_bucket(self, s3_bucket, lambda_context) -> None:
        response = handler(_event(), lambda_context)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["items"] == []
        assert body["total"] == 0
        assert body["page"] == 1
        assert body["limit"] == 10

    def test_lists_uploaded_image(self, uploaded_image_id, lambda_context) -> None:
        response = handler(_event(page="1", limit="5"), lambda_context)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert [item["id"] for item in body["items"]] == [uploaded_image_id]
        assert body["items"][0]["mime_type"] == "image/png"
        assert body["total_pages"] == 1
        assert body["limit"] == 5

    def test_unknown_params_are_ignored(self, s3_bucket, lambda_context) -> None:
        response = handler(_event(sort="name"), lambda_context)

        assert response["statusCode"] == 200

    @pytest.mark.parametrize(
        "query",
        [{"limit": "abc"}, {"limit": "0"}, {"page": "0"}, {"limit": "1001"}],
    )
    def test_invalid_params(self, lambda_context, query) -> None:
        response = handler(_event(**query), lambda_context)

        assert response["statusCode"] == 400
        assert json.loads(response["body"])["message"] == "Invalid request params"
