from collections.abc import Callable

import pytest

from core.models.image import UploadFile
from core.services.image_storage import ImageStorageService


@pytest.fixture
def make_service(make_config, memory_storage) -> Callable[..., ImageStorageService]:
    """
    Factory for a service wired to the in-memory storage double.

    Usage:
        service = make_service(layout="flat")
    """

    def _make(**overrides) -> ImageStorageService:
        return ImageStorageService(make_config(**overrides), storage=memory_storage)

    return _make


@pytest.fixture
def service(make_service) -> ImageStorageService:
    return make_service()


@pytest.fixture
def png_upload(sample_png) -> UploadFile:
    return UploadFile.from_bytes(sample_png, filename="cat.png", mime_type="image/png")
