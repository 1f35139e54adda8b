"""Image Variant Storage Service Package."""

__version__ = "0.1.0"
__description__ = (
    "Image variant storage on S3-compatible object stores with Pillow resizing"
)

__all__ = ["handlers", "core"]
