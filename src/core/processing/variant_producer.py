"""Produce every configured size variant from one uploaded buffer."""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass

from aws_lambda_powertools import Logger
from starlette.concurrency import run_in_threadpool

from core.models.errors import ProcessingError
from core.models.image import ImageVariant, VariantSpec
from core.processing.engine import PillowResizeEngine, ResizeEngine
from core.utils.mime import content_type_for_format

logger = Logger(utc=True)


@dataclass(frozen=True)
class ProducedVariant:
    """Encoded bytes for one variant."""

    data: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


class VariantProducer:
    """Drives the resize engine once per configured variant.

    The original is never passed through the engine; it is stored as
    uploaded. Variants are encoded concurrently on the thread pool and
    the first failure aborts the whole set.
    """

    def __init__(
        self,
        variants: Mapping[ImageVariant, VariantSpec],
        engine: ResizeEngine | None = None,
    ) -> None:
        self._variants = dict(variants)
        self._engine: ResizeEngine = engine or PillowResizeEngine()

    @property
    def variants(self) -> tuple[ImageVariant, ...]:
        return tuple(self._variants)

    async def produce_one(
        self,
        data: bytes,
        variant: ImageVariant,
        *,
        fmt: str,
    ) -> ProducedVariant:
        spec = self._variants[variant]

        try:
            encoded = await run_in_threadpool(
                self._engine.resize,
                data,
                width=spec.width,
                height=spec.height,
                quality=spec.quality,
                fmt=fmt,
            )
        except Exception as exc:
            logger.exception(
                "Variant processing failed",
                extra={"variant": variant.value, "format": fmt},
            )
            raise ProcessingError(
                message=f"Failed to process image: {exc}",
                details={"variant": variant.value},
            ) from exc

        return ProducedVariant(data=encoded, content_type=content_type_for_format(fmt))

    async def produce(self, data: bytes, *, fmt: str) -> dict[ImageVariant, ProducedVariant]:
        """Return one encoded buffer per configured variant.

        Args:
            data: Original image bytes
            fmt: Pillow format name to encode every variant in

        Raises:
            ProcessingError: If any variant fails to resize or encode
        """
        variants = self.variants
        logger.debug("Producing variants", extra={"count": len(variants), "format": fmt})

        results = await asyncio.gather(
            *(self.produce_one(data, variant, fmt=fmt) for variant in variants)
        )

        produced = dict(zip(variants, results))
        logger.debug(
            "Variants produced",
            extra={"sizes": {variant.value: item.size for variant, item in produced.items()}},
        )
        return produced
