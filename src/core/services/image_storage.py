"""Business logic for storing, retrieving, deleting and listing images.

This module coordinates validation, variant production, object storage
and URL signing for every image operation, translating lookups that come
up empty into ``NotFoundError``.
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from aws_lambda_powertools import Logger

from core.config import ImageStorageConfig
from core.filters.page_pagination import PagePagination
from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.infrastructure.aws.s3_metadata import S3MetadataRepository
from core.layouts.base import KeyLayout, validate_image_id
from core.layouts.factory import build_layout
from core.layouts.probe import ExtensionProbe
from core.models.batch import BatchFailure, BatchResult
from core.models.errors import (
    FilterError,
    ImageServiceError,
    NotFoundError,
    ValidationError,
)
from core.models.image import (
    DeleteResult,
    ImageMetadata,
    ImageUrls,
    ImageVariant,
    UploadFile,
    UploadResult,
)
from core.models.pagination import ImageListPage
from core.processing.validation import validate_upload
from core.processing.variant_producer import VariantProducer
from core.repositories.metadata_repository import ImageMetadataRepository
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import (
    DEFAULT_CONTENT_TYPE_FALLBACK,
    ERROR_CODE_INVALID_IMAGE_SIZE,
)
from core.utils.mime import extension_for_upload
from core.utils.time import utc_now_iso

logger = Logger(utc=True)

ResultT = TypeVar("ResultT")


class ImageStorageService:
    """Application service for image variants kept in an object store.

    This service orchestrates:
    - Upload validation and variant production
    - Writing the original, every variant and (flat layout) the metadata record
    - Minting fresh signed URLs on every read
    - Prefix-level deletion
    - Paginated listing over delimiter-grouped keys
    """

    def __init__(
        self,
        config: ImageStorageConfig,
        *,
        storage: ImageStorageRepository | None = None,
        metadata: ImageMetadataRepository | None = None,
        producer: VariantProducer | None = None,
        layout: KeyLayout | None = None,
    ) -> None:
        self._config = config
        self._layout = layout or build_layout(config.layout, config.folder_path)
        self._storage = storage or S3ImageStorage(S3Adapter(config))

        if metadata is None and self._layout.keeps_metadata:
            metadata = S3MetadataRepository(self._storage, self._layout)
        self._metadata = metadata

        self._producer = producer or VariantProducer(config.variants)
        self._probe = ExtensionProbe(self._storage, self._layout)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ImageStorageService":
        """Build the service from environment configuration."""
        return cls(ImageStorageConfig.from_env(**overrides))

    @property
    def config(self) -> ImageStorageConfig:
        return self._config

    @property
    def layout(self) -> KeyLayout:
        return self._layout

    @staticmethod
    def generate_image_id() -> str:
        """Generate a unique image identifier."""
        return str(uuid.uuid4())

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload_image(self, file: UploadFile) -> UploadResult:
        """Store an image and all of its variants.

        The upload flow is:
        1. Validate MIME type and size (no I/O on failure)
        2. Mint a new image id and derive every key
        3. Produce all variants in memory
        4. Write the original, then every variant concurrently
        5. Sign a URL per stored key
        6. Persist the metadata record (flat layout)
        7. Remove everything under the image prefix if any write fails

        Raises:
            ValidationError: If the file type or size is not accepted
            ProcessingError: If a variant cannot be produced
            ImageUploadFailedError: If the object store rejects a write
        """
        validate_upload(file, self._config)

        image_id = self.generate_image_id()
        ext = extension_for_upload(file.filename, file.mime_type)
        base_prefix = self._layout.derive_base_prefix(image_id)
        keys = self._derive_keys(image_id, ext)

        logger.debug(
            "Starting image upload",
            extra={"image_id": image_id, "filename": file.filename, "size": file.size},
        )

        produced = await self._producer.produce(file.data, fmt=self._layout.output_format(ext))

        try:
            await self._storage.put_object(
                key=keys[ImageVariant.ORIGINAL],
                data=file.data,
                content_type=file.mime_type,
                metadata=self._object_metadata(image_id, ImageVariant.ORIGINAL),
            )

            await self._gather_all(
                self._storage.put_object(
                    key=keys[variant],
                    data=item.data,
                    content_type=item.content_type,
                    metadata=self._object_metadata(image_id, variant),
                )
                for variant, item in produced.items()
            )

            urls = await self._sign_keys(keys)

            record: ImageMetadata | None = None
            if self._metadata is not None:
                sizes = {ImageVariant.ORIGINAL.value: file.size}
                sizes.update({variant.value: item.size for variant, item in produced.items()})
                record = ImageMetadata(
                    id=image_id,
                    original_filename=file.filename,
                    mime_type=file.mime_type,
                    extension=ext,
                    sizes=sizes,
                    created_at=utc_now_iso(),
                    urls=urls,
                )
                await self._metadata.save_metadata(metadata=record)

        except Exception:
            logger.exception("Image upload failed", extra={"image_id": image_id})
            await self._cleanup_failed_upload(image_id, base_prefix)
            raise

        logger.info(
            "Image uploaded successfully",
            extra={"image_id": image_id, "variants": len(keys)},
        )

        return UploadResult(
            id=image_id,
            key=base_prefix,
            original_filename=file.filename,
            mime_type=file.mime_type,
            size=file.size,
            urls=urls,
            created_at=record.created_at if record else None,
            metadata=record,
        )

    async def upload_multiple_images(
        self,
        files: Sequence[UploadFile],
    ) -> BatchResult[UploadResult]:
        """Upload several images concurrently; each succeeds or fails on its own.

        Failed items are reported by original filename.
        """
        semaphore = asyncio.Semaphore(self._config.max_concurrent_uploads)

        async def _upload(file: UploadFile) -> UploadResult:
            async with semaphore:
                return await self.upload_image(file)

        outcomes = await asyncio.gather(
            *(_upload(file) for file in files),
            return_exceptions=True,
        )

        result = self._collect_batch([file.filename for file in files], outcomes)
        logger.info(
            "Batch upload finished",
            extra={"succeeded": len(result.succeeded), "failed": len(result.failed)},
        )
        return result

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def get_image_url(self, image_id: str, variant: ImageVariant | str) -> str:
        """Mint a fresh signed URL for one variant of an image.

        Raises:
            ValidationError: If the id or variant label is invalid
            NotFoundError: If no original exists for the image
        """
        validate_image_id(image_id)
        resolved = self._parse_variant(variant)

        ext, _ = await self._resolve_extension(image_id)
        key = self._layout.derive_key(image_id, resolved, ext)

        return await self._storage.generate_presigned_get_url(
            key=key,
            expires_in=self._config.url_expiration_seconds,
        )

    async def get_image_urls(self, image_id: str) -> ImageUrls:
        """Mint fresh signed URLs for every configured variant of an image.

        Raises:
            NotFoundError: If no original exists for the image
        """
        validate_image_id(image_id)
        ext, _ = await self._resolve_extension(image_id)
        return await self._sign_keys(self._derive_keys(image_id, ext))

    async def get_image_metadata(self, image_id: str) -> ImageMetadata:
        """Return the image's metadata with freshly signed URLs.

        Without a stored record, a summary is rebuilt from the original's
        object headers.

        Raises:
            NotFoundError: If no original exists for the image
        """
        validate_image_id(image_id)
        ext, record = await self._resolve_extension(image_id)
        urls = await self._sign_keys(self._derive_keys(image_id, ext))

        if record is not None:
            return record.model_copy(update={"urls": urls})

        info = await self._storage.head_object(
            key=self._layout.derive_key(image_id, ImageVariant.ORIGINAL, ext),
        )
        return ImageMetadata(
            id=image_id,
            original_filename=f"{image_id}.{ext}",
            mime_type=info.content_type,
            extension=ext,
            sizes={ImageVariant.ORIGINAL.value: info.content_length},
            created_at=info.last_modified or "",
            urls=urls,
        )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_image(self, image_id: str) -> DeleteResult:
        """Delete every object under the image's base prefix.

        Not atomic: if the store fails mid-way some keys may remain.

        Raises:
            NotFoundError: If nothing exists under the prefix
            ImageDeletionFailedError: If the store refuses a delete
        """
        prefix = self._layout.derive_base_prefix(image_id)
        logger.debug("Starting image deletion", extra={"image_id": image_id, "prefix": prefix})

        keys = await self._storage.list_keys(prefix=prefix)
        if not keys:
            logger.warning("Image not found", extra={"image_id": image_id})
            raise NotFoundError(
                message="Image not found",
                details={"image_id": image_id},
            )

        deleted = await self._storage.delete_keys(keys=keys)

        logger.info(
            "Image deleted successfully",
            extra={"image_id": image_id, "deleted": len(deleted)},
        )
        return DeleteResult(
            image_id=image_id,
            deleted_keys=deleted,
            deleted_at=utc_now_iso(),
        )

    async def delete_multiple_images(
        self,
        image_ids: Sequence[str],
        *,
        fail_fast: bool | None = None,
    ) -> BatchResult[DeleteResult]:
        """Delete several images concurrently.

        Args:
            image_ids: Images to delete
            fail_fast: Raise the first failure and cancel the remaining
                deletes. Defaults to ``config.batch_delete_fail_fast``.
                Otherwise every delete runs and failures are reported
                in the result.
        """
        if fail_fast is None:
            fail_fast = self._config.batch_delete_fail_fast

        if fail_fast:
            deleted = await self._run_fail_fast([self.delete_image(image_id) for image_id in image_ids])
            return BatchResult[DeleteResult](succeeded=deleted)

        outcomes = await asyncio.gather(
            *(self.delete_image(image_id) for image_id in image_ids),
            return_exceptions=True,
        )

        result = self._collect_batch(list(image_ids), outcomes)
        logger.info(
            "Batch delete finished",
            extra={"succeeded": len(result.succeeded), "failed": len(result.failed)},
        )
        return result

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def get_images_list(self, page: int = 1, limit: int | None = None) -> ImageListPage:
        """List one page of stored images.

        Every call re-scans the namespace, so ``total`` reflects the
        store at call time. Per-item details that cannot be looked up
        fall back to defaults instead of failing the page.

        Raises:
            FilterError: If page or limit is out of range
            ImageListFailedError: If the namespace scan fails
        """
        if limit is None:
            limit = self._config.default_page_size

        is_valid, error_message = PagePagination.validate(page, limit, self._config.max_page_size)
        if not is_valid:
            raise FilterError(
                message=error_message,
                details={"page": page, "limit": limit},
            )

        image_ids = await self._discover_image_ids()
        window, total = PagePagination.paginate(image_ids, page=page, limit=limit)

        items = await asyncio.gather(*(self._describe_image(image_id) for image_id in window))

        logger.info(
            "Images listed successfully",
            extra={"page": page, "limit": limit, "total": total, "count": len(items)},
        )

        return ImageListPage(
            items=list(items),
            total=total,
            page=page,
            limit=limit,
            total_pages=PagePagination.total_pages(total, limit),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _derive_keys(self, image_id: str, ext: str) -> dict[ImageVariant, str]:
        return {
            variant: self._layout.derive_key(image_id, variant, ext)
            for variant in self._config.configured_variants
        }

    @staticmethod
    def _object_metadata(image_id: str, variant: ImageVariant) -> dict[str, str]:
        return {"image-id": image_id, "variant": variant.value}

    def _parse_variant(self, variant: ImageVariant | str) -> ImageVariant:
        try:
            resolved = ImageVariant(variant)
        except ValueError as exc:
            raise ValidationError(
                message="Invalid image size",
                error_code=ERROR_CODE_INVALID_IMAGE_SIZE,
                details={"variant": str(variant)},
            ) from exc

        if resolved not in self._config.configured_variants:
            raise ValidationError(
                message="Invalid image size",
                error_code=ERROR_CODE_INVALID_IMAGE_SIZE,
                details={"variant": resolved.value},
            )

        return resolved

    async def _resolve_extension(self, image_id: str) -> tuple[str, ImageMetadata | None]:
        """Return the stored extension, preferring the metadata record over probing."""
        if self._metadata is not None:
            record = await self._metadata.fetch_metadata(image_id=image_id)
            if record is not None and record.extension:
                return record.extension, record

            logger.debug("Falling back to extension probe", extra={"image_id": image_id})

        return await self._probe.resolve(image_id), None

    async def _sign_keys(self, keys: Mapping[ImageVariant, str]) -> ImageUrls:
        expires_in = self._config.url_expiration_seconds
        urls = await asyncio.gather(
            *(
                self._storage.generate_presigned_get_url(key=key, expires_in=expires_in)
                for key in keys.values()
            )
        )
        return {variant.value: url for variant, url in zip(keys, urls)}

    async def _cleanup_failed_upload(self, image_id: str, base_prefix: str) -> None:
        """Best-effort removal of whatever a failed upload managed to write."""
        try:
            keys = await self._storage.list_keys(prefix=base_prefix)
            if keys:
                await self._storage.delete_keys(keys=keys)
        except ImageServiceError:
            logger.warning(
                "Failed to clean up partially uploaded image",
                extra={"image_id": image_id, "prefix": base_prefix},
            )

    async def _discover_image_ids(self) -> list[str]:
        """Distinct image ids under the layout root, in listing order."""
        prefixes = await self._storage.list_prefixes(prefix=self._layout.root_prefix())

        image_ids: list[str] = []
        seen: set[str] = set()
        for prefix in prefixes:
            try:
                image_id = validate_image_id(self._layout.image_id_from_prefix(prefix))
            except (ValueError, ValidationError):
                logger.debug("Skipping non-image grouping", extra={"prefix": prefix})
                continue

            if image_id not in seen:
                seen.add(image_id)
                image_ids.append(image_id)

        return image_ids

    async def _describe_image(self, image_id: str) -> UploadResult:
        """Build a listing item, degrading to defaults when details are unavailable."""
        base_prefix = self._layout.derive_base_prefix(image_id)

        try:
            ext, record = await self._resolve_extension(image_id)
        except ImageServiceError as exc:
            logger.warning(
                "Could not resolve image while listing",
                extra={"image_id": image_id, "error": exc.error_code},
            )
            return UploadResult(
                id=image_id,
                key=base_prefix,
                original_filename=image_id,
                mime_type=DEFAULT_CONTENT_TYPE_FALLBACK,
                size=0,
                urls={},
            )

        urls = await self._sign_keys(self._derive_keys(image_id, ext))

        if record is not None:
            return UploadResult(
                id=image_id,
                key=base_prefix,
                original_filename=record.original_filename,
                mime_type=record.mime_type,
                size=record.sizes.get(ImageVariant.ORIGINAL.value, 0),
                urls=urls,
                created_at=record.created_at,
                metadata=record.model_copy(update={"urls": urls}),
            )

        mime_type = DEFAULT_CONTENT_TYPE_FALLBACK
        size = 0
        created_at: str | None = None
        try:
            info = await self._storage.head_object(
                key=self._layout.derive_key(image_id, ImageVariant.ORIGINAL, ext),
            )
            mime_type, size, created_at = info.content_type, info.content_length, info.last_modified
        except ImageServiceError as exc:
            logger.warning(
                "Image detail lookup failed, using defaults",
                extra={"image_id": image_id, "error": exc.error_code},
            )

        return UploadResult(
            id=image_id,
            key=base_prefix,
            original_filename=f"{image_id}.{ext}",
            mime_type=mime_type,
            size=size,
            urls=urls,
            created_at=created_at,
        )

    @staticmethod
    async def _gather_all(awaitables: Iterable[Awaitable[Any]]) -> list[Any]:
        """Await every awaitable, then raise the first failure if any.

        Unlike a plain gather, no sibling is still running when the error
        surfaces, so cleanup sees every write that happened.
        """
        outcomes = await asyncio.gather(*awaitables, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return list(outcomes)

    @staticmethod
    async def _run_fail_fast(awaitables: Sequence[Awaitable[ResultT]]) -> list[ResultT]:
        """Run concurrently; on the first failure cancel the rest and raise it."""
        tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
        if not tasks:
            return []

        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)

        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        for task in tasks:
            if task in done and task.exception() is not None:
                raise task.exception()  # type: ignore[misc]

        return [task.result() for task in tasks]

    @staticmethod
    def _collect_batch(
        item_ids: Sequence[str],
        outcomes: Sequence[ResultT | BaseException],
    ) -> BatchResult[ResultT]:
        """Split gathered outcomes into successes and reported failures.

        Only service errors are recorded as failures; anything else is a
        defect and propagates.
        """
        result: BatchResult[Any] = BatchResult()

        for item_id, outcome in zip(item_ids, outcomes):
            if isinstance(outcome, ImageServiceError):
                logger.warning(
                    "Batch item failed",
                    extra={"item": item_id, "error": outcome.error_code},
                )
                result.failed.append(
                    BatchFailure(
                        id=item_id,
                        error_code=outcome.error_code,
                        message=outcome.message,
                    )
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.succeeded.append(outcome)

        return result
