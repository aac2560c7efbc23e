"""Ingestion orchestration and transformation dispatch."""

import time
from typing import Mapping, Optional, Sequence

from .downloader import ImageDownloader
from .error_handling import BatchOperationContextManager
from .events import WorkItemPublisher
from .exceptions import PhotoIngestionError, RequestValidationError, S3Error
from .keys import build_original_identity
from .models import (
    DispatchResult,
    DispatchStatus,
    IngestedImage,
    IngestionRequest,
    IngestionResult,
    WorkItem,
)
from .observability import LogContext, timed_operation
from .protocols import DerivativeProducer, LoggerProtocol
from .registry import ImageRegistry
from .storage import ObjectStore


class IngestionOrchestrator:
    """
    Ingests the photos of one item.

    URLs are processed one after another: dedup, download, upload,
    registry write, then a concurrent fan-out of one work item per
    derivative format. The first failing URL aborts the request; URLs
    committed before it are not rolled back.
    """

    def __init__(
        self,
        store: ObjectStore,
        registry: ImageRegistry,
        publisher: WorkItemPublisher,
        downloader: ImageDownloader,
        formats: Sequence[str],
        logger: LoggerProtocol,
    ):
        self._store = store
        self._registry = registry
        self._publisher = publisher
        self._downloader = downloader
        self._formats = tuple(formats)
        self._logger = logger

    @staticmethod
    def validate(request: IngestionRequest) -> None:
        """Reject a request before any side effect happens."""
        if not request.item_id or not request.item_id.strip() or not request.photo_urls:
            raise RequestValidationError("itemId and photoUrls are required.")

    async def ingest(self, request: IngestionRequest) -> IngestionResult:
        """
        Ingest every non-blank photo URL of the request.

        Returns:
            The newly ingested images; already-registered photos are omitted

        Raises:
            RequestValidationError: If itemId or photoUrls is missing
            S3Error: If the item folder marker cannot be written
            PhotoIngestionError: If any photo fails, chained to the cause
        """
        self.validate(request)
        item_id = request.item_id
        log_context = LogContext(
            correlation_id=f"ingest_{item_id}_{int(time.time() * 1000)}",
            operation="ingest",
            component="ingestion_orchestrator",
        ).with_metadata(item_id=item_id)

        try:
            await self._store.ensure_folder(item_id)
        except Exception as exc:
            self._logger.error(f"Failed to create folder: {exc}", log_context)
            raise S3Error("Failed to prepare S3 folder.") from exc

        result = IngestionResult()
        with BatchOperationContextManager(f"ingestion of item {item_id}", self._logger) as batch:
            for photo_url in request.photo_urls:
                if not photo_url or not photo_url.strip():
                    continue
                cleaned_url = photo_url.strip()
                photo_context = log_context.with_metadata(url=cleaned_url)
                self._logger.info("Ingesting photo", photo_context)

                try:
                    async with timed_operation(self._logger, "Photo ingestion", photo_context):
                        ingested = await self._ingest_photo(item_id, cleaned_url, photo_context)
                except Exception as exc:
                    self._logger.error(f"Failed processing {cleaned_url}: {exc}", photo_context)
                    raise PhotoIngestionError(cleaned_url) from exc

                if ingested is None:
                    batch.add_skipped(cleaned_url)
                    continue
                batch.add_completed(cleaned_url)
                result.items.append(ingested)

        return result

    async def _ingest_photo(
        self, item_id: str, photo_url: str, log_context: LogContext
    ) -> Optional[IngestedImage]:
        image_id, object_key, file_name = build_original_identity(item_id, photo_url)

        if await self._registry.is_original_registered(item_id, image_id):
            self._logger.info(
                f"Image already registered for ImageId {image_id}. Skipping.", log_context
            )
            return None

        download = await self._downloader.download(photo_url)
        s3_url = await self._store.put_bytes(object_key, download.content, download.content_type)
        await self._registry.register_original(item_id, image_id, s3_url)

        self._logger.debug(f"Queueing {len(self._formats)} work items", log_context)
        await self._publisher.fan_out(item_id, s3_url, self._formats)

        return IngestedImage(image_id=image_id, file_name=file_name, s3_url=s3_url)


class TransformationDispatcher:
    """
    Routes work items to the processor of their format tag.

    Malformed items and unknown formats are dropped, never retried.
    Processor failures propagate so the delivery mechanism redelivers the
    item; there is no local retry or backoff.
    """

    def __init__(self, processors: Mapping[str, DerivativeProducer], logger: LoggerProtocol):
        self._processors = {tag.lower(): processor for tag, processor in processors.items()}
        self._logger = logger

    def resolve(self, format_tag: str) -> Optional[DerivativeProducer]:
        return self._processors.get(format_tag.strip().lower())

    async def dispatch(self, work_item: WorkItem, message_id: str = "") -> DispatchResult:
        log_context = LogContext(
            correlation_id=message_id or LogContext().correlation_id,
            operation="dispatch",
            component="transformation_dispatcher",
        )

        missing = work_item.missing_fields()
        if missing:
            reason = f"Missing {', '.join(missing)} attribute; skipping message."
            self._logger.warning(reason, log_context)
            return DispatchResult(status=DispatchStatus.DROPPED, reason=reason)

        processor = self.resolve(work_item.format)
        if processor is None:
            reason = f"Unsupported format '{work_item.format.strip()}'; skipping message."
            self._logger.warning(reason, log_context)
            return DispatchResult(
                status=DispatchStatus.DROPPED, format=work_item.format, reason=reason
            )

        item_context = log_context.with_metadata(
            item_id=work_item.item_id, format=processor.format
        )
        try:
            async with timed_operation(self._logger, f"{processor.format} derivative", item_context):
                output_url = await processor.produce_derivative(
                    work_item.source_url, work_item.item_id
                )
        except Exception as exc:
            self._logger.error(f"Error processing work item: {exc}", item_context)
            raise

        self._logger.info(f"Processed image. Output: {output_url}", item_context)
        return DispatchResult(
            status=DispatchStatus.PROCESSED, format=processor.format, output_url=output_url
        )
