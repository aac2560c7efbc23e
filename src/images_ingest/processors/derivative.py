"""Produce one derivative from a stored original and commit it."""

from typing import Optional, Union

from ..core.error_handling import with_error_handling
from ..core.exceptions import ImageProcessingError
from ..core.image_utils import EncodedImage, decode_image, encode_image
from ..core.keys import DerivativeTarget, plan_derivative
from ..core.models import ImageRecord
from ..core.observability import LogContext, create_logger
from ..core.protocols import LoggerProtocol
from ..core.registry import ImageRegistry
from ..core.storage import ObjectStore
from .variants import BlurVariant, CopyVariant, ResizeVariant

Variant = Union[ResizeVariant, BlurVariant, CopyVariant]


class DerivativeProcessor:
    """
    Format processor for a single derivative tag.

    Errors are not caught here: an unreadable source, a decode failure or
    a store failure propagates so that the work item is redelivered.
    """

    def __init__(
        self,
        format: str,
        variant: Variant,
        store: ObjectStore,
        registry: ImageRegistry,
        logger: Optional[LoggerProtocol] = None,
    ):
        self.format = format
        self.variant = variant
        self._store = store
        self._registry = registry
        self._logger = logger or create_logger("processor")

    async def produce_derivative(self, source_url: str, item_id: str) -> str:
        """Produce the derivative of ``source_url`` for ``item_id``; return its S3 URL."""
        target = plan_derivative(source_url, item_id, self.format)
        log_context = LogContext(
            operation="produce_derivative", component="derivative_processor"
        ).with_metadata(
            item_id=item_id, format=self.format, destination_key=target.destination_key
        )

        if self.variant.decodes:
            output_url = await self._render_and_upload(target, log_context)
        else:
            self._logger.debug("Copying source object", log_context)
            output_url = await self._store.copy_from(
                target.source_bucket, target.source_key, target.destination_key
            )

        await self._registry.put_record(
            ImageRecord(
                item_id=item_id,
                image_id=target.record_image_id,
                format=self.format,
                url=output_url,
            )
        )
        self._logger.info("Derivative committed", log_context, url=output_url)
        return output_url

    async def _render_and_upload(self, target: DerivativeTarget, log_context: LogContext) -> str:
        source_bytes = await self._store.get_bytes(target.source_bucket, target.source_key)
        encoded = await self._render(source_bytes)
        self._logger.debug(
            f"Rendered {encoded.format} derivative ({len(encoded.body)} bytes)", log_context
        )
        return await self._store.put_bytes(
            target.destination_key, encoded.body, encoded.content_type
        )

    @with_error_handling(ImageProcessingError)
    async def _render(self, source_bytes: bytes) -> EncodedImage:
        image = decode_image(source_bytes)
        source_format = image.format
        return encode_image(self.variant.apply(image), source_format)
