"""Core utilities and shared components for the images ingest pipeline."""

from .logging_config import (
    enable_debug_logging,
    get_logger,
    setup_logger,
)
from .exceptions import (
    ImagesIngestError,
    ConfigurationError,
    RequestValidationError,
    DownloadError,
    S3Error,
    RegistryError,
    EventPublishError,
    ImageProcessingError,
    InvalidS3UrlError,
    PhotoIngestionError,
)
from .models import (
    ORIGINAL_FORMAT,
    DispatchResult,
    DispatchStatus,
    ImageRecord,
    IngestedImage,
    IngestionRequest,
    IngestionResult,
    PipelineConfig,
    WorkItem,
)

__all__ = [
    "PipelineConfig",
    "ImageRecord",
    "WorkItem",
    "IngestionRequest",
    "IngestedImage",
    "IngestionResult",
    "DispatchResult",
    "DispatchStatus",
    "ORIGINAL_FORMAT",
    "setup_logger",
    "get_logger",
    "enable_debug_logging",
    "ImagesIngestError",
    "ConfigurationError",
    "RequestValidationError",
    "DownloadError",
    "S3Error",
    "RegistryError",
    "EventPublishError",
    "ImageProcessingError",
    "InvalidS3UrlError",
    "PhotoIngestionError",
]
