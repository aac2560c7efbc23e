"""Custom exceptions for the images ingest pipeline."""


class ImagesIngestError(Exception):
    """Base exception for all images ingest errors."""


class ConfigurationError(ImagesIngestError):
    """Error raised for invalid configuration options."""


class RequestValidationError(ImagesIngestError):
    """Error raised when an ingestion request is malformed."""


class DownloadError(ImagesIngestError):
    """Error raised when a source image cannot be downloaded."""


class S3Error(ImagesIngestError):
    """Error raised for S3 related failures."""


class RegistryError(ImagesIngestError):
    """Error raised for DynamoDB registry failures."""


class EventPublishError(ImagesIngestError):
    """Error raised when a work item cannot be published to SQS."""


class ImageProcessingError(ImagesIngestError):
    """Error raised when decoding or transforming an image fails."""


class InvalidS3UrlError(ImageProcessingError):
    """Error raised when a source URL does not address an S3 object."""


class PhotoIngestionError(ImagesIngestError):
    """Error raised when one photo of an ingestion request fails.

    Photos processed before the failing one stay committed.
    """

    def __init__(self, photo_url: str):
        super().__init__(f"Failed processing image: {photo_url}")
        self.photo_url = photo_url
