"""Protocol definitions for dependency injection and testability.

The AWS protocols describe the subset of the aioboto3 low-level clients
the pipeline uses; every call is awaited.
"""

from typing import Any, Dict, Protocol


class S3ClientProtocol(Protocol):
    """Protocol for async S3 client operations."""

    async def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    async def put_object(self, Bucket: str, Key: str, Body: bytes, **kwargs: Any) -> Dict[str, Any]:
        """Put object to S3."""
        ...

    async def copy_object(
        self, Bucket: str, Key: str, CopySource: Dict[str, str], **kwargs: Any
    ) -> Dict[str, Any]:
        """Server-side copy of an object."""
        ...

    def get_paginator(self, operation_name: str) -> Any:
        """Get paginator for S3 operations."""
        ...

    async def generate_presigned_url(
        self, ClientMethod: str, Params: Dict[str, Any], ExpiresIn: int
    ) -> str:
        """Create a time-limited URL for a client method."""
        ...


class DynamoDBClientProtocol(Protocol):
    """Protocol for async DynamoDB client operations."""

    async def get_item(self, TableName: str, Key: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        ...

    async def put_item(self, TableName: str, Item: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        ...


class SQSClientProtocol(Protocol):
    """Protocol for async SQS client operations."""

    async def send_message(
        self, QueueUrl: str, MessageBody: str, **kwargs: Any
    ) -> Dict[str, Any]:
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class DerivativeProducer(Protocol):
    """Capability shared by every format processor."""

    format: str

    async def produce_derivative(self, source_url: str, item_id: str) -> str:
        """Produce and commit one derivative; return its S3 URL."""
        ...
