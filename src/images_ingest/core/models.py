"""Shared data models for the images ingest pipeline."""

import json
import os
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConfigurationError

ORIGINAL_FORMAT = "ORIGINAL"


class PipelineConfig(BaseModel):
    """Configuration resolved once at process start and passed to every component."""

    bucket: str = "carimagesrepository2"
    images_table: str = "Images"
    queue_url: str = ""
    region_name: Optional[str] = None
    download_timeout: float = 30.0
    presigned_url_ttl: int = 900
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PipelineConfig":
        """
        Build the configuration from environment variables.

        Environment Variables:
            IMAGES_BUCKET: S3 bucket holding originals and derivatives
            IMAGES_TABLE: DynamoDB registry table
            EVENTS_QUEUE_URL: SQS queue receiving transformation work items
            AWS_REGION: Region for all AWS clients
            DOWNLOAD_TIMEOUT: Source download timeout in seconds
            PRESIGNED_URL_TTL: Lifetime of read-path links in seconds
            DEBUG: "1"/"true" enables debug logging
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        # Blank values fall back to the defaults, like a missing variable.
        for field_name, env_name in (
            ("bucket", "IMAGES_BUCKET"),
            ("images_table", "IMAGES_TABLE"),
            ("queue_url", "EVENTS_QUEUE_URL"),
            ("region_name", "AWS_REGION"),
        ):
            value = env.get(env_name, "").strip()
            if value:
                values[field_name] = value

        try:
            if env.get("DOWNLOAD_TIMEOUT", "").strip():
                values["download_timeout"] = float(env["DOWNLOAD_TIMEOUT"])
            if env.get("PRESIGNED_URL_TTL", "").strip():
                values["presigned_url_ttl"] = int(env["PRESIGNED_URL_TTL"])
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        values["debug"] = env.get("DEBUG", "").strip().lower() in ("1", "true", "yes")
        return cls(**values)

    def require_queue_url(self) -> str:
        """Ingestion publishes work items, so it cannot run without a queue."""
        if not self.queue_url.strip():
            raise ConfigurationError("EVENTS_QUEUE_URL is required for ingestion")
        return self.queue_url


class ImageRecord(BaseModel):
    """A registry row: one stored original or derivative."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: Optional[str] = Field(default=None, alias="ItemId")
    image_id: str = Field(alias="ImageId")
    format: Optional[str] = Field(default=None, alias="format")
    url: Optional[str] = Field(default=None, alias="url")

    def is_original_of(self, item_id: str) -> bool:
        """True when this row is the ORIGINAL of ``item_id``.

        Rows without a format predate format tagging and count as originals.
        """
        if self.item_id is None or self.item_id.lower() != item_id.lower():
            return False
        if self.format is None:
            return True
        return self.format.upper() == ORIGINAL_FORMAT


class WorkItem(BaseModel):
    """One queued instruction to produce one derivative for one original."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: Optional[str] = Field(default=None, alias="itemId")
    source_url: Optional[str] = Field(default=None, alias="s3Url")
    format: Optional[str] = Field(default=None, alias="format")

    def missing_fields(self) -> List[str]:
        """Names of required attributes that are absent or blank."""
        attributes = {"ItemId": self.item_id, "S3URL": self.source_url, "format": self.format}
        return [name for name, value in attributes.items() if not value or not value.strip()]

    def to_message_body(self) -> str:
        return json.dumps(
            {"itemId": self.item_id, "s3Url": self.source_url, "format": self.format}
        )

    def to_message_attributes(self) -> Dict[str, Dict[str, str]]:
        return {
            "ItemId": {"DataType": "String", "StringValue": self.item_id or ""},
            "S3URL": {"DataType": "String", "StringValue": self.source_url or ""},
            "format": {"DataType": "String", "StringValue": self.format or ""},
        }

    @classmethod
    def from_sqs_record(cls, record: Mapping[str, Any]) -> "WorkItem":
        """Build a work item from the message attributes of an SQS Lambda record.

        The body is ignored: routing is decided by attributes only.
        """
        attributes = record.get("messageAttributes") or {}

        def _string(name: str) -> Optional[str]:
            attribute = attributes.get(name) or {}
            return attribute.get("stringValue")

        return cls(item_id=_string("ItemId"), source_url=_string("S3URL"), format=_string("format"))


class IngestionRequest(BaseModel):
    """Body of an ingestion call."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: Optional[str] = Field(default=None, alias="itemId")
    photo_urls: Optional[List[Optional[str]]] = Field(default=None, alias="photoUrls")


class IngestedImage(BaseModel):
    """One newly ingested original, as reported back to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    image_id: str = Field(alias="imageId")
    file_name: str = Field(alias="fileName")
    s3_url: str = Field(alias="s3Url")


class IngestionResult(BaseModel):
    """Result of a successful ingestion call."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(default="Images ingested", alias="Message")
    items: List[IngestedImage] = Field(default_factory=list, alias="Items")


class DispatchStatus(Enum):
    """Terminal outcomes of a dispatched work item. Failures are raised instead."""

    PROCESSED = "processed"
    DROPPED = "dropped"


class DispatchResult(BaseModel):
    """Outcome of dispatching a single work item."""

    status: DispatchStatus
    format: Optional[str] = None
    output_url: Optional[str] = None
    reason: str = ""
