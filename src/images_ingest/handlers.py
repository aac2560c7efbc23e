"""AWS Lambda entry points.

The pipeline core is asynchronous; these synchronous handlers are the
only place that adapts it, with ``asyncio.run`` per invocation.
"""

import asyncio
import base64
import binascii
import functools
import json
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from .core.events import records_from_event
from .core.exceptions import ImagesIngestError, RequestValidationError
from .core.factories import open_pipeline
from .core.logging_config import enable_debug_logging
from .core.models import DispatchStatus, IngestionRequest, PipelineConfig, WorkItem
from .core.observability import create_logger
from .core.protocols import LoggerProtocol
from .core.services import IngestionOrchestrator, TransformationDispatcher
from .core.storage import ObjectStore

JSON_HEADERS = {"Content-Type": "application/json"}


@functools.lru_cache(maxsize=1)
def load_config() -> PipelineConfig:
    """Resolve the configuration once per process."""
    config = PipelineConfig.from_env()
    if config.debug:
        enable_debug_logging()
    return config


def build_response(status_code: int, payload: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    response: Dict[str, Any] = {"statusCode": status_code, "headers": dict(JSON_HEADERS)}
    if payload is not None:
        response["body"] = json.dumps(payload)
    return response


def _error(status_code: int, message: str) -> Dict[str, Any]:
    return build_response(status_code, {"Error": message})


def _decode_body(event: Mapping[str, Any]) -> str:
    body = event.get("body") or ""
    if event.get("isBase64Encoded") and body:
        return base64.b64decode(body).decode("utf-8")
    return body


def parse_ingestion_request(event: Optional[Mapping[str, Any]]) -> IngestionRequest:
    """
    Parse an API Gateway proxy event into an ingestion request.

    Raises:
        RequestValidationError: With the message reported to the caller
    """
    if event is None:
        raise RequestValidationError("Request payload is required.")

    try:
        payload = json.loads(_decode_body(event))
        if payload is None:
            raise RequestValidationError("itemId and photoUrls are required.")
        request = IngestionRequest.model_validate(payload)
    except (ValueError, binascii.Error, ValidationError) as exc:
        raise RequestValidationError("Invalid request payload.") from exc

    IngestionOrchestrator.validate(request)
    return request


async def handle_ingestion(
    orchestrator: IngestionOrchestrator,
    event: Optional[Mapping[str, Any]],
    logger: LoggerProtocol,
) -> Dict[str, Any]:
    """Map an ingestion call onto 201 / 400 / 500 responses."""
    try:
        request = parse_ingestion_request(event)
    except RequestValidationError as exc:
        logger.warning(f"Rejected ingestion request: {exc}")
        return _error(400, str(exc))

    try:
        result = await orchestrator.ingest(request)
    except RequestValidationError as exc:
        return _error(400, str(exc))
    except ImagesIngestError as exc:
        logger.error(f"Ingestion failed for ItemId {request.item_id}: {exc}")
        return _error(500, str(exc))

    return build_response(201, result.model_dump(by_alias=True))


async def handle_transform_batch(
    dispatcher: TransformationDispatcher,
    event: Mapping[str, Any],
    logger: LoggerProtocol,
) -> Dict[str, Any]:
    """
    Dispatch every SQS record of a batch.

    Failed records are reported as partial batch failures so that only
    they are redelivered; dropped records are acknowledged.
    """
    records = records_from_event(event)
    logger.info(f"Received {len(records)} records from SQS.")

    failures = []
    for record in records:
        message_id = record.get("messageId", "")
        work_item = WorkItem.from_sqs_record(record)
        try:
            result = await dispatcher.dispatch(work_item, message_id=message_id)
        except Exception as exc:
            logger.error(f"Error processing message {message_id}: {exc}")
            failures.append({"itemIdentifier": message_id})
            continue
        if result.status is DispatchStatus.DROPPED:
            logger.info(f"Dropped message {message_id}: {result.reason}")

    return {"batchItemFailures": failures}


def resolve_item_id(event: Mapping[str, Any]) -> Optional[str]:
    """ItemId from path parameters, the proxy path, or the last path segment."""
    path_parameters = event.get("pathParameters") or {}

    item_id = (path_parameters.get("itemId") or "").strip()
    if item_id:
        return item_id

    proxy = (path_parameters.get("proxy") or "").strip()
    if proxy:
        segments = [segment for segment in proxy.split("/") if segment]
        return segments[-1] if segments else None

    segments = [segment for segment in (event.get("path") or "").split("/") if segment]
    return segments[-1] if segments else None


async def handle_list_images(
    store: ObjectStore,
    event: Mapping[str, Any],
    ttl_seconds: int,
    logger: LoggerProtocol,
) -> Dict[str, Any]:
    """Return presigned links to every object stored for an item."""
    item_id = resolve_item_id(event or {})
    if not item_id:
        return _error(400, "ItemId is required in the path.")

    try:
        urls = await store.presigned_item_urls(item_id, ttl_seconds)
    except ImagesIngestError as exc:
        logger.error(f"Failed to generate presigned URLs for ItemId {item_id}: {exc}")
        return _error(500, "Failed to load images.")

    return build_response(200, {"ItemId": item_id, "Urls": urls})


async def _ingest(event: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    config = load_config()
    logger = create_logger("handlers")
    try:
        config.require_queue_url()
    except ImagesIngestError as exc:
        logger.error(str(exc))
        return _error(500, "Ingestion is not configured.")
    async with open_pipeline(config) as pipeline:
        return await handle_ingestion(pipeline.orchestrator, event, logger)


async def _transform(event: Mapping[str, Any]) -> Dict[str, Any]:
    config = load_config()
    async with open_pipeline(config) as pipeline:
        return await handle_transform_batch(pipeline.dispatcher, event, create_logger("handlers"))


async def _list_images(event: Mapping[str, Any]) -> Dict[str, Any]:
    config = load_config()
    async with open_pipeline(config) as pipeline:
        return await handle_list_images(
            pipeline.store, event, config.presigned_url_ttl, create_logger("handlers")
        )


def ingest_handler(event, context=None):
    """POST entry point: ingest photo URLs for an item."""
    return asyncio.run(_ingest(event))


def transform_handler(event, context=None):
    """SQS entry point: produce derivatives for a batch of work items."""
    return asyncio.run(_transform(event))


def list_images_handler(event, context=None):
    """GET entry point: presigned links for an item's stored images."""
    return asyncio.run(_list_images(event))
