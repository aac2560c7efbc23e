"""Factories for creating configured pipeline components."""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import aioboto3
import httpx

from ..processors import DERIVATIVE_FORMATS, build_processors
from .downloader import ImageDownloader
from .events import WorkItemPublisher
from .exceptions import ConfigurationError
from .models import PipelineConfig
from .observability import create_logger
from .protocols import (
    DynamoDBClientProtocol,
    LoggerProtocol,
    S3ClientProtocol,
    SQSClientProtocol,
)
from .registry import ImageRegistry
from .services import IngestionOrchestrator, TransformationDispatcher
from .storage import ObjectStore


@dataclass
class Pipeline:
    """Every entry point of the pipeline, sharing one set of clients."""

    config: PipelineConfig
    store: ObjectStore
    registry: ImageRegistry
    orchestrator: IngestionOrchestrator
    dispatcher: TransformationDispatcher


class ProcessingPipelineFactory:
    """Factory for creating the complete pipeline from already-open clients."""

    @staticmethod
    def create_pipeline(
        config: PipelineConfig,
        s3_client: S3ClientProtocol,
        dynamodb_client: DynamoDBClientProtocol,
        sqs_client: SQSClientProtocol,
        http_client: httpx.AsyncClient,
        logger: Optional[LoggerProtocol] = None,
    ) -> Pipeline:
        """Create a fully configured pipeline."""
        if not config.bucket:
            raise ConfigurationError("An S3 bucket is required")
        if not config.images_table:
            raise ConfigurationError("A registry table name is required")

        store = ObjectStore(s3_client, config.bucket)
        registry = ImageRegistry(dynamodb_client, config.images_table)

        orchestrator = IngestionOrchestrator(
            store=store,
            registry=registry,
            publisher=WorkItemPublisher(sqs_client, config.queue_url),
            downloader=ImageDownloader(http_client, config.download_timeout),
            formats=DERIVATIVE_FORMATS,
            logger=logger or create_logger("ingestion"),
        )
        dispatcher = TransformationDispatcher(
            processors=build_processors(store, registry, logger),
            logger=logger or create_logger("dispatcher"),
        )

        return Pipeline(
            config=config,
            store=store,
            registry=registry,
            orchestrator=orchestrator,
            dispatcher=dispatcher,
        )


@asynccontextmanager
async def open_pipeline(
    config: PipelineConfig, logger: Optional[LoggerProtocol] = None
) -> AsyncIterator[Pipeline]:
    """Open AWS and HTTP clients for the duration of one invocation."""
    session = aioboto3.Session(region_name=config.region_name)
    async with session.client("s3") as s3_client, session.client(
        "dynamodb"
    ) as dynamodb_client, session.client("sqs") as sqs_client, httpx.AsyncClient(
        timeout=config.download_timeout
    ) as http_client:
        yield ProcessingPipelineFactory.create_pipeline(
            config, s3_client, dynamodb_client, sqs_client, http_client, logger
        )
