"""Main module for the images ingest CLI."""

import sys
import json
import asyncio
import argparse
from typing import Any, Dict, List, Optional

from .core import ImagesIngestError, IngestionRequest, PipelineConfig, WorkItem, get_logger
from .core.factories import open_pipeline
from .core.logging_config import enable_debug_logging

VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="images-ingest",
        description="Images Ingest - S3 photo ingestion with queued derivative generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ingest two photos for an item and queue their derivatives
  images-ingest ingest --item-id car-42 https://cdn.example/a/front.jpg https://cdn.example/a/back.jpg

  # Produce one derivative directly, bypassing the queue
  images-ingest transform --item-id car-42 \\
                          --source-url https://bucket.s3.amazonaws.com/car-42/front.jpg --format 100px

  # Presigned links for everything stored under an item
  images-ingest list --item-id car-42
        """,
    )
    parser.add_argument("--bucket", help="S3 bucket (default: $IMAGES_BUCKET)")
    parser.add_argument("--table", help="DynamoDB registry table (default: $IMAGES_TABLE)")
    parser.add_argument("--queue-url", help="SQS queue URL (default: $EVENTS_QUEUE_URL)")
    parser.add_argument("--region", help="AWS region (default: $AWS_REGION)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    ingest_parser = subparsers.add_parser("ingest", help="Ingest photo URLs for an item")
    ingest_parser.add_argument("--item-id", required=True, help="Owning item id")
    ingest_parser.add_argument("photo_urls", nargs="+", help="Source photo URLs")

    transform_parser = subparsers.add_parser(
        "transform", help="Produce one derivative of a stored original"
    )
    transform_parser.add_argument("--item-id", required=True, help="Owning item id")
    transform_parser.add_argument("--source-url", required=True, help="S3 URL of the original")
    transform_parser.add_argument("--format", required=True, help="Derivative format tag")

    list_parser = subparsers.add_parser("list", help="Presigned links for an item")
    list_parser.add_argument("--item-id", required=True, help="Owning item id")

    subparsers.add_parser("version", help="Show version information")

    return parser


def resolve_config(args: argparse.Namespace) -> PipelineConfig:
    """Environment configuration with command-line overrides applied."""
    config = PipelineConfig.from_env()
    overrides: Dict[str, Any] = {}
    if args.bucket:
        overrides["bucket"] = args.bucket
    if args.table:
        overrides["images_table"] = args.table
    if args.queue_url:
        overrides["queue_url"] = args.queue_url
    if args.region:
        overrides["region_name"] = args.region
    if args.debug:
        overrides["debug"] = True
    return config.model_copy(update=overrides)


async def run_command(args: argparse.Namespace, config: PipelineConfig) -> Dict[str, Any]:
    if args.command == "ingest":
        config.require_queue_url()

    async with open_pipeline(config) as pipeline:
        if args.command == "ingest":
            request = IngestionRequest(item_id=args.item_id, photo_urls=args.photo_urls)
            result = await pipeline.orchestrator.ingest(request)
            return result.model_dump(by_alias=True)

        if args.command == "transform":
            work_item = WorkItem(
                item_id=args.item_id, source_url=args.source_url, format=args.format
            )
            result = await pipeline.dispatcher.dispatch(work_item)
            return {
                "status": result.status.value,
                "format": result.format,
                "outputUrl": result.output_url,
                "reason": result.reason,
            }

        urls = await pipeline.store.presigned_item_urls(args.item_id, config.presigned_url_ttl)
        return {"ItemId": args.item_id, "Urls": urls}


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the command-line interface of Images Ingest.

    Resolves the configuration once, opens the AWS and HTTP clients for
    the duration of the command and prints the result as JSON.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print("Images Ingest CLI")
        print(f"Version {VERSION}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logger = get_logger("images-ingest.cli")
    try:
        config = resolve_config(args)
        if config.debug:
            enable_debug_logging()
        output = asyncio.run(run_command(args, config))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        sys.exit(130)
    except ImagesIngestError as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        sys.exit(1)

    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
