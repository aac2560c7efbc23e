# src/images_ingest/core/error_handling.py

import functools
import logging
from typing import Type

from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, UnidentifiedImageError

from .exceptions import ImagesIngestError, ImageProcessingError


def with_error_handling(error_cls: Type[ImagesIngestError] = ImagesIngestError):
    """
    Decorator for coroutine functions that talk to AWS or decode images.

    botocore failures are re-raised as ``error_cls``; Pillow decode failures
    as ImageProcessingError. Pipeline errors and anything else propagate
    unchanged after being logged.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__ + '.' + func.__qualname__)
            try:
                return await func(*args, **kwargs)
            except ImagesIngestError:
                raise
            except (ClientError, BotoCoreError) as e:
                logger.error(f"AWS call failed in '{func.__qualname__}': {e}", exc_info=True)
                raise error_cls(f"{func.__qualname__} failed: {e}") from e
            except (UnidentifiedImageError, Image.DecompressionBombError) as e:
                logger.error(f"Failed to decode image in '{func.__qualname__}': {e}", exc_info=True)
                raise ImageProcessingError(f"Failed to decode image in {func.__qualname__}: {e}") from e
            except Exception as e:
                logger.error(f"Error in '{func.__qualname__}': {e}", exc_info=True)
                raise
        return wrapper
    return decorator


class BatchOperationContextManager:
    """
    Context manager that logs the lifecycle of a batch operation.

    Exceptions raised inside the block are logged and always propagate.
    """
    def __init__(self, operation_name="Batch Operation", logger=None):
        self.operation_name = operation_name
        self.completed_items = []
        self.skipped_items = []
        self.logger = logger or logging.getLogger(self.__class__.__module__ + '.' + self.__class__.__name__)

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(
                f"{self.operation_name} aborted after {len(self.completed_items)} committed item(s): {exc_val}"
            )
            for item_identifier in self.completed_items:
                self.logger.warning(f"  Left committed: '{item_identifier}'")
        else:
            self.logger.info(
                f"{self.operation_name} completed: {len(self.completed_items)} processed, "
                f"{len(self.skipped_items)} skipped."
            )
        return False

    def add_completed(self, item_identifier: str):
        """Record an item whose side effects are committed."""
        self.completed_items.append(item_identifier)

    def add_skipped(self, item_identifier: str):
        """Record an item that needed no work."""
        self.skipped_items.append(item_identifier)
        self.logger.debug(f"Skipped '{item_identifier}' in {self.operation_name}")
