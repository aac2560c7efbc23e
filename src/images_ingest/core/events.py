"""SQS event channel carrying transformation work items."""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping

from .error_handling import with_error_handling
from .exceptions import EventPublishError
from .models import WorkItem
from .protocols import SQSClientProtocol


class WorkItemPublisher:
    """Publishes work items; attributes mirror the body so consumers can route on them."""

    def __init__(self, sqs_client: SQSClientProtocol, queue_url: str):
        self._sqs = sqs_client
        self._queue_url = queue_url

    @with_error_handling(EventPublishError)
    async def publish(self, work_item: WorkItem) -> str:
        """Send one work item and return the SQS message id."""
        response = await self._sqs.send_message(
            QueueUrl=self._queue_url,
            MessageBody=work_item.to_message_body(),
            MessageAttributes=work_item.to_message_attributes(),
        )
        return response.get("MessageId", "")

    async def fan_out(self, item_id: str, source_url: str, formats: Iterable[str]) -> List[str]:
        """
        Publish one work item per format concurrently.

        Every publish is awaited before returning; the first failure is
        raised once all of them have finished.
        """
        work_items = [
            WorkItem(item_id=item_id, source_url=source_url, format=format_tag)
            for format_tag in formats
        ]
        results = await asyncio.gather(
            *(self.publish(work_item) for work_item in work_items),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)


def records_from_event(event: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """SQS records of a Lambda event, tolerating an empty or missing list."""
    return list(event.get("Records") or [])
