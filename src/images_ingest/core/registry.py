"""DynamoDB-backed image registry."""

from typing import Any, Dict, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from .error_handling import with_error_handling
from .exceptions import RegistryError
from .models import ORIGINAL_FORMAT, ImageRecord
from .protocols import DynamoDBClientProtocol

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_item(record: ImageRecord) -> Dict[str, Any]:
    plain = record.model_dump(by_alias=True, exclude_none=True)
    return {name: _serializer.serialize(value) for name, value in plain.items()}


def _from_item(item: Dict[str, Any]) -> ImageRecord:
    plain = {name: _deserializer.deserialize(value) for name, value in item.items()}
    return ImageRecord.model_validate(plain)


class ImageRegistry:
    """Key-value table mapping ``ImageId`` to its image record.

    Writes are single-key puts without conditions: concurrent writers to
    the same ``ImageId`` race and the last write wins.
    """

    def __init__(self, dynamodb_client: DynamoDBClientProtocol, table_name: str):
        self._dynamodb = dynamodb_client
        self._table_name = table_name

    @property
    def table_name(self) -> str:
        return self._table_name

    @with_error_handling(RegistryError)
    async def get_record(self, image_id: str, projected: bool = False) -> Optional[ImageRecord]:
        """Fetch the record for ``image_id``; ``projected`` skips the url attribute."""
        kwargs: Dict[str, Any] = {}
        if projected:
            kwargs["ProjectionExpression"] = "ItemId, ImageId, #fmt"
            kwargs["ExpressionAttributeNames"] = {"#fmt": "format"}

        response = await self._dynamodb.get_item(
            TableName=self._table_name,
            Key={"ImageId": _serializer.serialize(image_id)},
            **kwargs,
        )
        item = response.get("Item")
        if not item:
            return None
        return _from_item(item)

    async def is_original_registered(self, item_id: str, image_id: str) -> bool:
        """True when ``image_id`` is already registered as an ORIGINAL of ``item_id``."""
        record = await self.get_record(image_id, projected=True)
        return record is not None and record.is_original_of(item_id)

    @with_error_handling(RegistryError)
    async def put_record(self, record: ImageRecord) -> None:
        await self._dynamodb.put_item(TableName=self._table_name, Item=_to_item(record))

    async def register_original(self, item_id: str, image_id: str, url: str) -> ImageRecord:
        record = ImageRecord(item_id=item_id, image_id=image_id, format=ORIGINAL_FORMAT, url=url)
        await self.put_record(record)
        return record
