"""Fake implementations for testing purposes."""

import io
import time
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

import httpx
from botocore.exceptions import ClientError
from PIL import Image


def _client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@dataclass
class S3Object:
    """Fake S3 object for testing."""

    key: str
    body: bytes
    content_type: str = "binary/octet-stream"
    size: int = 0

    def __post_init__(self):
        if self.size == 0:
            self.size = len(self.body)


@dataclass
class S3Bucket:
    """Fake S3 bucket for testing."""

    name: str
    objects: Dict[str, S3Object] = field(default_factory=dict)

    def add_object(
        self, key: str, body: bytes, content_type: str = "binary/octet-stream"
    ) -> None:
        """Add object to bucket."""
        self.objects[key] = S3Object(key=key, body=body, content_type=content_type)

    def get_object(self, key: str) -> Optional[S3Object]:
        """Get object from bucket."""
        return self.objects.get(key)

    def list_objects(self, prefix: str = "") -> List[S3Object]:
        """List objects with optional prefix filter."""
        return [obj for key, obj in sorted(self.objects.items()) if key.startswith(prefix)]


class FakeStreamingBody:
    """Async response body, mirroring aiobotocore's StreamingBody."""

    def __init__(self, data: bytes):
        self._data = data

    async def __aenter__(self) -> "FakeStreamingBody":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def read(self) -> bytes:
        return self._data


class FakeFailureMixin:
    """Shared failure switch for the fake AWS clients."""

    def __init__(self):
        self.operation_count = 0
        self.should_fail = False
        self.failure_message = "Simulated failure"
        self.failure_code = "InternalError"

    def set_failure_mode(
        self, should_fail: bool, message: str = "Simulated failure", code: str = "InternalError"
    ) -> None:
        """Configure failure mode for testing error handling."""
        self.should_fail = should_fail
        self.failure_message = message
        self.failure_code = code

    def _check(self, operation: str) -> None:
        self.operation_count += 1
        if self.should_fail:
            raise _client_error(self.failure_code, self.failure_message, operation)


class FakeS3Client(FakeFailureMixin):
    """Fake async S3 client for testing."""

    def __init__(self):
        super().__init__()
        self.buckets: Dict[str, S3Bucket] = {}
        self.copies: List[Tuple[str, str, str, str]] = []

    def create_bucket(self, name: str) -> S3Bucket:
        """Create a new bucket."""
        bucket = S3Bucket(name=name)
        self.buckets[name] = bucket
        return bucket

    def get_bucket(self, name: str) -> Optional[S3Bucket]:
        """Get bucket by name."""
        return self.buckets.get(name)

    def _bucket(self, name: str, operation: str) -> S3Bucket:
        bucket = self.buckets.get(name)
        if not bucket:
            raise _client_error("NoSuchBucket", f"Bucket {name} not found", operation)
        return bucket

    async def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        self._check("GetObject")
        obj = self._bucket(Bucket, "GetObject").get_object(Key)
        if not obj:
            raise _client_error("NoSuchKey", f"Object {Key} not found in bucket {Bucket}", "GetObject")

        return {
            "Body": FakeStreamingBody(obj.body),
            "ContentType": obj.content_type,
            "ContentLength": obj.size,
        }

    async def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str = "binary/octet-stream", **kwargs: Any
    ) -> Dict[str, Any]:
        """Put object to S3."""
        self._check("PutObject")
        self._bucket(Bucket, "PutObject").add_object(Key, Body, ContentType)
        return {
            "ETag": f'"fake-etag-{Key}"',
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }

    async def copy_object(
        self, Bucket: str, Key: str, CopySource: Dict[str, str], **kwargs: Any
    ) -> Dict[str, Any]:
        """Server-side copy between buckets."""
        self._check("CopyObject")
        source = self._bucket(CopySource["Bucket"], "CopyObject").get_object(CopySource["Key"])
        if not source:
            raise _client_error("NoSuchKey", f"Object {CopySource['Key']} not found", "CopyObject")

        self._bucket(Bucket, "CopyObject").add_object(Key, source.body, source.content_type)
        self.copies.append((CopySource["Bucket"], CopySource["Key"], Bucket, Key))
        return {"CopyObjectResult": {"ETag": f'"fake-etag-{Key}"'}}

    def get_paginator(self, operation_name: str) -> "FakeS3Paginator":
        """Get paginator for S3 operations."""
        return FakeS3Paginator(self, operation_name)

    async def generate_presigned_url(
        self, ClientMethod: str, Params: Dict[str, Any], ExpiresIn: int = 3600
    ) -> str:
        return (
            f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}"
            f"?X-Amz-Expires={ExpiresIn}&X-Amz-Signature=fake"
        )


class FakeS3Paginator:
    """Fake async S3 paginator for testing."""

    def __init__(self, s3_client: FakeS3Client, operation_name: str, page_size: int = 2):
        self.s3_client = s3_client
        self.operation_name = operation_name
        self.page_size = page_size

    async def paginate(self, Bucket: str, Prefix: str = "") -> AsyncIterator[Dict[str, Any]]:
        """Yield pages of ``page_size`` objects."""
        self.s3_client._check("ListObjectsV2")
        objects = self.s3_client._bucket(Bucket, "ListObjectsV2").list_objects(Prefix)

        for start in range(0, max(len(objects), 1), self.page_size):
            page = objects[start : start + self.page_size]
            yield {
                "Contents": [{"Key": obj.key, "Size": obj.size} for obj in page],
                "IsTruncated": start + self.page_size < len(objects),
            }


class FakeDynamoDBClient(FakeFailureMixin):
    """Fake async DynamoDB client storing items by their ``ImageId`` key."""

    def __init__(self):
        super().__init__()
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.put_count = 0

    def create_table(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self.tables.setdefault(name, {})

    def _table(self, name: str, operation: str) -> Dict[str, Dict[str, Any]]:
        if name not in self.tables:
            raise _client_error("ResourceNotFoundException", f"Table {name} not found", operation)
        return self.tables[name]

    async def get_item(self, TableName: str, Key: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self._check("GetItem")
        item = self._table(TableName, "GetItem").get(Key["ImageId"]["S"])
        if item is None:
            return {}

        projection = kwargs.get("ProjectionExpression")
        if projection:
            names = kwargs.get("ExpressionAttributeNames", {})
            wanted = {names.get(part.strip(), part.strip()) for part in projection.split(",")}
            item = {name: value for name, value in item.items() if name in wanted}
        return {"Item": dict(item)}

    async def put_item(self, TableName: str, Item: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self._check("PutItem")
        self._table(TableName, "PutItem")[Item["ImageId"]["S"]] = dict(Item)
        self.put_count += 1
        return {}

    def plain_items(self, table_name: str) -> Dict[str, Dict[str, str]]:
        """Table contents with string attribute values unwrapped."""
        return {
            key: {name: value["S"] for name, value in item.items()}
            for key, item in self.tables.get(table_name, {}).items()
        }


class FakeSQSClient(FakeFailureMixin):
    """Fake async SQS client recording sent messages."""

    def __init__(self):
        super().__init__()
        self.messages: List[Dict[str, Any]] = []

    async def send_message(self, QueueUrl: str, MessageBody: str, **kwargs: Any) -> Dict[str, Any]:
        self._check("SendMessage")
        message_id = f"msg-{len(self.messages) + 1}"
        self.messages.append(
            {
                "QueueUrl": QueueUrl,
                "MessageId": message_id,
                "MessageBody": MessageBody,
                "MessageAttributes": kwargs.get("MessageAttributes", {}),
            }
        )
        return {"MessageId": message_id}

    def as_lambda_event(self) -> Dict[str, Any]:
        """Render recorded messages the way Lambda delivers an SQS batch."""
        records = []
        for message in self.messages:
            records.append(
                {
                    "messageId": message["MessageId"],
                    "body": message["MessageBody"],
                    "messageAttributes": {
                        name: {"stringValue": value["StringValue"], "dataType": value["DataType"]}
                        for name, value in message["MessageAttributes"].items()
                    },
                }
            )
        return {"Records": records}


class FakeLogger:
    """Fake logger for testing with support for LogContext."""

    def __init__(self, name: str = "test_logger"):
        self.name = name
        self.logs: List[Dict[str, Any]] = []

    def _log(
        self, level: str, message: str, context: Any = None, **kwargs: Any
    ) -> None:
        log_entry = {
            "level": level,
            "message": message,
            "timestamp": time.time(),
            **kwargs,
        }

        if context is not None:
            if hasattr(context, "correlation_id"):
                log_entry["correlation_id"] = context.correlation_id
            if hasattr(context, "operation"):
                log_entry["operation"] = context.operation
            if hasattr(context, "metadata"):
                log_entry.update(context.metadata)

        self.logs.append(log_entry)

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        self._log("DEBUG", message, context, **kwargs)

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        self._log("INFO", message, context, **kwargs)

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        self._log("WARNING", message, context, **kwargs)

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        self._log("ERROR", message, context, **kwargs)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get logged messages, optionally filtered by level."""
        if level:
            return [log for log in self.logs if log["level"] == level]
        return self.logs.copy()


def create_test_image(
    width: int = 100, height: int = 100, format: str = "JPEG", mode: str = "RGB"
) -> bytes:
    """Create a test image in memory with a simple two-color pattern."""
    image = Image.new("RGB", (width, height), color="red")

    for x in range(0, width, 20):
        for y in range(0, height, 20):
            if (x + y) % 40 == 0:
                block = (x, y, min(x + 10, width), min(y + 10, height))
                image.paste((0, 0, 255), block)

    if mode != "RGB":
        image = image.convert(mode)

    img_bytes = io.BytesIO()
    save_kwargs = {"quality": 95} if format == "JPEG" else {}
    image.save(img_bytes, format=format, **save_kwargs)
    return img_bytes.getvalue()


Route = Tuple[int, bytes, str]


def create_fake_http_client(
    routes: Dict[str, Route],
    on_request: Optional[Callable[[httpx.Request], None]] = None,
) -> httpx.AsyncClient:
    """
    httpx client answering from a URL -> (status, body, content type) table.

    Unknown URLs answer 404.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if on_request:
            on_request(request)
        status, body, content_type = routes.get(str(request.url), (404, b"not found", "text/plain"))
        return httpx.Response(status, content=body, headers={"Content-Type": content_type})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@dataclass
class FakeAwsEnvironment:
    s3: FakeS3Client
    dynamodb: FakeDynamoDBClient
    sqs: FakeSQSClient
    bucket: str
    table: str
    queue_url: str


def setup_test_aws_environment(
    bucket: str = "test-images",
    table: str = "Images",
    queue_url: str = "https://sqs.test.amazonaws.com/000000000000/image-events",
) -> FakeAwsEnvironment:
    """Set up fake S3, DynamoDB and SQS with an empty bucket and registry table."""
    s3_client = FakeS3Client()
    s3_client.create_bucket(bucket)

    dynamodb_client = FakeDynamoDBClient()
    dynamodb_client.create_table(table)

    return FakeAwsEnvironment(
        s3=s3_client,
        dynamodb=dynamodb_client,
        sqs=FakeSQSClient(),
        bucket=bucket,
        table=table,
        queue_url=queue_url,
    )
