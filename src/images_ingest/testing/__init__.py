"""Testing utilities and fakes for the images ingest pipeline."""

from .fakes import (
    FakeS3Client,
    FakeDynamoDBClient,
    FakeSQSClient,
    FakeLogger,
    FakeAwsEnvironment,
    S3Object,
    S3Bucket,
    create_fake_http_client,
    create_test_image,
    setup_test_aws_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeDynamoDBClient",
    "FakeSQSClient",
    "FakeLogger",
    "FakeAwsEnvironment",
    "S3Object",
    "S3Bucket",
    "create_fake_http_client",
    "create_test_image",
    "setup_test_aws_environment",
]
