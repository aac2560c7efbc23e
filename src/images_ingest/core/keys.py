"""Identity scheme and S3 key/URL conventions.

Originals live at ``<itemId>/<fileName>``, derivatives at
``<itemId>/<imageId>_<format><extension>`` and every item has a zero-byte
``<itemId>/`` folder marker.
"""

import posixpath
import uuid
from typing import NamedTuple, Tuple
from urllib.parse import quote, unquote, urlsplit

from .exceptions import InvalidS3UrlError

DEFAULT_EXTENSION = ".jpg"


class OriginalIdentity(NamedTuple):
    image_id: str
    object_key: str
    file_name: str


class DerivativeTarget(NamedTuple):
    source_bucket: str
    source_key: str
    image_id: str
    destination_key: str
    record_image_id: str


def folder_key(item_id: str) -> str:
    return f"{item_id.rstrip('/')}/"


def build_original_identity(item_id: str, photo_url: str) -> OriginalIdentity:
    """
    Derive the registry identity and S3 key of an original from its source URL.

    Args:
        item_id: Owning item
        photo_url: Source URL of the photo

    Returns:
        (image_id, object_key, file_name); file_name is a fresh opaque id
        when the URL path has no last component.
    """
    path = unquote(urlsplit(photo_url).path)
    file_name = posixpath.basename(path)
    if not file_name.strip():
        file_name = uuid.uuid4().hex

    image_id = posixpath.splitext(file_name)[0]
    object_key = f"{folder_key(item_id)}{file_name}"
    return OriginalIdentity(image_id, object_key, file_name)


def build_s3_url(bucket: str, key: str) -> str:
    """Canonical virtual-hosted URL; segments are percent-encoded, '/' kept."""
    return f"https://{bucket}.s3.amazonaws.com/{quote(key, safe='/')}"


def parse_s3_url(url: str) -> Tuple[str, str]:
    """
    Split a virtual-hosted S3 URL into (bucket, key).

    Raises:
        InvalidS3UrlError: If either part is blank
    """
    parts = urlsplit(url.strip())
    bucket = (parts.hostname or "").split(".")[0]
    key = unquote(parts.path).lstrip("/")

    if not bucket.strip() or not key.strip():
        raise InvalidS3UrlError(f"Invalid S3 URL provided: {url!r}")

    return bucket, key


def extract_image_info(key: str) -> Tuple[str, str]:
    """Return (image_id, extension) for an object key, defaulting the extension to .jpg."""
    file_name = posixpath.basename(key)
    stem, extension = posixpath.splitext(file_name)
    if not extension.strip():
        extension = DEFAULT_EXTENSION
    if not stem.strip():
        stem = uuid.uuid4().hex
    return stem, extension


def derivative_image_id(image_id: str, format_tag: str) -> str:
    return f"{image_id}_{format_tag.upper()}"


def plan_derivative(source_url: str, item_id: str, format_tag: str) -> DerivativeTarget:
    """Resolve where the ``format_tag`` derivative of ``source_url`` is stored and registered."""
    source_bucket, source_key = parse_s3_url(source_url)
    image_id, extension = extract_image_info(source_key)
    destination_key = f"{item_id}/{image_id}_{format_tag}{extension}"
    return DerivativeTarget(
        source_bucket=source_bucket,
        source_key=source_key,
        image_id=image_id,
        destination_key=destination_key,
        record_image_id=derivative_image_id(image_id, format_tag),
    )
