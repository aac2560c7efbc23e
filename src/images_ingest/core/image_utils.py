"""Image decoding, transformation and re-encoding utilities."""

import io
from typing import NamedTuple, Optional

from PIL import Image, ImageFilter

FALLBACK_FORMAT = "JPEG"
FALLBACK_CONTENT_TYPE = "image/jpeg"
JPEG_QUALITY = 95


class EncodedImage(NamedTuple):
    body: bytes
    content_type: str
    format: str


def decode_image(image_bytes: bytes) -> "Image.Image":
    """
    Decode image bytes, keeping the detected encoded format on ``image.format``.

    Raises:
        PIL.UnidentifiedImageError: If the bytes are not a known image format
    """
    image = Image.open(io.BytesIO(image_bytes))
    image.load()
    return image


def resize_to_fit(img: "Image.Image", size: int) -> "Image.Image":
    """
    Fit an image within a ``size`` x ``size`` box, preserving aspect ratio.

    Images already inside the box are returned unscaled.

    Args:
        img: PIL Image to resize
        size: Target box edge in pixels

    Returns:
        Resized copy of the image
    """
    if size <= 0:
        raise ValueError(f"Target size must be positive, got {size}")

    resized = img.copy()
    resized.thumbnail((size, size), Image.Resampling.LANCZOS)
    return resized


def gaussian_blur(img: "Image.Image", radius: float) -> "Image.Image":
    """Blur the whole image. Palette and bilevel images are expanded first."""
    if img.mode in ("P", "1"):
        has_alpha = img.mode == "P" and "transparency" in img.info
        img = img.convert("RGBA" if has_alpha else "RGB")
    return img.filter(ImageFilter.GaussianBlur(radius=radius))


def _can_encode(format_name: Optional[str]) -> bool:
    if not format_name:
        return False
    Image.init()
    return format_name.upper() in Image.SAVE


def encode_image(img: "Image.Image", source_format: Optional[str]) -> EncodedImage:
    """
    Re-encode an image using the encoder of its source format.

    Falls back to JPEG when the source format is unknown or Pillow
    has no encoder for it.

    Args:
        img: PIL Image to encode
        source_format: Pillow format name detected on the source ("PNG", "JPEG", ...)

    Returns:
        Encoded bytes with their content type
    """
    if _can_encode(source_format):
        format_name = source_format.upper()
        content_type = Image.MIME.get(format_name, FALLBACK_CONTENT_TYPE)
    else:
        format_name = FALLBACK_FORMAT
        content_type = FALLBACK_CONTENT_TYPE

    save_kwargs = {}
    if format_name == "JPEG":
        save_kwargs["quality"] = JPEG_QUALITY
        if img.mode not in ("RGB", "L", "CMYK"):
            img = img.convert("RGB")

    output_stream = io.BytesIO()
    img.save(output_stream, format=format_name, **save_kwargs)
    return EncodedImage(output_stream.getvalue(), content_type, format_name)
