"""The closed set of derivative variants.

A variant only knows how to turn a decoded image into its derivative;
fetching, storing and registering are shared by every variant.
"""

from dataclasses import dataclass

from PIL import Image

from ..core.image_utils import gaussian_blur, resize_to_fit

DEFAULT_BLUR_RADIUS = 3.0


@dataclass(frozen=True)
class ResizeVariant:
    """Fit within a ``size`` x ``size`` box, preserving aspect ratio."""

    size: int
    decodes: bool = True

    def apply(self, image: "Image.Image") -> "Image.Image":
        return resize_to_fit(image, self.size)


@dataclass(frozen=True)
class BlurVariant:
    """Gaussian blur over the whole image."""

    radius: float = DEFAULT_BLUR_RADIUS
    decodes: bool = True

    def apply(self, image: "Image.Image") -> "Image.Image":
        return gaussian_blur(image, self.radius)


@dataclass(frozen=True)
class CopyVariant:
    """Identity transform, committed as a server-side copy."""

    decodes: bool = False

    def apply(self, image: "Image.Image") -> "Image.Image":
        return image
