"""Format processors: one derivative variant per format tag."""

from typing import Dict, Optional

from ..core.protocols import LoggerProtocol
from ..core.registry import ImageRegistry
from ..core.storage import ObjectStore
from .derivative import DerivativeProcessor, Variant
from .variants import BlurVariant, CopyVariant, ResizeVariant

# Format tag -> variant. Orchestrator fan-out and dispatcher routing both use this table.
FORMAT_VARIANTS: Dict[str, Variant] = {
    "32px": ResizeVariant(32),
    "100px": ResizeVariant(100),
    "200px": ResizeVariant(200),
    "blurred": BlurVariant(),
}

DERIVATIVE_FORMATS = tuple(FORMAT_VARIANTS)


def build_processors(
    store: ObjectStore,
    registry: ImageRegistry,
    logger: Optional[LoggerProtocol] = None,
    variants: Optional[Dict[str, Variant]] = None,
) -> Dict[str, DerivativeProcessor]:
    """Create one processor per format tag, keyed by the lower-cased tag."""
    table = FORMAT_VARIANTS if variants is None else variants
    return {
        format_tag.lower(): DerivativeProcessor(format_tag, variant, store, registry, logger)
        for format_tag, variant in table.items()
    }


__all__ = [
    "FORMAT_VARIANTS",
    "DERIVATIVE_FORMATS",
    "build_processors",
    "DerivativeProcessor",
    "ResizeVariant",
    "BlurVariant",
    "CopyVariant",
]
