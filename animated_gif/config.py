"""
Configuration shared by the decoder, the frame transformer and the front ends.
"""

from dataclasses import dataclass

from PIL import Image

from .errors import InvalidTargetSize
from .frames import TargetSize

MAX_DIMENSION = 4096


@dataclass(frozen=True)
class CodecConfig:
    """Configuration for decoding and transforming animations."""

    default_duration: int = 100  # ms, used when a frame's delay is 0
    require_trailer: bool = True
    resample: Image.Resampling = Image.Resampling.BILINEAR
    max_workers: int = 1


DEFAULT_CONFIG = CodecConfig()


def parse_size(size_text: str) -> TargetSize:
    """Parse a size string (WIDTHxHEIGHT) into a TargetSize."""
    if not size_text:
        raise InvalidTargetSize("Size must be provided as WIDTHxHEIGHT.")
    try:
        width_text, height_text = size_text.lower().split("x", maxsplit=1)
        width = int(width_text)
        height = int(height_text)
        if width <= 0 or height <= 0:
            raise ValueError("Dimensions must be positive")
        if width > MAX_DIMENSION or height > MAX_DIMENSION:
            raise ValueError(f"Maximum dimension is {MAX_DIMENSION}px")
        return TargetSize(width, height)
    except ValueError as exc:
        raise InvalidTargetSize(
            f"Size must be WIDTHxHEIGHT with positive integers (e.g., 320x180). Got: {size_text}"
        ) from exc
