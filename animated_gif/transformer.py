"""
Aspect-fill scale-and-crop of every frame in an animation.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from .config import DEFAULT_CONFIG, CodecConfig
from .errors import InvalidTargetSize
from .frames import AnimatedFrameSequence, Frame, TargetSize

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class CropGeometry:
    """Where a source raster lands after aspect-fill scaling and centre cropping."""

    scale_factor: float
    scaled_size: Tuple[int, int]
    crop_box: Tuple[int, int, int, int]


def resolve_target(target: Tuple[int, int], scale: float = 1.0) -> TargetSize:
    """Apply a display scale to a target size, yielding pixel dimensions."""
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidTargetSize(f"Display scale must be a positive finite number, got {scale}.")
    width, height = target
    if not (width > 0 and height > 0):
        raise InvalidTargetSize(f"Target size must be positive, got {width}x{height}.")
    if not (math.isfinite(width * scale) and math.isfinite(height * scale)):
        raise InvalidTargetSize(f"Target {width}x{height} at scale {scale} is not finite.")
    pixel_width = round_half_up(width * scale)
    pixel_height = round_half_up(height * scale)
    if pixel_width <= 0 or pixel_height <= 0:
        raise InvalidTargetSize(
            f"Target {width}x{height} at scale {scale} rounds to {pixel_width}x{pixel_height}."
        )
    return TargetSize(pixel_width, pixel_height)


def compute_geometry(source: Tuple[int, int], target: TargetSize) -> CropGeometry:
    """
    Aspect-fill geometry for scaling ``source`` to cover ``target``.

    The source is scaled by ``max(tw / sw, th / sh)``, the scaled size is
    rounded half-up (and never drops below the target), and a target-sized box
    is centred on it with floored offsets.
    """
    source_width, source_height = source
    scale_factor = max(target.width / source_width, target.height / source_height)
    scaled_width = max(target.width, round_half_up(source_width * scale_factor))
    scaled_height = max(target.height, round_half_up(source_height * scale_factor))
    left = (scaled_width - target.width) // 2
    top = (scaled_height - target.height) // 2
    return CropGeometry(
        scale_factor=scale_factor,
        scaled_size=(scaled_width, scaled_height),
        crop_box=(left, top, left + target.width, top + target.height),
    )


class FrameTransformer:
    """Scales and crops every frame of a sequence to one target size."""

    def __init__(self, config: CodecConfig = DEFAULT_CONFIG):
        self.config = config

    def transform(
        self,
        sequence: AnimatedFrameSequence,
        target: Tuple[int, int],
        scale: float = 1.0,
    ) -> AnimatedFrameSequence:
        """
        Return a new sequence whose frames exactly fill ``target``.

        Args:
            sequence: The animation to transform. It is not modified.
            target: Output size in points; multiplied by ``scale`` for pixels.
            scale: Display density factor.

        Returns:
            A sequence with the same frame count, order, durations and loop count.

        Raises:
            InvalidTargetSize: Non-positive target dimensions or scale.
        """
        pixel_target = resolve_target(target, scale)
        geometry = compute_geometry(sequence.size, pixel_target)
        logger.debug(
            "Scaling %dx%d by %.4f to %dx%d, crop %s",
            sequence.size[0], sequence.size[1], geometry.scale_factor,
            geometry.scaled_size[0], geometry.scaled_size[1], geometry.crop_box,
        )

        def scale_and_crop(frame: Frame) -> Frame:
            return Frame(self._resample(frame.image, geometry), frame.duration)

        if self.config.max_workers > 1 and len(sequence) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                frames = list(executor.map(scale_and_crop, sequence.frames))
        else:
            frames = [scale_and_crop(frame) for frame in sequence.frames]
        return AnimatedFrameSequence(tuple(frames), sequence.loop_count)

    def _resample(self, image: Image.Image, geometry: CropGeometry) -> Image.Image:
        if image.size == geometry.scaled_size:
            scaled = image
        else:
            scaled = image.resize(geometry.scaled_size, self.config.resample)
        return scaled.crop(geometry.crop_box)


def transform(
    sequence: AnimatedFrameSequence,
    target: Tuple[int, int],
    scale: float = 1.0,
    config: CodecConfig = DEFAULT_CONFIG,
) -> AnimatedFrameSequence:
    """Aspect-fill scale and centre-crop every frame of ``sequence`` to ``target``."""
    return FrameTransformer(config).transform(sequence, target, scale)
