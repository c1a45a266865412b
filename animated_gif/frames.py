"""
In-memory result types: frames, animated frame sequences and target sizes.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

from PIL import Image

# Property name under which per-frame durations are handed to display layers
# that store animation frames and their timing separately.
FRAME_DURATIONS_PROPERTY_KEY = "frame_durations"


class TargetSize(NamedTuple):
    """Output raster dimensions in pixels."""

    width: int
    height: int


@dataclass(frozen=True, eq=False)
class Frame:
    """One RGBA raster and how long it stays on screen, in milliseconds."""

    image: Image.Image
    duration: int

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(f"Frame duration must be non-negative, got {self.duration}.")

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


@dataclass(frozen=True, eq=False)
class AnimatedFrameSequence:
    """
    Ordered frames of an animation plus its loop count.

    Frames are kept in display order and all share the same canvas size.
    A ``loop_count`` of 0 or ``None`` means the animation repeats forever.
    """

    frames: Tuple[Frame, ...]
    loop_count: Optional[int] = None

    def __post_init__(self):
        frames = tuple(self.frames)
        object.__setattr__(self, "frames", frames)
        if not frames:
            raise ValueError("An animated frame sequence needs at least one frame.")
        size = frames[0].size
        for index, frame in enumerate(frames):
            if frame.size != size:
                raise ValueError(
                    f"Frame {index} is {frame.size[0]}x{frame.size[1]}, "
                    f"expected {size[0]}x{size[1]}."
                )
        if self.loop_count is not None and self.loop_count < 0:
            raise ValueError(f"Loop count must be non-negative, got {self.loop_count}.")

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.frames)

    def __getitem__(self, index: int) -> Frame:
        return self.frames[index]

    @property
    def size(self) -> Tuple[int, int]:
        return self.frames[0].size

    @property
    def loops_forever(self) -> bool:
        return not self.loop_count

    def frame_count(self) -> int:
        return len(self.frames)

    def frame(self, index: int) -> Frame:
        if not 0 <= index < len(self.frames):
            raise IndexError(f"Frame index {index} out of range (0..{len(self.frames) - 1}).")
        return self.frames[index]

    def total_duration(self) -> int:
        return sum(frame.duration for frame in self.frames)

    def images(self) -> List[Image.Image]:
        """Frame rasters in display order."""
        return [frame.image for frame in self.frames]

    def durations(self) -> Dict[int, int]:
        """Frame durations keyed by frame position."""
        return {index: frame.duration for index, frame in enumerate(self.frames)}

    def frame_properties(self) -> Dict[str, Dict[int, int]]:
        """Durations wrapped under ``FRAME_DURATIONS_PROPERTY_KEY``."""
        return {FRAME_DURATIONS_PROPERTY_KEY: self.durations()}
