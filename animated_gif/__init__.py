"""
Animated GIF decoding and frame transforms.
Decodes GIF bytes into full-canvas RGBA frames with per-frame durations and
scale-crops every frame of an animation to a fixed size.
"""

from .byte_cursor import ByteCursor
from .config import CodecConfig, DEFAULT_CONFIG, parse_size
from .errors import (
    DecodeError,
    ImageTooLarge,
    InvalidSignature,
    InvalidTargetSize,
    MalformedBlock,
    NoFrames,
    TruncatedInput,
    UnsupportedColorDepth,
)
from .frames import (
    FRAME_DURATIONS_PROPERTY_KEY,
    AnimatedFrameSequence,
    Frame,
    TargetSize,
)
from .gif_decoder import GifDecoder, decode
from .resources import AnimatedImageCache, DirectoryByteSource, animated_gif_named
from .transformer import FrameTransformer, transform

__all__ = [
    "ByteCursor",
    "CodecConfig",
    "DEFAULT_CONFIG",
    "parse_size",
    "DecodeError",
    "ImageTooLarge",
    "InvalidSignature",
    "InvalidTargetSize",
    "MalformedBlock",
    "NoFrames",
    "TruncatedInput",
    "UnsupportedColorDepth",
    "FRAME_DURATIONS_PROPERTY_KEY",
    "AnimatedFrameSequence",
    "Frame",
    "TargetSize",
    "GifDecoder",
    "decode",
    "AnimatedImageCache",
    "DirectoryByteSource",
    "animated_gif_named",
    "FrameTransformer",
    "transform",
]
