"""
Exception types raised while decoding and transforming animated GIFs.

Every decode failure derives from ``DecodeError`` and, like the rest of the
package's validation errors, from ``ValueError`` so callers that only care about
"bad input" can catch a single type.
"""


class DecodeError(ValueError):
    """Base class for failures while decoding GIF bytes."""


class InvalidSignature(DecodeError):
    """The buffer does not start with ``GIF87a`` or ``GIF89a``."""


class TruncatedInput(DecodeError):
    """The buffer ended in the middle of a structure."""


class MalformedBlock(DecodeError):
    """An unexpected block introducer or an inconsistent block body."""


class UnsupportedColorDepth(DecodeError):
    """A colour table or LZW code size outside the range GIF allows."""


class NoFrames(DecodeError):
    """The stream held no image blocks."""


class ImageTooLarge(DecodeError):
    """The logical screen exceeds Pillow's decompression-bomb pixel limit."""


class InvalidTargetSize(ValueError):
    """A transform target with non-positive dimensions or scale."""
