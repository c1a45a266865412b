"""
GIF87a/GIF89a decoder producing full-canvas RGBA frames.

Parses the header, logical screen descriptor and block stream, decompresses
every image block and composites it onto a running canvas so each returned
frame is what a viewer would display at that point of the animation.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image

from .byte_cursor import ByteCursor, BytesLike
from .config import DEFAULT_CONFIG, CodecConfig
from .errors import (
    ImageTooLarge,
    InvalidSignature,
    MalformedBlock,
    NoFrames,
    TruncatedInput,
)
from .frames import AnimatedFrameSequence, Frame
from .lzw import check_min_code_size, iter_lzw

logger = logging.getLogger(__name__)

SIGNATURES = (b"GIF87a", b"GIF89a")

EXTENSION_INTRODUCER = 0x21
IMAGE_SEPARATOR = 0x2C
TRAILER = 0x3B

GRAPHIC_CONTROL_LABEL = 0xF9
APPLICATION_LABEL = 0xFF
LOOPING_APPLICATIONS = frozenset({b"NETSCAPE2.0", b"ANIMEXTS1.0"})

# Disposal methods
DISPOSE_UNSPECIFIED = 0
DISPOSE_NONE = 1
DISPOSE_BACKGROUND = 2
DISPOSE_PREVIOUS = 3

INTERLACE_PASSES = ((0, 8), (4, 8), (2, 4), (1, 2))
TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class LogicalScreen:
    width: int
    height: int
    color_table: Optional[bytes]
    background_index: int
    aspect_ratio: int


@dataclass(frozen=True)
class GraphicControl:
    disposal: int
    user_input: bool
    transparent_index: Optional[int]
    delay: int  # hundredths of a second


@dataclass(frozen=True)
class ImageDescriptor:
    left: int
    top: int
    width: int
    height: int
    interlaced: bool
    color_table: Optional[bytes]


def read_sub_blocks(cursor: ByteCursor) -> bytes:
    """Read a chain of length-prefixed sub-blocks up to the zero-length terminator."""
    chunks = []
    while True:
        size = cursor.read_byte()
        if size == 0:
            break
        chunks.append(cursor.read_bytes(size))
    return b"".join(chunks)


def skip_sub_blocks(cursor: ByteCursor) -> None:
    while True:
        size = cursor.read_byte()
        if size == 0:
            break
        cursor.skip(size)


def read_color_table(cursor: ByteCursor, size_bits: int) -> bytes:
    return cursor.read_bytes(3 * (1 << (size_bits + 1)))


def interlaced_rows(height: int) -> List[int]:
    """Display row of each stored row, for the four GIF interlace passes."""
    return [y for start, step in INTERLACE_PASSES for y in range(start, height, step)]


def rgba_palette(color_table: bytes, transparent_index: Optional[int]) -> bytes:
    """Expand an RGB colour table into a 256-entry RGBA palette."""
    palette = bytearray()
    padded = color_table.ljust(768, b"\x00")
    for index in range(256):
        palette += padded[index * 3:index * 3 + 3]
        palette.append(0 if index == transparent_index else 255)
    return bytes(palette)


class GifDecoder:
    """Decodes complete GIF buffers into AnimatedFrameSequence objects."""

    def __init__(self, config: CodecConfig = DEFAULT_CONFIG):
        self.config = config

    def decode(self, data: BytesLike) -> AnimatedFrameSequence:
        """
        Decode a complete GIF buffer.

        Args:
            data: The whole file. It is only read during this call.

        Returns:
            The decoded frames in display order, each full-canvas sized.

        Raises:
            InvalidSignature: The buffer is not a GIF.
            TruncatedInput: The buffer ends mid-structure or before the trailer.
            MalformedBlock: An unknown block introducer or inconsistent block body.
            UnsupportedColorDepth: An LZW code size GIF does not allow.
            NoFrames: The stream contains no image blocks.
            ImageTooLarge: The logical screen exceeds Pillow's pixel limit.
        """
        cursor = ByteCursor(data)
        try:
            return self._decode(cursor)
        finally:
            cursor.release()

    def _decode(self, cursor: ByteCursor) -> AnimatedFrameSequence:
        self._read_signature(cursor)
        screen = self._read_logical_screen(cursor)
        logger.debug(
            "Logical screen %dx%d, global color table: %s",
            screen.width, screen.height, screen.color_table is not None,
        )

        canvas = Image.new("RGBA", (screen.width, screen.height), TRANSPARENT)
        frames: List[Frame] = []
        loop_count: Optional[int] = None
        control: Optional[GraphicControl] = None

        while True:
            if cursor.remaining() == 0:
                if self.config.require_trailer:
                    raise TruncatedInput(
                        f"Data ended at offset {cursor.position} before the GIF trailer."
                    )
                logger.debug("Data ended without a trailer after %d frame(s)", len(frames))
                break

            introducer = cursor.read_byte()
            if introducer == TRAILER:
                break
            if introducer == EXTENSION_INTRODUCER:
                label = cursor.read_byte()
                if label == GRAPHIC_CONTROL_LABEL:
                    control = self._read_graphic_control(cursor)
                elif label == APPLICATION_LABEL:
                    found = self._read_application_extension(cursor)
                    if found is not None:
                        loop_count = found
                else:
                    logger.debug("Skipping extension 0x%02X", label)
                    skip_sub_blocks(cursor)
            elif introducer == IMAGE_SEPARATOR:
                descriptor = self._read_image_descriptor(cursor)
                canvas, image = self._draw_frame(cursor, screen, descriptor, control, canvas)
                frames.append(Frame(image, self._frame_duration(control)))
                control = None
            else:
                raise MalformedBlock(
                    f"Unexpected block introducer 0x{introducer:02X} at offset {cursor.position - 1}."
                )

        if not frames:
            raise NoFrames("The GIF contains no image blocks.")
        logger.debug("Decoded %d frame(s), loop count %s", len(frames), loop_count)
        return AnimatedFrameSequence(tuple(frames), loop_count)

    def _read_signature(self, cursor: ByteCursor) -> None:
        signature = cursor.read_bytes(min(6, cursor.remaining()))
        if not signature:
            raise TruncatedInput("Empty buffer.")
        if not any(known.startswith(signature) for known in SIGNATURES):
            raise InvalidSignature(f"Not a GIF: signature {signature!r}.")
        if len(signature) < 6:
            raise TruncatedInput(f"Data ended inside the GIF signature ({signature!r}).")

    def _read_logical_screen(self, cursor: ByteCursor) -> LogicalScreen:
        width = cursor.read_uint16_le()
        height = cursor.read_uint16_le()
        packed = cursor.read_byte()
        background_index = cursor.read_byte()
        aspect_ratio = cursor.read_byte()
        if width == 0 or height == 0:
            raise MalformedBlock(f"Logical screen has zero area ({width}x{height}).")
        limit = Image.MAX_IMAGE_PIXELS
        if limit and width * height > limit:
            raise ImageTooLarge(
                f"Logical screen {width}x{height} exceeds the limit of {limit} pixels."
            )
        color_table = None
        if packed & 0x80:
            color_table = read_color_table(cursor, packed & 0x07)
        return LogicalScreen(width, height, color_table, background_index, aspect_ratio)

    def _read_graphic_control(self, cursor: ByteCursor) -> GraphicControl:
        body = read_sub_blocks(cursor)
        if len(body) < 4:
            raise MalformedBlock(
                f"Graphic control extension body is {len(body)} byte(s), expected 4."
            )
        packed = body[0]
        delay = body[1] | (body[2] << 8)
        transparent_index = body[3] if packed & 0x01 else None
        return GraphicControl(
            disposal=(packed >> 2) & 0x07,
            user_input=bool(packed & 0x02),
            transparent_index=transparent_index,
            delay=delay,
        )

    def _read_application_extension(self, cursor: ByteCursor) -> Optional[int]:
        """Return the loop count if this is a looping extension, else None."""
        size = cursor.read_byte()
        if size == 0:
            return None
        identifier = cursor.read_bytes(size)
        data = read_sub_blocks(cursor)
        if identifier not in LOOPING_APPLICATIONS:
            logger.debug("Skipping application extension %r", identifier)
            return None
        if len(data) < 3 or data[0] != 0x01:
            return None
        return data[1] | (data[2] << 8)

    def _read_image_descriptor(self, cursor: ByteCursor) -> ImageDescriptor:
        left = cursor.read_uint16_le()
        top = cursor.read_uint16_le()
        width = cursor.read_uint16_le()
        height = cursor.read_uint16_le()
        packed = cursor.read_byte()
        color_table = None
        if packed & 0x80:
            color_table = read_color_table(cursor, packed & 0x07)
        return ImageDescriptor(left, top, width, height, bool(packed & 0x40), color_table)

    def _frame_duration(self, control: Optional[GraphicControl]) -> int:
        if control is None or control.delay == 0:
            return self.config.default_duration
        return control.delay * 10

    def _draw_frame(
        self,
        cursor: ByteCursor,
        screen: LogicalScreen,
        descriptor: ImageDescriptor,
        control: Optional[GraphicControl],
        canvas: Image.Image,
    ) -> Tuple[Image.Image, Image.Image]:
        """Composite one image block onto the canvas.

        Returns the canvas to carry into the next frame (after disposal) and
        the raster to display for this frame.
        """
        min_code_size = cursor.read_byte()
        data = read_sub_blocks(cursor)

        color_table = descriptor.color_table or screen.color_table
        if color_table is None:
            raise MalformedBlock("Image block has neither a local nor a global color table.")

        disposal = control.disposal if control else DISPOSE_UNSPECIFIED
        transparent_index = control.transparent_index if control else None
        previous = canvas.copy() if disposal == DISPOSE_PREVIOUS else None

        box = self._visible_box(screen, descriptor)
        if box is None:
            check_min_code_size(min_code_size)
        else:
            patch = self._render_patch(
                descriptor, box, data, min_code_size, color_table, transparent_index
            )
            canvas.paste(patch, box[:2], patch)

        displayed = canvas.copy()

        if disposal == DISPOSE_BACKGROUND and box is not None:
            canvas.paste(TRANSPARENT, box)
        elif disposal == DISPOSE_PREVIOUS:
            canvas = previous
        return canvas, displayed

    @staticmethod
    def _visible_box(
        screen: LogicalScreen, descriptor: ImageDescriptor
    ) -> Optional[Tuple[int, int, int, int]]:
        right = min(descriptor.left + descriptor.width, screen.width)
        bottom = min(descriptor.top + descriptor.height, screen.height)
        if right <= descriptor.left or bottom <= descriptor.top:
            return None
        return (descriptor.left, descriptor.top, right, bottom)

    @staticmethod
    def _render_patch(
        descriptor: ImageDescriptor,
        box: Tuple[int, int, int, int],
        data: bytes,
        min_code_size: int,
        color_table: bytes,
        transparent_index: Optional[int],
    ) -> Image.Image:
        """Decode the part of an image block that falls inside ``box``.

        Buffers are sized by the visible region, and decompression stops once
        every visible row is filled.
        """
        width, height = descriptor.width, descriptor.height
        visible_width = box[2] - box[0]
        visible_height = box[3] - box[1]
        rows = interlaced_rows(height) if descriptor.interlaced else range(height)
        rows_left = sum(1 for y in rows if y < visible_height)

        indices = bytearray(visible_width * visible_height)
        coverage = bytearray(len(indices))
        row = 0
        column = 0
        for entry in iter_lzw(data, min_code_size):
            offset = 0
            while offset < len(entry) and row < height:
                y = rows[row]
                take = min(len(entry) - offset, width - column)
                if y < visible_height and column < visible_width:
                    count = min(take, visible_width - column)
                    start = y * visible_width + column
                    indices[start:start + count] = entry[offset:offset + count]
                    coverage[start:start + count] = b"\xff" * count
                offset += take
                column += take
                if column == width:
                    column = 0
                    row += 1
                    if y < visible_height:
                        rows_left -= 1
            if rows_left == 0 or row >= height:
                break

        patch = Image.frombytes("P", (visible_width, visible_height), bytes(indices))
        patch.putpalette(rgba_palette(color_table, transparent_index), "RGBA")
        patch = patch.convert("RGBA")
        if rows_left:
            logger.debug("Image data is short: %d visible row(s) not reached", rows_left)
            # Pixels the stream never reached leave the canvas untouched.
            alpha = Image.frombytes("L", (visible_width, visible_height), bytes(coverage))
            patch.putalpha(Image.composite(patch.getchannel("A"), alpha, alpha))
        return patch


def decode(data: BytesLike, config: CodecConfig = DEFAULT_CONFIG) -> AnimatedFrameSequence:
    """Decode GIF bytes into an AnimatedFrameSequence."""
    return GifDecoder(config).decode(data)
