"""
Loading animated GIFs by name.

Name resolution lives outside the codec: a byte source turns a resource name
into bytes, and ``AnimatedImageCache`` keeps decoded sequences for callers that
ask for the same name repeatedly, with explicit invalidation.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .config import DEFAULT_CONFIG, CodecConfig
from .frames import AnimatedFrameSequence
from .gif_decoder import decode

logger = logging.getLogger(__name__)

GIF_SUFFIX = ".gif"


class ByteSource(Protocol):
    def load(self, name: str) -> bytes:
        ...


def candidate_names(name: str, scale: float = 1.0) -> List[str]:
    """File names to try for ``name``, high-density variant first when scale > 1."""
    stem = name[: -len(GIF_SUFFIX)] if name.lower().endswith(GIF_SUFFIX) else name
    names = [f"{stem}{GIF_SUFFIX}"]
    if scale > 1:
        names.insert(0, f"{stem}@2x{GIF_SUFFIX}")
    return names


class DirectoryByteSource:
    """Resolves resource names to GIF files inside one directory."""

    def __init__(self, root: Path, scale: float = 1.0):
        self.root = Path(root)
        self.scale = scale

    def load(self, name: str) -> bytes:
        for candidate in candidate_names(name, self.scale):
            path = self.root / candidate
            if path.is_file():
                logger.debug("Loading %s from %s", name, path)
                return path.read_bytes()
        raise FileNotFoundError(f"No GIF named {name!r} in {self.root}")


class AnimatedImageCache:
    """Decoded sequences keyed by resource name."""

    def __init__(self, source: ByteSource, config: CodecConfig = DEFAULT_CONFIG):
        self.source = source
        self.config = config
        self._entries: Dict[str, AnimatedFrameSequence] = {}
        self._lock = threading.Lock()

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    def get(self, name: str) -> AnimatedFrameSequence:
        with self._lock:
            cached = self._entries.get(name)
        if cached is not None:
            return cached
        sequence = decode(self.source.load(name), self.config)
        with self._lock:
            return self._entries.setdefault(name, sequence)

    def invalidate(self, name: Optional[str] = None) -> None:
        """Forget one cached name, or everything when ``name`` is None."""
        with self._lock:
            if name is None:
                self._entries.clear()
            else:
                self._entries.pop(name, None)


def animated_gif_named(
    name: str, source: ByteSource, config: CodecConfig = DEFAULT_CONFIG
) -> AnimatedFrameSequence:
    """Load and decode the GIF ``source`` resolves ``name`` to."""
    return decode(source.load(name), config)
