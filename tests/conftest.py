import pytest

from gif_builder import build_gif, solid


@pytest.fixture
def two_frame_gif() -> bytes:
    """10x10 canvas, red frame with a 5cs delay then green frame with a 0 delay."""
    return build_gif(
        10,
        10,
        [solid(10, 10, 1, delay=5), solid(10, 10, 2, delay=0)],
        loop=0,
    )


@pytest.fixture
def single_frame_gif() -> bytes:
    return build_gif(6, 4, [solid(6, 4, 3)])
