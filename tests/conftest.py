"""Pytest configuration.

The backend tests use PySide6 QObjects and signals. We create a single
`QCoreApplication` for the entire session as early as possible and cleanly
shut it down at the end.

Image fixtures are built with pyvips so they do not depend on the package's
own encode helpers.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np
import pytest

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a Qt core application exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    global _APP

    app = QCoreApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QCoreApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    app = QCoreApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


def _encode_array(arr: np.ndarray, suffix: str, **kwargs: Any) -> bytes:
    import pyvips

    h, w, bands = arr.shape
    img = pyvips.Image.new_from_memory(np.ascontiguousarray(arr).tobytes(), w, h, bands, "uchar")
    img = img.copy(interpretation="srgb")
    return bytes(img.write_to_buffer(suffix, **kwargs))


def gradient_array(width: int, height: int) -> np.ndarray:
    """RGB array where pixel (x, y) is (x % 256, y % 256, 128)."""
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[:, :, 0] = (np.arange(width) % 256)[None, :]
    arr[:, :, 1] = (np.arange(height) % 256)[:, None]
    arr[:, :, 2] = 128
    return arr


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Factory for PNG bytes of a gradient image (see ``gradient_array``)."""
    pytest.importorskip("pyvips")

    def _make(width: int = 64, height: int = 48) -> bytes:
        return _encode_array(gradient_array(width, height), ".png")

    return _make


@pytest.fixture
def make_noise_png() -> Callable[..., bytes]:
    """Factory for PNG bytes of random noise (compresses poorly as PNG)."""
    pytest.importorskip("pyvips")

    def _make(width: int = 64, height: int = 64, seed: int = 7) -> bytes:
        rng = np.random.default_rng(seed)
        arr = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
        return _encode_array(arr, ".png")

    return _make


@pytest.fixture
def png_bytes(make_png) -> bytes:
    return make_png(64, 48)


@pytest.fixture
def session(png_bytes):
    from photo_session.session import EditSession

    s = EditSession()
    s.load_image(png_bytes)
    yield s
    s.shutdown()
