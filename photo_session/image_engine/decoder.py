"""Encoded-bytes <-> pixels helpers built on pyvips.

All working images travel through the session as encoded bytes wrapped in
``WorkingImage``. Pixels are only materialized when a crop, compression or
export needs them.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import Any

import numpy as np
import pyvips  # type: ignore

from photo_session.errors import ImageDecodeError, ImageEncodeError
from photo_session.logger import get_logger

_logger = get_logger("decoder")

_RGB_CHANNELS = 3
_RGBA_CHANNELS = 4


@dataclass(frozen=True, slots=True)
class WorkingImage:
    """Immutable reference to encoded image bytes and their natural size."""

    data: bytes
    width: int
    height: int
    format: str = ""

    @property
    def byte_size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"WorkingImage({self.width}x{self.height}, {self.format or '?'}, {len(self.data)} bytes)"


def _configure_cache() -> None:
    # Configure pyvips caches to avoid memory growth
    with contextlib.suppress(Exception):
        pyvips.cache_set_max(0)
        pyvips.cache_set_max_mem(0)
        pyvips.cache_set_max_files(0)


def _loader_format(image: Any) -> str:
    with contextlib.suppress(Exception):
        if image.get_typeof("vips-loader") != 0:
            # e.g. "jpegload_buffer" -> "jpeg"
            return str(image.get("vips-loader")).split("load")[0]
    return ""


def decode_image_bytes(data: bytes) -> WorkingImage:
    """Validate encoded image bytes and wrap them as a ``WorkingImage``.

    Raises:
        ImageDecodeError: if the bytes are not a readable image
    """
    if not data:
        raise ImageDecodeError("Image data is empty")
    _configure_cache()
    try:
        image = pyvips.Image.new_from_buffer(bytes(data), "")
        width, height = int(image.width), int(image.height)
    except pyvips.Error as e:
        _logger.debug("decode failed: %s", e)
        raise ImageDecodeError(f"Could not decode image: {e}") from e
    return WorkingImage(bytes(data), width, height, _loader_format(image))


def load_vips_image(data: bytes, *, flatten: bool = False) -> Any:
    """Fully decode encoded bytes into an 8-bit sRGB pyvips image held in memory.

    ``flatten`` composites any alpha channel onto black and drops it.

    Raises:
        ImageDecodeError: if decoding fails at any point
    """
    if not data:
        raise ImageDecodeError("Image data is empty")
    _configure_cache()
    try:
        image = pyvips.Image.new_from_buffer(bytes(data), "")
        if image.interpretation != "srgb" or image.bands < _RGB_CHANNELS:
            # Grey, CMYK and 16-bit inputs -> 3 or 4 band sRGB
            image = image.colourspace("srgb")
        if flatten and image.hasalpha():
            image = image.flatten(background=[0, 0, 0])
        if image.format != "uchar":
            image = image.cast("uchar")
        # Force the whole decode now so failures surface here, not at encode time.
        return image.copy_memory()
    except pyvips.Error as e:
        _logger.debug("decode failed: %s", e)
        raise ImageDecodeError(f"Could not decode image: {e}") from e


def encode_png(image: Any) -> bytes:
    """Encode a pyvips image losslessly as PNG."""
    try:
        out = image.write_to_buffer(".png")
    except pyvips.Error as e:
        _logger.error("PNG encode failed: %s", e)
        raise ImageEncodeError(f"Could not encode PNG: {e}") from e
    # Normalize to bytes in case pyvips returns a memoryview-like object
    return out if isinstance(out, bytes) else bytes(out)


def encode_jpeg(image: Any, quality: int) -> bytes:
    """Encode a pyvips image as JPEG at ``quality`` (1..100)."""
    q = max(1, min(100, int(quality)))
    try:
        if image.hasalpha():
            image = image.flatten(background=[0, 0, 0])
        out = image.write_to_buffer(".jpg", Q=q)
    except pyvips.Error as e:
        _logger.error("JPEG encode failed (Q=%d): %s", q, e)
        raise ImageEncodeError(f"Could not encode JPEG: {e}") from e
    return out if isinstance(out, bytes) else bytes(out)


def to_array(image: Any) -> np.ndarray:
    """Copy a uchar pyvips image into a ``(h, w, bands)`` uint8 array."""
    mem = image.write_to_memory()
    return np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands).copy()


def from_array(array: np.ndarray) -> Any:
    """Build an sRGB pyvips image from a ``(h, w, 3|4)`` array."""
    if array.ndim != 3 or array.shape[2] not in (_RGB_CHANNELS, _RGBA_CHANNELS):
        raise ValueError("expected numpy array with shape (h, w, 3) or (h, w, 4)")
    if array.dtype != np.uint8:
        array = array.astype(np.uint8)
    h, w, bands = array.shape
    # pyvips expects a contiguous bytes buffer in C order
    img: Any = pyvips.Image.new_from_memory(np.ascontiguousarray(array).tobytes(), w, h, bands, "uchar")
    with contextlib.suppress(Exception):
        img = img.copy(interpretation="srgb")
    return img


def to_rgb_array(data: bytes) -> np.ndarray:
    """Decode encoded bytes into an RGB uint8 array (alpha flattened onto black)."""
    array = to_array(load_vips_image(data, flatten=True))
    if array.shape[2] != _RGB_CHANNELS:
        raise ImageDecodeError(f"Unsupported band count after conversion: {array.shape[2]}")
    return array
