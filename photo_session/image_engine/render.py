"""Rasterize the rendered view of an image.

Color adjustments follow CSS filter semantics (``brightness``, ``contrast``,
``saturate`` in percent, applied in that order and clamped after each step).
Geometry follows ``rotate(r) scaleX(fx) scaleY(fy)``: flips are applied to
the pixels first, then the rotation.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pyvips  # type: ignore

from photo_session.edit_state import EditState
from photo_session.errors import ImageEncodeError
from photo_session.logger import get_logger

from .decoder import WorkingImage, encode_png, from_array, load_vips_image, to_array

_logger = get_logger("render")

_LUMA = np.array([0.213, 0.715, 0.072], dtype=np.float32)


def saturate_matrix(amount: float) -> np.ndarray:
    """3x3 color matrix of the CSS ``saturate()`` filter (1.0 = identity)."""
    s = float(amount)
    identity = np.eye(3, dtype=np.float32)
    grey = np.tile(_LUMA, (3, 1))
    return grey + s * (identity - grey)


def adjust_colors(rgb: np.ndarray, brightness: float, contrast: float, saturate: float) -> np.ndarray:
    """Apply brightness/contrast/saturate (percent values) to an RGB uint8 array."""
    px = rgb.astype(np.float32) / 255.0
    if brightness != 100:
        px = np.clip(px * (brightness / 100.0), 0.0, 1.0)
    if contrast != 100:
        px = np.clip((px - 0.5) * (contrast / 100.0) + 0.5, 0.0, 1.0)
    if saturate != 100:
        px = np.clip(px @ saturate_matrix(saturate / 100.0).T, 0.0, 1.0)
    return np.rint(px * 255.0).astype(np.uint8)


def _apply_geometry(image: Any, state: EditState) -> Any:
    if state.flip_x < 0:
        image = image.fliphor()
    if state.flip_y < 0:
        image = image.flipver()

    angle = float(state.rotation) % 360.0
    if angle == 0:
        return image
    if angle == 90:
        return image.rot90()
    if angle == 180:
        return image.rot180()
    if angle == 270:
        return image.rot270()
    background = [0] * image.bands
    # Arbitrary angles grow the canvas to hold the rotated bounds.
    return image.rotate(angle, background=background)


def render_adjusted(image: WorkingImage, state: EditState) -> WorkingImage:
    """Rasterize ``image`` with every adjustment in ``state`` applied, as PNG."""
    vips_image = load_vips_image(image.data)
    array = to_array(vips_image)
    rgb = array[:, :, :3]
    adjusted = adjust_colors(rgb, state.brightness, state.contrast, state.saturate)
    if array.shape[2] == 4:
        adjusted = np.concatenate([adjusted, array[:, :, 3:]], axis=2)

    try:
        out = _apply_geometry(from_array(adjusted), state)
    except pyvips.Error as e:
        _logger.error("Error applying geometry %s: %s", state, e, exc_info=True)
        raise ImageEncodeError(f"Could not transform image: {e}") from e
    data = encode_png(out)
    _logger.debug(
        "rendered %dx%d -> %dx%d with %s", image.width, image.height, out.width, out.height, state
    )
    return WorkingImage(data, int(out.width), int(out.height), "png")
