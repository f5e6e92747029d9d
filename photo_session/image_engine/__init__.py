"""Image decode/encode and rasterization helpers (pyvips + numpy)."""

from .decoder import (
    WorkingImage,
    decode_image_bytes,
    encode_jpeg,
    encode_png,
    load_vips_image,
    to_rgb_array,
)
from .render import render_adjusted

__all__ = [
    "WorkingImage",
    "decode_image_bytes",
    "encode_jpeg",
    "encode_png",
    "load_vips_image",
    "render_adjusted",
    "to_rgb_array",
]
