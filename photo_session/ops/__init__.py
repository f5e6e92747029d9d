"""Use-case / operations layer.

Pure crop geometry (display <-> source mapping, drag tracking) and the
compression pipeline. Both are free of session state.
"""

from .compressor import CompressionResult, compress_image, format_size, reduction_percent
from .crop_controller import Rect, RegionTracker, Size, clamp_rect, map_rect, rect_from_points, to_pixel_box

__all__ = [
    "CompressionResult",
    "Rect",
    "RegionTracker",
    "Size",
    "clamp_rect",
    "compress_image",
    "format_size",
    "map_rect",
    "rect_from_points",
    "reduction_percent",
    "to_pixel_box",
]
