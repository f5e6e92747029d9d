"""Lossy re-encode of the working image with a size report.

Compression is a preview: it never touches the edit state or history. The
caller keeps the returned ``CompressionResult`` and exports it explicitly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from photo_session.image_engine.decoder import WorkingImage, encode_jpeg, load_vips_image
from photo_session.logger import get_logger

_logger = get_logger("compressor")

COMPRESSED_FORMAT = "jpeg"
COMPRESSED_MEDIA_TYPE = "image/jpeg"


def format_size(size_bytes: int) -> str:
    if size_bytes == 0:
        return "0B"
    if size_bytes < 0:
        raise ValueError("size_bytes must be non-negative")
    size_name = ("B", "KB", "MB", "GB", "TB")
    i = min(int(math.floor(math.log(size_bytes, 1024))), len(size_name) - 1)
    p = math.pow(1024, i)
    s = round(size_bytes / p, 2)
    return f"{s} {size_name[i]}"


def reduction_percent(original_size: int, compressed_size: int) -> float:
    """Size reduction in percent. An empty original reports 0."""
    if original_size <= 0:
        return 0.0
    return (original_size - compressed_size) / original_size * 100.0


def quality_to_q(quality: float) -> int:
    """Map a 0..1 quality factor onto the encoder's 1..100 scale."""
    q = float(quality)
    if math.isnan(q) or not 0.0 <= q <= 1.0:
        raise ValueError(f"quality must be within [0, 1], got {quality!r}")
    return max(1, min(100, round(q * 100)))


@dataclass(frozen=True, slots=True)
class CompressionResult:
    original_size: int
    compressed_size: int
    image: WorkingImage
    quality: float

    @property
    def reduction(self) -> float:
        return reduction_percent(self.original_size, self.compressed_size)

    def summary(self) -> str:
        return (
            f"Original: {self.original_size / 1024:.2f} KB\n"
            f"Compressed: {self.compressed_size / 1024:.2f} KB\n"
            f"Reduced: {self.reduction:.2f}%"
        )


def compress_image(image: WorkingImage, quality: float, *, original_size: int | None = None) -> CompressionResult:
    """Re-encode ``image`` as JPEG at its natural resolution.

    Args:
        image: Current working image
        quality: Quality factor in [0, 1]
        original_size: Byte size captured by the caller before any work
            started. Defaults to the length of ``image.data``.

    Raises:
        ValueError: quality outside [0, 1]
        ImageDecodeError / ImageEncodeError: the image could not be processed
    """
    q = quality_to_q(quality)
    if original_size is None:
        original_size = len(image.data)

    vips_image = load_vips_image(image.data, flatten=True)
    data = encode_jpeg(vips_image, q)
    compressed = WorkingImage(data, int(vips_image.width), int(vips_image.height), COMPRESSED_FORMAT)

    result = CompressionResult(
        original_size=int(original_size),
        compressed_size=len(data),
        image=compressed,
        quality=float(quality),
    )
    _logger.info(
        "compressed %s -> %s (Q=%d, %.2f%%)",
        format_size(result.original_size),
        format_size(result.compressed_size),
        q,
        result.reduction,
    )
    return result
