"""Image crop backend using pyvips.

Pure functions for cropping images, no Qt dependencies.
"""

from __future__ import annotations

import pyvips  # type: ignore

from photo_session.errors import ImageEncodeError
from photo_session.image_engine.decoder import WorkingImage, encode_png, load_vips_image
from photo_session.logger import get_logger

_logger = get_logger("crop")


def validate_crop_bounds(img_width: int, img_height: int, crop: tuple[int, int, int, int]) -> bool:
    """Validate that crop rectangle is within image bounds.

    Args:
        img_width: Original image width
        img_height: Original image height
        crop: (left, top, width, height) crop rectangle

    Returns:
        True if crop is valid, False otherwise
    """
    left, top, width, height = crop
    if left < 0 or top < 0:
        return False
    if width <= 0 or height <= 0:
        return False
    if left + width > img_width:
        return False
    return not top + height > img_height


def crop_image_bytes(data: bytes, crop: tuple[int, int, int, int]) -> WorkingImage:
    """Extract a sub-region of encoded image bytes into a new PNG image.

    Args:
        data: Encoded source image
        crop: (left, top, width, height) in source pixel coordinates

    Returns:
        The extracted region, re-encoded losslessly, sized exactly width x height

    Raises:
        ImageDecodeError: the source cannot be decoded
        ValueError: the crop box does not fit inside the image
        ImageEncodeError: the region cannot be encoded
    """
    image = load_vips_image(data)

    if not validate_crop_bounds(image.width, image.height, crop):
        _logger.error("Crop bounds %s invalid for image size %dx%d", crop, image.width, image.height)
        raise ValueError(f"Crop bounds {crop} invalid for image size {image.width}x{image.height}")

    left, top, width, height = crop
    _logger.debug("Cropping %dx%d image: crop=%s", image.width, image.height, crop)

    try:
        cropped = image.crop(left, top, width, height)
    except pyvips.Error as e:
        _logger.error("Error during crop of %s: %s", crop, e, exc_info=True)
        raise ImageEncodeError(f"Could not extract region {crop}: {e}") from e

    out = encode_png(cropped)
    return WorkingImage(out, int(width), int(height), "png")
