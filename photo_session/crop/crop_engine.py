from __future__ import annotations

from enum import Enum

from photo_session.image_engine.decoder import WorkingImage
from photo_session.logger import get_logger
from photo_session.ops.crop_controller import Rect, Size, clamp_rect, map_rect, to_pixel_box

from .crop import crop_image_bytes

_logger = get_logger("crop_engine")


class CropPhase(str, Enum):
    IDLE = "idle"
    CROPPING = "cropping"


class CropEngine:
    """Crop state machine: idle -> cropping -> (commit) -> idle.

    The region is kept in display coordinates of the surface the image is
    drawn on and only mapped to source pixels at commit time.
    """

    def __init__(self) -> None:
        self._phase = CropPhase.IDLE
        self._display_size: Size | None = None
        self._region: Rect | None = None

    @property
    def phase(self) -> CropPhase:
        return self._phase

    @property
    def is_cropping(self) -> bool:
        return self._phase is CropPhase.CROPPING

    @property
    def region(self) -> Rect | None:
        return self._region

    @property
    def display_size(self) -> Size | None:
        return self._display_size

    def begin_crop(self, image: WorkingImage | None, display_size: Size) -> bool:
        if image is None:
            _logger.debug("begin_crop ignored: no working image")
            return False
        if display_size.width <= 0 or display_size.height <= 0:
            raise ValueError(f"Display size must be positive, got {display_size.width}x{display_size.height}")
        self._phase = CropPhase.CROPPING
        self._display_size = display_size
        self._region = None
        _logger.debug("crop started on %sx%s surface", display_size.width, display_size.height)
        return True

    def update_region(self, rect: Rect) -> Rect | None:
        """Replace the region with ``rect`` clipped to the display surface."""
        if not self.is_cropping or self._display_size is None:
            return None
        self._region = clamp_rect(rect, self._display_size)
        return self._region

    def cancel_crop(self) -> None:
        self._phase = CropPhase.IDLE
        self._display_size = None
        self._region = None

    def source_box(self, image: WorkingImage) -> tuple[int, int, int, int] | None:
        """Pixel box the current region maps to, or None if nothing would be cut."""
        if not self.is_cropping or self._display_size is None:
            return None
        if self._region is None or self._region.is_empty:
            return None
        natural = Size(image.width, image.height)
        src = map_rect(self._region, self._display_size, natural)
        box = to_pixel_box(src, natural)
        if box[2] <= 0 or box[3] <= 0:
            return None
        return box

    def commit_crop(self, image: WorkingImage | None) -> WorkingImage | None:
        """Extract the region from ``image`` and return the cropped image.

        Returns None without side effects when not cropping or when no
        usable region was drawn. On extraction failure the exception
        propagates and the engine stays in the cropping phase.
        """
        if image is None or not self.is_cropping:
            _logger.debug("commit_crop ignored: not cropping")
            return None
        box = self.source_box(image)
        if box is None:
            _logger.debug("commit_crop ignored: no region")
            return None

        cropped = crop_image_bytes(image.data, box)
        _logger.debug("crop committed: display=%s source=%s", self._region, box)
        self.cancel_crop()
        return cropped
