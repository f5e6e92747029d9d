"""Crop package public API.

`crop` holds the pyvips pixel backend; `crop_engine` the idle/cropping
state machine used by the session. Display-space geometry lives in
`photo_session.ops.crop_controller`.
"""

from .crop import crop_image_bytes, validate_crop_bounds
from .crop_engine import CropEngine, CropPhase

__all__ = [
    "CropEngine",
    "CropPhase",
    "crop_image_bytes",
    "validate_crop_bounds",
]
