"""In-memory photo editing session.

Adjustment parameters, crop, lossy compression preview and undo/redo over
both, with no persistence. The Qt facade lives in `photo_session.app` and is
not imported here.
"""

from .errors import (
    ImageDecodeError,
    ImageEncodeError,
    ImageProcessingError,
    InvalidParameterError,
    PhotoSessionError,
    SessionBusyError,
    UnknownPresetError,
)
from .edit_state import EditState
from .presets import get_preset, preset_names
from .image_engine.decoder import WorkingImage
from .history import HistoryEngine, HistoryEntry
from .ops.compressor import CompressionResult
from .ops.crop_controller import Rect, RegionTracker, Size, map_rect
from .crop.crop_engine import CropEngine, CropPhase
from .settings_manager import SettingsManager
from .session import EditSession, ExportArtifact

__version__ = "0.1.0"

__all__ = [
    "CompressionResult",
    "CropEngine",
    "CropPhase",
    "EditSession",
    "EditState",
    "ExportArtifact",
    "HistoryEngine",
    "HistoryEntry",
    "ImageDecodeError",
    "ImageEncodeError",
    "ImageProcessingError",
    "InvalidParameterError",
    "PhotoSessionError",
    "Rect",
    "RegionTracker",
    "SessionBusyError",
    "SettingsManager",
    "Size",
    "UnknownPresetError",
    "WorkingImage",
    "get_preset",
    "map_rect",
    "preset_names",
]
