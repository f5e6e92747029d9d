"""EditSession: one photo-editing session.

The session owns the edit state, the undo/redo history, the crop state
machine, the working image and the last compression preview. Sessions share
nothing, so several can live side by side.

Every mutating call follows the same protocol: validate, snapshot the
pre-mutation (state, image) pair into history (which drops the redo stack),
mutate, then notify render listeners with the new adjustment description.
"""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .crop.crop_engine import CropEngine, CropPhase
from .edit_state import EditState
from .errors import SessionBusyError
from .history import HistoryEngine, HistoryEntry
from .image_engine.decoder import WorkingImage, decode_image_bytes
from .image_engine.render import render_adjusted
from .logger import get_logger
from .ops.compressor import COMPRESSED_MEDIA_TYPE, CompressionResult, compress_image
from .ops.crop_controller import Rect, Size
from .presets import get_preset
from .settings_manager import SettingsManager

_logger = get_logger("session")

RenderListener = Callable[[dict[str, Any]], None]


@dataclass(frozen=True, slots=True)
class ExportArtifact:
    filename: str
    data: bytes
    media_type: str

    def write_to(self, directory: str | Path) -> Path:
        path = Path(directory) / self.filename
        path.write_bytes(self.data)
        _logger.info("exported %s (%d bytes)", path, len(self.data))
        return path


def _as_size(value: Size | tuple[float, float]) -> Size:
    if isinstance(value, Size):
        return value
    w, h = value
    return Size(float(w), float(h))


def _as_rect(value: Rect | tuple[float, float, float, float]) -> Rect:
    if isinstance(value, Rect):
        return value
    x, y, w, h = value
    return Rect(float(x), float(y), float(w), float(h))


class EditSession:
    def __init__(self, settings: SettingsManager | None = None) -> None:
        self._settings = settings or SettingsManager()
        self._state = EditState()
        self._history = HistoryEngine(self._settings.history_limit)
        self._crop = CropEngine()
        self._image: WorkingImage | None = None
        self._original: WorkingImage | None = None
        self._last_compression: CompressionResult | None = None
        self._compare_mode = False
        self._listeners: list[RenderListener] = []

        self._busy_lock = threading.Lock()
        self._busy: str | None = None
        self._executor: ThreadPoolExecutor | None = None

    # ---- read-only views ----
    @property
    def settings(self) -> SettingsManager:
        return self._settings

    @property
    def state(self) -> EditState:
        return self._state.copy()

    @property
    def image(self) -> WorkingImage | None:
        return self._image

    @property
    def original_image(self) -> WorkingImage | None:
        return self._original

    @property
    def has_image(self) -> bool:
        return self._image is not None

    @property
    def undo_depth(self) -> int:
        return self._history.undo_depth

    @property
    def redo_depth(self) -> int:
        return self._history.redo_depth

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def last_compression(self) -> CompressionResult | None:
        return self._last_compression

    @property
    def compare_mode(self) -> bool:
        return self._compare_mode

    @property
    def crop_phase(self) -> CropPhase:
        return self._crop.phase

    @property
    def crop_region(self) -> Rect | None:
        return self._crop.region

    @property
    def is_busy(self) -> bool:
        return self._busy is not None

    def render_description(self) -> dict[str, Any]:
        return self._state.render_description()

    # ---- listeners ----
    def subscribe(self, listener: RenderListener) -> Callable[[], None]:
        """Register a render listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        description = self._state.render_description()
        for listener in list(self._listeners):
            try:
                listener(description)
            except Exception:
                _logger.exception("render listener %r failed", listener)

    # ---- busy guard ----
    def _ensure_idle(self) -> None:
        if self._busy is not None:
            raise SessionBusyError(f"Session is busy ({self._busy}); try again when it finishes")

    def _acquire_busy(self, name: str) -> None:
        with self._busy_lock:
            self._ensure_idle()
            self._busy = name

    def _release_busy(self) -> None:
        with self._busy_lock:
            self._busy = None

    @contextlib.contextmanager
    def _image_operation(self, name: str) -> Iterator[None]:
        self._acquire_busy(name)
        try:
            yield
        finally:
            self._release_busy()

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="photo_session")
        return self._executor

    def _run_then_release(self, fn: Callable[..., Any], *args: Any) -> Any:
        # Released before the future resolves, so waiters see an idle session.
        try:
            return fn(*args)
        finally:
            self._release_busy()

    def _submit(self, name: str, fn: Callable[..., Any], *args: Any) -> Future:
        self._acquire_busy(name)
        try:
            return self._get_executor().submit(self._run_then_release, fn, *args)
        except BaseException:
            self._release_busy()
            raise

    def shutdown(self) -> None:
        """Wait for in-flight work and release the worker thread."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ---- image input ----
    def load_image(self, data: bytes) -> WorkingImage:
        """Make ``data`` the working and original image and start over.

        History is cleared and the state goes back to defaults. Not undoable.

        Raises:
            ImageDecodeError: the bytes are not a readable image
        """
        self._ensure_idle()
        image = decode_image_bytes(data)
        self._image = image
        self._original = image
        self._history.clear()
        self._state = EditState()
        self._crop.cancel_crop()
        self._last_compression = None
        _logger.info("image loaded: %r", image)
        self._notify()
        return image

    def load_image_file(self, path: str | Path) -> WorkingImage:
        data = Path(path).read_bytes()
        return self.load_image(data)

    # ---- parameter edits ----
    def _edit(self, action: str, mutate: Callable[[EditState], None]) -> None:
        self._ensure_idle()
        self._history.record_snapshot(self._state, self._image)
        mutate(self._state)
        _logger.debug("%s -> %s", action, self._state)
        self._notify()

    def set_parameter(self, key: str, value: Any) -> None:
        number = EditState.coerce_adjustment(key, value)
        self._edit(f"set {key}={number}", lambda s: setattr(s, key, number))

    def apply_preset(self, name: str) -> None:
        bundle = get_preset(name)
        self._edit(f"preset {name}", lambda s: s.apply_bundle(bundle))

    def rotate(self, delta: float) -> None:
        degrees = EditState.coerce_degrees(delta)
        self._edit(f"rotate {degrees:+g}", lambda s: s.rotate(degrees))

    def flip_horizontal(self) -> None:
        self._edit("flip horizontal", EditState.flip_horizontal)

    def flip_vertical(self) -> None:
        self._edit("flip vertical", EditState.flip_vertical)

    def reset(self) -> None:
        """Restore default adjustments. The working image is kept."""
        self._ensure_idle()
        self._history.record_snapshot(self._state, self._image)
        self._state = EditState()
        _logger.debug("reset")
        self._notify()

    def reset_all(self) -> bool:
        """Restore default adjustments and the originally loaded image."""
        if self._original is None:
            return False
        self._ensure_idle()
        self._history.record_snapshot(self._state, self._image)
        self._state = EditState()
        self._image = self._original
        self._crop.cancel_crop()
        _logger.debug("reset all")
        self._notify()
        return True

    def toggle_compare(self) -> bool:
        self._compare_mode = not self._compare_mode
        return self._compare_mode

    # ---- history ----
    def _make_current(self, entry: HistoryEntry) -> None:
        self._state = entry.state
        if entry.image is not self._image:
            self._crop.cancel_crop()
        self._image = entry.image
        self._notify()

    def undo(self) -> bool:
        self._ensure_idle()
        entry = self._history.undo(self._state, self._image)
        if entry is None:
            _logger.debug("undo ignored: nothing to undo")
            return False
        self._make_current(entry)
        return True

    def redo(self) -> bool:
        self._ensure_idle()
        entry = self._history.redo(self._state, self._image)
        if entry is None:
            _logger.debug("redo ignored: nothing to redo")
            return False
        self._make_current(entry)
        return True

    # ---- crop ----
    def begin_crop(self, display_size: Size | tuple[float, float]) -> bool:
        """Start drawing a crop region on a surface of ``display_size``."""
        self._ensure_idle()
        return self._crop.begin_crop(self._image, _as_size(display_size))

    def update_crop_region(self, rect: Rect | tuple[float, float, float, float]) -> Rect | None:
        return self._crop.update_region(_as_rect(rect))

    def cancel_crop(self) -> None:
        self._crop.cancel_crop()

    def _run_commit_crop(self, image: WorkingImage) -> WorkingImage | None:
        state_before = self._state.copy()
        cropped = self._crop.commit_crop(image)
        if cropped is None:
            return None
        self._history.record_snapshot(state_before, image)
        self._image = cropped
        _logger.info("crop applied: %r -> %r", image, cropped)
        self._notify()
        return cropped

    def commit_crop(self) -> WorkingImage | None:
        """Cut the drawn region out of the working image.

        No-op (returns None) without an active crop or a drawn region.
        Decode/encode failures propagate and leave state and history as they were.
        """
        image = self._image
        if image is None or not self._crop.is_cropping:
            _logger.debug("commit_crop ignored: no active crop")
            return None
        with self._image_operation("crop"):
            return self._run_commit_crop(image)

    def submit_commit_crop(self) -> Future:
        """Run ``commit_crop`` on the session worker. Listeners fire on that thread."""
        image = self._image
        if image is None or not self._crop.is_cropping:
            done: Future = Future()
            done.set_result(None)
            return done
        return self._submit("crop", self._run_commit_crop, image)

    # ---- compression ----
    def _resolve_quality(self, quality: float | None) -> float:
        return self._settings.compress_quality if quality is None else float(quality)

    def _run_compress(self, image: WorkingImage, quality: float, original_size: int) -> CompressionResult:
        result = compress_image(image, quality, original_size=original_size)
        self._last_compression = result
        return result

    def compress(self, quality: float | None = None) -> CompressionResult | None:
        """Preview a lossy re-encode of the working image.

        Does not change the edit state, the working image or history.
        Returns None without an image.
        """
        image = self._image
        if image is None:
            _logger.debug("compress ignored: no working image")
            return None
        q = self._resolve_quality(quality)
        with self._image_operation("compress"):
            # Size is taken before any encoding starts.
            return self._run_compress(image, q, image.byte_size)

    def submit_compress(self, quality: float | None = None) -> Future:
        """Run ``compress`` on the session worker.

        The original size is captured here, on the calling thread. Until the
        future completes, mutating calls raise ``SessionBusyError``.
        """
        image = self._image
        if image is None:
            done: Future = Future()
            done.set_result(None)
            return done
        q = self._resolve_quality(quality)
        return self._submit("compress", self._run_compress, image, q, image.byte_size)

    # ---- exports ----
    def export_compressed(self) -> ExportArtifact | None:
        result = self._last_compression
        if result is None:
            _logger.debug("export_compressed ignored: no compression result")
            return None
        return ExportArtifact(self._settings.compressed_filename, result.image.data, COMPRESSED_MEDIA_TYPE)

    def export_image(self) -> ExportArtifact | None:
        """Rasterize the current rendered view (adjustments applied) as PNG."""
        image = self._image
        if image is None:
            _logger.debug("export_image ignored: no working image")
            return None
        rendered = render_adjusted(image, self._state.copy())
        return ExportArtifact(self._settings.export_filename, rendered.data, "image/png")
