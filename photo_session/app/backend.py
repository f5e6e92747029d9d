"""Qt-facing facade over one EditSession.

- Single command entry: backend.dispatch(cmd, payload)
- UI binding via the state QObject (backend.adjustments)
- Python -> UI notifications via backend.event

Widgets, pointer capture and the render surface stay on the UI side. This
module only translates commands into session calls and reports failures.
"""

from __future__ import annotations

import contextlib
from typing import Any

from PySide6.QtCore import Property, QObject, QUrl, Signal, Slot

from photo_session.app.state.adjustment_state import AdjustmentState
from photo_session.errors import PhotoSessionError
from photo_session.logger import get_logger
from photo_session.ops.crop_controller import Rect, Size
from photo_session.session import EditSession
from photo_session.settings_manager import SettingsManager

_logger = get_logger("backend")


def _get_payload_value(payload: object | None, key: str, *, default: Any) -> Any:
    """Extract a value from a UI payload.

    Supports:
    - dict-like payloads (Python dict)
    - None
    - otherwise returns default
    """

    if payload is None:
        return default

    # QML often passes a JS object which arrives as QJSValue/QVariant.
    # Convert to a Python mapping when possible.
    if payload.__class__.__name__ == "QJSValue" and hasattr(payload, "toVariant"):
        with contextlib.suppress(Exception):
            payload = payload.toVariant()  # type: ignore[assignment, attr-defined]

    if isinstance(payload, dict):
        return payload.get(key, default)

    return default


def _local_path(raw: object) -> str:
    out = str(raw or "")
    if out.startswith("file:"):
        url = QUrl(out)
        if url.isLocalFile():
            out = url.toLocalFile()
    return out


class EditorBackend(QObject):
    """Single backend object exposed to the UI.

    UI -> Python: backend.dispatch(cmd, payload)
    Python -> UI: backend.event(dict)
    UI bindings: backend.adjustments
    """

    # QObject already has an .event() handler method, so we must not shadow it.
    event_ = Signal(object, name="event")

    def __init__(
        self,
        session: EditSession | None = None,
        settings: SettingsManager | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._session = session or EditSession(settings)
        self._adjustments = AdjustmentState(self)
        self._unsubscribe = self._session.subscribe(self._on_render_changed)
        self._sync_state()

        self._commands = {
            "loadImage": self._cmd_load_image,
            "setParameter": self._cmd_set_parameter,
            "applyPreset": self._cmd_apply_preset,
            "rotate": self._cmd_rotate,
            "flipHorizontal": lambda _p: self._session.flip_horizontal(),
            "flipVertical": lambda _p: self._session.flip_vertical(),
            "reset": lambda _p: self._session.reset(),
            "resetAll": lambda _p: self._session.reset_all(),
            "undo": lambda _p: self._session.undo(),
            "redo": lambda _p: self._session.redo(),
            "toggleCompare": self._cmd_toggle_compare,
            "startCrop": self._cmd_start_crop,
            "cropSetRect": self._cmd_crop_set_rect,
            "applyCrop": self._cmd_apply_crop,
            "cancelCrop": lambda _p: self._session.cancel_crop(),
            "compress": self._cmd_compress,
            "downloadCompressed": self._cmd_download_compressed,
            "downloadImage": self._cmd_download_image,
        }

    @property
    def session(self) -> EditSession:
        return self._session

    # ---- expose state objects to the UI ----
    def _get_adjustments(self) -> QObject:
        return self._adjustments

    adjustments = Property(QObject, _get_adjustments, constant=True)  # type: ignore[arg-type]

    def shutdown(self) -> None:
        self._unsubscribe()
        self._session.shutdown()

    # ---- command entry ----
    @Slot(str, "QVariant")  # type: ignore[call-overload]
    def dispatch(self, cmd: str, payload: object | None = None) -> None:
        command = str(cmd or "").strip()
        if not command:
            self._emit_error("Empty cmd")
            return

        handler = self._commands.get(command)
        if handler is None:
            _logger.warning("unknown command: %s", command)
            self._emit_error(f"Unknown command: {command}")
            return

        try:
            handler(payload)
        except (PhotoSessionError, ValueError, TypeError, OSError) as e:
            _logger.error("command %s failed: %s", command, e, exc_info=True)
            self._emit_error(str(e), command=command)
            return
        self._sync_state()

    # ---- notifications ----
    def _emit(self, name: str, **fields: Any) -> None:
        self.event_.emit({"type": "event", "name": name, **fields})

    def _emit_error(self, message: str, *, command: str | None = None) -> None:
        fields: dict[str, Any] = {"level": "error", "message": message}
        if command:
            fields["command"] = command
        self._emit("error", **fields)

    def _on_render_changed(self, description: dict[str, Any]) -> None:
        self._adjustments._apply(description)

    def _sync_state(self) -> None:
        self._adjustments._apply(self._session.render_description())
        self._adjustments._set_history(self._session.can_undo, self._session.can_redo)
        self._adjustments._set_compare_mode(self._session.compare_mode)

    # ---- commands ----
    def _cmd_load_image(self, payload: object | None) -> None:
        path = _local_path(_get_payload_value(payload, "path", default=""))
        if not path:
            raise ValueError("loadImage needs a path")
        image = self._session.load_image_file(path)
        self._emit("imageLoaded", path=path, width=image.width, height=image.height)

    def _cmd_set_parameter(self, payload: object | None) -> None:
        key = str(_get_payload_value(payload, "key", default=""))
        value = _get_payload_value(payload, "value", default=None)
        self._session.set_parameter(key, value)

    def _cmd_apply_preset(self, payload: object | None) -> None:
        self._session.apply_preset(str(_get_payload_value(payload, "name", default="")))

    def _cmd_rotate(self, payload: object | None) -> None:
        self._session.rotate(float(_get_payload_value(payload, "degrees", default=0.0)))

    def _cmd_toggle_compare(self, _payload: object | None) -> None:
        self._session.toggle_compare()

    def _cmd_start_crop(self, payload: object | None) -> None:
        w = float(_get_payload_value(payload, "displayWidth", default=0.0))
        h = float(_get_payload_value(payload, "displayHeight", default=0.0))
        if self._session.begin_crop(Size(w, h)):
            self._emit("cropStarted")

    def _cmd_crop_set_rect(self, payload: object | None) -> None:
        rect = Rect(
            float(_get_payload_value(payload, "x", default=0.0)),
            float(_get_payload_value(payload, "y", default=0.0)),
            float(_get_payload_value(payload, "w", default=0.0)),
            float(_get_payload_value(payload, "h", default=0.0)),
        )
        self._session.update_crop_region(rect)

    def _cmd_apply_crop(self, _payload: object | None) -> None:
        cropped = self._session.commit_crop()
        if cropped is not None:
            self._emit("cropApplied", width=cropped.width, height=cropped.height)

    def _cmd_compress(self, payload: object | None) -> None:
        quality = _get_payload_value(payload, "quality", default=None)
        result = self._session.compress(None if quality is None else float(quality))
        if result is None:
            return
        self._emit(
            "compressed",
            originalSize=result.original_size,
            compressedSize=result.compressed_size,
            reduction=result.reduction,
            quality=result.quality,
            summary=result.summary(),
        )

    def _cmd_download_compressed(self, payload: object | None) -> None:
        artifact = self._session.export_compressed()
        if artifact is None:
            return
        directory = _local_path(_get_payload_value(payload, "directory", default="."))
        path = artifact.write_to(directory)
        self._emit("exported", path=str(path), mediaType=artifact.media_type)

    def _cmd_download_image(self, payload: object | None) -> None:
        artifact = self._session.export_image()
        if artifact is None:
            return
        directory = _local_path(_get_payload_value(payload, "directory", default="."))
        path = artifact.write_to(directory)
        self._emit("exported", path=str(path), mediaType=artifact.media_type)
