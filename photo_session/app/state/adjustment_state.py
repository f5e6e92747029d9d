from __future__ import annotations

from typing import Any

from PySide6.QtCore import Property, QObject, Signal


class AdjustmentState(QObject):
    """State bound by the rendering surface.

    Design:
    - Mirrors the session's render description; the session is authoritative.
    - Values are only pushed in by the backend through ``_apply``.
    """

    brightnessChanged = Signal(float)
    contrastChanged = Signal(float)
    saturateChanged = Signal(float)
    rotationChanged = Signal(float)
    scaleXChanged = Signal(int)
    scaleYChanged = Signal(int)
    canUndoChanged = Signal(bool)
    canRedoChanged = Signal(bool)
    compareModeChanged = Signal(bool)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._brightness = 100.0
        self._contrast = 100.0
        self._saturate = 100.0
        self._rotation = 0.0
        self._scale_x = 1
        self._scale_y = 1
        self._can_undo = False
        self._can_redo = False
        self._compare_mode = False

    # ---- read-only properties (mutate via backend) ----
    def _get_brightness(self) -> float:
        return float(self._brightness)

    brightness = Property(float, _get_brightness, notify=brightnessChanged)  # type: ignore[arg-type]

    def _get_contrast(self) -> float:
        return float(self._contrast)

    contrast = Property(float, _get_contrast, notify=contrastChanged)  # type: ignore[arg-type]

    def _get_saturate(self) -> float:
        return float(self._saturate)

    saturate = Property(float, _get_saturate, notify=saturateChanged)  # type: ignore[arg-type]

    def _get_rotation(self) -> float:
        return float(self._rotation)

    rotation = Property(float, _get_rotation, notify=rotationChanged)  # type: ignore[arg-type]

    def _get_scale_x(self) -> int:
        return int(self._scale_x)

    scaleX = Property(int, _get_scale_x, notify=scaleXChanged)  # type: ignore[arg-type]

    def _get_scale_y(self) -> int:
        return int(self._scale_y)

    scaleY = Property(int, _get_scale_y, notify=scaleYChanged)  # type: ignore[arg-type]

    def _get_can_undo(self) -> bool:
        return bool(self._can_undo)

    canUndo = Property(bool, _get_can_undo, notify=canUndoChanged)  # type: ignore[arg-type]

    def _get_can_redo(self) -> bool:
        return bool(self._can_redo)

    canRedo = Property(bool, _get_can_redo, notify=canRedoChanged)  # type: ignore[arg-type]

    def _get_compare_mode(self) -> bool:
        return bool(self._compare_mode)

    compareMode = Property(bool, _get_compare_mode, notify=compareModeChanged)  # type: ignore[arg-type]

    # ---- internal mutation helpers (called by backend) ----
    def _apply(self, description: dict[str, Any]) -> None:
        b = float(description.get("brightness", self._brightness))
        if b != self._brightness:
            self._brightness = b
            self.brightnessChanged.emit(b)

        c = float(description.get("contrast", self._contrast))
        if c != self._contrast:
            self._contrast = c
            self.contrastChanged.emit(c)

        s = float(description.get("saturate", self._saturate))
        if s != self._saturate:
            self._saturate = s
            self.saturateChanged.emit(s)

        r = float(description.get("rotation", self._rotation))
        if r != self._rotation:
            self._rotation = r
            self.rotationChanged.emit(r)

        sx = int(description.get("scaleX", self._scale_x))
        if sx != self._scale_x:
            self._scale_x = sx
            self.scaleXChanged.emit(sx)

        sy = int(description.get("scaleY", self._scale_y))
        if sy != self._scale_y:
            self._scale_y = sy
            self.scaleYChanged.emit(sy)

    def _set_history(self, can_undo: bool, can_redo: bool) -> None:
        u = bool(can_undo)
        if u != self._can_undo:
            self._can_undo = u
            self.canUndoChanged.emit(u)
        r = bool(can_redo)
        if r != self._can_redo:
            self._can_redo = r
            self.canRedoChanged.emit(r)

    def _set_compare_mode(self, value: bool) -> None:
        v = bool(value)
        if v == self._compare_mode:
            return
        self._compare_mode = v
        self.compareModeChanged.emit(v)
