from __future__ import annotations

import json
import os
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")


class SettingsManager:
    """Session configuration.

    Values live in memory only. A JSON file may be given to override the
    defaults at startup; it is read once and never written back.
    """

    DEFAULTS: dict[str, Any] = {
        "compress_quality": 0.92,
        "compressed_filename": "compressed.jpg",
        "export_filename": "edited-image.png",
        "history_limit": 0,
    }

    def __init__(self, settings_path: str | None = None, overrides: dict[str, Any] | None = None):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()
        if overrides:
            self._settings.update(overrides)

    def load(self) -> None:
        self._settings = {}
        if not self.settings_path:
            return
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    self._settings = data
                    _logger.debug("settings loaded: %s", self.settings_path)
                else:
                    _logger.warning("settings file is not a JSON object: %s", self.settings_path)
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def compress_quality(self) -> float:
        try:
            q = float(self.get("compress_quality"))
        except (TypeError, ValueError):
            _logger.warning("invalid compress_quality: %r", self.get("compress_quality"))
            return float(self.DEFAULTS["compress_quality"])
        if not 0.0 <= q <= 1.0:
            _logger.warning("compress_quality out of range: %s", q)
            return float(self.DEFAULTS["compress_quality"])
        return q

    @property
    def compressed_filename(self) -> str:
        return str(self.get("compressed_filename") or self.DEFAULTS["compressed_filename"])

    @property
    def export_filename(self) -> str:
        return str(self.get("export_filename") or self.DEFAULTS["export_filename"])

    @property
    def history_limit(self) -> int:
        try:
            return max(0, int(self.get("history_limit")))
        except (TypeError, ValueError):
            _logger.warning("invalid history_limit: %r", self.get("history_limit"))
            return 0
