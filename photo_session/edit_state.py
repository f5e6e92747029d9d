from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any

from .errors import InvalidParameterError

ADJUSTMENT_KEYS = ("brightness", "contrast", "saturate")
DEFAULT_PERCENT = 100.0


def _finite_number(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidParameterError(f"Parameter {key!r} needs a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Parameter {key!r} needs a number, got {value!r}") from None
    # NaN and infinities cannot be rendered
    if not math.isfinite(number):
        raise InvalidParameterError(f"Parameter {key!r} must be finite, got {value!r}")
    return number


@dataclass(slots=True)
class EditState:
    """Current adjustment and transform parameters.

    Percentages are unconstrained. ``rotation`` accumulates without wrapping.
    ``flip_x``/``flip_y`` are signs and stay in {-1, 1}.
    """

    brightness: float = DEFAULT_PERCENT
    contrast: float = DEFAULT_PERCENT
    saturate: float = DEFAULT_PERCENT
    rotation: float = 0.0
    flip_x: int = 1
    flip_y: int = 1

    def copy(self) -> EditState:
        return replace(self)

    @staticmethod
    def coerce_adjustment(key: str, value: Any) -> float:
        """Validate an adjustment key and return its value as a float."""
        if key not in ADJUSTMENT_KEYS:
            raise InvalidParameterError(f"Unknown parameter: {key!r}")
        return _finite_number(key, value)

    @staticmethod
    def coerce_degrees(value: Any) -> float:
        return _finite_number("rotation", value)

    def set_adjustment(self, key: str, value: Any) -> None:
        setattr(self, key, self.coerce_adjustment(key, value))

    def apply_bundle(self, bundle: dict[str, Any]) -> None:
        for key, value in bundle.items():
            self.set_adjustment(key, value)

    def rotate(self, delta: float) -> None:
        self.rotation += self.coerce_degrees(delta)

    def flip_horizontal(self) -> None:
        self.flip_x *= -1

    def flip_vertical(self) -> None:
        self.flip_y *= -1

    def render_description(self) -> dict[str, float | int]:
        """Declarative description consumed by the rendering collaborator."""
        return {
            "brightness": self.brightness,
            "contrast": self.contrast,
            "saturate": self.saturate,
            "rotation": self.rotation,
            "scaleX": self.flip_x,
            "scaleY": self.flip_y,
        }
