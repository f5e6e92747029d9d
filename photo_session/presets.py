"""Named bundles of adjustment values.

A preset only carries the color adjustments it sets. Geometry (rotation and
flips) is never part of a preset.
"""

from __future__ import annotations

from types import MappingProxyType

from .errors import UnknownPresetError

PRESETS = MappingProxyType(
    {
        "grayscale": MappingProxyType({"brightness": 100, "contrast": 100, "saturate": 0}),
        "sepia": MappingProxyType({"brightness": 105, "contrast": 110, "saturate": 80}),
        "vintage": MappingProxyType({"brightness": 110, "contrast": 120, "saturate": 90}),
        "cool": MappingProxyType({"brightness": 100, "contrast": 105, "saturate": 120}),
        "warm": MappingProxyType({"brightness": 110, "contrast": 100, "saturate": 130}),
    }
)


def preset_names() -> list[str]:
    return list(PRESETS)


def get_preset(name: str) -> dict[str, float]:
    """Return a mutable copy of the named preset bundle.

    Raises:
        UnknownPresetError: if no preset has that name
    """
    try:
        bundle = PRESETS[name]
    except (KeyError, TypeError):
        raise UnknownPresetError(name) from None
    return dict(bundle)
