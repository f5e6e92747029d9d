from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("PySide6")
pytest.importorskip("pyvips")

from photo_session.app.backend import EditorBackend


@pytest.fixture
def backend():
    b = EditorBackend()
    yield b
    b.shutdown()


@pytest.fixture
def events(backend) -> list[dict]:
    seen: list[dict] = []
    backend.event_.connect(seen.append)
    return seen


@pytest.fixture
def image_path(tmp_path: Path, png_bytes: bytes) -> Path:
    p = tmp_path / "in.png"
    p.write_bytes(png_bytes)
    return p


def _names(events: list[dict]) -> list[str]:
    return [e["name"] for e in events]


def test_load_and_adjust(backend, events, image_path):
    backend.dispatch("loadImage", {"path": str(image_path)})
    assert _names(events) == ["imageLoaded"]
    assert events[0]["width"] == 64

    state = backend.adjustments
    seen: list[float] = []
    state.brightnessChanged.connect(seen.append)

    backend.dispatch("setParameter", {"key": "brightness", "value": 125})
    assert state.brightness == 125.0
    assert seen == [125.0]
    assert state.canUndo is True
    assert state.canRedo is False

    backend.dispatch("undo")
    assert state.brightness == 100.0
    assert state.canUndo is False
    assert state.canRedo is True


def test_transform_commands(backend, image_path):
    backend.dispatch("loadImage", {"path": image_path.as_uri()})
    backend.dispatch("rotate", {"degrees": 90})
    backend.dispatch("rotate", {"degrees": 90})
    backend.dispatch("flipHorizontal")
    backend.dispatch("applyPreset", {"name": "cool"})

    state = backend.adjustments
    assert state.rotation == 180.0
    assert state.scaleX == -1
    assert state.scaleY == 1
    assert state.saturate == 120.0

    backend.dispatch("reset")
    assert state.rotation == 0.0
    assert state.scaleX == 1


def test_errors_are_reported_not_raised(backend, events, tmp_path):
    backend.dispatch("applyPreset", {"name": "psychedelic"})
    backend.dispatch("loadImage", {"path": str(tmp_path / "missing.png")})
    backend.dispatch("setParameter", {"key": "hue", "value": 3})
    backend.dispatch("noSuchCommand")
    backend.dispatch("")

    assert _names(events) == ["error"] * 5
    assert "psychedelic" in events[0]["message"]
    assert events[0]["command"] == "applyPreset"
    assert backend.session.undo_depth == 0


def test_bad_payload_values_are_reported(backend, events, image_path, tmp_path):
    backend.dispatch("loadImage", {"path": str(image_path)})
    backend.dispatch("rotate", {"degrees": None})
    backend.dispatch("rotate", {"degrees": float("inf")})
    backend.dispatch("setParameter", {"key": "brightness", "value": float("nan")})
    backend.dispatch("downloadImage", {"directory": str(tmp_path)})

    assert _names(events) == ["imageLoaded", "error", "error", "error", "exported"]
    assert all(e["command"] in ("rotate", "setParameter") for e in events[1:4])
    assert backend.session.undo_depth == 0
    assert (tmp_path / "edited-image.png").exists()


def test_crop_compress_and_download(backend, events, image_path, tmp_path):
    backend.dispatch("loadImage", {"path": str(image_path)})
    backend.dispatch("startCrop", {"displayWidth": 64, "displayHeight": 48})
    backend.dispatch("cropSetRect", {"x": 0, "y": 0, "w": 32, "h": 16})
    backend.dispatch("applyCrop")
    backend.dispatch("compress", {"quality": 0.9})

    out_dir = tmp_path / "out"
    out_dir.mkdir()
    backend.dispatch("downloadCompressed", {"directory": str(out_dir)})
    backend.dispatch("downloadImage", {"directory": str(out_dir)})

    names = _names(events)
    assert names == ["imageLoaded", "cropStarted", "cropApplied", "compressed", "exported", "exported"]
    applied = events[2]
    assert (applied["width"], applied["height"]) == (32, 16)
    compressed = events[3]
    assert compressed["quality"] == 0.9
    assert compressed["summary"].startswith("Original:")
    assert (out_dir / "compressed.jpg").exists()
    assert (out_dir / "edited-image.png").exists()


def test_compare_toggle(backend):
    assert backend.adjustments.compareMode is False
    backend.dispatch("toggleCompare")
    assert backend.adjustments.compareMode is True
