from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Rect:
    """Rect in (x, y, w, h) form. Units depend on the space it lives in."""

    x: float
    y: float
    w: float
    h: float

    @property
    def x2(self) -> float:
        return self.x + self.w

    @property
    def y2(self) -> float:
        return self.y + self.h

    @property
    def is_empty(self) -> bool:
        return self.w <= 0 or self.h <= 0

    def normalized(self) -> Rect:
        x, y, w, h = float(self.x), float(self.y), float(self.w), float(self.h)
        if w < 0:
            x = x + w
            w = -w
        if h < 0:
            y = y + h
            h = -h
        return Rect(x, y, w, h)


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def clamp_rect(rect: Rect, bounds: Size) -> Rect:
    """Normalize ``rect`` and clip it to ``[0, bounds]`` on both axes."""
    r = rect.normalized()
    bw, bh = float(bounds.width), float(bounds.height)
    x1 = _clamp(r.x, 0.0, bw)
    y1 = _clamp(r.y, 0.0, bh)
    x2 = _clamp(r.x2, 0.0, bw)
    y2 = _clamp(r.y2, 0.0, bh)
    return Rect(x1, y1, x2 - x1, y2 - y1)


def rect_from_points(start: tuple[float, float], end: tuple[float, float], bounds: Size) -> Rect:
    """Rectangle spanned by a drag from ``start`` to ``end``.

    The moving end is clamped to the surface; the anchor is taken as given,
    then the whole rect is clipped.
    """
    sx, sy = float(start[0]), float(start[1])
    ex = _clamp(float(end[0]), 0.0, float(bounds.width))
    ey = _clamp(float(end[1]), 0.0, float(bounds.height))
    rect = Rect(min(sx, ex), min(sy, ey), abs(ex - sx), abs(ey - sy))
    return clamp_rect(rect, bounds)


def scale_factors(display_size: Size, natural_size: Size) -> tuple[float, float]:
    """Per-axis display -> source scale. Axes are independent."""
    if display_size.width <= 0 or display_size.height <= 0:
        raise ValueError(f"Display size must be positive, got {display_size.width}x{display_size.height}")
    return (
        float(natural_size.width) / float(display_size.width),
        float(natural_size.height) / float(display_size.height),
    )


def map_rect(display_rect: Rect, display_size: Size, natural_size: Size) -> Rect:
    """Map a display-space rect into source-pixel space.

    x and w scale by ``natural.width / display.width``, y and h by
    ``natural.height / display.height``. Non-uniform scale is kept as is.
    """
    sx, sy = scale_factors(display_size, natural_size)
    r = display_rect.normalized()
    return Rect(r.x * sx, r.y * sy, r.w * sx, r.h * sy)


def to_pixel_box(rect: Rect, natural_size: Size) -> tuple[int, int, int, int]:
    """Round a source-space rect to whole pixels inside the image.

    Returns (left, top, width, height). Width/height may be 0 if the rect
    lies entirely outside the image or rounds away.
    """
    nw, nh = int(natural_size.width), int(natural_size.height)
    r = rect.normalized()
    left = int(_clamp(round(r.x), 0, nw))
    top = int(_clamp(round(r.y), 0, nh))
    right = int(_clamp(round(r.x2), left, nw))
    bottom = int(_clamp(round(r.y2), top, nh))
    return left, top, right - left, bottom - top


class RegionTracker:
    """Latest crop rectangle of a pointer drag, for polling.

    Drag samples replace each other; nothing is queued. The rectangle stays
    available after release until the next press or ``clear()``.
    """

    def __init__(self, bounds: Size) -> None:
        self.bounds = bounds
        self._anchor: tuple[float, float] | None = None
        self._rect: Rect | None = None

    @property
    def dragging(self) -> bool:
        return self._anchor is not None

    def press(self, x: float, y: float) -> None:
        ax = _clamp(float(x), 0.0, float(self.bounds.width))
        ay = _clamp(float(y), 0.0, float(self.bounds.height))
        self._anchor = (ax, ay)
        self._rect = Rect(ax, ay, 0.0, 0.0)

    def move(self, x: float, y: float) -> Rect | None:
        if self._anchor is None:
            return self._rect
        self._rect = rect_from_points(self._anchor, (x, y), self.bounds)
        return self._rect

    def release(self) -> Rect | None:
        self._anchor = None
        return self._rect

    def latest(self) -> Rect | None:
        return self._rect

    def clear(self) -> None:
        self._anchor = None
        self._rect = None
