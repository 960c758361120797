"""Geometry records produced by the sampler and analyzer, plus the viewport."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import NamedTuple

__all__ = [
    "DEFAULT_VIEWPORT",
    "Point",
    "Root",
    "Segment",
    "TangentLine",
    "Viewport",
    "is_plottable",
]


class Point(NamedTuple):
    """Sampled point; a NaN coordinate marks a gap (pen up)."""

    x: float
    y: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


class Segment(NamedTuple):
    start: Point
    end: Point


class Root(NamedTuple):
    """Root or intersection found by bisection.

    ``converged`` is False when the iteration cap was hit before the
    residual dropped below tolerance; ``(x, y)`` is then a best estimate.
    """

    x: float
    y: float
    kind: str  # "root" or "intersection"
    converged: bool = True


@dataclass(frozen=True)
class TangentLine:
    start: Point
    end: Point
    contact: Point
    slope: float


@dataclass(frozen=True)
class Viewport:
    """Visible window in world coordinates.

    ``x_min < x_max`` and ``y_min < y_max`` are the caller's responsibility.
    """

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def pan(self, dx: float, dy: float) -> "Viewport":
        """Drag the content by ``(dx, dy)`` world units; the window moves the opposite way."""
        return Viewport(self.x_min - dx, self.x_max - dx, self.y_min - dy, self.y_max - dy)

    def zoom(self, factor: float, cx: float | None = None, cy: float | None = None) -> "Viewport":
        """Scale the window about ``(cx, cy)`` (default: its centre).

        ``factor > 1`` zooms out, ``factor < 1`` zooms in; the anchor point
        keeps its position on screen.
        """
        if cx is None:
            cx = (self.x_min + self.x_max) / 2
        if cy is None:
            cy = (self.y_min + self.y_max) / 2
        return replace(
            self,
            x_min=cx - (cx - self.x_min) * factor,
            x_max=cx + (self.x_max - cx) * factor,
            y_min=cy - (cy - self.y_min) * factor,
            y_max=cy + (self.y_max - cy) * factor,
        )


DEFAULT_VIEWPORT = Viewport(-10.0, 10.0, -7.0, 7.0)


def is_plottable(value: object) -> bool:
    """True for a finite real number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
