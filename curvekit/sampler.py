"""
sampler: turn compiled expressions into plottable geometry
==========================================================

Purpose
-------
Evaluate a :class:`~curvekit.ParsedExpression` over the visible window and
return points (standard, polar, parametric, derivative) or line segments
(implicit curves, via marching squares).

Safe evaluation
---------------
Every sampler goes through :func:`evaluate_batch`, which never raises:

- the compiled NumPy function is called once on the whole batch with
  floating-point warnings silenced;
- results with a non-zero imaginary part, infinities and NaNs all become NaN;
- if the vectorized call itself raises, the batch is re-evaluated one sample
  at a time so that a fault only blanks its own sample;
- if the scope lacks a variable the expression needs, every sample is NaN.

A NaN coordinate in the output is the "pen up" sentinel for renderers.
Sampling an expression without a compiled form returns an empty result.

Examples
--------
>>> from curvekit import parse_expression, Viewport
>>> pts = sample_standard(parse_expression("1/x"), Viewport(-1, 1, -1, 1), {}, num_points=2)
>>> [p.y for p in pts]
[-1.0, nan, 1.0]
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np

from .CompiledExpression import CompiledExpression
from .ParsedExpression import ExpressionKind, ParsedExpression
from .config import (
    DERIVATIVE_STEP,
    IMPLICIT_RESOLUTION,
    LERP_EPSILON,
    PARAMETRIC_SAMPLES,
    PARAMETRIC_T_RANGE,
    POLAR_SAMPLES,
    POLAR_THETA_RANGE,
    STANDARD_SAMPLES,
    TABLE_ROWS,
    SceneConfig,
)
from .geometry import Point, Segment, TangentLine, Viewport

__all__ = [
    "ValueTable",
    "evaluate_at",
    "evaluate_batch",
    "points_to_arrays",
    "safe_eval",
    "sample",
    "sample_derivative",
    "sample_implicit",
    "sample_parametric",
    "sample_polar",
    "sample_standard",
    "tangent_line",
    "value_table",
]

logger = logging.getLogger(__name__)

Scope = Mapping[str, float]


# === SECTION: Safe evaluation [id: safe-eval]===


def _to_real(values: Any) -> np.ndarray:
    """Return a float array where anything not finite and real is NaN."""
    arr = np.asarray(values)
    if np.iscomplexobj(arr):
        arr = np.where(arr.imag == 0, arr.real, np.nan)
    arr = np.array(arr, dtype=float)
    arr[~np.isfinite(arr)] = np.nan
    return arr


def _float_scope(scope: Scope) -> dict[str, np.ndarray]:
    """Slider values as float arrays; integer powers such as ``2**-1`` fail in NumPy."""
    return {name: np.asarray(value, dtype=float) for name, value in scope.items()}


def evaluate_batch(compiled: CompiledExpression, scope: Scope, coordinates: Mapping[str, np.ndarray]) -> np.ndarray:
    """Evaluate ``compiled`` at every sample of ``coordinates``.

    Parameters
    ----------
    compiled:
        Expression to evaluate.
    scope:
        Slider values. Keys that name a coordinate are overridden.
    coordinates:
        Coordinate name -> sample array. All arrays broadcast to the output shape.

    Returns
    -------
    numpy.ndarray
        Float array of the broadcast shape; NaN where the value is not plottable.
    """
    shape = np.broadcast_shapes(*(np.shape(v) for v in coordinates.values()))
    scope = _float_scope(scope)
    full_scope = {**scope, **coordinates}
    if compiled.missing_variables(full_scope):
        return np.full(shape, np.nan)

    with np.errstate(all="ignore"):
        try:
            return np.broadcast_to(_to_real(compiled.evaluate(full_scope)), shape).copy()
        except Exception as exc:  # fall back to per-sample evaluation
            logger.debug("vectorized evaluation of %r failed (%s); evaluating per sample", compiled.text, exc)

        out = np.full(shape, np.nan)
        grids = {name: np.broadcast_to(values, shape) for name, values in coordinates.items()}
        for index in np.ndindex(*shape):
            sample_scope = dict(scope)
            sample_scope.update({name: float(grid[index]) for name, grid in grids.items()})
            try:
                out[index] = _to_real(compiled.evaluate(sample_scope)).reshape(-1)[0]
            except Exception:  # a failing sample is not plottable
                continue
        return out


def safe_eval(compiled: CompiledExpression, scope: Scope) -> float:
    """Evaluate once; NaN instead of any fault or non-finite/complex result."""
    if compiled.missing_variables(scope):
        return math.nan
    scope = _float_scope(scope)
    with np.errstate(all="ignore"):
        try:
            values = _to_real(compiled.evaluate(scope)).reshape(-1)
        except Exception:  # a failing sample is not plottable
            return math.nan
    return float(values[0]) if values.size == 1 else math.nan


def _grid(lo: float, hi: float, n: int) -> np.ndarray:
    """``n + 1`` samples ``lo + i * (hi - lo) / n``."""
    return lo + np.arange(n + 1) * ((hi - lo) / n)


def _points(xs: np.ndarray, ys: np.ndarray) -> list[Point]:
    return [Point(x, y) for x, y in zip(xs.tolist(), ys.tolist())]


# === SECTION: 1-D samplers [id: curves]===


def sample_standard(
    parsed: ParsedExpression,
    viewport: Viewport,
    scope: Scope,
    num_points: int = STANDARD_SAMPLES,
) -> list[Point]:
    """Sample ``y = f(x)`` at ``num_points + 1`` evenly spaced x across the viewport."""
    if parsed.compiled is None:
        return []
    xs = _grid(viewport.x_min, viewport.x_max, num_points)
    return _points(xs, evaluate_batch(parsed.compiled, scope, {"x": xs}))


def sample_polar(
    parsed: ParsedExpression,
    scope: Scope,
    theta_min: float = POLAR_THETA_RANGE[0],
    theta_max: float = POLAR_THETA_RANGE[1],
    num_points: int = POLAR_SAMPLES,
) -> list[Point]:
    """Sample ``r = f(theta)`` and map to Cartesian ``(r cos theta, r sin theta)``.

    A non-plottable ``r`` yields ``Point(nan, nan)`` at that index.
    """
    if parsed.compiled is None:
        return []
    thetas = _grid(theta_min, theta_max, num_points)
    r = evaluate_batch(parsed.compiled, scope, {"theta": thetas})
    return _points(r * np.cos(thetas), r * np.sin(thetas))


def sample_parametric(
    parsed: ParsedExpression,
    scope: Scope,
    t_min: float = PARAMETRIC_T_RANGE[0],
    t_max: float = PARAMETRIC_T_RANGE[1],
    num_points: int = PARAMETRIC_SAMPLES,
) -> list[Point]:
    """Sample ``(x(t), y(t))``; each component is evaluated independently."""
    if parsed.compiled_x is None or parsed.compiled_y is None:
        return []
    ts = _grid(t_min, t_max, num_points)
    xs = evaluate_batch(parsed.compiled_x, scope, {"t": ts})
    ys = evaluate_batch(parsed.compiled_y, scope, {"t": ts})
    return _points(xs, ys)


def sample_derivative(
    parsed: ParsedExpression,
    viewport: Viewport,
    scope: Scope,
    num_points: int = STANDARD_SAMPLES,
    h: float = DERIVATIVE_STEP,
) -> list[Point]:
    """Central-difference derivative ``(f(x+h) - f(x-h)) / 2h`` on the standard grid."""
    if parsed.compiled is None:
        return []
    xs = _grid(viewport.x_min, viewport.x_max, num_points)
    fp = evaluate_batch(parsed.compiled, scope, {"x": xs + h})
    fm = evaluate_batch(parsed.compiled, scope, {"x": xs - h})
    return _points(xs, _to_real((fp - fm) / (2 * h)))


def evaluate_at(parsed: ParsedExpression, x: float, scope: Scope) -> float:
    """``f(x)`` for a standard expression; NaN when not plottable."""
    if parsed.compiled is None:
        return math.nan
    return safe_eval(parsed.compiled, {**scope, "x": x})


def tangent_line(
    parsed: ParsedExpression,
    a: float,
    viewport: Viewport,
    scope: Scope,
    h: float = DERIVATIVE_STEP,
) -> Optional[TangentLine]:
    """Tangent to ``y = f(x)`` at ``x = a``, spanning the viewport's x-extent.

    Returns None when ``f(a)`` or the slope is not finite.
    """
    if parsed.compiled is None:
        return None
    ya = evaluate_at(parsed, a, scope)
    slope = (evaluate_at(parsed, a + h, scope) - evaluate_at(parsed, a - h, scope)) / (2 * h)
    if not (math.isfinite(ya) and math.isfinite(slope)):
        return None
    return TangentLine(
        start=Point(viewport.x_min, ya + slope * (viewport.x_min - a)),
        end=Point(viewport.x_max, ya + slope * (viewport.x_max - a)),
        contact=Point(a, ya),
        slope=slope,
    )


# === SECTION: Marching squares [id: implicit]===

# Case index -> edge pairs. Bits: bottom-left 1, bottom-right 2, top-right 4, top-left 8.
# 5 and 10 are the saddles; both diagonal pairings are emitted.
_EDGE_TABLE: dict[int, tuple[tuple[str, str], ...]] = {
    1: (("B", "L"),),
    14: (("B", "L"),),
    2: (("R", "B"),),
    13: (("R", "B"),),
    3: (("R", "L"),),
    12: (("R", "L"),),
    4: (("T", "R"),),
    11: (("T", "R"),),
    5: (("B", "L"), ("T", "R")),
    6: (("T", "B"),),
    9: (("T", "B"),),
    7: (("T", "L"),),
    8: (("T", "L"),),
    10: (("R", "B"), ("L", "T")),
}


def _lerp(a: np.ndarray, b: np.ndarray, va: np.ndarray, vb: np.ndarray) -> np.ndarray:
    """Zero crossing between ``a`` (value ``va``) and ``b`` (value ``vb``); midpoint on near-ties."""
    return np.where(np.abs(va - vb) < LERP_EPSILON, (a + b) / 2, a + (b - a) * -va / (vb - va))


def sample_implicit(
    parsed: ParsedExpression,
    viewport: Viewport,
    scope: Scope,
    resolution: int = IMPLICIT_RESOLUTION,
) -> list[Segment]:
    """Approximate ``f(x, y) = 0`` with marching squares.

    The ``(resolution + 1)^2`` grid ``g[i, j] = f(x_i, y_j)`` is evaluated in
    one batch. Cells with a non-plottable corner are skipped, which can leave
    gaps near singularities. Segments are returned unordered (cell by cell);
    no stitching into polylines is attempted.
    """
    if parsed.compiled is None:
        return []
    xs = _grid(viewport.x_min, viewport.x_max, resolution)
    ys = _grid(viewport.y_min, viewport.y_max, resolution)
    grid = evaluate_batch(parsed.compiled, scope, {"x": xs[:, None], "y": ys[None, :]})

    v00 = grid[:-1, :-1]  # bottom-left
    v10 = grid[1:, :-1]  # bottom-right
    v11 = grid[1:, 1:]  # top-right
    v01 = grid[:-1, 1:]  # top-left
    finite = np.isfinite(v00) & np.isfinite(v10) & np.isfinite(v11) & np.isfinite(v01)
    case = (
        (v00 > 0).astype(int)
        | (v10 > 0).astype(int) << 1
        | (v11 > 0).astype(int) << 2
        | (v01 > 0).astype(int) << 3
    )
    active = finite & (case != 0) & (case != 15)
    if not active.any():
        return []

    shape = v00.shape
    x0, x1 = xs[:-1, None], xs[1:, None]
    y0, y1 = ys[None, :-1], ys[None, 1:]
    with np.errstate(all="ignore"):
        edges = {
            "B": (_lerp(x0, x1, v00, v10), np.broadcast_to(y0, shape)),
            "R": (np.broadcast_to(x1, shape), _lerp(y0, y1, v10, v11)),
            "T": (_lerp(x0, x1, v01, v11), np.broadcast_to(y1, shape)),
            "L": (np.broadcast_to(x0, shape), _lerp(y0, y1, v00, v01)),
        }

    segments: list[Segment] = []
    for i, j in zip(*np.nonzero(active)):
        for first, second in _EDGE_TABLE[int(case[i, j])]:
            ax, ay = edges[first]
            bx, by = edges[second]
            segments.append(
                Segment(
                    Point(float(ax[i, j]), float(ay[i, j])),
                    Point(float(bx[i, j]), float(by[i, j])),
                )
            )
    return segments


# === SECTION: Dispatch and tabulation [id: dispatch]===


def sample(
    parsed: ParsedExpression,
    viewport: Viewport,
    scope: Scope,
    config: SceneConfig = SceneConfig(),
) -> Union[list[Point], list[Segment]]:
    """Sample ``parsed`` the way its kind requires.

    Implicit expressions give segments, every other kind gives points.
    """
    if parsed.kind is ExpressionKind.POLAR:
        return sample_polar(parsed, scope, *config.theta_range, num_points=config.polar_samples)
    if parsed.kind is ExpressionKind.PARAMETRIC:
        return sample_parametric(parsed, scope, *config.t_range, num_points=config.parametric_samples)
    if parsed.kind is ExpressionKind.IMPLICIT:
        return sample_implicit(parsed, viewport, scope, resolution=config.implicit_resolution)
    return sample_standard(parsed, viewport, scope, num_points=config.standard_samples)


@dataclass(frozen=True)
class ValueTable:
    """``rows[i][k]`` is column ``k`` at ``xs[i]``; None marks a blank cell."""

    xs: tuple[float, ...]
    rows: tuple[tuple[Optional[float], ...], ...]


def value_table(
    columns: Sequence[tuple[ParsedExpression, Scope]],
    viewport: Viewport,
    rows: int = TABLE_ROWS,
) -> ValueTable:
    """Tabulate standard expressions at ``rows + 1`` x positions across the viewport.

    x positions and values are rounded to 6 decimals. A cell is None when
    the expression has no compiled form or its value is not plottable there.
    """
    step = (viewport.x_max - viewport.x_min) / rows
    xs = tuple(round(viewport.x_min + i * step, 6) for i in range(rows + 1))
    table: list[tuple[Optional[float], ...]] = []
    for x in xs:
        cells: list[Optional[float]] = []
        for parsed, scope in columns:
            if parsed.parse_error is not None or parsed.compiled is None:
                cells.append(None)
                continue
            y = evaluate_at(parsed, x, scope)
            cells.append(round(y, 6) if math.isfinite(y) else None)
        table.append(tuple(cells))
    return ValueTable(xs=xs, rows=tuple(table))


def points_to_arrays(points: Sequence[Point]) -> tuple[np.ndarray, np.ndarray]:
    """Split points into ``(xs, ys)`` float arrays (NaN gaps preserved)."""
    if not points:
        return np.empty(0), np.empty(0)
    arr = np.asarray(points, dtype=float)
    return arr[:, 0], arr[:, 1]
