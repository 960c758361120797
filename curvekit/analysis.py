"""Root and intersection finding by scan-and-bisect.

Both searches share one shape. The x-range of the viewport is scanned at
``num_samples`` uniform intervals. An interval whose end values have strictly
opposite signs is bisected for at most ``BISECTION_MAX_ITERATIONS`` steps,
stopping as soon as ``|f(mid)| < tolerance``. Intervals touching a
non-plottable sample are never bracketed. Each bracketing interval yields at
most one result, so two roots closer than one scan step can merge or vanish.

When the iteration cap is reached first, the last midpoint is still reported,
flagged ``converged=False``.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Mapping

import numpy as np

from .ParsedExpression import ExpressionKind, ParsedExpression
from .config import BISECTION_MAX_ITERATIONS, ROOT_SAMPLES, ROOT_TOLERANCE
from .geometry import Root, Viewport
from .sampler import evaluate_at, evaluate_batch

__all__ = ["find_intersections", "find_roots"]

logger = logging.getLogger(__name__)


def _is_standard(parsed: ParsedExpression) -> bool:
    return parsed.kind is ExpressionKind.STANDARD and parsed.is_valid


def _bisect(f: Callable[[float], float], lo: float, hi: float, tolerance: float) -> tuple[float, bool]:
    """Shrink the bracket ``[lo, hi]``; return ``(x, converged)``."""
    for _ in range(BISECTION_MAX_ITERATIONS):
        mid = (lo + hi) / 2
        value = f(mid)
        if abs(value) < tolerance:
            return mid, True
        if f(lo) * value < 0:
            hi = mid
        else:
            lo = mid
    return (lo + hi) / 2, False


def _scan(
    f: Callable[[float], float],
    values: np.ndarray,
    x_min: float,
    dx: float,
    tolerance: float,
) -> list[tuple[float, bool]]:
    """Bisect every sign change in ``values`` (sampled at ``x_min + i * dx``).

    A sample that is exactly zero is itself a root; the sign test alone would
    miss it because both neighbouring products are zero.
    """
    found: list[tuple[float, bool]] = []
    if len(values) and values[0] == 0:
        found.append((x_min, True))
    for i in range(1, len(values)):
        prev, current = values[i - 1], values[i]
        if not (math.isfinite(prev) and math.isfinite(current)):
            continue
        x = x_min + i * dx
        if current == 0:
            found.append((x, True))
        elif prev * current < 0:
            root, converged = _bisect(f, x - dx, x, tolerance)
            if not converged:
                logger.debug("bisection hit %d iterations near x=%g", BISECTION_MAX_ITERATIONS, root)
            found.append((root, converged))
    return found


def find_roots(
    parsed: ParsedExpression,
    viewport: Viewport,
    scope: Mapping[str, float],
    num_samples: int = ROOT_SAMPLES,
    tolerance: float = ROOT_TOLERANCE,
) -> list[Root]:
    """Zeros of a standard expression within the viewport's x-range.

    Roots are reported as ``Root(x, 0.0, "root", converged)`` in increasing x.
    Anything other than a valid standard expression gives ``[]``.
    """
    if not _is_standard(parsed):
        return []
    dx = (viewport.x_max - viewport.x_min) / num_samples
    xs = viewport.x_min + np.arange(num_samples + 1) * dx
    values = evaluate_batch(parsed.compiled, scope, {"x": xs})

    def f(x: float) -> float:
        return evaluate_at(parsed, x, scope)

    return [Root(x, 0.0, "root", converged) for x, converged in _scan(f, values, viewport.x_min, dx, tolerance)]


def find_intersections(
    p1: ParsedExpression,
    p2: ParsedExpression,
    viewport: Viewport,
    scope1: Mapping[str, float],
    scope2: Mapping[str, float],
    num_samples: int = ROOT_SAMPLES,
    tolerance: float = ROOT_TOLERANCE,
) -> list[Root]:
    """Crossings of two standard expressions, found as roots of ``f1 - f2``.

    The reported y is the first curve's value ``f1(x)`` at the crossing.

    Examples
    --------
    >>> from curvekit import parse_expression, DEFAULT_VIEWPORT
    >>> [hit] = find_intersections(parse_expression("x"), parse_expression("2 - x"), DEFAULT_VIEWPORT, {}, {})
    >>> round(hit.x, 6), round(hit.y, 6)
    (1.0, 1.0)
    """
    if not (_is_standard(p1) and _is_standard(p2)):
        return []
    dx = (viewport.x_max - viewport.x_min) / num_samples
    xs = viewport.x_min + np.arange(num_samples + 1) * dx
    values = evaluate_batch(p1.compiled, scope1, {"x": xs}) - evaluate_batch(p2.compiled, scope2, {"x": xs})

    def d(x: float) -> float:
        return evaluate_at(p1, x, scope1) - evaluate_at(p2, x, scope2)

    return [
        Root(x, evaluate_at(p1, x, scope1), "intersection", converged)
        for x, converged in _scan(d, values, viewport.x_min, dx, tolerance)
    ]
