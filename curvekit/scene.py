"""One-call geometry for everything a graph view draws in a frame.

The caller (an application store) owns a list of :class:`ExpressionEntry`
records. :func:`build_scene` parses each visible entry and collects its curve
geometry, the requested overlays, the roots of the selected entry, and the
pairwise intersections of the visible standard curves. Nothing is kept
between calls.

Examples
--------
>>> from curvekit import DEFAULT_VIEWPORT
>>> entries = [ExpressionEntry("expr-1", "x"), ExpressionEntry("expr-2", "2 - x")]
>>> scene = build_scene(entries, DEFAULT_VIEWPORT)
>>> [curve.kind.value for curve in scene.curves]
['standard', 'standard']
>>> [(round(p.x, 3), round(p.y, 3)) for p in scene.intersections]
[(1.0, 1.0)]
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from itertools import combinations
from typing import Mapping, Optional, Sequence

from .ParsedExpression import ExpressionKind, ParsedExpression
from .SliderParam import SliderParam, create_sliders, scope_from_sliders
from .analysis import find_intersections, find_roots
from .classifier import parse_expression
from .config import TABLE_ROWS, SceneConfig
from .geometry import Point, Root, Segment, TangentLine, Viewport
from .sampler import (
    ValueTable,
    sample_derivative,
    sample_implicit,
    sample_parametric,
    sample_polar,
    sample_standard,
    tangent_line,
    value_table,
)

__all__ = ["CurveGeometry", "ExpressionEntry", "Scene", "build_scene", "build_value_table"]


@dataclass(frozen=True)
class ExpressionEntry:
    """One expression row as the store keeps it.

    ``id`` is assigned by the store; this module never generates ids.
    """

    id: str
    text: str
    visible: bool = True
    show_derivative: bool = False
    show_tangent: bool = False
    tangent_x: float = 0.0
    sliders: tuple[SliderParam, ...] = ()

    @property
    def scope(self) -> dict[str, float]:
        return scope_from_sliders(self.sliders)

    def parse(self) -> ParsedExpression:
        return parse_expression(self.text)

    def with_text(self, text: str) -> "ExpressionEntry":
        """New text, with sliders reconciled against the new free variables.

        An unparseable text keeps the current sliders.
        """
        parsed = parse_expression(text)
        if parsed.parse_error is not None:
            return replace(self, text=text)
        return replace(self, text=text, sliders=tuple(create_sliders(parsed.free_variables, self.sliders)))

    def advance(self, dt: float) -> "ExpressionEntry":
        """Step every animating slider by ``dt`` seconds."""
        return replace(self, sliders=tuple(slider.advance(dt) for slider in self.sliders))


@dataclass(frozen=True)
class CurveGeometry:
    """Geometry for one entry: ``points`` for curves, ``segments`` for implicit ones."""

    id: str
    kind: ExpressionKind
    points: tuple[Point, ...] = ()
    segments: tuple[Segment, ...] = ()
    derivative: tuple[Point, ...] = ()
    tangent: Optional[TangentLine] = None
    roots: tuple[Root, ...] = ()


@dataclass(frozen=True)
class Scene:
    curves: tuple[CurveGeometry, ...] = ()
    intersections: tuple[Root, ...] = ()


def _standard_geometry(
    entry: ExpressionEntry,
    parsed: ParsedExpression,
    viewport: Viewport,
    scope: Mapping[str, float],
    selected: bool,
    config: SceneConfig,
) -> CurveGeometry:
    derivative: tuple[Point, ...] = ()
    if entry.show_derivative:
        derivative = tuple(sample_derivative(parsed, viewport, scope, num_points=config.standard_samples))
    tangent = tangent_line(parsed, entry.tangent_x, viewport, scope) if entry.show_tangent else None
    roots: tuple[Root, ...] = ()
    if selected:
        roots = tuple(
            find_roots(parsed, viewport, scope, num_samples=config.root_samples, tolerance=config.root_tolerance)
        )
    return CurveGeometry(
        id=entry.id,
        kind=ExpressionKind.STANDARD,
        points=tuple(sample_standard(parsed, viewport, scope, num_points=config.standard_samples)),
        derivative=derivative,
        tangent=tangent,
        roots=roots,
    )


def build_scene(
    entries: Sequence[ExpressionEntry],
    viewport: Viewport,
    selected_id: Optional[str] = None,
    config: SceneConfig = SceneConfig(),
) -> Scene:
    """Compute the geometry of every visible, non-blank, error-free entry.

    Roots are only searched for the entry whose id is ``selected_id``.
    Intersections are computed for every pair of visible standard curves,
    but only when there are between 2 and ``config.max_intersection_curves``
    of them.
    """
    curves: list[CurveGeometry] = []
    standard: list[tuple[ParsedExpression, dict[str, float]]] = []

    for entry in entries:
        if not entry.visible or not entry.text.strip():
            continue
        parsed = entry.parse()
        if parsed.parse_error is not None:
            continue
        scope = entry.scope

        if parsed.kind is ExpressionKind.STANDARD:
            curves.append(_standard_geometry(entry, parsed, viewport, scope, entry.id == selected_id, config))
            standard.append((parsed, scope))
        elif parsed.kind is ExpressionKind.POLAR:
            points = sample_polar(parsed, scope, *config.theta_range, num_points=config.polar_samples)
            curves.append(CurveGeometry(id=entry.id, kind=parsed.kind, points=tuple(points)))
        elif parsed.kind is ExpressionKind.PARAMETRIC:
            points = sample_parametric(parsed, scope, *config.t_range, num_points=config.parametric_samples)
            curves.append(CurveGeometry(id=entry.id, kind=parsed.kind, points=tuple(points)))
        else:
            segments = sample_implicit(parsed, viewport, scope, resolution=config.implicit_resolution)
            curves.append(CurveGeometry(id=entry.id, kind=parsed.kind, segments=tuple(segments)))

    intersections: list[Root] = []
    if 2 <= len(standard) <= config.max_intersection_curves:
        for (p1, scope1), (p2, scope2) in combinations(standard, 2):
            intersections.extend(
                find_intersections(
                    p1,
                    p2,
                    viewport,
                    scope1,
                    scope2,
                    num_samples=config.root_samples,
                    tolerance=config.root_tolerance,
                )
            )

    return Scene(curves=tuple(curves), intersections=tuple(intersections))


def build_value_table(
    entries: Sequence[ExpressionEntry],
    viewport: Viewport,
    rows: int = TABLE_ROWS,
) -> tuple[tuple[str, ...], Optional[ValueTable]]:
    """Value table over the visible standard entries.

    Returns the ids of the tabulated entries (one column each) and the table,
    or ``((), None)`` when no entry qualifies.
    """
    columns: list[tuple[str, ParsedExpression, dict[str, float]]] = []
    for entry in entries:
        if not entry.visible or not entry.text.strip():
            continue
        parsed = entry.parse()
        if parsed.parse_error is None and parsed.kind is ExpressionKind.STANDARD:
            columns.append((entry.id, parsed, entry.scope))
    if not columns:
        return (), None
    table = value_table([(parsed, scope) for _, parsed, scope in columns], viewport, rows=rows)
    return tuple(entry_id for entry_id, _, _ in columns), table
