from __future__ import annotations

import logging
import math

import pytest

from curvekit.analysis import find_intersections, find_roots
from curvekit.classifier import parse_expression
from curvekit.geometry import DEFAULT_VIEWPORT, Viewport


def test_linear_root() -> None:
    roots = find_roots(parse_expression("x - 2"), DEFAULT_VIEWPORT, {})
    assert len(roots) == 1
    assert abs(roots[0].x - 2.0) < 1e-9
    assert roots[0].y == 0.0
    assert roots[0].kind == "root"
    assert roots[0].converged


def test_root_between_samples_is_bisected() -> None:
    [root] = find_roots(parse_expression("x - 1/3"), DEFAULT_VIEWPORT, {})
    assert root.x == pytest.approx(1 / 3, abs=1e-9)
    assert root.converged


def test_sine_roots_in_order() -> None:
    roots = find_roots(parse_expression("sin(x)"), DEFAULT_VIEWPORT, {})
    assert [r.x for r in roots] == pytest.approx([k * math.pi for k in range(-3, 4)], abs=1e-8)


def test_roots_use_slider_scope() -> None:
    [root] = find_roots(parse_expression("y = x - a"), DEFAULT_VIEWPORT, {"a": 0.7})
    assert root.x == pytest.approx(0.7, abs=1e-9)
    assert find_roots(parse_expression("y = x - a"), DEFAULT_VIEWPORT, {}) == []


def test_pole_is_not_a_root() -> None:
    assert find_roots(parse_expression("1/x"), DEFAULT_VIEWPORT, {}) == []
    assert find_roots(parse_expression("x^2 + 1"), DEFAULT_VIEWPORT, {}) == []


def test_roots_outside_viewport_are_ignored() -> None:
    assert find_roots(parse_expression("x - 20"), DEFAULT_VIEWPORT, {}) == []
    [root] = find_roots(parse_expression("x - 20"), Viewport(15.0, 25.0, -1.0, 1.0), {})
    assert root.x == pytest.approx(20.0, abs=1e-9)


def test_non_standard_inputs_give_nothing() -> None:
    assert find_roots(parse_expression("x^2 + y^2 = 1"), DEFAULT_VIEWPORT, {}) == []
    assert find_roots(parse_expression("r = theta"), DEFAULT_VIEWPORT, {}) == []
    assert find_roots(parse_expression("foo(x)"), DEFAULT_VIEWPORT, {}) == []
    assert find_intersections(
        parse_expression("x"), parse_expression("(t, t)"), DEFAULT_VIEWPORT, {}, {}
    ) == []


def test_iteration_cap_reports_best_estimate(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="curvekit.analysis"):
        [root] = find_roots(parse_expression("x - 1/3"), DEFAULT_VIEWPORT, {}, tolerance=0.0)
    assert not root.converged
    assert root.x == pytest.approx(1 / 3, abs=1e-12)
    assert any("bisection hit" in r.getMessage() for r in caplog.records)


def test_line_intersection() -> None:
    [hit] = find_intersections(parse_expression("x"), parse_expression("2 - x"), DEFAULT_VIEWPORT, {}, {})
    assert hit.x == pytest.approx(1.0, abs=1e-9)
    assert hit.y == pytest.approx(1.0, abs=1e-9)
    assert hit.kind == "intersection"


def test_parabola_line_intersections() -> None:
    hits = find_intersections(parse_expression("x^2"), parse_expression("x + 2"), DEFAULT_VIEWPORT, {}, {})
    assert [h.x for h in hits] == pytest.approx([-1.0, 2.0], abs=1e-9)
    assert [h.y for h in hits] == pytest.approx([1.0, 4.0], abs=1e-8)


def test_intersections_use_each_scope() -> None:
    hits = find_intersections(
        parse_expression("y = a*x"),
        parse_expression("y = a"),
        DEFAULT_VIEWPORT,
        {"a": 2.0},
        {"a": 3.0},
    )
    assert [h.x for h in hits] == pytest.approx([1.5], abs=1e-9)
    assert hits[0].y == pytest.approx(3.0, abs=1e-8)


def test_parallel_lines_do_not_intersect() -> None:
    assert find_intersections(parse_expression("x"), parse_expression("x + 1"), DEFAULT_VIEWPORT, {}, {}) == []
