from __future__ import annotations

import math

import numpy as np
import pytest
import sympy as sp

from curvekit.ParsedExpression import ExpressionKind
from curvekit.classifier import CLASSIFICATION_RULES, parse, parse_expression, split_parametric, to_sympy
from curvekit.expression_ast import parse_ast
from curvekit.geometry import Viewport
from curvekit.sampler import sample_standard


@pytest.mark.parametrize(
    ("text", "kind"),
    [
        ("y = 2x + 1", ExpressionKind.STANDARD),
        ("sin(x)", ExpressionKind.STANDARD),
        ("(x + 1)", ExpressionKind.STANDARD),
        ("(x+1)*max(x, 2)", ExpressionKind.STANDARD),
        ("r = 1 + cos(theta)", ExpressionKind.POLAR),
        ("r = 2θ", ExpressionKind.POLAR),
        ("(cos(t), sin(t))", ExpressionKind.PARAMETRIC),
        ("(cos(2t), max(t, 1))", ExpressionKind.PARAMETRIC),
        ("x^2 + y^2 = 1", ExpressionKind.IMPLICIT),
        ("x^2 + y^2 - 4", ExpressionKind.IMPLICIT),
        ("y = y^2 + x", ExpressionKind.IMPLICIT),
        ("x = 3", ExpressionKind.IMPLICIT),
    ],
)
def test_classification(text: str, kind: ExpressionKind) -> None:
    parsed = parse_expression(text)
    assert parsed.parse_error is None
    assert parsed.kind is kind
    assert parsed.is_valid


def test_rules_are_tried_in_order() -> None:
    assert [rule.__name__ for rule in CLASSIFICATION_RULES] == [
        "_polar_rule",
        "_parametric_rule",
        "_equation_rule",
        "_bare_rule",
    ]


def test_free_variables_exclude_coordinates_and_builtins() -> None:
    assert parse_expression("y = a*x + b").free_variables == ("a", "b")
    assert parse_expression("y = b*x + a").free_variables == ("b", "a")
    assert parse_expression("y = sin(x) + pi").free_variables == ()
    assert parse_expression("r = a*theta").free_variables == ("a",)
    assert parse_expression("(a*cos(t), b*sin(t) + a)").free_variables == ("a", "b")
    assert parse_expression("x^2 + y^2 = r^2").free_variables == ("r",)


def test_compiled_variables_put_coordinates_first() -> None:
    parsed = parse_expression("x^2 + y^2 = k")
    assert parsed.compiled is not None
    assert parsed.compiled.variables == ("x", "y", "k")
    assert parsed.compiled.text == "(x^2 + y^2) - (k)"
    assert float(parsed.compiled.evaluate({"x": 1.0, "y": 2.0, "k": 5.0})) == 0.0


def test_parametric_components_compile_separately() -> None:
    parsed = parse_expression("(a*cos(t), sin(t))")
    assert parsed.compiled is None
    assert parsed.compiled_x is not None and parsed.compiled_y is not None
    assert parsed.compiled_x.text == "a*cos(t)"
    assert parsed.compiled_y.variables == ("t", "a")
    assert float(parsed.compiled_x.evaluate({"t": 0.0, "a": 3.0})) == pytest.approx(3.0)


def test_stray_coordinate_becomes_required_variable() -> None:
    parsed = parse_expression("y = t*x")
    assert parsed.parse_error is None
    assert parsed.free_variables == ()
    assert parsed.compiled is not None
    assert parsed.compiled.missing_variables({"x": 1.0}) == ("t",)


def test_parsing_is_idempotent() -> None:
    first = parse_expression("y = a*x^2")
    second = parse_expression("y = a*x^2")
    assert (first.kind, first.free_variables, first.text) == (second.kind, second.free_variables, second.text)
    assert first.compiled is not None and second.compiled is not None
    assert first.compiled.symbolic == second.compiled.symbolic


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("foo(x)", "Undefined function foo"),
        ("sin(x, 2)", "Wrong number of arguments in function sin (2 provided, 1 expected)"),
        ("atan2(x)", "2 expected"),
        ("log(x, 2, 3)", "1 to 2 expected"),
        ("y = sin + 1", "must be called with arguments"),
        ("sin(", "ended"),
        ("x +", "ended"),
        ("2 $ x", "Unexpected character"),
    ],
)
def test_parse_errors_are_reported(text: str, message: str) -> None:
    parsed = parse_expression(text)
    assert parsed.parse_error is not None
    assert message in parsed.parse_error
    assert parsed.kind is ExpressionKind.STANDARD
    assert parsed.compiled is None
    assert not parsed.is_valid


def test_blank_input_is_not_an_error() -> None:
    parsed = parse_expression("   ")
    assert parsed.parse_error is None
    assert parsed.is_blank
    assert parsed.compiled is None
    assert parsed.free_variables == ()


def test_parse_keeps_normalized_text() -> None:
    assert parse_expression(" y = 2x ").text == "y = 2*x"
    assert parse("y = 2*x").text == "y = 2*x"


def test_to_sympy_uses_floats_without_simplifying() -> None:
    x = sp.Symbol("x")
    assert isinstance(to_sympy(parse_ast("3")), sp.Float)
    assert float(to_sympy(parse_ast("1/2"))) == 0.5
    assert float(to_sympy(parse_ast("ln(e)"))) == pytest.approx(1.0)
    assert to_sympy(parse_ast("x/x")) != 1
    assert to_sympy(parse_ast("x/x")).free_symbols == {x}


def test_power_tower_parses_quickly_and_overflows() -> None:
    parsed = parse_expression("10^10^10")
    assert parsed.parse_error is None
    assert parsed.kind is ExpressionKind.STANDARD
    points = sample_standard(parsed, Viewport(-1.0, 1.0, -1.0, 1.0), {}, num_points=2)
    assert len(points) == 3
    assert all(math.isnan(p.y) for p in points)
    assert parse_expression("y = x + 9^9^9^9").is_valid


def test_removable_singularity_stays_undefined() -> None:
    points = sample_standard(parse_expression("x/x"), Viewport(-1.0, 1.0, -1.0, 1.0), {}, num_points=2)
    assert points[0].y == 1.0
    assert math.isnan(points[1].y)
    assert points[2].y == 1.0


def test_split_parametric_respects_nesting() -> None:
    assert split_parametric("(max(t, 1), t)") == ("max(t, 1)", "t")
    assert split_parametric("((t))") is None
    assert split_parametric("(x+1)*max(x, 2)") is None
    assert split_parametric("(t, t, t)") is None
    assert split_parametric("(t, (t)") is None


def test_numeric_results_match_numpy() -> None:
    parsed = parse_expression("y = abs(x) + sign(x) + x % 3")
    assert parsed.compiled is not None
    xs = np.array([-4.0, -1.0, 0.0, 2.5])
    expected = np.abs(xs) + np.sign(xs) + np.mod(xs, 3.0)
    np.testing.assert_allclose(parsed.compiled.evaluate({"x": xs}), expected)
