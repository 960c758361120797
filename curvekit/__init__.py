"""Top-level public API for the ``curvekit`` package.

curvekit is the expression engine behind an interactive 2-D grapher. It
classifies typed-in expressions, compiles them to NumPy, and samples them
into points and segments for a renderer:

>>> from curvekit import parse_expression, sample_standard, DEFAULT_VIEWPORT
>>> parsed = parse_expression("y = a*x^2")
>>> parsed.kind.value, parsed.free_variables
('standard', ('a',))
>>> len(sample_standard(parsed, DEFAULT_VIEWPORT, {"a": 1.0}))
2001

The library is silent by default; enable records with
``logging.getLogger("curvekit").setLevel(logging.DEBUG)`` plus a handler.
"""

import logging

from .CompiledExpression import CompiledExpression
from .InputConvert import InputConvert
from .NamedFunction import NamedFunction
from .ParsedExpression import ExpressionKind, ParsedExpression
from .SliderParam import SliderParam, create_sliders, scope_from_sliders
from .analysis import find_intersections, find_roots
from .axis_ticks import format_axis_label, grid_spacing, nice_num, tick_values
from .classifier import CLASSIFICATION_RULES, parse, parse_expression
from .config import SceneConfig
from .expression_ast import ExpressionSyntaxError, parse_ast
from .geometry import DEFAULT_VIEWPORT, Point, Root, Segment, TangentLine, Viewport, is_plottable
from .numpify import NumpifiedFunction, numpify
from .preprocess import normalize
from .sampler import (
    ValueTable,
    evaluate_at,
    points_to_arrays,
    sample,
    sample_derivative,
    sample_implicit,
    sample_parametric,
    sample_polar,
    sample_standard,
    tangent_line,
    value_table,
)
from .scene import CurveGeometry, ExpressionEntry, Scene, build_scene, build_value_table

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CLASSIFICATION_RULES",
    "CompiledExpression",
    "CurveGeometry",
    "DEFAULT_VIEWPORT",
    "ExpressionEntry",
    "ExpressionKind",
    "ExpressionSyntaxError",
    "InputConvert",
    "NamedFunction",
    "NumpifiedFunction",
    "ParsedExpression",
    "Point",
    "Root",
    "Scene",
    "SceneConfig",
    "Segment",
    "SliderParam",
    "TangentLine",
    "ValueTable",
    "Viewport",
    "build_scene",
    "build_value_table",
    "create_sliders",
    "evaluate_at",
    "find_intersections",
    "find_roots",
    "format_axis_label",
    "grid_spacing",
    "is_plottable",
    "nice_num",
    "normalize",
    "numpify",
    "parse",
    "parse_ast",
    "parse_expression",
    "points_to_arrays",
    "sample",
    "sample_derivative",
    "sample_implicit",
    "sample_parametric",
    "sample_polar",
    "sample_standard",
    "scope_from_sliders",
    "tangent_line",
    "tick_values",
    "value_table",
]
