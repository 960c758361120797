"""Classify typed-in expressions into curve families and compile them.

Classification is an explicit ordered list of rules, :data:`CLASSIFICATION_RULES`.
Each rule takes normalized text and returns a :class:`ParsedExpression` when it
applies, or ``None`` to pass the text on to the next rule. The first rule that
applies wins:

1. ``r = <expr>`` is polar in ``theta``.
2. ``(<x(t)>, <y(t)>)``, one parenthesis pair around exactly one top-level
   comma, is parametric in ``t``.
3. ``<lhs> = <rhs>``: ``y = f(x)`` is standard unless ``f`` itself uses ``y``;
   every other equation is implicit ``(lhs) - (rhs) = 0``.
4. A bare expression is implicit when it uses ``y`` and standard otherwise.

Compilation lowers the :mod:`curvekit.expression_ast` tree to SymPy through
:mod:`curvekit.symbol_table` and hands the result to :func:`curvekit.numpify.numpify`.

Examples
--------
>>> parse_expression("y = a*x + b").free_variables
('a', 'b')
>>> parse_expression("x^2 + y^2 = 1").kind.value
'implicit'
"""

from __future__ import annotations

import logging
import operator
import re
from typing import Callable, Optional, Sequence

import sympy as sp

from .CompiledExpression import CompiledExpression
from .ParsedExpression import ExpressionKind, ParsedExpression
from .expression_ast import (
    BinaryOp,
    Call,
    Literal,
    Node,
    SymbolRef,
    UnaryOp,
    free_symbols,
    parse_ast,
    references,
)
from .numpify import numpify
from .preprocess import normalize
from .symbol_table import (
    CONSTANTS,
    COORDINATE_NAMES,
    FUNCTIONS,
    FactorialGamma,
    FlooredMod,
    variable_symbol,
)

__all__ = [
    "CLASSIFICATION_RULES",
    "compile_node",
    "parse",
    "parse_expression",
    "split_parametric",
    "to_sympy",
]

logger = logging.getLogger(__name__)


# === SECTION: Lowering to SymPy [id: lowering]===


_BINARY_OPS: dict[str, Callable[[sp.Basic, sp.Basic], sp.Basic]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "^": sp.Pow,
    "%": FlooredMod,
}


def to_sympy(node: Node) -> sp.Basic:
    """Lower an AST node to a SymPy expression.

    Number literals become :class:`sympy.Float`, so no step of lowering or
    printing does exact integer arithmetic (``10^10^10`` stays cheap and
    overflows when evaluated). The tree is built with SymPy evaluation
    switched off, so ``x/x`` keeps its pole at ``x = 0`` instead of
    collapsing to ``1``.

    Raises
    ------
    ValueError
        For an unknown function, a function used without arguments, or a call
        with the wrong number of arguments.
    """
    with sp.evaluate(False):
        return _lower(node)


def _lower(node: Node) -> sp.Basic:
    if isinstance(node, Literal):
        return sp.Float(node.value)
    if isinstance(node, SymbolRef):
        if node.name in CONSTANTS:
            return CONSTANTS[node.name]
        if node.name in FUNCTIONS:
            raise ValueError(f"Function '{node.name}' must be called with arguments")
        return variable_symbol(node.name)
    if isinstance(node, Call):
        spec = FUNCTIONS.get(node.name)
        if spec is None:
            raise ValueError(f"Undefined function {node.name}")
        if not spec.accepts(len(node.args)):
            raise ValueError(
                f"Wrong number of arguments in function {node.name} "
                f"({len(node.args)} provided, {spec.describe()} expected)"
            )
        return spec.build(*(_lower(arg) for arg in node.args))
    if isinstance(node, BinaryOp):
        return _BINARY_OPS[node.op](_lower(node.left), _lower(node.right))
    if isinstance(node, UnaryOp):
        operand = _lower(node.operand)
        if node.op == "-":
            return -operand
        if node.op == "!":
            return FactorialGamma(operand)
        return operand
    raise TypeError(f"Unknown node type: {type(node).__name__}")


def compile_node(node: Node, text: str, coordinates: Sequence[str], free: Sequence[str]) -> CompiledExpression:
    """Compile ``node`` into a function of ``coordinates`` followed by ``free``.

    Coordinates of other families that the expression mentions (``t`` in a
    standard expression, say) are appended as arguments too, so evaluation
    reports them as missing instead of failing to compile.
    """
    stray = [name for name in COORDINATE_NAMES if name not in coordinates and references(node, name)]
    names = (*coordinates, *stray, *free)
    numeric = numpify(to_sympy(node), vars=[variable_symbol(name) for name in names])
    return CompiledExpression(text=text, node=node, numeric=numeric)


# === SECTION: Classification rules [id: rules]===


_POLAR_RE = re.compile(r"^r\s*=\s*(.+)$")
_EQUATION_RE = re.compile(r"^(.+?)\s*=\s*(.+)$")

Rule = Callable[[str], Optional[ParsedExpression]]


def split_parametric(text: str) -> Optional[tuple[str, str]]:
    """Split ``(a, b)`` at its only top-level comma.

    The opening parenthesis must close at the last character, and the pair
    must hold exactly one comma outside nested parentheses.

    >>> split_parametric("(cos(t), sin(t))")
    ('cos(t)', 'sin(t)')
    >>> split_parametric("(x + 1)") is None
    True
    >>> split_parametric("(x+1)*max(x, 2)") is None
    True
    """
    if not (text.startswith("(") and text.endswith(")")):
        return None
    last = len(text) - 1
    depth = 0
    commas: list[int] = []
    for idx, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0 and idx != last:
                return None
        elif ch == "," and depth == 1:
            commas.append(idx)
    if depth != 0 or len(commas) != 1:
        return None
    comma = commas[0]
    return text[1:comma].strip(), text[comma + 1:last].strip()


def _implicit(node: Node, source: str, text: str) -> ParsedExpression:
    free = free_symbols(node, exclude=("y",))
    return ParsedExpression(
        kind=ExpressionKind.IMPLICIT,
        compiled=compile_node(node, source, ("x", "y"), free),
        free_variables=free,
        text=text,
    )


def _standard(node: Node, source: str, text: str) -> ParsedExpression:
    free = free_symbols(node, exclude=("x",))
    return ParsedExpression(
        kind=ExpressionKind.STANDARD,
        compiled=compile_node(node, source, ("x",), free),
        free_variables=free,
        text=text,
    )


def _polar_rule(text: str) -> Optional[ParsedExpression]:
    match = _POLAR_RE.match(text)
    if match is None:
        return None
    rhs = match.group(1)
    node = parse_ast(rhs)
    free = free_symbols(node, exclude=("theta",))
    return ParsedExpression(
        kind=ExpressionKind.POLAR,
        compiled=compile_node(node, rhs, ("theta",), free),
        free_variables=free,
        text=text,
    )


def _parametric_rule(text: str) -> Optional[ParsedExpression]:
    parts = split_parametric(text)
    if parts is None:
        return None
    text_x, text_y = parts
    node_x, node_y = parse_ast(text_x), parse_ast(text_y)
    free = tuple(dict.fromkeys(free_symbols(node_x, exclude=("t",)) + free_symbols(node_y, exclude=("t",))))
    return ParsedExpression(
        kind=ExpressionKind.PARAMETRIC,
        compiled_x=compile_node(node_x, text_x, ("t",), free),
        compiled_y=compile_node(node_y, text_y, ("t",), free),
        free_variables=free,
        text=text,
    )


def _equation_rule(text: str) -> Optional[ParsedExpression]:
    match = _EQUATION_RE.match(text)
    if match is None:
        return None
    lhs, rhs = match.group(1).strip(), match.group(2).strip()
    rhs_node = parse_ast(rhs)
    if lhs == "y" and not references(rhs_node, "y"):
        return _standard(rhs_node, rhs, text)
    difference = BinaryOp("-", parse_ast(lhs), rhs_node)
    return _implicit(difference, f"({lhs}) - ({rhs})", text)


def _bare_rule(text: str) -> Optional[ParsedExpression]:
    node = parse_ast(text)
    if references(node, "y"):
        return _implicit(node, text, text)
    return _standard(node, text, text)


CLASSIFICATION_RULES: tuple[Rule, ...] = (
    _polar_rule,
    _parametric_rule,
    _equation_rule,
    _bare_rule,
)


# === SECTION: Entry points [id: entry]===


def parse(text: str) -> ParsedExpression:
    """Classify and compile already-normalized ``text``.

    Never raises: any failure while parsing or compiling is returned as a
    standard-kind result carrying ``parse_error``.
    """
    try:
        for rule in CLASSIFICATION_RULES:
            result = rule(text)
            if result is not None:
                return result
    except Exception as exc:  # every parse/compile failure is reported, not raised
        message = str(exc) or type(exc).__name__
        logger.debug("parse failed for %r: %s", text, message)
        return ParsedExpression.failure(message, text)
    # _bare_rule always returns
    raise AssertionError("no classification rule applied")


def parse_expression(raw: str) -> ParsedExpression:
    """Parse user input: trim, normalize, classify, compile.

    Blank input yields an empty standard result with no error.
    """
    trimmed = raw.strip()
    if not trimmed:
        return ParsedExpression()
    return parse(normalize(trimmed))
