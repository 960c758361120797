"""Builtin names, constants and functions an expression may use.

``BUILTIN_NAMES`` is the fixed, case-sensitive table that is never offered as
a slider. ``CONSTANTS`` and ``FUNCTIONS`` describe how those names lower to
SymPy (see :mod:`curvekit.classifier`).

Functions whose SymPy form prints cleanly to NumPy (trigonometric, hyperbolic,
``exp``/``log``/``sqrt``, ``floor``/``ceil``, ``pow``) map to
native SymPy functions. Everything else is an opaque :func:`NamedFunction`
class carrying its own NumPy implementation.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, Mapping

import numpy as np
import sympy as sp
from scipy import special

from .NamedFunction import NamedFunction

__all__ = [
    "BUILTIN_NAMES",
    "CONSTANTS",
    "COORDINATE_NAMES",
    "FUNCTIONS",
    "FunctionSpec",
    "variable_symbol",
]


COORDINATE_NAMES: tuple[str, ...] = ("x", "y", "t", "theta")


# === SECTION: NumPy-backed builtins [id: named]===


@NamedFunction
class Secant:
    def numeric(self, x):
        return 1.0 / np.cos(x)


@NamedFunction
class Cosecant:
    def numeric(self, x):
        return 1.0 / np.sin(x)


@NamedFunction
class Cotangent:
    def numeric(self, x):
        return 1.0 / np.tan(x)


@NamedFunction
class Log2:
    def numeric(self, x):
        return np.log2(x)


@NamedFunction
class Log10:
    def numeric(self, x):
        return np.log10(x)


@NamedFunction
class RealCbrt:
    """Real cube root, defined for negative arguments."""

    def numeric(self, x):
        return np.cbrt(x)


@NamedFunction
class NthRoot:
    """Real n-th root; negative radicands only have odd integer roots."""

    def numeric(self, x, n):
        x = np.asarray(x, dtype=float)
        n = np.asarray(n, dtype=float)
        magnitude = np.abs(x) ** (1.0 / n)
        odd = np.mod(n, 2.0) == 1.0
        return np.where(x < 0, np.where(odd, -magnitude, np.nan), magnitude)


@NamedFunction
class RoundHalfAway:
    """Round half away from zero, optionally to ``digits`` decimals."""

    arity = (1, 2)

    def numeric(self, *args):
        x = np.asarray(args[0], dtype=float)
        scale = 10.0 ** np.asarray(args[1], dtype=float) if len(args) > 1 else 1.0
        return np.sign(x) * np.floor(np.abs(x) * scale + 0.5) / scale


@NamedFunction
class Absolute:
    def numeric(self, x):
        return np.abs(x)


@NamedFunction
class Signum:
    def numeric(self, x):
        return np.sign(x)


@NamedFunction
class FlooredMod:
    """Modulo whose result takes the sign of the divisor."""

    def numeric(self, a, b):
        return np.mod(a, b)


@NamedFunction
class FactorialGamma:
    """``n! = gamma(n + 1)``; undefined for negative ``n``."""

    def numeric(self, n):
        n = np.asarray(n, dtype=float)
        return np.where(n < 0, np.nan, special.gamma(n + 1.0))


@NamedFunction
class GammaFunction:
    def numeric(self, x):
        return special.gamma(x)


@NamedFunction
class Minimum:
    def numeric(self, *args):
        return functools.reduce(np.minimum, args)


@NamedFunction
class Maximum:
    def numeric(self, *args):
        return functools.reduce(np.maximum, args)


@NamedFunction
class UniformRandom:
    """``random()`` in [0, 1), ``random(max)`` or ``random(min, max)``.

    One value is drawn per element of the broadcast bounds. With constant
    bounds the generated code sees scalars, so ``x + random()`` draws once per
    evaluation and shifts a whole sampled curve by the same offset.
    """

    arity = (0, 1, 2)

    def numeric(self, *args):
        if len(args) == 0:
            low, high = 0.0, 1.0
        elif len(args) == 1:
            low, high = 0.0, args[0]
        else:
            low, high = args
        shape = np.broadcast(low, high).shape
        return np.random.default_rng().uniform(low, high, size=shape or None)


# === SECTION: Lowering tables [id: tables]===


@dataclass(frozen=True)
class FunctionSpec:
    """How a builtin function name lowers to SymPy."""

    min_args: int
    max_args: int | None
    build: Callable[..., sp.Basic]

    def accepts(self, count: int) -> bool:
        return count >= self.min_args and (self.max_args is None or count <= self.max_args)

    def describe(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"


def _unary(fn: Callable[..., sp.Basic]) -> FunctionSpec:
    return FunctionSpec(1, 1, fn)


def _log(x: sp.Basic, base: sp.Basic | None = None) -> sp.Basic:
    return sp.log(x) if base is None else sp.log(x) / sp.log(base)


def _nth_root(x: sp.Basic, n: sp.Basic = sp.Float(2)) -> sp.Basic:
    return NthRoot(x, n)


FUNCTIONS: Mapping[str, FunctionSpec] = {
    "sin": _unary(sp.sin),
    "cos": _unary(sp.cos),
    "tan": _unary(sp.tan),
    "asin": _unary(sp.asin),
    "acos": _unary(sp.acos),
    "atan": _unary(sp.atan),
    "atan2": FunctionSpec(2, 2, sp.atan2),
    "sinh": _unary(sp.sinh),
    "cosh": _unary(sp.cosh),
    "tanh": _unary(sp.tanh),
    "asinh": _unary(sp.asinh),
    "acosh": _unary(sp.acosh),
    "atanh": _unary(sp.atanh),
    "sec": _unary(Secant),
    "csc": _unary(Cosecant),
    "cot": _unary(Cotangent),
    "log": FunctionSpec(1, 2, _log),
    "log2": _unary(Log2),
    "log10": _unary(Log10),
    "ln": _unary(sp.log),
    "exp": _unary(sp.exp),
    "sqrt": _unary(sp.sqrt),
    "cbrt": _unary(RealCbrt),
    "pow": FunctionSpec(2, 2, sp.Pow),
    "nthRoot": FunctionSpec(1, 2, _nth_root),
    "abs": _unary(Absolute),
    "ceil": _unary(sp.ceiling),
    "floor": _unary(sp.floor),
    "round": FunctionSpec(1, 2, RoundHalfAway),
    "sign": _unary(Signum),
    "min": FunctionSpec(1, None, Minimum),
    "max": FunctionSpec(1, None, Maximum),
    "mod": FunctionSpec(2, 2, FlooredMod),
    "factorial": _unary(FactorialGamma),
    "gamma": _unary(GammaFunction),
    "random": FunctionSpec(0, 2, UniformRandom),
}

CONSTANTS: Mapping[str, sp.Basic] = {
    "e": sp.E,
    "E": sp.E,
    "pi": sp.pi,
    "PI": sp.pi,
    "i": sp.I,
    "Infinity": sp.oo,
    "NaN": sp.nan,
}

BUILTIN_NAMES: frozenset[str] = frozenset(COORDINATE_NAMES) | frozenset(CONSTANTS) | frozenset(FUNCTIONS)


def variable_symbol(name: str) -> sp.Symbol:
    """Return the SymPy symbol used for variable ``name``."""
    return sp.Symbol(name)
