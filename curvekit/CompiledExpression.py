"""Compiled numeric form of one expression, evaluated against a name->value scope."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import sympy as sp

from .expression_ast import Node
from .numpify import NumpifiedFunction

__all__ = ["CompiledExpression"]


@dataclass(frozen=True, eq=False)
class CompiledExpression:
    """Pure numeric function of a scope.

    ``evaluate`` looks up each required variable by name and calls the
    generated NumPy function. Passing arrays for some variables evaluates the
    whole batch at once through broadcasting.

    Examples
    --------
    >>> from curvekit.classifier import parse
    >>> compiled = parse("a*x + 1").compiled
    >>> compiled.variables
    ('x', 'a')
    >>> float(compiled.evaluate({"x": 2.0, "a": 3.0}))
    7.0
    """

    text: str
    node: Node
    numeric: NumpifiedFunction

    @property
    def variables(self) -> tuple[str, ...]:
        """Names the function needs, in call order."""
        return tuple(sym.name for sym in self.numeric.vars)

    @property
    def symbolic(self) -> sp.Basic:
        return self.numeric.symbolic

    @property
    def source(self) -> str:
        return self.numeric.source

    def missing_variables(self, scope: Mapping[str, Any]) -> tuple[str, ...]:
        return tuple(name for name in self.variables if name not in scope)

    def evaluate(self, scope: Mapping[str, Any]) -> Any:
        """Evaluate against ``scope``.

        Raises
        ------
        KeyError
            If a required variable is absent from ``scope``.
        """
        missing = self.missing_variables(scope)
        if missing:
            raise KeyError(f"Missing value(s) for: {', '.join(missing)}")
        return self.numeric(*(scope[name] for name in self.variables))

    def __repr__(self) -> str:
        return f"CompiledExpression({self.text!r}, variables={self.variables})"
