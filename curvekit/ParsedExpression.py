"""Classification result for one typed-in expression."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .CompiledExpression import CompiledExpression

__all__ = ["ExpressionKind", "ParsedExpression"]


class ExpressionKind(str, Enum):
    """Curve family of an expression."""

    STANDARD = "standard"  # y = f(x)
    POLAR = "polar"  # r = f(theta)
    PARAMETRIC = "parametric"  # (x(t), y(t))
    IMPLICIT = "implicit"  # f(x, y) = 0

    @property
    def coordinates(self) -> tuple[str, ...]:
        """Coordinate names the samplers inject for this family."""
        return _COORDINATES[self]


_COORDINATES = {
    ExpressionKind.STANDARD: ("x",),
    ExpressionKind.POLAR: ("theta",),
    ExpressionKind.PARAMETRIC: ("t",),
    ExpressionKind.IMPLICIT: ("x", "y"),
}


@dataclass(frozen=True)
class ParsedExpression:
    """Immutable classification and compiled form of one expression.

    Exactly one of ``compiled`` or the ``(compiled_x, compiled_y)`` pair is
    set, matching ``kind``. Both are absent when ``parse_error`` is set or
    the text was blank. ``free_variables`` lists slider candidates in
    first-seen order and never includes the coordinates of ``kind``.
    """

    kind: ExpressionKind = ExpressionKind.STANDARD
    compiled: Optional[CompiledExpression] = None
    compiled_x: Optional[CompiledExpression] = None
    compiled_y: Optional[CompiledExpression] = None
    free_variables: tuple[str, ...] = ()
    parse_error: Optional[str] = None
    text: str = ""

    @classmethod
    def failure(cls, message: str, text: str = "") -> "ParsedExpression":
        return cls(kind=ExpressionKind.STANDARD, parse_error=message, text=text)

    @property
    def is_valid(self) -> bool:
        if self.parse_error is not None:
            return False
        if self.kind is ExpressionKind.PARAMETRIC:
            return self.compiled_x is not None and self.compiled_y is not None
        return self.compiled is not None

    @property
    def is_blank(self) -> bool:
        return self.parse_error is None and not self.text
