"""Text normalization applied before an expression is parsed.

Two passes, in this order:

1. unicode aliases: ``θ`` becomes ``theta`` and ``π`` becomes ``pi``;
2. implicit multiplication: ``2x -> 2*x``, ``)( -> )*(``, ``)2 -> )*2``,
   ``)x -> )*x`` and ``2( -> 2*(``. A number directly before ``(``
   only counts when it is not the tail of a name, so ``log10(x)`` and
   ``atan2(y, x)`` stay calls.

The multiplication pass is purely lexical. ``3sin(x)`` becomes
``3*sin(x)`` and it is the parser's job to see ``sin`` as a function name.

Examples
--------
>>> normalize("2x")
'2*x'
>>> normalize("3sin(x)")
'3*sin(x)'
>>> normalize("r = 2θ")
'r = 2*theta'
"""

from __future__ import annotations

import re

__all__ = ["UNICODE_ALIASES", "normalize"]


UNICODE_ALIASES: tuple[tuple[str, str], ...] = (
    ("θ", "theta"),
    ("π", "pi"),
)

# Order matters: each pass runs on the output of the previous one.
_IMPLICIT_MULTIPLICATION: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(\d)([a-zA-Z])"), r"\1*\2"),
    (re.compile(r"\)\("), ")*("),
    (re.compile(r"\)(\d)"), r")*\1"),
    (re.compile(r"\)([a-zA-Z])"), r")*\1"),
    (re.compile(r"\b(\d+\.?\d*)\("), r"\1*("),
)


def normalize(raw: str) -> str:
    """Return ``raw`` with unicode aliases replaced and implicit products made explicit."""
    text = raw
    for alias, name in UNICODE_ALIASES:
        text = text.replace(alias, name)
    for pattern, replacement in _IMPLICIT_MULTIPLICATION:
        text = pattern.sub(replacement, text)
    return text
