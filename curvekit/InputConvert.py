"""Typed-in slider text to a number.

:func:`InputConvert` is what a slider's text box calls when the user commits a
value. Plain numbers take the ``float()`` fast path; anything else is read
with curvekit's own expression grammar, so ``"pi/2"``, ``"2π"`` and
``"sqrt(2)"`` all work, while text naming a variable (``"2x"``) is refused.
"""

from __future__ import annotations

from typing import Any, Type, TypeVar

import numpy as np

from .classifier import to_sympy
from .expression_ast import parse_ast
from .numpify import numpify
from .preprocess import normalize

T = TypeVar("T", int, float, complex)


# === SECTION: InputConvert [id: InputConvert]===


def InputConvert(obj: Any, dest_type: Type[T] = float, truncate: bool = True) -> T:
    """Convert a number or slider text to ``dest_type``.

    Parameters
    ----------
    obj:
        An ``int``, ``float`` or ``complex`` (``bool`` is refused), or text.
    dest_type:
        ``float``, ``int`` or ``complex``.
    truncate:
        What to do with a result that does not fit ``dest_type`` exactly.
        With ``True`` the imaginary part is dropped and ``int`` rounds toward
        zero (``3.9 -> 3``). With ``False`` both cases raise.

    Returns
    -------
    int, float or complex

    Raises
    ------
    NotImplementedError
        If ``dest_type`` is not one of the three supported types.
    ValueError
        If the text is blank, does not parse, depends on a variable,
        evaluates to NaN, or breaks the ``truncate=False`` rules.

    Examples
    --------
    >>> InputConvert("2pi") == InputConvert("2*pi")
    True
    >>> InputConvert("sqrt(16)", int, truncate=False)
    4
    """
    if dest_type not in (float, int, complex):
        raise NotImplementedError(
            f"Unsupported destination type: {dest_type!r}. Only float, int, and complex are supported."
        )
    label = dest_type.__name__

    if isinstance(obj, (int, float, complex)) and not isinstance(obj, bool):
        try:
            return _narrow(complex(obj), dest_type, truncate)
        except (OverflowError, ValueError) as exc:
            raise ValueError(f"Could not convert {obj!r} to {label}.") from exc
    if not isinstance(obj, str):
        raise ValueError(f"Could not convert {obj!r} to {label}.")

    text = obj.strip()
    if not text:
        raise ValueError(f"Cannot convert empty string to {label}.")
    try:
        value = complex(float(text))
    except ValueError:
        value = _evaluate_text(text, label)
    try:
        return _narrow(value, dest_type, truncate)
    except OverflowError as exc:
        raise ValueError(f"Could not convert {obj!r} to {label}.") from exc


def _evaluate_text(text: str, label: str) -> complex:
    """Evaluate constant-only expression text."""
    try:
        expr = to_sympy(parse_ast(normalize(text)))
    except ValueError as exc:
        raise ValueError(f"Could not convert {text!r} to {label}: {exc}") from exc
    if expr.free_symbols:
        names = ", ".join(sorted(sym.name for sym in expr.free_symbols))
        raise ValueError(f"Could not convert {text!r} to {label}: depends on {names}.")

    with np.errstate(all="ignore"):
        try:
            value = complex(np.asarray(numpify(expr)()).item())
        except ArithmeticError as exc:
            raise ValueError(f"Could not convert {text!r} to {label}: {exc}") from exc
    if np.isnan(value):
        raise ValueError(f"Could not convert {text!r} to {label} (not a number).")
    return value


def _narrow(value: complex, dest_type: type, truncate: bool) -> Any:
    if dest_type is complex:
        return value
    if value.imag != 0 and not truncate:
        raise ValueError(f"Could not convert non-real {value!r} to {dest_type.__name__}: imaginary part is non-zero.")
    real = value.real
    if dest_type is float:
        return real
    if not truncate and not real.is_integer():
        raise ValueError(f"Could not convert {value!r} to int: value is not an exact integer.")
    return int(real)


# === END OF SECTION: InputConvert [id: InputConvert]===
