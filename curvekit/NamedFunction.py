"""
NamedFunction: SymPy ``Function`` classes that carry a NumPy implementation
==========================================================================

Purpose
-------
Some builtins an expression may call (``cbrt``, ``nthRoot``, ``round``,
``factorial``, ...) either have no SymPy counterpart, or have one whose SymPy
evaluation rules or NumPy printing differ from the numeric behaviour the
grapher wants. For those, :func:`NamedFunction` turns a small *spec class*
into an opaque SymPy ``Function`` subclass with an ``f_numpy`` attribute.

:func:`curvekit.numpify.numpify` auto-binds ``F.f_numpy`` for every function
``F`` that appears in an expression, so the generated code calls the NumPy
implementation directly.

Spec class contract
-------------------
- ``numeric(self, *args)`` (required): NumPy-friendly implementation. It is
  called without instantiating the class (``self`` is ``None``).
- The number of positional parameters of ``numeric`` after ``self`` fixes
  the SymPy arity. A ``*args`` signature makes the function variadic.
- ``arity`` (optional class attribute): explicit tuple of accepted argument
  counts, overriding the signature (used for optional trailing arguments).

Examples
--------
>>> import numpy as np
>>> import sympy as sp
>>> @NamedFunction
... class Cube:
...     def numeric(self, x):
...         return np.asarray(x) ** 3
>>> x = sp.Symbol("x")
>>> Cube(x)
Cube(x)
>>> float(Cube.f_numpy(2.0))
8.0
"""

from __future__ import annotations

import inspect
import textwrap
from typing import Callable, Optional, Protocol, Type, cast

import sympy as sp


__all__ = ["NamedFunction"]


class _NamedFunctionSpec(Protocol):
    """Protocol for @NamedFunction class-decoration."""

    def numeric(self, *args: object) -> object:
        ...


class _SignedFunctionMeta(type(sp.Function)):
    """Metaclass that allows overriding ``__signature__`` on generated classes."""

    @property
    def __signature__(cls) -> Optional[inspect.Signature]:  # noqa: D401
        return cast(Optional[inspect.Signature], getattr(cls, "_custom_signature", None))


def _numeric_arity(sig: inspect.Signature, *, what: str) -> Optional[int]:
    """Return the fixed argument count of ``numeric`` (excluding ``self``), or None if variadic.

    Raises
    ------
    ValueError
        If the signature has keyword-only parameters, ``**kwargs``, defaults,
        or no ``self`` parameter.
    """
    params = list(sig.parameters.values())
    if not params:
        raise ValueError(f"{what} must accept at least 'self'.")

    variadic = False
    for p in params[1:]:
        if p.kind is inspect.Parameter.VAR_POSITIONAL:
            variadic = True
            continue
        if p.kind not in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            raise ValueError(
                f"{what} must use only positional parameters (no **kwargs or keyword-only). "
                f"Got parameter {p.name!r} with kind={p.kind}."
            )
        if p.default is not inspect._empty:
            raise ValueError(
                f"{what} must not define default values; declare `arity` on the class instead."
            )

    if variadic:
        return None
    return len(params) - 1


def _generate_docstring(original_doc: Optional[str], name: str, arity_text: str) -> str:
    doc: list[str] = []
    if original_doc:
        doc.append(textwrap.dedent(original_doc).strip())
        doc.append("")
    doc.append("NamedFunction-generated SymPy Function.")
    doc.append("")
    doc.append("Numeric implementation")
    doc.append("----------------------")
    doc.append(f"`{name}.f_numpy` ({arity_text})")
    return "\n".join(doc).strip()


def NamedFunction(cls: Type[_NamedFunctionSpec]) -> Type[sp.Function]:
    """Decorate a spec class to produce an opaque SymPy Function class.

    Parameters
    ----------
    cls:
        A class defining ``numeric(self, *args)`` and optionally ``arity``.

    Returns
    -------
    Type[sympy.Function]
        A SymPy Function subclass named after ``cls`` whose ``f_numpy``
        calls ``cls.numeric``.

    Raises
    ------
    TypeError
        If ``cls`` is not a class.
    ValueError
        If ``cls`` has no ``numeric`` method or its signature is unsupported.
    """
    if not inspect.isclass(cls):
        raise TypeError(f"@NamedFunction must decorate a class, not {type(cls)}")
    if not callable(getattr(cls, "numeric", None)):
        raise ValueError(f"Class {cls.__name__} decorated with @NamedFunction must define 'numeric'.")

    numeric_func = cast(Callable[..., object], getattr(cls, "numeric"))
    sig = inspect.signature(numeric_func)
    fixed = _numeric_arity(sig, what=f"{cls.__name__}.numeric")

    arity = getattr(cls, "arity", None)
    if arity is not None:
        nargs: Optional[tuple[int, ...]] = tuple(int(n) for n in arity)
    elif fixed is not None:
        nargs = (fixed,)
    else:
        nargs = None

    @staticmethod
    def f_numpy(*args: object) -> object:
        return numeric_func(None, *args)

    class_dict: dict[str, object] = {
        "__module__": cls.__module__,
        "__doc__": _generate_docstring(
            cls.__doc__,
            cls.__name__,
            "variadic" if nargs is None else "arguments: " + "/".join(str(n) for n in nargs),
        ),
        "f_numpy": f_numpy,
        "_original_class": cls,
    }
    if nargs is not None:
        class_dict["nargs"] = nargs

    NewClass = _SignedFunctionMeta(cls.__name__, (sp.Function,), class_dict)
    NewClass._custom_signature = inspect.Signature(list(sig.parameters.values())[1:])
    return cast(Type[sp.Function], NewClass)
