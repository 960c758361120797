"""
numpify: compile SymPy expressions to vectorized NumPy functions
================================================================

Purpose
-------
Every expression curvekit draws is compiled once into a plain Python function
whose body is NumPy code. :func:`numpify` takes the SymPy form produced by
:mod:`curvekit.classifier` plus the argument symbols in call order
(coordinates first, then slider variables) and returns a
:class:`NumpifiedFunction`. Each call compiles afresh; nothing is cached.

Generated code
--------------
SymPy's :class:`~sympy.printing.numpy.NumPyPrinter` renders the body with
``allow_unknown_functions`` switched on, so a function it has no NumPy
spelling for comes out as a bare call such as ``RealCbrt(x)``. That name is
then bound in the generated function's globals, either to an implementation
passed in ``functions=`` or to ``F.f_numpy`` when the function class ``F``
defines one (every :func:`curvekit.NamedFunction.NamedFunction` class does).
A bare call left without an implementation is rejected before any code is
generated.

Argument names are the symbol names whenever those are usable Python
parameters. Anything else (``lambda``, ``numpy``, ``x-y``) is replaced by a
fresh identifier; :attr:`NumpifiedFunction.name_for_symbol` records the
mapping.

Every argument goes through ``numpy.asarray``. A body that depends on no
argument is broadcast against all of them, so a constant still yields one
value per sample.

Examples
--------
>>> import numpy as np
>>> import sympy as sp
>>> x = sp.Symbol("x")
>>> numpify(sp.Integer(5), [x])(np.array([1, 2, 3]))
array([5., 5., 5.])
>>> numpify(sp.Symbol("lambda") * x, [sp.Symbol("lambda"), x]).var_names
('lambda_', 'x')

Logging
-------
Compile timings go to the ``curvekit.numpify`` logger at DEBUG level::

    logging.getLogger("curvekit.numpify").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import builtins
import keyword
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import numpy as np
import sympy as sp
from sympy.core.function import FunctionClass
from sympy.printing.numpy import NumPyPrinter


__all__ = ["numpify", "NumpifiedFunction"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_GENERATED = "_generated"


@dataclass(frozen=True, eq=False)
class NumpifiedFunction:
    """Generated NumPy function with the expression and source it came from.

    Call it positionally, in the order of :attr:`vars`. Arrays broadcast.
    """

    fn: Callable[..., Any]
    symbolic: sp.Basic
    call_signature: tuple[tuple[sp.Symbol, str], ...]
    source: str

    def __call__(self, *args: Any) -> Any:
        if len(args) != len(self.call_signature):
            raise TypeError(
                f"Expected {len(self.call_signature)} positional argument(s) "
                f"({', '.join(self.var_names)}), got {len(args)}"
            )
        return self.fn(*args)

    @property
    def vars(self) -> tuple[sp.Symbol, ...]:
        return tuple(sym for sym, _ in self.call_signature)

    @property
    def var_names(self) -> tuple[str, ...]:
        """Parameter names of the generated function, after mangling."""
        return tuple(name for _, name in self.call_signature)

    @property
    def name_for_symbol(self) -> dict[sp.Symbol, str]:
        return dict(self.call_signature)

    @property
    def symbol_for_name(self) -> dict[str, sp.Symbol]:
        return {name: sym for sym, name in self.call_signature}

    def __repr__(self) -> str:
        return f"NumpifiedFunction({self.symbolic!r}, vars=({', '.join(self.var_names)}))"


def numpify(
    expr: Any,
    vars: Union[sp.Symbol, Iterable[sp.Symbol]] = (),
    *,
    functions: Optional[Mapping[Any, Callable[..., Any]]] = None,
) -> NumpifiedFunction:
    """Compile ``expr`` into a vectorized NumPy function of ``vars``.

    Parameters
    ----------
    expr:
        A SymPy expression, or anything :func:`sympy.sympify` accepts.
    vars:
        Argument symbols in call order. A single Symbol is accepted.
    functions:
        NumPy implementations for SymPy functions the printer cannot spell,
        keyed by function class (or an application of it). They take
        precedence over ``F.f_numpy``.

    Returns
    -------
    NumpifiedFunction

    Raises
    ------
    TypeError
        If ``expr`` is not SymPy-compatible, ``vars`` holds something other
        than Symbols, or an implementation is not callable.
    ValueError
        If ``expr`` has a free symbol missing from ``vars``, or calls a
        function that has no NumPy implementation.

    Notes
    -----
    The function is created with ``exec``. Its input is printed from SymPy
    trees that :mod:`curvekit.classifier` builds from a closed name table.
    """
    started = time.perf_counter()
    expr = _as_expression(expr)
    symbols = _as_symbols(vars)

    unbound = sorted({s.name for s in expr.free_symbols} - {s.name for s in symbols})
    if unbound:
        raise ValueError(
            f"Expression contains unbound symbols: {', '.join(unbound)}. "
            f"Arguments are ({', '.join(s.name for s in symbols)})."
        )

    printer = NumPyPrinter(settings={"user_functions": {}, "allow_unknown_functions": True})
    implementations = _implementations(expr, functions)
    _require_implementations(expr, printer, implementations)

    taken = set(keyword.kwlist) | set(dir(builtins)) | {"numpy", _GENERATED} | set(implementations)
    call_signature = tuple((sym, _identifier(sym.name, taken)) for sym in symbols)
    renames = {sym: sp.Symbol(name) for sym, name in call_signature if sym.name != name}
    if renames:
        # renaming must not simplify an unevaluated tree
        with sp.evaluate(False):
            expr_for_print = expr.xreplace(renames)
    else:
        expr_for_print = expr
    body = printer.doprint(expr_for_print)
    printed = time.perf_counter()

    arg_names = [name for _, name in call_signature]
    source = _render(arg_names, body, broadcast=bool(arg_names) and not expr.free_symbols)
    namespace: dict[str, Any] = {"numpy": np, **implementations}
    exec(source, namespace)
    fn = namespace[_GENERATED]
    fn.__doc__ = f"NumPy code generated from {expr!r}."
    done = time.perf_counter()

    logger.debug(
        "numpify timings (ms): codegen=%.2f exec=%.2f total=%.2f",
        1000.0 * (printed - started),
        1000.0 * (done - printed),
        1000.0 * (done - started),
    )
    return NumpifiedFunction(fn=fn, symbolic=expr, call_signature=call_signature, source=source)


# === SECTION: Helpers [id: helpers]===


def _as_expression(expr: Any) -> sp.Basic:
    try:
        result = sp.sympify(expr)
    except (sp.SympifyError, TypeError) as exc:
        raise TypeError(f"numpify expects a SymPy-compatible expression, got {type(expr)}") from exc
    if not isinstance(result, sp.Basic):
        raise TypeError(f"numpify expects a SymPy expression, got {type(result)}")
    return result


def _as_symbols(vars: Union[sp.Symbol, Iterable[sp.Symbol]]) -> tuple[sp.Symbol, ...]:
    if isinstance(vars, sp.Symbol):
        return (vars,)
    try:
        symbols = tuple(vars)
    except TypeError as exc:
        raise TypeError("vars must be a SymPy Symbol or an iterable of SymPy Symbols") from exc
    for sym in symbols:
        if not isinstance(sym, sp.Symbol):
            raise TypeError(f"vars must contain only SymPy Symbols, got {type(sym)}")
    return symbols


def _identifier(name: str, taken: set[str]) -> str:
    """Return a parameter name for ``name`` that is not in ``taken``, and reserve it."""
    base = re.sub(r"\W", "_", name) or "_"
    if base[0].isdigit():
        base = f"_{base}"
    if keyword.iskeyword(base):
        base = f"{base}_"
    candidate = base
    suffix = 0
    while candidate in taken:
        candidate = f"{base}_{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


def _implementations(
    expr: sp.Basic, functions: Optional[Mapping[Any, Callable[..., Any]]]
) -> dict[str, Callable[..., Any]]:
    """Map printed function names to NumPy callables: explicit ones first, then ``F.f_numpy``."""
    table: dict[str, Callable[..., Any]] = {}
    for key, impl in (functions or {}).items():
        if isinstance(key, sp.Function):
            name = key.func.__name__
        elif isinstance(key, FunctionClass):
            name = key.__name__
        else:
            raise TypeError(f"functions keys must be SymPy function classes, got {type(key)}")
        if not callable(impl):
            raise TypeError(f"Implementation for {name} must be callable, got {type(impl)}")
        table[name] = impl

    for app in expr.atoms(sp.Function):
        impl = getattr(app.func, "f_numpy", None)
        if callable(impl):
            table.setdefault(app.func.__name__, impl)
    return table


def _require_implementations(
    expr: sp.Basic, printer: NumPyPrinter, table: Mapping[str, Callable[..., Any]]
) -> None:
    """Reject functions that print as bare calls with nothing bound to their name."""
    missing = sorted(
        {
            app.func.__name__
            for app in expr.atoms(sp.Function)
            if app.func.__name__ not in table and printer.doprint(app).startswith(f"{app.func.__name__}(")
        }
    )
    if missing:
        raise ValueError(
            "Expression contains unknown SymPy function(s) that require a NumPy implementation: "
            f"{', '.join(missing)}. Decorate the class with @NamedFunction or pass "
            "functions={F: callable} to numpify."
        )


def _render(arg_names: list[str], body: str, broadcast: bool) -> str:
    lines = [f"def {_GENERATED}({', '.join(arg_names)}):"]
    lines.extend(f"    {name} = numpy.asarray({name})" for name in arg_names)
    if broadcast:
        lines.append(f"    return ({body}) + numpy.zeros(numpy.broadcast({', '.join(arg_names)}).shape)")
    else:
        lines.append(f"    return {body}")
    return "\n".join(lines)
