"""Checks for the NamedFunction decorator and the builtins defined with it."""

from __future__ import annotations

from importlib import import_module

import numpy as np
import pytest
import sympy as sp

NamedFunction = import_module("curvekit.NamedFunction").NamedFunction
symbol_table = import_module("curvekit.symbol_table")


def test_fixed_arity_comes_from_numeric_signature() -> None:
    @NamedFunction
    class Hypot2:
        """Squared distance from the origin."""

        def numeric(self, x, y):
            return np.asarray(x) ** 2 + np.asarray(y) ** 2

    x, y = sp.symbols("x y")
    assert Hypot2.nargs == sp.FiniteSet(2)
    assert Hypot2(x, y).func is Hypot2
    assert Hypot2.f_numpy(3.0, 4.0) == 25.0
    with pytest.raises(TypeError):
        Hypot2(x)


def test_docstring_keeps_original_text() -> None:
    @NamedFunction
    class Twice:
        """Double the argument."""

        def numeric(self, x):
            return 2 * np.asarray(x)

    doc = Twice.__doc__ or ""
    assert doc.startswith("Double the argument.")
    assert "NamedFunction-generated SymPy Function." in doc
    assert "`Twice.f_numpy` (arguments: 1)" in doc


def test_arity_attribute_overrides_signature() -> None:
    x = sp.Symbol("x")
    rounded = symbol_table.RoundHalfAway
    assert rounded(x).args == (x,)
    assert rounded(x, 2).args == (x, sp.Integer(2))
    assert rounded.f_numpy(2.5) == 3.0
    assert rounded.f_numpy(-2.5) == -3.0
    assert rounded.f_numpy(1.2345, 2) == pytest.approx(1.23)


def test_variadic_numeric_accepts_any_count() -> None:
    x, y, z = sp.symbols("x y z")
    assert symbol_table.Minimum(x, y, z).args == (x, y, z)
    result = symbol_table.Minimum.f_numpy(np.array([1.0, 5.0]), np.array([3.0, 2.0]), np.array([0.0, 9.0]))
    assert result.tolist() == [0.0, 2.0]
    assert symbol_table.Maximum.f_numpy(1.0, 4.0) == 4.0


def test_named_functions_stay_unevaluated() -> None:
    expr = symbol_table.Absolute(sp.Integer(-2))
    assert expr.func is symbol_table.Absolute
    assert expr != sp.Integer(2)


def test_decorator_rejects_non_classes() -> None:
    with pytest.raises(TypeError):
        NamedFunction(lambda x: x)


def test_decorator_requires_numeric() -> None:
    class Empty:
        pass

    with pytest.raises(ValueError, match="must define 'numeric'"):
        NamedFunction(Empty)


def test_decorator_rejects_default_values() -> None:
    class WithDefault:
        def numeric(self, x, n=2):
            return x

    with pytest.raises(ValueError, match="declare `arity`"):
        NamedFunction(WithDefault)


def test_real_roots() -> None:
    assert symbol_table.NthRoot.f_numpy(-8.0, 3.0) == pytest.approx(-2.0)
    assert symbol_table.NthRoot.f_numpy(16.0, 4.0) == pytest.approx(2.0)
    assert np.isnan(symbol_table.NthRoot.f_numpy(-4.0, 2.0))
    assert symbol_table.RealCbrt.f_numpy(-27.0) == pytest.approx(-3.0)


def test_factorial_and_floored_mod() -> None:
    assert symbol_table.FactorialGamma.f_numpy(5.0) == pytest.approx(120.0)
    assert symbol_table.FactorialGamma.f_numpy(0.5) == pytest.approx(0.886226925, rel=1e-8)
    assert np.isnan(symbol_table.FactorialGamma.f_numpy(-1.0))
    assert symbol_table.FlooredMod.f_numpy(-1.0, 3.0) == 2.0
    assert symbol_table.FlooredMod.f_numpy(7.0, -3.0) == -2.0


def test_random_range() -> None:
    values = [symbol_table.UniformRandom.f_numpy(2.0, 3.0) for _ in range(20)]
    assert all(2.0 <= v < 3.0 for v in values)
    assert 0.0 <= symbol_table.UniformRandom.f_numpy() < 1.0


def test_random_draws_one_value_per_element() -> None:
    values = symbol_table.UniformRandom.f_numpy(np.zeros(50), np.ones(50))
    assert values.shape == (50,)
    assert len(set(values.tolist())) > 1
    assert np.all((values >= 0.0) & (values < 1.0))
