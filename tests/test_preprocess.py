from __future__ import annotations

import pytest

from curvekit.preprocess import normalize


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2x", "2*x"),
        ("3sin(x)", "3*sin(x)"),
        ("(x+1)(x-1)", "(x+1)*(x-1)"),
        ("(x+1)2", "(x+1)*2"),
        ("(x+1)x", "(x+1)*x"),
        ("2(x+1)", "2*(x+1)"),
        ("2.5(x)", "2.5*(x)"),
    ],
)
def test_implicit_multiplication(raw: str, expected: str) -> None:
    assert normalize(raw) == expected


def test_unicode_aliases_are_replaced_before_multiplication() -> None:
    assert normalize("r = 2θ") == "r = 2*theta"
    assert normalize("2π") == "2*pi"


def test_names_ending_in_digits_keep_their_call() -> None:
    assert normalize("log10(x)") == "log10(x)"
    assert normalize("atan2(y, x)") == "atan2(y, x)"
    assert normalize("3log2(x)") == "3*log2(x)"


def test_normalize_is_total_and_leaves_plain_text_alone() -> None:
    assert normalize("") == ""
    assert normalize("x^2 + y^2 = 1") == "x^2 + y^2 = 1"
    assert normalize("@#$") == "@#$"
