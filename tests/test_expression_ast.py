from __future__ import annotations

import pytest

from curvekit.expression_ast import (
    BinaryOp,
    Call,
    ExpressionSyntaxError,
    Literal,
    SymbolRef,
    UnaryOp,
    free_symbols,
    parse_ast,
    references,
    to_source,
    tokenize,
    walk,
)


def test_tokenize_ends_with_eof() -> None:
    tokens = tokenize("2*x ** 3")
    assert [t.kind for t in tokens] == ["NUMBER", "OP", "NAME", "OP", "NUMBER", "EOF"]
    assert tokens[3].text == "**"
    assert tokens[-1].position == len("2*x ** 3")


def test_precedence_and_associativity() -> None:
    assert parse_ast("1 + 2*3") == BinaryOp(
        "+", Literal(1.0, "1"), BinaryOp("*", Literal(2.0, "2"), Literal(3.0, "3"))
    )
    # power is right associative and binds tighter than a leading minus
    assert parse_ast("-x^2") == UnaryOp("-", BinaryOp("^", SymbolRef("x"), Literal(2.0, "2")))
    assert parse_ast("2^3^2") == BinaryOp(
        "^", Literal(2.0, "2"), BinaryOp("^", Literal(3.0, "3"), Literal(2.0, "2"))
    )
    assert parse_ast("2^-x") == BinaryOp("^", Literal(2.0, "2"), UnaryOp("-", SymbolRef("x")))
    assert parse_ast("x**2") == parse_ast("x^2")


def test_calls_and_postfix_factorial() -> None:
    assert parse_ast("atan2(y, x)") == Call("atan2", (SymbolRef("y"), SymbolRef("x")))
    assert parse_ast("random()") == Call("random", ())
    assert parse_ast("n!") == UnaryOp("!", SymbolRef("n"))


def test_literal_keeps_spelling() -> None:
    assert parse_ast("3") == Literal(3.0, "3")
    assert parse_ast("3.0") == Literal(3.0, "3.0")
    assert parse_ast(".5") == Literal(0.5, ".5")


@pytest.mark.parametrize("text", ["", "   ", "x +", "(x", "x)", "sin(x,", "2 $ 3", "x y"])
def test_malformed_input_raises_syntax_error(text: str) -> None:
    with pytest.raises(ExpressionSyntaxError) as excinfo:
        parse_ast(text)
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.position >= 0


def test_error_message_points_at_offending_token() -> None:
    with pytest.raises(ExpressionSyntaxError, match="position 2") as excinfo:
        parse_ast("x $")
    assert excinfo.value.position == 2


def test_walk_is_preorder_left_to_right() -> None:
    names = [n.name for n in walk(parse_ast("a + b*c")) if isinstance(n, SymbolRef)]
    assert names == ["a", "b", "c"]


def test_free_symbols_skips_builtins_and_deduplicates() -> None:
    assert free_symbols(parse_ast("a*x + b + a")) == ("a", "b")
    assert free_symbols(parse_ast("sin(x) + pi + e")) == ()
    assert free_symbols(parse_ast("k*t"), exclude=("k",)) == ()


def test_references_finds_bare_symbols_only() -> None:
    assert references(parse_ast("x^2 + y"), "y")
    assert not references(parse_ast("sin(x)"), "sin")


def test_to_source_round_trips_structure() -> None:
    node = parse_ast("-a*(x+1)^2 + f!")
    assert parse_ast(to_source(node)) == node
