"""Tagged-union syntax tree for typed-in expressions.

Purpose
-------
Turn a normalized expression string (see :mod:`curvekit.preprocess`) into an
explicit tree of five node kinds, and provide the typed traversals the
classifier needs:

- :class:`Literal` (a number),
- :class:`SymbolRef` (a bare name such as ``x`` or ``a``),
- :class:`Call` (``name(arg, ...)``),
- :class:`BinaryOp` (``+ - * / ^ %``),
- :class:`UnaryOp` (prefix ``-``/``+`` and postfix ``!``).

Grammar
-------
Lowest to highest precedence::

    additive       := multiplicative (("+" | "-") multiplicative)*
    multiplicative := unary (("*" | "/" | "%") unary)*
    unary          := ("-" | "+") unary | power
    power          := postfix (("^" | "**") unary)?
    postfix        := atom "!"*
    atom           := NUMBER | NAME "(" args ")" | NAME | "(" additive ")"

``^`` is right associative and binds tighter than a leading sign, so
``-x^2`` is ``-(x^2)`` and ``2^-x`` is ``2^(-x)``.

Examples
--------
>>> node = parse_ast("a*x + b")
>>> free_symbols(node)
('a', 'b')
>>> references(parse_ast("x^2 + y^2"), "y")
True
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from .symbol_table import BUILTIN_NAMES

__all__ = [
    "BinaryOp",
    "Call",
    "ExpressionSyntaxError",
    "Literal",
    "Node",
    "SymbolRef",
    "UnaryOp",
    "free_symbols",
    "parse_ast",
    "references",
    "to_source",
    "tokenize",
    "walk",
]


class ExpressionSyntaxError(ValueError):
    """Raised when expression text cannot be parsed.

    ``position`` is the character offset of the offending token (or the
    text length when input ended early).
    """

    def __init__(self, message: str, position: int) -> None:
        super().__init__(message)
        self.position = position


# === SECTION: Nodes [id: nodes]===


@dataclass(frozen=True)
class Literal:
    """Numeric literal; ``text`` keeps the spelling for :func:`to_source`."""

    value: float
    text: str


@dataclass(frozen=True)
class SymbolRef:
    name: str


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple["Node", ...]


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"


Node = Union[Literal, SymbolRef, Call, BinaryOp, UnaryOp]


# === SECTION: Tokenizer [id: tokens]===


@dataclass(frozen=True)
class Token:
    kind: str  # NUMBER, NAME, OP or EOF
    text: str
    position: int


_TOKEN_RE = re.compile(
    r"(?P<space>\s+)"
    r"|(?P<number>\d+\.?\d*|\.\d+)"
    r"|(?P<name>[A-Za-z_][A-Za-z_0-9]*)"
    r"|(?P<op>\*\*|[-+*/^%!(),])"
)


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, ending with a single ``EOF`` token."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ExpressionSyntaxError(f"Unexpected character {text[pos]!r} at position {pos}", pos)
        kind = match.lastgroup
        if kind == "number":
            tokens.append(Token("NUMBER", match.group(), pos))
        elif kind == "name":
            tokens.append(Token("NAME", match.group(), pos))
        elif kind == "op":
            tokens.append(Token("OP", match.group(), pos))
        pos = match.end()
    tokens.append(Token("EOF", "", len(text)))
    return tokens


# === SECTION: Parser [id: parser]===


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def consume(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind != "EOF":
            self.pos += 1
        return tok

    def accept(self, *ops: str) -> Token | None:
        tok = self.peek()
        if tok.kind == "OP" and tok.text in ops:
            return self.consume()
        return None

    def expect(self, op: str) -> Token:
        tok = self.peek()
        if tok.kind == "OP" and tok.text == op:
            return self.consume()
        raise self.error(f"Expected {op!r}", tok)

    def error(self, message: str, tok: Token) -> ExpressionSyntaxError:
        if tok.kind == "EOF":
            return ExpressionSyntaxError(f"{message} but the expression ended", tok.position)
        return ExpressionSyntaxError(f"{message}, got {tok.text!r} at position {tok.position}", tok.position)

    def parse(self) -> Node:
        if self.peek().kind == "EOF":
            raise ExpressionSyntaxError("Empty expression", 0)
        node = self.additive()
        tok = self.peek()
        if tok.kind != "EOF":
            raise self.error("Unexpected token", tok)
        return node

    def additive(self) -> Node:
        node = self.multiplicative()
        while (tok := self.accept("+", "-")) is not None:
            node = BinaryOp(tok.text, node, self.multiplicative())
        return node

    def multiplicative(self) -> Node:
        node = self.unary()
        while (tok := self.accept("*", "/", "%")) is not None:
            node = BinaryOp(tok.text, node, self.unary())
        return node

    def unary(self) -> Node:
        tok = self.accept("-", "+")
        if tok is not None:
            return UnaryOp(tok.text, self.unary())
        return self.power()

    def power(self) -> Node:
        node = self.postfix()
        if self.accept("^", "**") is not None:
            node = BinaryOp("^", node, self.unary())
        return node

    def postfix(self) -> Node:
        node = self.atom()
        while self.accept("!") is not None:
            node = UnaryOp("!", node)
        return node

    def atom(self) -> Node:
        tok = self.consume()
        if tok.kind == "NUMBER":
            return Literal(float(tok.text), tok.text)
        if tok.kind == "NAME":
            if self.accept("(") is not None:
                return Call(tok.text, self.arguments())
            return SymbolRef(tok.text)
        if tok.kind == "OP" and tok.text == "(":
            node = self.additive()
            self.expect(")")
            return node
        raise self.error("Expected a number, name or '('", tok)

    def arguments(self) -> tuple[Node, ...]:
        if self.accept(")") is not None:
            return ()
        args = [self.additive()]
        while self.accept(",") is not None:
            args.append(self.additive())
        self.expect(")")
        return tuple(args)


def parse_ast(text: str) -> Node:
    """Parse ``text`` into a :data:`Node` tree.

    Raises
    ------
    ExpressionSyntaxError
        If the text is empty or malformed.
    """
    return _Parser(text).parse()


# === SECTION: Traversal [id: traversal]===


def _children(node: Node) -> tuple[Node, ...]:
    if isinstance(node, BinaryOp):
        return (node.left, node.right)
    if isinstance(node, UnaryOp):
        return (node.operand,)
    if isinstance(node, Call):
        return node.args
    return ()


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, depth first, left to right."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(_children(current)))


def free_symbols(node: Node, exclude: Iterable[str] = ()) -> tuple[str, ...]:
    """Return slider candidates: symbol names outside the builtin table and ``exclude``.

    Names are de-duplicated and returned in first-seen order.
    """
    skip = BUILTIN_NAMES | frozenset(exclude)
    seen: dict[str, None] = {}
    for current in walk(node):
        if isinstance(current, SymbolRef) and current.name not in skip:
            seen.setdefault(current.name, None)
    return tuple(seen)


def references(node: Node, name: str) -> bool:
    """Return True when ``node`` contains a bare symbol called ``name``."""
    return any(isinstance(current, SymbolRef) and current.name == name for current in walk(node))


def to_source(node: Node) -> str:
    """Render ``node`` back to (fully parenthesized) expression text."""
    if isinstance(node, Literal):
        return node.text
    if isinstance(node, SymbolRef):
        return node.name
    if isinstance(node, Call):
        return f"{node.name}({', '.join(to_source(arg) for arg in node.args)})"
    if isinstance(node, BinaryOp):
        return f"({to_source(node.left)} {node.op} {to_source(node.right)})"
    if isinstance(node, UnaryOp):
        if node.op == "!":
            return f"({to_source(node.operand)})!"
        return f"{node.op}({to_source(node.operand)})"
    raise TypeError(f"Unknown node type: {type(node).__name__}")
