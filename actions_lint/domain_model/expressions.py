"""Lexer, parser and syntax tree of the ``${{ }}`` expression language.

Grammar, loosest binding first::

    expr     := or
    or       := and ("||" and)*
    and      := equality ("&&" equality)*
    equality := compare (("==" | "!=") compare)*
    compare  := unary (("<" | "<=" | ">" | ">=") unary)*
    unary    := "!" unary | postfix
    postfix  := primary ("." (IDENT | "*") | "[" expr "]")*
    primary  := literal | IDENT | IDENT "(" args ")" | "(" expr ")"

Offsets stored in tokens and nodes are relative to the start of the parsed
text so callers can map them back to the source.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple


class ExpressionSyntaxError(Exception):
    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset


# region lexer
@dataclass(frozen=True)
class Token:
    kind: str
    value: Any
    offset: int


_NUMBER_RE = re.compile(
    r"-?(?:0x[0-9a-fA-F]+|0o[0-7]+|(?:\d+(?:\.\d*)?)(?:[eE][+-]?\d+)?)"
)
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")
_OPERATORS = ("==", "!=", "<=", ">=", "&&", "||", "<", ">", "!")
_PUNCTUATION = {
    ".": "DOT",
    ",": "COMMA",
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACKET",
    "]": "RBRACKET",
    "*": "STAR",
}
_KEYWORDS = {"null": ("NULL", None), "true": ("BOOL", True), "false": ("BOOL", False)}


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char.isspace():
            i += 1
            continue

        if char == "'":
            value, end = _read_string(text, i)
            tokens.append(Token("STRING", value, i))
            i = end
            continue
        if char == '"':
            raise ExpressionSyntaxError(
                "string literals must be enclosed in single quotes", i
            )

        match = _NUMBER_RE.match(text, i)
        if match and (char.isdigit() or (char == "-" and len(match.group()) > 1)):
            tokens.append(Token("NUMBER", _to_number(match.group(), i), i))
            i = match.end()
            continue

        match = _IDENT_RE.match(text, i)
        if match:
            word = match.group()
            kind, value = _KEYWORDS.get(word, ("IDENT", word))
            tokens.append(Token(kind, value, i))
            i = match.end()
            continue

        operator = next((op for op in _OPERATORS if text.startswith(op, i)), None)
        if operator:
            tokens.append(Token("NOT" if operator == "!" else "OP", operator, i))
            i += len(operator)
            continue

        if char in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[char], char, i))
            i += 1
            continue

        raise ExpressionSyntaxError(f"unexpected character {char!r}", i)

    tokens.append(Token("EOF", None, len(text)))
    return tokens


def _read_string(text: str, start: int) -> Tuple[str, int]:
    """Read a single-quoted string starting at ``start``.

    Returns the unescaped value and the offset after the closing quote.
    """
    chars = []
    i = start + 1
    while i < len(text):
        if text[i] == "'":
            if text.startswith("''", i):
                chars.append("'")
                i += 2
                continue
            return "".join(chars), i + 1
        chars.append(text[i])
        i += 1
    raise ExpressionSyntaxError("unterminated string literal", start)


def _to_number(literal: str, offset: int) -> float:
    try:
        sign = -1 if literal.startswith("-") else 1
        body = literal.lstrip("-")
        if body.lower().startswith("0x"):
            return sign * int(body, 16)
        if body.lower().startswith("0o"):
            return sign * int(body[2:], 8)
        return float(literal)
    except ValueError:
        raise ExpressionSyntaxError(f"invalid number literal {literal!r}", offset) from None


# endregion lexer


# region syntax tree
@dataclass(frozen=True)
class ExprNode:
    offset: int


@dataclass(frozen=True)
class Literal(ExprNode):
    value: Any


@dataclass(frozen=True)
class Variable(ExprNode):
    name: str


@dataclass(frozen=True)
class PropertyAccess(ExprNode):
    receiver: ExprNode
    name: str


@dataclass(frozen=True)
class IndexAccess(ExprNode):
    receiver: ExprNode
    index: ExprNode


@dataclass(frozen=True)
class ObjectFilter(ExprNode):
    receiver: ExprNode


@dataclass(frozen=True)
class FunctionCall(ExprNode):
    name: str
    args: List[ExprNode] = field(default_factory=list)


@dataclass(frozen=True)
class Not(ExprNode):
    operand: ExprNode


@dataclass(frozen=True)
class BinaryOp(ExprNode):
    op: str
    left: ExprNode
    right: ExprNode


def _children(node: ExprNode) -> List[ExprNode]:
    if isinstance(node, (PropertyAccess, ObjectFilter)):
        return [node.receiver]
    if isinstance(node, IndexAccess):
        return [node.receiver, node.index]
    if isinstance(node, FunctionCall):
        return list(node.args)
    if isinstance(node, Not):
        return [node.operand]
    if isinstance(node, BinaryOp):
        return [node.left, node.right]
    return []


def iter_nodes(node: ExprNode) -> Iterator[ExprNode]:
    """Yield ``node`` and all of its descendants, parents first.

    Long operator and property chains build deep trees, so the walk keeps
    its own stack.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(_children(current)))


def property_path(node: ExprNode) -> Optional[str]:
    """Dotted path of a plain property access such as ``github.event.issue.title``.

    Object filters are rendered as ``*`` and string indexes as properties.
    Returns None for anything that is not a chain of accesses on a variable.
    """
    parts: List[str] = []
    while not isinstance(node, Variable):
        if isinstance(node, PropertyAccess):
            parts.append(node.name.lower())
        elif isinstance(node, ObjectFilter):
            parts.append("*")
        elif isinstance(node, IndexAccess):
            if isinstance(node.index, Literal) and isinstance(node.index.value, str):
                parts.append(node.index.value.lower())
            else:
                parts.append("*")
        else:
            return None
        node = node.receiver
    parts.append(node.name.lower())
    return ".".join(reversed(parts))


# endregion syntax tree


class ExpressionParser:
    """Recursive descent parser over the token list."""

    MAX_DEPTH = 64

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    def parse(self) -> ExprNode:
        if self._peek().kind == "EOF":
            raise ExpressionSyntaxError("expression is empty", 0)
        node = self._parse_binary(0)
        token = self._peek()
        if token.kind != "EOF":
            raise ExpressionSyntaxError(
                f"unexpected {self._describe(token)} after end of expression", token.offset
            )
        return node

    _LEVELS = (("||",), ("&&",), ("==", "!="), ("<", "<=", ">", ">="))

    def _parse_binary(self, level: int) -> ExprNode:
        if level == len(self._LEVELS):
            return self._parse_unary()
        left = self._parse_binary(level + 1)
        while self._peek().kind == "OP" and self._peek().value in self._LEVELS[level]:
            op = self._advance()
            right = self._parse_binary(level + 1)
            left = BinaryOp(op.offset, op.value, left, right)
        return left

    def _parse_unary(self) -> ExprNode:
        token = self._peek()
        if self.depth >= self.MAX_DEPTH:
            raise ExpressionSyntaxError("expression is nested too deeply", token.offset)
        self.depth += 1
        try:
            if token.kind == "NOT":
                self._advance()
                return Not(token.offset, self._parse_unary())
            return self._parse_postfix()
        finally:
            self.depth -= 1

    def _parse_postfix(self) -> ExprNode:
        node = self._parse_primary()
        while True:
            token = self._peek()
            if token.kind == "DOT":
                self._advance()
                name = self._advance()
                if name.kind == "STAR":
                    node = ObjectFilter(name.offset, node)
                elif name.kind == "IDENT":
                    node = PropertyAccess(name.offset, node, name.value)
                elif name.kind in ("NULL", "BOOL"):
                    # keywords are valid property names, e.g. inputs.true
                    word = {None: "null", True: "true", False: "false"}[name.value]
                    node = PropertyAccess(name.offset, node, word)
                else:
                    raise ExpressionSyntaxError(
                        f"expected property name after '.' but found {self._describe(name)}",
                        name.offset,
                    )
            elif token.kind == "LBRACKET":
                self._advance()
                if self._peek().kind == "STAR":
                    star = self._advance()
                    self._expect("RBRACKET", "']'")
                    node = ObjectFilter(star.offset, node)
                    continue
                index = self._parse_binary(0)
                self._expect("RBRACKET", "']'")
                node = IndexAccess(token.offset, node, index)
            else:
                return node

    def _parse_primary(self) -> ExprNode:
        token = self._advance()
        if token.kind in ("NULL", "BOOL", "NUMBER", "STRING"):
            return Literal(token.offset, token.value)
        if token.kind == "IDENT":
            if self._peek().kind == "LPAREN":
                self._advance()
                args = self._parse_args()
                return FunctionCall(token.offset, token.value, args)
            return Variable(token.offset, token.value)
        if token.kind == "LPAREN":
            node = self._parse_binary(0)
            self._expect("RPAREN", "')'")
            return node
        raise ExpressionSyntaxError(f"unexpected {self._describe(token)}", token.offset)

    def _parse_args(self) -> List[ExprNode]:
        args: List[ExprNode] = []
        if self._peek().kind == "RPAREN":
            self._advance()
            return args
        while True:
            args.append(self._parse_binary(0))
            token = self._advance()
            if token.kind == "RPAREN":
                return args
            if token.kind != "COMMA":
                raise ExpressionSyntaxError(
                    f"expected ',' or ')' in argument list but found {self._describe(token)}",
                    token.offset,
                )

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != "EOF":
            self.index += 1
        return token

    def _expect(self, kind: str, what: str) -> Token:
        token = self._advance()
        if token.kind != kind:
            raise ExpressionSyntaxError(
                f"expected {what} but found {self._describe(token)}", token.offset
            )
        return token

    @staticmethod
    def _describe(token: Token) -> str:
        if token.kind == "EOF":
            return "end of expression"
        if token.kind == "STRING":
            return f"string '{token.value}'"
        return f"'{token.value}'"


def parse_expression(text: str) -> ExprNode:
    """Parse the inside of a ``${{ }}`` span.

    Raises:
        ExpressionSyntaxError: The text is not a valid expression.
    """
    return ExpressionParser(text).parse()


# region spans
@dataclass(frozen=True)
class Span:
    """A ``${{ ... }}`` occurrence inside a string.

    ``start`` is the offset of ``${{`` and ``end`` the offset after ``}}``.
    An unterminated span has ``closed`` False and ends at the end of text.
    """

    start: int
    end: int
    closed: bool = True

    @property
    def inner_start(self) -> int:
        return self.start + 3

    def inner(self, text: str) -> str:
        return text[self.inner_start:self.end - 2 if self.closed else self.end]


def find_spans(text: str) -> List[Span]:
    """Locate all ``${{ }}`` spans, honoring quoted strings inside them."""
    spans: List[Span] = []
    pos = 0
    while True:
        start = text.find("${{", pos)
        if start < 0:
            return spans
        i = start + 3
        in_string = False
        while i < len(text):
            if text[i] == "'":
                in_string = not in_string
            elif not in_string and text.startswith("}}", i):
                break
            i += 1
        if i >= len(text):
            spans.append(Span(start, len(text), closed=False))
            return spans
        spans.append(Span(start, i + 2))
        pos = i + 2


# endregion spans
