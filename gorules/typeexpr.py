"""Parsing of Go type expressions into a small syntax tree."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

from .gotypes import (
    Array,
    ChanDir,
    GoType,
    Interface,
    Map,
    Pointer,
    Slice,
    builtin_type,
)


class TypeExprError(ValueError):
    """Raised when a type expression cannot be parsed or converted."""


@dataclass(frozen=True)
class Ident:
    name: str


@dataclass(frozen=True)
class Selector:
    """A qualified name such as ``io.Reader``."""

    x: Ident
    sel: str


@dataclass(frozen=True)
class Star:
    x: TypeNode


@dataclass(frozen=True)
class ArrayExpr:
    """An array or slice type; ``length`` is None for slices.

    A length is either an identifier or the text of a number literal.
    """

    elem: TypeNode
    length: Union[None, Ident, str] = None


@dataclass(frozen=True)
class MapExpr:
    key: TypeNode
    value: TypeNode


@dataclass(frozen=True)
class ChanExpr:
    elem: TypeNode
    direction: ChanDir = ChanDir.SEND_RECV


@dataclass(frozen=True)
class Field:
    """A parameter, result, struct field or interface element."""

    names: tuple[str, ...]
    type: TypeNode
    tag: str = ""
    variadic: bool = False


@dataclass(frozen=True)
class FuncExpr:
    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] = ()


@dataclass(frozen=True)
class StructExpr:
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True)
class InterfaceExpr:
    methods: tuple[Field, ...] = ()


TypeNode = Union[
    Ident, Selector, Star, ArrayExpr, MapExpr, ChanExpr, FuncExpr, StructExpr, InterfaceExpr
]

_TYPE_KEYWORDS = frozenset({"map", "chan", "func", "struct", "interface"})
_OTHER_KEYWORDS = frozenset(
    {
        "break", "case", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "go", "goto", "if", "import", "package",
        "range", "return", "select", "switch", "type", "var",
    }
)
_KEYWORDS = _TYPE_KEYWORDS | _OTHER_KEYWORDS

_LEX = re.compile(
    r"""
      (?P<space>[ \t\r]+)
    | (?P<newline>\n)
    | (?P<comment>//[^\n]*|/\*.*?\*/)
    | (?P<ident>[^\W\d]\w*)
    | (?P<number>\d[\w.]*)
    | (?P<string>"(?:\\.|[^"\\\n])*"|`[^`]*`|'(?:\\.|[^'\\\n])*')
    | (?P<op><-|\.\.\.|[-+*/%&|^<>=!~(){}\[\],;.:])
    """,
    re.X | re.S,
)


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    line: int
    col: int


def _tokenize(s: str) -> list[_Token]:
    tokens: list[_Token] = []
    insert_semi = False
    pos, line, line_start = 0, 1, 0
    while pos < len(s):
        m = _LEX.match(s, pos)
        col = len(s[line_start:pos].encode("utf-8")) + 1
        if m is None:
            raise TypeExprError(f"{line}:{col}: illegal character {s[pos]!r}")
        kind, text = m.lastgroup, m.group()
        if kind == "newline" or (kind == "comment" and "\n" in text):
            if insert_semi:
                tokens.append(_Token(";", "\n", line, col))
                insert_semi = False
            line += text.count("\n")
            line_start = m.start() + text.rindex("\n") + 1
        elif kind in ("space", "comment"):
            pass
        elif kind == "op":
            tokens.append(_Token(text, text, line, col))
            insert_semi = text in (")", "]", "}")
        else:
            tokens.append(_Token(kind.upper(), text, line, col))
            insert_semi = not (kind == "ident" and text in _KEYWORDS)
        pos = m.end()
    col = len(s[line_start:].encode("utf-8")) + 1
    tokens.append(_Token("EOF", "", line, col))
    return tokens


def _describe(tok: _Token) -> str:
    if tok.kind == "EOF":
        return "'EOF'"
    if tok.kind == ";" and tok.text == "\n":
        return "newline"
    if tok.kind in ("IDENT", "NUMBER", "STRING") and tok.text not in _KEYWORDS:
        return tok.text
    return f"'{tok.text}'"


def _starts_type(tok: _Token) -> bool:
    if tok.kind == "IDENT":
        return tok.text not in _OTHER_KEYWORDS
    return tok.kind in ("*", "[", "(", "<-")


def _is_keyword(tok: _Token, word: str) -> bool:
    return tok.kind == "IDENT" and tok.text == word


class _Parser:
    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def _peek(self, ahead: int = 0) -> _Token:
        return self._tokens[min(self._pos + ahead, len(self._tokens) - 1)]

    def _next(self) -> _Token:
        tok = self._peek()
        if tok.kind != "EOF":
            self._pos += 1
        return tok

    def _at(self, kind: str) -> bool:
        return self._peek().kind == kind

    @staticmethod
    def _error(tok: _Token, what: str) -> TypeExprError:
        return TypeExprError(f"{tok.line}:{tok.col}: expected {what}, found {_describe(tok)}")

    def _expect(self, kind: str) -> _Token:
        if not self._at(kind):
            raise self._error(self._peek(), f"'{kind}'")
        return self._next()

    def _expect_ident(self) -> str:
        tok = self._peek()
        if tok.kind != "IDENT" or tok.text in _KEYWORDS:
            raise self._error(tok, "'IDENT'")
        return self._next().text

    def parse_expr(self) -> TypeNode:
        node = self.parse_type()
        if self._at(";") and self._peek().text == "\n":
            self._next()
        if not self._at("EOF"):
            raise self._error(self._peek(), "'EOF'")
        return node

    def parse_type(self) -> TypeNode:
        tok = self._peek()
        if tok.kind == "IDENT":
            if tok.text in _OTHER_KEYWORDS:
                raise self._error(tok, "operand")
            if tok.text in _TYPE_KEYWORDS:
                return self._parse_keyword_type(tok.text)
            self._next()
            if self._at("."):
                self._next()
                return Selector(Ident(tok.text), self._expect_ident())
            return Ident(tok.text)
        if tok.kind == "*":
            self._next()
            return Star(self.parse_type())
        if tok.kind == "[":
            return self._parse_array()
        if tok.kind == "(":
            self._next()
            inner = self.parse_type()
            self._expect(")")
            return inner
        if tok.kind == "<-":
            self._next()
            if not _is_keyword(self._peek(), "chan"):
                raise self._error(self._peek(), "'chan'")
            self._next()
            return ChanExpr(self.parse_type(), ChanDir.RECV_ONLY)
        raise self._error(tok, "operand")

    def _parse_keyword_type(self, word: str) -> TypeNode:
        self._next()
        if word == "map":
            self._expect("[")
            key = self.parse_type()
            self._expect("]")
            return MapExpr(key, self.parse_type())
        if word == "chan":
            direction = ChanDir.SEND_RECV
            if self._at("<-"):
                self._next()
                direction = ChanDir.SEND_ONLY
            return ChanExpr(self.parse_type(), direction)
        if word == "func":
            params = self._parse_params()
            return FuncExpr(params, self._parse_results())
        if word == "struct":
            return StructExpr(self._parse_block(self._struct_field))
        return InterfaceExpr(self._parse_block(self._interface_elem))

    def _parse_array(self) -> ArrayExpr:
        self._expect("[")
        if self._at("]"):
            self._next()
            return ArrayExpr(self.parse_type())
        tok = self._peek()
        length: Union[Ident, str]
        if tok.kind == "NUMBER":
            length = self._next().text
        elif tok.kind == "IDENT" and tok.text not in _KEYWORDS:
            length = Ident(self._next().text)
        else:
            raise self._error(tok, "operand")
        self._expect("]")
        return ArrayExpr(self.parse_type(), length)

    def _param_item(self) -> tuple[Optional[str], TypeNode, bool]:
        if self._at("..."):
            self._next()
            return None, self.parse_type(), True
        typ = self.parse_type()
        if isinstance(typ, Ident) and (self._at("...") or _starts_type(self._peek())):
            variadic = self._at("...")
            if variadic:
                self._next()
            return typ.name, self.parse_type(), variadic
        return None, typ, False

    def _parse_params(self) -> tuple[Field, ...]:
        open_tok = self._expect("(")
        items = []
        while not self._at(")"):
            items.append(self._param_item())
            if not self._at(","):
                break
            self._next()
        self._expect(")")
        if all(name is None for name, _, _ in items):
            return tuple(Field((), typ, variadic=variadic) for _, typ, variadic in items)
        mixed = TypeExprError(
            f"{open_tok.line}:{open_tok.col}: mixed named and unnamed parameters"
        )
        fields: list[Field] = []
        pending: list[str] = []
        for name, typ, variadic in items:
            if name is None:
                if not isinstance(typ, Ident) or variadic:
                    raise mixed
                pending.append(typ.name)
            else:
                fields.append(Field(tuple(pending) + (name,), typ, variadic=variadic))
                pending = []
        if pending:
            raise mixed
        return tuple(fields)

    def _parse_results(self) -> tuple[Field, ...]:
        if self._at("("):
            return self._parse_params()
        if _starts_type(self._peek()):
            return (Field((), self.parse_type()),)
        return ()

    def _parse_block(self, element) -> tuple[Field, ...]:
        self._expect("{")
        fields: list[Field] = []
        while not self._at("}"):
            fields.append(element())
            if self._at(";"):
                self._next()
            elif not self._at("}"):
                raise self._error(self._peek(), "';'")
        self._expect("}")
        return tuple(fields)

    def _struct_field(self) -> Field:
        if self._at("*"):
            field = Field((), self.parse_type())
        else:
            tok = self._peek()
            if tok.kind != "IDENT" or tok.text in _KEYWORDS:
                raise self._error(tok, "field name or embedded type")
            first = self.parse_type()
            if isinstance(first, Ident) and self._at(","):
                names = [first.name]
                while self._at(","):
                    self._next()
                    names.append(self._expect_ident())
                field = Field(tuple(names), self.parse_type())
            elif isinstance(first, Ident) and _starts_type(self._peek()):
                field = Field((first.name,), self.parse_type())
            else:
                field = Field((), first)
        if self._at("STRING"):
            field = Field(field.names, field.type, tag=self._next().text)
        return field

    def _interface_elem(self) -> Field:
        tok = self._peek()
        if tok.kind == "IDENT" and tok.text not in _KEYWORDS and self._peek(1).kind == "(":
            name = self._next().text
            params = self._parse_params()
            return Field((name,), FuncExpr(params, self._parse_results()))
        return Field((), self.parse_type())


def parse_type_expr(s: str) -> TypeNode:
    """Parse a Go type expression; raise TypeExprError on a syntax error."""
    return _Parser(_tokenize(s)).parse_expr()


_DECIMAL = re.compile(r"[0-9]+")
_MAX_INT64 = 2**63 - 1


def _decimal_length(text: str) -> Optional[int]:
    if not _DECIMAL.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _MAX_INT64 else None


def _type_from_node(e: TypeNode) -> Optional[GoType]:
    match e:
        case Ident(name):
            return builtin_type(name)
        case ArrayExpr(elem_node, length):
            elem = _type_from_node(elem_node)
            if elem is None:
                return None
            if length is None:
                return Slice(elem)
            if not isinstance(length, str):
                return None
            n = _decimal_length(length)
            return Array(elem, n) if n is not None else None
        case MapExpr(key_node, value_node):
            key = _type_from_node(key_node)
            if key is None:
                return None
            value = _type_from_node(value_node)
            if value is None:
                return None
            return Map(key, value)
        case Star(x):
            elem = _type_from_node(x)
            return Pointer(elem) if elem is not None else None
        case InterfaceExpr(methods):
            return Interface() if not methods else None
    return None


def type_from_string(s: str) -> Optional[GoType]:
    """Build a type from its textual form.

    Returns None for well-formed expressions that name no supported type;
    raises TypeExprError if ``s`` does not parse.
    """
    return _type_from_node(parse_type_expr(s.replace("?", "__any")))