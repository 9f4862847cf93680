"""Regular-expression matching with fast paths for common simple patterns."""

from __future__ import annotations

import abc
import enum
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

import regex


class Pattern(abc.ABC):
    """A compiled pattern that can test text or bytes."""

    @abc.abstractmethod
    def match_string(self, s: str) -> bool:
        """Report whether ``s`` contains a match."""

    @abc.abstractmethod
    def match(self, b: bytes) -> bool:
        """Report whether ``b`` contains a match."""


_CLASS_SCAN = re.compile(r"\\.|\[\^?\]?(?:\\.|\[:[a-z]+:\]|[^\]])*\]|.", re.S)
_MULTILINE_FLAG = re.compile(r"\(\?[a-zA-Z]*m")


def _to_python_syntax(pattern: str) -> str:
    """Adjust end-of-text anchors so they behave as in Perl-flag RE2 syntax."""
    multiline = _MULTILINE_FLAG.search(pattern) is not None
    out = []
    for m in _CLASS_SCAN.finditer(pattern):
        piece = m.group()
        if piece == "$" and not multiline:
            out.append(r"\Z")
        elif piece == r"\z":
            out.append(r"\Z")
        else:
            out.append(piece)
    return "".join(out)


class RegexpMatcher(Pattern):
    """General matcher backed by a full regular expression."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        try:
            self._re = regex.compile(_to_python_syntax(pattern))
        except regex.error as e:
            raise ValueError(f"error parsing regexp: {e}") from e

    def match_string(self, s: str) -> bool:
        return self._re.search(s) is not None

    def match(self, b: bytes) -> bool:
        return self._re.search(b.decode("utf-8", "replace")) is not None

    def __repr__(self) -> str:
        return f"RegexpMatcher({self.pattern!r})"


@dataclass
class _LiteralMatcher(Pattern):
    value: str
    encoded: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.encoded = self.value.encode("utf-8")


class ContainsLiteralMatcher(_LiteralMatcher):
    def match_string(self, s: str) -> bool:
        return self.value in s

    def match(self, b: bytes) -> bool:
        return self.encoded in b


class PrefixLiteralMatcher(_LiteralMatcher):
    def match_string(self, s: str) -> bool:
        return s.startswith(self.value)

    def match(self, b: bytes) -> bool:
        return b.startswith(self.encoded)


class SuffixLiteralMatcher(_LiteralMatcher):
    def match_string(self, s: str) -> bool:
        return s.endswith(self.value)

    def match(self, b: bytes) -> bool:
        return b.endswith(self.encoded)


class EqLiteralMatcher(_LiteralMatcher):
    def match_string(self, s: str) -> bool:
        return s == self.value

    def match(self, b: bytes) -> bool:
        return b == self.encoded


_REPLACEMENT = "\ufffd"


@dataclass
class PrefixRunePredMatcher(Pattern):
    """Tests a predicate on the first character (U+FFFD when absent or invalid)."""

    pred: Callable[[str], bool]

    def match_string(self, s: str) -> bool:
        return self.pred(s[:1] or _REPLACEMENT)

    def match(self, b: bytes) -> bool:
        return self.pred(b[:4].decode("utf-8", "replace")[:1] or _REPLACEMENT)


def _is_upper(ch: str) -> bool:
    return unicodedata.category(ch) == "Lu"


def _is_lower(ch: str) -> bool:
    return unicodedata.category(ch) == "Ll"


class _Marker(enum.Enum):
    BEGIN = enum.auto()
    END = enum.auto()
    ANY = enum.auto()


_META = frozenset("\\.+*?()|[]{}^$")
_PIECE_RE = re.compile(r"\\(?P<esc>.)|(?P<any>\.\*\??)|(?P<char>.)", re.S)


def _simple_items(s: str) -> Optional[list[Union[str, _Marker]]]:
    """Split a pattern into literals and anchors, or None if it is anything else."""
    items: list[Union[str, _Marker]] = []
    for m in _PIECE_RE.finditer(s):
        esc, char = m.group("esc"), m.group("char")
        if m.group("any"):
            items.append(_Marker.ANY)
            continue
        if esc is not None:
            if not esc.isascii() or esc.isalnum():
                return None
            lit = esc
        elif char == "^":
            items.append(_Marker.BEGIN)
            continue
        elif char == "$":
            items.append(_Marker.END)
            continue
        elif char in _META:
            return None
        else:
            lit = char
        if items and isinstance(items[-1], str):
            items[-1] += lit
        else:
            items.append(lit)
    return items


def _compile_optimized(s: str) -> Optional[Pattern]:
    items = _simple_items(s)
    if items is not None:
        match items:
            case [str() as lit]:
                return ContainsLiteralMatcher(lit)
            case [_Marker.ANY, str() as lit, _Marker.ANY]:
                return ContainsLiteralMatcher(lit)
            case [_Marker.BEGIN, str() as lit]:
                return PrefixLiteralMatcher(lit)
            case [str() as lit, _Marker.END]:
                return SuffixLiteralMatcher(lit)
            case [_Marker.BEGIN, str() as lit, _Marker.END]:
                return EqLiteralMatcher(lit)
    if s == r"^\p{Lu}":
        return PrefixRunePredMatcher(_is_upper)
    if s == r"^\p{Ll}":
        return PrefixRunePredMatcher(_is_lower)
    return None


def compile_pattern(re_text: str) -> Pattern:
    """Compile ``re_text``, using a specialised matcher where one applies.

    Raises ValueError if the expression is invalid.
    """
    optimized = _compile_optimized(re_text)
    if optimized is not None:
        return optimized
    return RegexpMatcher(re_text)


def is_regexp(p: Pattern) -> bool:
    """Report whether ``p`` is the general regular-expression matcher."""
    return isinstance(p, RegexpMatcher)