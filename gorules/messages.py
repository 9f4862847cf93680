"""Report message rendering and comment-pattern matching."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, TypeVar, Union

import regex

from .textmatch import _to_python_syntax

_PLACEHOLDER = "<...>"
_DEFAULT_TRUNCATE_LEN = 60
_ADDRESS_OPERANDS = frozenset({"Ident", "IndexExpr", "SelectorExpr"})

_Text = TypeVar("_Text", str, bytes)


@dataclass(frozen=True)
class Node:
    """A matched syntax node.

    ``pos`` and ``end`` are offsets into the file source, or -1 when unknown;
    ``text`` is used when the source does not cover the node.
    For unary expressions ``op`` holds the operator and ``operand`` its argument.
    """

    kind: str
    text: str = ""
    pos: int = -1
    end: int = -1
    op: str = ""
    operand: Optional[Node] = None


@dataclass(frozen=True)
class CapturedNode:
    """A node bound to a named pattern variable; ``node`` may be None."""

    name: str
    node: Optional[Node]


@dataclass
class MatchData:
    """The node matched as a whole together with its named captures."""

    node: Optional[Node]
    capture: list[CapturedNode] = field(default_factory=list)

    def captured_by_name(self, name: str) -> Optional[Node]:
        """Return the node captured as ``name``, or None if there is none."""
        for c in self.capture:
            if c.name == name:
                return c.node
        return None


def regexp_has_capture_groups(pattern: str) -> bool:
    """Report whether ``pattern`` has capture groups, named or not.

    An unparsable pattern counts as having them, which is the safer answer.
    """
    try:
        compiled = regex.compile(pattern)
    except regex.error:
        return True
    return compiled.groups > 0


@dataclass
class CommentRule:
    """A rule that matches the text of comments with a regular expression."""

    pattern: str
    message: str = ""
    suggestion: str = ""
    location: str = ""
    capture_groups: bool = field(init=False)
    _compiled: regex.Pattern = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.capture_groups = regexp_has_capture_groups(self.pattern)
        try:
            self._compiled = regex.compile(_to_python_syntax(self.pattern))
        except regex.error as e:
            raise ValueError(f"error parsing regexp: {e}") from e


def _comment_node(text: str, pos: int) -> Node:
    return Node("Comment", text, pos, pos + len(text))


def match_comment(rule: CommentRule, text: str, offset: int) -> Optional[MatchData]:
    """Match ``rule`` against a comment's ``text`` that starts at ``offset``.

    Returns None when the comment does not match.
    """
    m = rule._compiled.search(text)
    if m is None:
        return None
    data = MatchData(_comment_node(m.group(), offset + m.start()))
    if rule.capture_groups:
        for name, index in sorted(rule._compiled.groupindex.items(), key=lambda kv: kv[1]):
            begin, end = m.span(index)
            if begin < 0 or end < 0:
                # The named group took no part in the match.
                data.capture.append(CapturedNode(name, _comment_node("", offset)))
                continue
            data.capture.append(CapturedNode(name, _comment_node(text[begin:end], offset + begin)))
    return data


def truncate_text(s: _Text, max_len: int) -> _Text:
    """Shorten ``s`` to ``max_len`` by replacing its middle with ``<...>``."""
    placeholder = _PLACEHOLDER if isinstance(s, str) else _PLACEHOLDER.encode()
    if len(s) <= max_len - len(placeholder):
        return s
    if max_len < len(placeholder):
        raise ValueError(f"max length {max_len} is shorter than the placeholder")
    budget = max_len - len(placeholder)
    left_len = budget // 2
    right_len = budget % 2 + left_len
    return s[:left_len] + placeholder + s[len(s) - right_len:]


def fixed_text(text: str, node: Node, following: str) -> str:
    """Drop the ``&`` of an address expression when a selector follows it.

    With ``$x.y`` and ``$x`` bound to ``&buf`` this yields ``buf.y``.
    """
    if (
        node.kind == "UnaryExpr"
        and node.op == "&"
        and node.operand is not None
        and node.operand.kind in _ADDRESS_OPERANDS
        and following.startswith(".")
    ):
        return text.removeprefix("&")
    return text


@dataclass
class MessageRenderer:
    """Interpolates ``$name`` and ``$$`` references in report templates."""

    source: str = ""
    truncate_len: int = 0

    @property
    def max_len(self) -> int:
        return self.truncate_len or _DEFAULT_TRUNCATE_LEN

    def node_text(self, node: Node) -> str:
        src = self.source
        if 0 <= node.pos < len(src) and 0 <= node.end < len(src):
            return src[node.pos:node.end]
        return node.text

    def render(self, msg: str, m: MatchData, truncate: bool) -> str:
        """Render ``msg`` with the nodes of ``m``; truncate long values if asked."""
        if "$" not in msg:
            return msg
        # Longer names first, so that $foo is not taken for $f followed by "oo".
        capture = sorted(
            (c for c in m.capture if c.node is not None),
            key=lambda c: len(c.name),
            reverse=True,
        )
        parts: list[str] = []
        i = 0
        while True:
            dollar = msg.find("$", i)
            if dollar == -1:
                parts.append(msg[i:])
                break
            parts.append(msg[i:dollar])
            rest = msg[dollar + 1:]
            node: Union[Node, None] = None
            name_len = 0
            if rest.startswith("$"):
                node, name_len = m.node, 1
            else:
                for c in capture:
                    if rest.startswith(c.name):
                        node, name_len = c.node, len(c.name)
                        break
            if node is not None:
                text = fixed_text(self.node_text(node), node, rest[name_len:])
                if truncate:
                    text = truncate_text(text, self.max_len)
                parts.append(text)
            else:
                parts.append("$")
            i = dollar + 1 + name_len
        return "".join(parts)