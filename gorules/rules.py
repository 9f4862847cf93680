"""Rule groups, reports and the bundled core rule set."""

from __future__ import annotations

import builtins
import re
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence

from .messages import Node
from .typeexpr import TypeExprError
from .typematch import Context, ImportsTab
from .typematch import Pattern as TypePattern
from .typematch import parse as parse_type_pattern

_PATTERN_VAR = re.compile(r"\$\*?(\w+)")
_DOC_PREFIX = "doc:"


@dataclass(frozen=True)
class Position:
    """A location in a file; a line of 0 means the position is unknown."""

    filename: str = ""
    offset: int = 0
    line: int = 0
    column: int = 0

    @property
    def is_valid(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        text = self.filename
        if self.is_valid:
            if text:
                text += ":"
            text += str(self.line)
            if self.column:
                text += f":{self.column}"
        return text or "-"


@dataclass(frozen=True)
class RuleGroup:
    """A named group of rules with its documentation."""

    name: str
    pos: Position = Position()
    line: int = 0
    filename: str = ""
    doc_tags: tuple[str, ...] = ()
    doc_summary: str = ""
    doc_before: str = ""
    doc_after: str = ""
    doc_note: str = ""


@dataclass(frozen=True)
class RuleInfo:
    """The line that defined a rule and the group it belongs to."""

    line: int
    group: RuleGroup


@dataclass(frozen=True)
class Suggestion:
    """A replacement for the source between two positions."""

    from_pos: int
    to_pos: int
    replacement: bytes


@dataclass
class ReportData:
    """Everything passed on for one successful rule match."""

    rule_info: RuleInfo
    node: Optional[Node]
    message: str
    suggestion: Optional[Suggestion] = None
    func: Optional[Node] = None


class ImportError(builtins.ImportError):
    """Raised when a rules file refers to a package that cannot be imported."""

    def __init__(self, msg: str, err: Optional[BaseException] = None) -> None:
        super().__init__(msg)
        self.msg = msg
        self.err = err
        self.__cause__ = err

    def __str__(self) -> str:
        return self.msg


@dataclass
class Rule:
    """One rule: code patterns, an optional type filter per variable, and its output.

    ``where_types`` pairs a pattern variable with a type pattern it must match.
    """

    group: RuleGroup
    line: int
    patterns: tuple[str, ...]
    message: str = ""
    suggestion: str = ""
    where_types: tuple[tuple[str, str], ...] = ()
    location: str = ""
    imports: dict[str, str] = field(default_factory=dict)
    type_patterns: dict[str, TypePattern] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.patterns:
            raise ValueError("missing Match() or MatchComment() call")
        if not self.message and not self.suggestion:
            raise ValueError("missing Report(), Suggest() or Do() call")
        pattern_vars = [set(_PATTERN_VAR.findall(p)) for p in self.patterns]
        referenced = [name for name, _ in self.where_types]
        if self.location:
            referenced.append(self.location)
        for name in referenced:
            if name != "$$" and not all(name in names for names in pattern_vars):
                raise ValueError(f"filter refers to a non-existing var {name}")
        ctx = Context(ImportsTab(dict(self.imports)))
        self.type_patterns = {}
        for name, type_text in self.where_types:
            try:
                self.type_patterns[name] = parse_type_pattern(ctx, type_text)
            except TypeExprError as e:
                raise ValueError(f"parse type expr: {e}") from e

    @property
    def info(self) -> RuleInfo:
        return RuleInfo(self.line, self.group)


def parse_doc_pragmas(name: str, comment_lines: Iterable[str]) -> RuleGroup:
    """Build a group called ``name`` from its ``//doc:key value`` comment lines."""
    docs: dict[str, str] = {}
    for raw in comment_lines:
        text = raw.strip().removeprefix("//").strip()
        if not text.startswith(_DOC_PREFIX):
            continue
        key, _, value = text[len(_DOC_PREFIX):].partition(" ")
        docs[key] = value.strip()
    return RuleGroup(
        name=name,
        doc_tags=tuple(docs.get("tags", "").split()),
        doc_summary=docs.get("summary", ""),
        doc_before=docs.get("before", ""),
        doc_after=docs.get("after", ""),
        doc_note=docs.get("note", ""),
    )


def _group(filename: str, line: int, name: str, docs: Sequence[str]) -> RuleGroup:
    group = parse_doc_pragmas(name, docs)
    return replace(group, pos=Position(filename, 0, line, 1), line=line, filename=filename)


def core_bundle() -> list[Rule]:
    """Return the bundled diagnostic, refactoring and style rules."""
    bad_cond = _group(
        "diag.go",
        13,
        "badCond",
        [
            "//doc:summary reports always false/true conditions",
            '//doc:before  strings.Count(s, "/") >= 0',
            '//doc:after   strings.Count(s, "/") > 0',
            "//doc:tags    diagnostic",
        ],
    )
    sort_funcs = _group(
        "refactor.go",
        11,
        "sortFuncs",
        [
            "//doc:summary suggests sorting function alternatives",
            "//doc:before  sort.Slice(xs, func(i, j int) bool { return xs[i] < xs[j] })",
            "//doc:after   sort.Ints(xs)",
            "//doc:tags    refactor",
        ],
    )
    expr_unparen = _group(
        "style.go",
        11,
        "exprUnparen",
        [
            "//doc:summary reports redundant parentheses",
            "//doc:before  f(x, (y))",
            "//doc:after   f(x, y)",
            "//doc:tags    style",
        ],
    )
    empty_decl = _group(
        "style.go",
        21,
        "emptyDecl",
        [
            "//doc:summary reports empty declaration blocks",
            "//doc:before  var ()",
            "//doc:after   /* nothing */",
            "//doc:tags    style",
        ],
    )
    empty_error = _group(
        "style.go",
        31,
        "emptyError",
        [
            "//doc:summary reports empty errors creation",
            '//doc:before  errors.New("")',
            "//doc:after   errors.New(\"can't open the cache file\")",
            "//doc:tags    style",
        ],
    )
    sort_pattern = "sort.Slice($s, func($i, $j int) bool { return $s[$i] < $s[$j] })"
    return [
        Rule(bad_cond, 14, ("strings.Count($_, $_) >= 0",), message="statement always true"),
        Rule(bad_cond, 15, ("bytes.Count($_, $_) >= 0",), message="statement always true"),
        Rule(
            sort_funcs,
            12,
            (sort_pattern,),
            suggestion="sort.Strings($s)",
            where_types=(("s", "[]string"),),
        ),
        Rule(
            sort_funcs,
            16,
            (sort_pattern,),
            suggestion="sort.Ints($s)",
            where_types=(("s", "[]int"),),
        ),
        Rule(
            sort_funcs,
            20,
            (sort_pattern,),
            suggestion="sort.Float64s($s)",
            where_types=(("s", "[]float64"),),
        ),
        Rule(
            expr_unparen,
            12,
            ("$f($*_, ($x), $*_)",),
            message="the parentheses around $x are superfluous",
            suggestion="$f($x)",
        ),
        Rule(empty_decl, 22, ("var()",), message="empty var() block"),
        Rule(empty_decl, 23, ("const()",), message="empty const() block"),
        Rule(empty_decl, 24, ("type()",), message="empty type() block"),
        Rule(
            empty_error,
            32,
            ('fmt.Errorf("")', 'errors.New("")'),
            message="empty errors are hard to debug",
        ),
    ]


def find_group(groups: Iterable[RuleGroup], name: str) -> Optional[RuleGroup]:
    """Return the first group called ``name``, or None if there is none."""
    return next((g for g in groups if g.name == name), None)