# gorules

Building blocks for a rule-based checker of Go source code. The package
models Go types, matches them against type patterns with `$`-variables,
picks fast text matchers for common regular expressions, matches comment
rules, renders rule messages with `$var` interpolation, and ships a small
bundle of core rules with their documentation.

## Install

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `gorules.gotypes`: a small model of Go types: `Basic`, `Pointer`,
  `Slice`, `Array`, `Map`, `Chan` (with `ChanDir`), `Signature`, `Struct`,
  `Interface`, `Named`, plus `Var` and `Package`. `identical(x, y)` compares
  two types the way Go does, `builtin_type(name)` returns a predeclared type
  (including the `byte` and `rune` aliases and `error`), and
  `find_dependency(pkg, path)` searches a package and its complete imports.
- `gorules.textmatch`: `compile_pattern(re_text)` turns a regular expression
  into a `Pattern` with `match_string()` and `match()`. Plain literals,
  `.*lit.*`, `^lit`, `lit$`, `^lit$`, `^\p{Lu}` and `^\p{Ll}` get a dedicated
  matcher (`ContainsLiteralMatcher`, `PrefixLiteralMatcher`,
  `SuffixLiteralMatcher`, `EqLiteralMatcher`, `PrefixRunePredMatcher`);
  anything else becomes a `RegexpMatcher`. `is_regexp(p)` tells which kind
  you got. An invalid expression raises `ValueError`.
- `gorules.typeexpr`: `parse_type_expr(s)` parses a Go type expression such
  as `map[string][]int` into a small syntax tree (`Ident`, `Selector`,
  `Star`, `ArrayExpr`, `MapExpr`, `ChanExpr`, `FuncExpr`, `StructExpr`,
  `InterfaceExpr`, `Field`). `type_from_string(s)` builds a `gotypes` type
  from predeclared names, slices, arrays, maps, pointers and `interface{}`,
  returning `None` for anything else. Syntax errors raise `TypeExprError`.
- `gorules.typematch`: type patterns with variables, for example
  `[$len]$t`, `map[$t]$t`, `struct{$*_; int; $*_}`, `func($*_) $_` or
  `interface{ $*_ }`. Build one with `parse(ctx, s)`, where `ctx` is a
  `Context` holding an `ImportsTab` that resolves package names such as
  `io` in `io.Reader`; test it with `Pattern.match_identical(state, typ)`
  using a `MatcherState`.
- `gorules.messages`: `MessageRenderer.render(msg, m, truncate)` fills in
  `$name` and `$$` references from a `MatchData`; `truncate_text(s, max_len)`
  shortens long values with `<...>` (60 characters by default in the
  renderer); `fixed_text()` drops the `&` of `&x` when a selector follows.
  `CommentRule` and `match_comment(rule, text, offset)` match comment text
  and collect named groups; `regexp_has_capture_groups()` reports whether a
  pattern has groups.
- `gorules.rules`: `RuleGroup` (with documentation fields), `RuleInfo`,
  `Position`, `Suggestion`, `ReportData`, `ImportError` and `Rule`. A `Rule`
  checks that its filters refer to pattern variables that exist and compiles
  its type filters. `parse_doc_pragmas(name, comment_lines)` reads
  `//doc:summary`, `//doc:before`, `//doc:after`, `//doc:note` and
  `//doc:tags` lines; `core_bundle()` returns the bundled diagnostic,
  refactoring and style rules; `find_group(groups, name)` looks a group up.

## Examples

```python
from gorules import gotypes, typematch

ctx = typematch.Context(typematch.ImportsTab({"io": "io"}))
pat = typematch.parse(ctx, "map[$t]$t")
state = typematch.MatcherState()

int_t = gotypes.builtin_type("int")
str_t = gotypes.builtin_type("string")
pat.match_identical(state, gotypes.Map(int_t, int_t))  # True
pat.match_identical(state, gotypes.Map(int_t, str_t))  # False
```

```python
from gorules.messages import truncate_text

truncate_text(b"hello world", 8)  # b"h<...>ld"
```

```python
from gorules.rules import core_bundle, find_group

rules = core_bundle()
group = find_group((r.group for r in rules), "sortFuncs")
group.doc_tags  # ("refactor",)
```

## What it does not do

The package has no Go source parser and no engine that matches code
patterns such as `strings.Count($_, $_) >= 0` against Go files: the rules in
`core_bundle()` describe their patterns, messages and type filters, but
nothing here runs them over source code. There is no command-line tool and
no loader for rules files.