"""Matching of Go types against type patterns with $-variables."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .gotypes import (
    UNSAFE_POINTER,
    Array,
    Chan,
    GoType,
    Interface,
    Map,
    Named,
    Pointer,
    Signature,
    Slice,
    Struct,
    builtin_type,
    identical,
)
from .typeexpr import (
    ArrayExpr,
    ChanExpr,
    Field,
    FuncExpr,
    Ident,
    InterfaceExpr,
    MapExpr,
    Selector,
    Star,
    StructExpr,
    TypeExprError,
    TypeNode,
    parse_type_expr,
)


class _Op(enum.Enum):
    BUILTIN = enum.auto()
    POINTER = enum.auto()
    VAR = enum.auto()
    VAR_SEQ = enum.auto()
    SLICE = enum.auto()
    ARRAY = enum.auto()
    MAP = enum.auto()
    CHAN = enum.auto()
    FUNC_NO_SEQ = enum.auto()
    FUNC = enum.auto()
    STRUCT_NO_SEQ = enum.auto()
    STRUCT = enum.auto()
    ANY_INTERFACE = enum.auto()
    NAMED = enum.auto()


@dataclass(frozen=True)
class _Node:
    op: _Op
    value: Any = None
    subs: tuple[_Node, ...] = ()


@dataclass
class MatcherState:
    """Bindings collected while matching one pattern."""

    type_matches: dict[str, Optional[GoType]] = field(default_factory=dict)
    int64_matches: dict[str, int] = field(default_factory=dict)

    def reset(self) -> None:
        self.type_matches.clear()
        self.int64_matches.clear()


class ImportsTab:
    """Scoped table of package names to import paths."""

    def __init__(self, initial: dict[str, str]) -> None:
        self._scopes: list[dict[str, str]] = [initial]

    def lookup(self, pkg_name: str) -> Optional[str]:
        """Return the path bound to ``pkg_name`` in the innermost scope that has it."""
        for scope in reversed(self._scopes):
            if pkg_name in scope:
                return scope[pkg_name]
        return None

    def load(self, pkg_name: str, pkg_path: str) -> None:
        self._scopes[-1][pkg_name] = pkg_path

    def enter_scope(self) -> None:
        self._scopes.append({})

    def leave_scope(self) -> None:
        self._scopes.pop()


@dataclass
class Context:
    itab: ImportsTab


_VAR_PREFIX = "ᐸvarᐳ"
_VAR_SEQ_PREFIX = "ᐸvar_seqᐳ"
_EFACE = Interface()
_VENDOR = "/vendor/"


def parse(ctx: Context, s: str) -> Pattern:
    """Compile the type pattern ``s``; raise TypeExprError if it is unusable."""
    text = s.replace("$*", _VAR_SEQ_PREFIX).replace("$", _VAR_PREFIX)
    root = _convert(ctx, parse_type_expr(text))
    if root is None:
        raise TypeExprError(f"can't convert {s} type expression")
    return Pattern(root)


def _convert_fields(ctx: Context, fields: Sequence[Field]) -> Optional[tuple[list[_Node], bool]]:
    subs: list[_Node] = []
    has_seq = False
    for f in fields:
        if f.variadic:
            return None
        p = _convert(ctx, f.type)
        if p is None or f.names:
            return None
        has_seq = has_seq or p.op is _Op.VAR_SEQ
        subs.append(p)
    return subs, has_seq


def _convert(ctx: Context, e: TypeNode) -> Optional[_Node]:
    match e:
        case Ident(name):
            basic = builtin_type(name)
            if basic is not None:
                return _Node(_Op.BUILTIN, basic)
            if name.startswith(_VAR_PREFIX):
                return _Node(_Op.VAR, name[len(_VAR_PREFIX):])
            # Only unnamed sequences are supported.
            if name.startswith(_VAR_SEQ_PREFIX) and name[len(_VAR_SEQ_PREFIX):] == "_":
                return _Node(_Op.VAR_SEQ, "_")
            return None
        case Selector(Ident(pkg), sel):
            if pkg == "unsafe" and sel == "Pointer":
                return _Node(_Op.BUILTIN, UNSAFE_POINTER)
            pkg_path = ctx.itab.lookup(pkg)
            if pkg_path is None:
                return None
            return _Node(_Op.NAMED, (pkg_path, sel))
        case Star(x):
            elem = _convert(ctx, x)
            return _Node(_Op.POINTER, subs=(elem,)) if elem is not None else None
        case ArrayExpr(elem_node, length):
            elem = _convert(ctx, elem_node)
            if elem is None:
                return None
            if length is None:
                return _Node(_Op.SLICE, subs=(elem,))
            if isinstance(length, Ident):
                if not length.name.startswith(_VAR_PREFIX):
                    return None
                return _Node(_Op.ARRAY, length.name[len(_VAR_PREFIX):], (elem,))
            if not length.isdigit() or not length.isascii():
                return None
            n = int(length)
            if n >= 2**63:
                return None
            return _Node(_Op.ARRAY, n, (elem,))
        case MapExpr(key_node, value_node):
            key = _convert(ctx, key_node)
            if key is None:
                return None
            value = _convert(ctx, value_node)
            if value is None:
                return None
            return _Node(_Op.MAP, subs=(key, value))
        case ChanExpr(elem_node, direction):
            elem = _convert(ctx, elem_node)
            return _Node(_Op.CHAN, direction, (elem,)) if elem is not None else None
        case FuncExpr(params, results):
            converted_params = _convert_fields(ctx, params)
            if converted_params is None:
                return None
            converted_results = _convert_fields(ctx, results)
            if converted_results is None:
                return None
            (param_subs, params_seq), (result_subs, results_seq) = converted_params, converted_results
            op = _Op.FUNC if params_seq or results_seq else _Op.FUNC_NO_SEQ
            return _Node(op, len(param_subs), tuple(param_subs + result_subs))
        case StructExpr(fields):
            converted = _convert_fields(ctx, fields)
            if converted is None:
                return None
            members, has_seq = converted
            return _Node(_Op.STRUCT if has_seq else _Op.STRUCT_NO_SEQ, subs=tuple(members))
        case InterfaceExpr(methods):
            if not methods:
                return _Node(_Op.BUILTIN, _EFACE)
            if len(methods) == 1:
                p = _convert(ctx, methods[0].type)
                if p is None or p.op is not _Op.VAR_SEQ:
                    return None
                return _Node(_Op.ANY_INTERFACE)
    return None


@dataclass(frozen=True)
class Pattern:
    """A compiled type pattern."""

    root: _Node

    def match_identical(self, state: MatcherState, typ: Optional[GoType]) -> bool:
        """Report whether ``typ`` matches the pattern."""
        state.reset()
        return self._match(state, self.root, typ)

    def _match_fields(
        self, state: MatcherState, subs: Sequence[_Node], fields: Sequence[GoType]
    ) -> bool:
        num_fields = len(fields)
        if not subs and num_fields:
            return False
        matched = 0
        match_any = False
        i = 0
        while i < len(subs):
            if subs[i].op is _Op.VAR_SEQ:
                match_any = True
            left = num_fields - matched
            if match_any:
                if left == 0:
                    match_any = False
                    i += 1
                elif i + 1 < len(subs) and self._match(state, subs[i + 1], fields[matched]):
                    # Non-greedy: stop the sequence as soon as the next pattern fits.
                    match_any = False
                    i += 2
                    matched += 1
                else:
                    matched += 1
                continue
            if left == 0 or not self._match(state, subs[i], fields[matched]):
                return False
            i += 1
            matched += 1
        return matched == num_fields

    def _match(self, state: MatcherState, sub: _Node, typ: Optional[GoType]) -> bool:
        op = sub.op
        if op is _Op.VAR:
            name = sub.value
            if name == "_":
                return True
            if name not in state.type_matches:
                state.type_matches[name] = typ
                return True
            bound = state.type_matches[name]
            if bound is None:
                return typ is None
            return identical(typ, bound)
        if op is _Op.BUILTIN:
            return identical(typ, sub.value)
        if op in (_Op.POINTER, _Op.SLICE):
            kind = Pointer if op is _Op.POINTER else Slice
            return isinstance(typ, kind) and self._match(state, sub.subs[0], typ.elem)
        if op is _Op.ARRAY:
            if not isinstance(typ, Array):
                return False
            want = sub.value
            if want == "_":
                want = typ.length
            elif isinstance(want, str):
                want = state.int64_matches.setdefault(want, typ.length)
            return want == typ.length and self._match(state, sub.subs[0], typ.elem)
        if op is _Op.MAP:
            return (
                isinstance(typ, Map)
                and self._match(state, sub.subs[0], typ.key)
                and self._match(state, sub.subs[1], typ.elem)
            )
        if op is _Op.CHAN:
            return (
                isinstance(typ, Chan)
                and sub.value == typ.direction
                and self._match(state, sub.subs[0], typ.elem)
            )
        if op is _Op.NAMED:
            # Predeclared named types have no package and never match here.
            if not isinstance(typ, Named) or typ.pkg is None:
                return False
            pkg_path, type_name = sub.value
            if type_name != typ.name:
                return False
            obj_path = typ.pkg.path
            vendor_pos = obj_path.find(_VENDOR)
            if vendor_pos != -1:
                obj_path = obj_path[vendor_pos + len(_VENDOR):]
            return obj_path == pkg_path
        if op in (_Op.FUNC_NO_SEQ, _Op.FUNC):
            if not isinstance(typ, Signature):
                return False
            params, results = sub.subs[: sub.value], sub.subs[sub.value:]
            param_types = [v.type for v in typ.params]
            result_types = [v.type for v in typ.results]
            if op is _Op.FUNC:
                return self._match_fields(state, params, param_types) and self._match_fields(
                    state, results, result_types
                )
            if len(param_types) != len(params) or len(result_types) != len(results):
                return False
            return all(
                self._match(state, p, t)
                for p, t in zip(params + results, param_types + result_types)
            )
        if op is _Op.STRUCT_NO_SEQ:
            if not isinstance(typ, Struct) or typ.num_fields() != len(sub.subs):
                return False
            return all(self._match(state, m, f.type) for m, f in zip(sub.subs, typ.fields))
        if op is _Op.STRUCT:
            return isinstance(typ, Struct) and self._match_fields(
                state, sub.subs, [f.type for f in typ.fields]
            )
        if op is _Op.ANY_INTERFACE:
            return isinstance(typ, Interface)
        return False