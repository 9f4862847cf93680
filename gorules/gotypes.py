"""A small model of Go types: enough to build, compare and print them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class ChanDir(enum.Enum):
    """Direction of a channel type."""

    SEND_RECV = "chan"
    SEND_ONLY = "chan<-"
    RECV_ONLY = "<-chan"


class GoType:
    """Base class of every Go type."""

    def underlying(self) -> GoType:
        """Return the underlying type; only named types differ from themselves."""
        return self


@dataclass(frozen=True, eq=False)
class Basic(GoType):
    """A predeclared basic type such as ``int`` or ``string``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class Pointer(GoType):
    elem: GoType

    def __str__(self) -> str:
        return f"*{self.elem}"


@dataclass(frozen=True, eq=False)
class Slice(GoType):
    elem: GoType

    def __str__(self) -> str:
        return f"[]{self.elem}"


@dataclass(frozen=True, eq=False)
class Array(GoType):
    elem: GoType
    length: int

    def __str__(self) -> str:
        return f"[{self.length}]{self.elem}"


@dataclass(frozen=True, eq=False)
class Map(GoType):
    key: GoType
    elem: GoType

    def __str__(self) -> str:
        return f"map[{self.key}]{self.elem}"


@dataclass(frozen=True, eq=False)
class Chan(GoType):
    elem: GoType
    direction: ChanDir = ChanDir.SEND_RECV

    def __str__(self) -> str:
        return f"{self.direction.value} {self.elem}"


@dataclass(frozen=True, eq=False)
class Var:
    """A parameter, result, struct field or interface method."""

    name: str
    type: GoType
    embedded: bool = False
    tag: str = ""

    def __str__(self) -> str:
        return f"{self.name} {self.type}" if self.name else str(self.type)


@dataclass(frozen=True, eq=False)
class Signature(GoType):
    params: tuple[Var, ...] = ()
    results: tuple[Var, ...] = ()
    variadic: bool = False

    def body(self) -> str:
        """Return the signature text without the leading ``func`` keyword."""
        parts = [str(v) for v in self.params]
        if self.variadic and self.params:
            last = self.params[-1]
            elem = last.type.elem if isinstance(last.type, Slice) else last.type
            prefix = f"{last.name} " if last.name else ""
            parts[-1] = f"{prefix}...{elem}"
        text = "(" + ", ".join(parts) + ")"
        if len(self.results) == 1 and not self.results[0].name:
            text += f" {self.results[0].type}"
        elif self.results:
            text += " (" + ", ".join(str(v) for v in self.results) + ")"
        return text

    def __str__(self) -> str:
        return "func" + self.body()


@dataclass(frozen=True, eq=False)
class Struct(GoType):
    fields: tuple[Var, ...] = ()

    def num_fields(self) -> int:
        return len(self.fields)

    def field(self, i: int) -> Var:
        return self.fields[i]

    def __str__(self) -> str:
        parts = []
        for f in self.fields:
            text = str(f.type) if f.embedded else str(f)
            if f.tag:
                text += f' "{f.tag}"'
            parts.append(text)
        return "struct{" + "; ".join(parts) + "}"


@dataclass(frozen=True, eq=False)
class Interface(GoType):
    """An interface type; methods are vars whose type is a Signature."""

    methods: tuple[Var, ...] = ()

    def sorted_methods(self) -> list[Var]:
        return sorted(self.methods, key=lambda m: m.name)

    def __str__(self) -> str:
        parts = []
        for m in self.sorted_methods():
            sig = m.type
            parts.append(m.name + (sig.body() if isinstance(sig, Signature) else str(sig)))
        return "interface{" + "; ".join(parts) + "}"


@dataclass(eq=False)
class Package:
    path: str
    name: str
    imports: tuple[Package, ...] = ()
    complete: bool = True


@dataclass(frozen=True, eq=False)
class Named(GoType):
    """A defined type; two named types are identical only if they are the same object."""

    name: str
    pkg: Optional[Package]
    base: GoType

    def underlying(self) -> GoType:
        return self.base.underlying()

    def __str__(self) -> str:
        return f"{self.pkg.path}.{self.name}" if self.pkg is not None else self.name


INVALID = Basic("invalid type")
BOOL = Basic("bool")
INT = Basic("int")
INT8 = Basic("int8")
INT16 = Basic("int16")
INT32 = Basic("int32")
INT64 = Basic("int64")
UINT = Basic("uint")
UINT8 = Basic("uint8")
UINT16 = Basic("uint16")
UINT32 = Basic("uint32")
UINT64 = Basic("uint64")
UINTPTR = Basic("uintptr")
STRING = Basic("string")
FLOAT32 = Basic("float32")
FLOAT64 = Basic("float64")
COMPLEX64 = Basic("complex64")
COMPLEX128 = Basic("complex128")
UNSAFE_POINTER = Basic("unsafe.Pointer")

ERROR = Named(
    "error",
    None,
    Interface((Var("Error", Signature(results=(Var("", STRING),))),)),
)

_BUILTINS: dict[str, GoType] = {
    "error": ERROR,
    "bool": BOOL,
    "int": INT,
    "int8": INT8,
    "int16": INT16,
    "int32": INT32,
    "int64": INT64,
    "uint": UINT,
    "uint8": UINT8,
    "uint16": UINT16,
    "uint32": UINT32,
    "uint64": UINT64,
    "uintptr": UINTPTR,
    "string": STRING,
    "float32": FLOAT32,
    "float64": FLOAT64,
    "complex64": COMPLEX64,
    "complex128": COMPLEX128,
    "byte": UINT8,
    "rune": INT32,
}


def builtin_type(name: str) -> Optional[GoType]:
    """Return the predeclared type called ``name``, or None if there is none."""
    return _BUILTINS.get(name)


def _identical_vars(xs: tuple[Var, ...], ys: tuple[Var, ...]) -> bool:
    return len(xs) == len(ys) and all(identical(x.type, y.type) for x, y in zip(xs, ys))


def identical(x: Optional[GoType], y: Optional[GoType]) -> bool:
    """Report whether two types are identical in Go's sense."""
    if x is y:
        return True
    if x is None or y is None or type(x) is not type(y):
        return False
    if isinstance(x, Basic):
        return x.name == y.name
    if isinstance(x, (Pointer, Slice)):
        return identical(x.elem, y.elem)
    if isinstance(x, Array):
        return x.length == y.length and identical(x.elem, y.elem)
    if isinstance(x, Map):
        return identical(x.key, y.key) and identical(x.elem, y.elem)
    if isinstance(x, Chan):
        return x.direction == y.direction and identical(x.elem, y.elem)
    if isinstance(x, Signature):
        return (
            x.variadic == y.variadic
            and _identical_vars(x.params, y.params)
            and _identical_vars(x.results, y.results)
        )
    if isinstance(x, Struct):
        return len(x.fields) == len(y.fields) and all(
            a.name == b.name
            and a.embedded == b.embedded
            and a.tag == b.tag
            and identical(a.type, b.type)
            for a, b in zip(x.fields, y.fields)
        )
    if isinstance(x, Interface):
        xs, ys = x.sorted_methods(), y.sorted_methods()
        return len(xs) == len(ys) and all(
            a.name == b.name and identical(a.type, b.type) for a, b in zip(xs, ys)
        )
    return False


def find_dependency(pkg: Package, path: str) -> Optional[Package]:
    """Find the package with ``path`` among ``pkg`` and its complete dependencies."""
    if pkg.path == path:
        return pkg
    for imported in pkg.imports:
        dep = find_dependency(imported, path)
        if dep is not None and dep.complete:
            return dep
    return None