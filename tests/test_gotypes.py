import pytest

from gorules.gotypes import (
    ERROR,
    INT,
    INT32,
    STRING,
    UINT8,
    Array,
    Chan,
    ChanDir,
    Interface,
    Map,
    Named,
    Package,
    Pointer,
    Signature,
    Slice,
    Struct,
    Var,
    builtin_type,
    find_dependency,
    identical,
)


def test_builtin_aliases():
    assert builtin_type("byte") is builtin_type("uint8") is UINT8
    assert builtin_type("rune") is INT32
    assert builtin_type("error") is ERROR


def test_builtin_unknown():
    assert builtin_type("Reader") is None


@pytest.mark.parametrize(
    "a, b",
    [
        (Slice(INT), Slice(INT)),
        (Pointer(Pointer(INT)), Pointer(Pointer(INT))),
        (Array(INT, 10), Array(INT, 10)),
        (Map(STRING, INT), Map(STRING, INT)),
        (Chan(INT, ChanDir.RECV_ONLY), Chan(INT, ChanDir.RECV_ONLY)),
        (Interface(), Interface()),
    ],
)
def test_identical_structural(a, b):
    assert identical(a, b)
    assert identical(b, a)


@pytest.mark.parametrize(
    "a, b",
    [
        (Slice(INT), Slice(STRING)),
        (Array(INT, 10), Array(INT, 11)),
        (Map(STRING, INT), Map(INT, INT)),
        (Chan(INT), Chan(INT, ChanDir.SEND_ONLY)),
        (Slice(INT), Array(INT, 1)),
        (INT, None),
    ],
)
def test_not_identical(a, b):
    assert not identical(a, b)


def test_named_identity():
    pkg = Package("io", "io")
    a = Named("Reader", pkg, Struct())
    b = Named("Reader", pkg, Struct())
    assert identical(a, a)
    assert not identical(a, b)


def test_underlying():
    body = Struct((Var("x", INT),))
    named = Named("T", Package("p", "p"), body)
    outer = Named("U", Package("p", "p"), named)
    assert outer.underlying() is body
    assert INT.underlying() is INT


def test_struct_fields():
    s = Struct((Var("a", INT), Var("b", STRING)))
    assert s.num_fields() == 2
    assert s.field(1).type is STRING


def test_struct_identical_checks_names():
    assert identical(Struct((Var("a", INT),)), Struct((Var("a", INT),)))
    assert not identical(Struct((Var("a", INT),)), Struct((Var("b", INT),)))


def test_signature_ignores_param_names():
    a = Signature(params=(Var("x", INT),), results=(Var("", STRING),))
    b = Signature(params=(Var("y", INT),), results=(Var("", STRING),))
    assert identical(a, b)
    c = Signature(params=(Var("y", Slice(INT)),), variadic=True)
    d = Signature(params=(Var("y", Slice(INT)),), variadic=False)
    assert not identical(c, d)


def test_interface_method_order():
    sig = Signature(results=(Var("", STRING),))
    a = Interface((Var("A", sig), Var("B", sig)))
    b = Interface((Var("B", sig), Var("A", sig)))
    assert identical(a, b)
    assert not identical(a, Interface((Var("A", sig),)))


def test_type_strings():
    assert str(Slice(INT)) == "[]int"
    assert str(Map(INT, INT)) == "map[int]int"
    assert str(Pointer(INT)) == "*int"
    assert str(Array(INT, 10)) == "[10]int"
    assert str(Signature(params=(Var("", INT), Var("", STRING)))) == "func(int, string)"


def test_error_type():
    assert str(ERROR) == "error"
    assert str(ERROR.underlying()) == "interface{Error() string}"


def test_find_dependency():
    leaf = Package("strings", "strings")
    partial = Package("bytes", "bytes", complete=False)
    mid = Package("example/mid", "mid", imports=(leaf, partial))
    root = Package("example/root", "root", imports=(mid,))
    assert find_dependency(root, "example/root") is root
    assert find_dependency(root, "strings") is leaf
    assert find_dependency(root, "bytes") is None
    assert find_dependency(root, "fmt") is None