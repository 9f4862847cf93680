import pytest

from gorules.gotypes import INT, STRING, UINT8, Array, ChanDir, Interface, Map, Slice, identical
from gorules.typeexpr import (
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
    parse_type_expr,
    type_from_string,
)


def test_parse_simple_nodes():
    assert parse_type_expr("int") == Ident("int")
    assert parse_type_expr("(int)") == Ident("int")
    assert parse_type_expr("*io.Reader") == Star(Selector(Ident("io"), "Reader"))
    assert parse_type_expr("[]int") == ArrayExpr(Ident("int"))
    assert parse_type_expr("[10]int") == ArrayExpr(Ident("int"), "10")
    assert parse_type_expr("[n]int") == ArrayExpr(Ident("int"), Ident("n"))
    assert parse_type_expr("map[string]int") == MapExpr(Ident("string"), Ident("int"))


def test_parse_chan_directions():
    assert parse_type_expr("chan int") == ChanExpr(Ident("int"), ChanDir.SEND_RECV)
    assert parse_type_expr("chan <- int") == ChanExpr(Ident("int"), ChanDir.SEND_ONLY)
    assert parse_type_expr("<- chan int") == ChanExpr(Ident("int"), ChanDir.RECV_ONLY)


def test_parse_func_named_params():
    node = parse_type_expr("func(a, b int) (err error)")
    assert node == FuncExpr(
        (Field(("a", "b"), Ident("int")),),
        (Field(("err",), Ident("error")),),
    )


def test_parse_func_unnamed_and_variadic():
    node = parse_type_expr("func(int, ...string) int")
    assert node == FuncExpr(
        (Field((), Ident("int")), Field((), Ident("string"), variadic=True)),
        (Field((), Ident("int")),),
    )


def test_parse_struct_fields():
    node = parse_type_expr("struct{a, b int; sync.Mutex}")
    assert node == StructExpr(
        (
            Field(("a", "b"), Ident("int")),
            Field((), Selector(Ident("sync"), "Mutex")),
        )
    )


def test_parse_struct_on_several_lines():
    node = parse_type_expr("struct{\n\tint\n\tstring\n}")
    assert node == StructExpr((Field((), Ident("int")), Field((), Ident("string"))))


def test_parse_interface_method():
    node = parse_type_expr("interface{ String() string }")
    assert node == InterfaceExpr(
        (Field(("String",), FuncExpr((), (Field((), Ident("string")),))),)
    )


def test_parse_error_position():
    with pytest.raises(TypeExprError, match=r"1:1: expected operand, found '%'"):
        parse_type_expr("%illegal")


@pytest.mark.parametrize("text", ["int int", "map[int", "func(a int, string)", "[]", "var"])
def test_parse_errors(text):
    with pytest.raises(TypeExprError):
        parse_type_expr(text)


@pytest.mark.parametrize(
    "text", ["int", "[]int", "[10]int", "map[string]int", "*int", "**[]uint8", "interface{}"]
)
def test_type_from_string_round_trip(text):
    assert str(type_from_string(text)) == text


def test_type_from_string_builds_types():
    assert identical(type_from_string("byte"), UINT8)
    assert identical(type_from_string("[]int"), Slice(INT))
    assert identical(type_from_string("[4]string"), Array(STRING, 4))
    assert identical(type_from_string("map[string]int"), Map(STRING, INT))
    assert identical(type_from_string("(interface{})"), Interface())


@pytest.mark.parametrize(
    "text",
    ["?", "foo", "[n]int", "[0x10]int", "[1.5]int", "chan int", "interface{String() string}"],
)
def test_type_from_string_unsupported(text):
    assert type_from_string(text) is None


def test_type_from_string_syntax_error():
    with pytest.raises(TypeExprError):
        type_from_string("map[")