import pytest

from gorules.messages import (
    CapturedNode,
    CommentRule,
    MatchData,
    MessageRenderer,
    Node,
    fixed_text,
    match_comment,
    regexp_has_capture_groups,
    truncate_text,
)

LONG = "have := truncateText(test.input, test.maxLen)"


@pytest.mark.parametrize(
    "text,max_len,want",
    [
        ("hello world", 60, "hello world"),
        ("hello world", 8, "h<...>ld"),
        ("hello world", 7, "h<...>d"),
        ("hello world", 6, "<...>d"),
        ("hello world", 5, "<...>"),
        (LONG, 20, "have :=<...>.maxLen)"),
        (LONG, 30, "have := trun<...> test.maxLen)"),
        (LONG, 40, "have := truncateT<...>nput, test.maxLen)"),
        (LONG, 41, "have := truncateTe<...>nput, test.maxLen)"),
        (LONG, 42, "have := truncateTe<...>input, test.maxLen)"),
        (LONG, 50, LONG),
    ],
)
def test_truncate_text(text, max_len, want):
    have = truncate_text(text, max_len)
    assert len(have) <= max_len
    if len(text) > max_len:
        assert len(have) == max_len
    assert have == want


def test_truncate_text_bytes():
    assert truncate_text(b"hello world", 8) == b"h<...>ld"


def test_truncate_text_too_small_limit():
    with pytest.raises(ValueError):
        truncate_text("hello world", 3)


@pytest.mark.parametrize(
    "msg,want,names",
    [
        ("$x", "xvar", ["x"]),
        ("$x$x", "xvarxvar", ["x"]),
        ("$f $foo", "fvar foovar", ["f", "foo"]),
        ("$foo $f", "foovar fvar", ["f", "foo"]),
        ("$foo $f", "foovar fvar", ["foo", "f"]),
        ("$foo $foo $f", "foovar foovar fvar", ["foo", "f"]),
        ("$foo$f", "foovarfvar", ["foo", "f"]),
        ("$foo($f) + $f.$foo", "foovar(fvar) + fvar.foovar", ["foo", "f"]),
        ("$fooo", "foovaro", ["foo"]),
        ("$nonexisting", "$nonexisting", ["x"]),
        ("$$", "dd", ["x"]),
        ("$$[$x]", "dd[xvar]", ["x"]),
    ],
)
def test_render_message(msg, want, names):
    capture = [CapturedNode(n, Node("Ident", n + "var")) for n in names]
    m = MatchData(Node("Ident", "dd"), capture)
    assert MessageRenderer().render(msg, m, False) == want


def test_render_without_dollar_is_unchanged():
    m = MatchData(Node("Ident", "dd"))
    assert MessageRenderer().render("plain text", m, True) == "plain text"


def test_render_skips_nil_captures():
    m = MatchData(Node("Ident", "dd"), [CapturedNode("results", None)])
    assert MessageRenderer().render("$results", m, False) == "$results"


def test_render_truncates_when_asked():
    long_text = "x" * 100
    m = MatchData(Node("Ident", "dd"), [CapturedNode("x", Node("Ident", long_text))])
    renderer = MessageRenderer(truncate_len=10)
    assert renderer.render("[$x]", m, True) == "[xx<...>xxx]"
    assert renderer.render("[$x]", m, False) == "[" + long_text + "]"


def test_render_default_truncate_len_is_60():
    m = MatchData(Node("Ident", "y" * 200))
    assert len(MessageRenderer().render("$$", m, True)) == 60


def test_render_uses_source_offsets():
    renderer = MessageRenderer(source="a := foo(bar)\n")
    m = MatchData(Node("CallExpr", "ignored", pos=5, end=13))
    assert renderer.render("call $$", m, False) == "call foo(bar)"


def test_render_fixes_address_before_selector():
    amp = Node("UnaryExpr", "&buf", op="&", operand=Node("Ident", "buf"))
    m = MatchData(Node("Ident", "dd"), [CapturedNode("x", amp)])
    renderer = MessageRenderer()
    assert renderer.render("$x.Len()", m, False) == "buf.Len()"
    assert renderer.render("f($x)", m, False) == "f(&buf)"


def test_fixed_text_cases():
    ident_amp = Node("UnaryExpr", "&a[0]", op="&", operand=Node("IndexExpr", "a[0]"))
    call_amp = Node("UnaryExpr", "&f()", op="&", operand=Node("CallExpr", "f()"))
    assert fixed_text("&a[0]", ident_amp, ".x") == "a[0]"
    assert fixed_text("&a[0]", ident_amp, " rest") == "&a[0]"
    assert fixed_text("&f()", call_amp, ".x") == "&f()"


def test_captured_by_name():
    node = Node("Ident", "v")
    m = MatchData(Node("Ident", "dd"), [CapturedNode("v", node)])
    assert m.captured_by_name("v") == node
    assert m.captured_by_name("w") is None


@pytest.mark.parametrize(
    "pattern,want",
    [
        ("foo", False),
        ("(?:foo)|bar", False),
        ("(?s)/\\*.*nolint.*", False),
        ("(foo)", True),
        ("(?P<x>foo)", True),
        ("(", True),
    ],
)
def test_regexp_has_capture_groups(pattern, want):
    assert regexp_has_capture_groups(pattern) is want


def test_comment_rule_invalid_pattern():
    with pytest.raises(ValueError, match="error parsing regexp"):
        CommentRule("(")


def test_match_comment_without_groups():
    rule = CommentRule("begining", message='"$$" may contain a typo')
    text = "// This is a begining"
    m = match_comment(rule, text, 100)
    assert m.node.text == "begining"
    assert m.node.pos == 100 + text.index("begining")
    assert m.capture == []
    assert MessageRenderer().render(rule.message, m, True) == '"begining" may contain a typo'


def test_match_comment_no_match():
    assert match_comment(CommentRule("bizzare"), "// fine text", 0) is None


def test_match_comment_dollar_anchor():
    rule = CommentRule(r"// nolint(?:$|\s)")
    assert match_comment(rule, "// nolint", 0).node.text == "// nolint"
    assert match_comment(rule, "// nolintx", 0) is None


def test_match_comment_named_group_positions():
    rule = CommentRule(r"(?P<first>calender)|(error)", message="first=$first")
    m = match_comment(rule, "// calender", 10)
    first = m.captured_by_name("first")
    assert first.text == "calender"
    assert first.pos == 13
    assert first.end == 21
    assert MessageRenderer().render(rule.message, m, True) == "first=calender"


def test_match_comment_empty_named_group():
    rule = CommentRule(r"(?P<x>collegue)|(commitee)", message='x="$x"')
    renderer = MessageRenderer()
    hit = match_comment(rule, "// collegue", 0)
    miss = match_comment(rule, "// commitee", 0)
    assert renderer.render(rule.message, hit, True) == 'x="collegue"'
    assert renderer.render(rule.message, miss, True) == 'x=""'


def test_match_comment_whole_match_with_groups():
    rule = CommentRule(r"(?P<word>buisness) advice", message='"$$" may contain a typo')
    m = match_comment(rule, "// I can't give you a buisness advice.", 0)
    assert MessageRenderer().render(rule.message, m, True) == '"buisness advice" may contain a typo'


def test_match_comment_suggestion_not_truncated():
    rule = CommentRule(r"// nolint2(?P<rest>.*)", suggestion="//nolint2$rest")
    tail = " foo bar" * 20
    m = match_comment(rule, "// nolint2" + tail, 0)
    assert MessageRenderer().render(rule.suggestion, m, False) == "//nolint2" + tail


def test_match_comment_directive():
    rule = CommentRule(r"/\*(?P<directive>[\w-]+):", message="directive should be written as //$directive")
    m = match_comment(rule, "/*foo-bar: baz*/", 0)
    assert MessageRenderer().render(rule.message, m, True) == "directive should be written as //foo-bar"