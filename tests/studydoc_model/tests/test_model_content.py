import pytest

from studydoc.model import ContentExpr
from studydoc.test_builder import eq, out
from studydoc.test_builder import test_schema as schema

doc = out["doc"]
p = out["p"]
li = out["li"]
ul = out["ul"]
tr = out["tr"]


def match(expr, types):
    ts = [schema.nodes[t] for t in types.split(" ")] if types else []
    return ContentExpr.parse(expr, schema.nodes).match_types(ts)


@pytest.mark.parametrize(
    "expr,types,valid",
    [
        ("", "", True),
        ("", "paragraph", False),
        ("block+", "", False),
        ("block+", "paragraph heading table", True),
        ("block+", "text", False),
        ("paragraph block*", "paragraph", True),
        ("paragraph block*", "paragraph bulletList heading", True),
        ("paragraph block*", "heading", False),
        ("paragraph block*", "", False),
        ("inline*", "text hardBreak text", True),
        ("inline*", "paragraph", False),
        ("text*", "text", True),
        ("text*", "hardBreak", False),
        ("(tableCell | tableHeader)*", "tableHeader tableCell tableCell", True),
        ("(tableCell | tableHeader)*", "", True),
        ("(tableCell | tableHeader)*", "paragraph", False),
        ("tableRow+", "tableRow tableRow", True),
        ("heading?", "", True),
        ("heading?", "heading", True),
        ("heading?", "heading heading", False),
        ("heading paragraph+", "heading paragraph paragraph", True),
        ("heading paragraph+", "heading", False),
    ],
)
def test_match_types(expr, types, valid):
    assert match(expr, types) is valid


@pytest.mark.parametrize(
    "expr",
    [
        "paragraph (heading",
        "nothing",
        "paragraph text",
        "*",
    ],
)
def test_rejects_invalid_expressions(expr):
    with pytest.raises(SyntaxError):
        ContentExpr.parse(expr, schema.nodes)


class TestFill:
    def test_fills_empty_list_item(self):
        assert eq(schema.nodes["listItem"].create_and_fill(), li(p()))

    def test_inserts_paragraph_before_nested_list(self):
        nested = ul(li(p("x")))
        item = schema.nodes["listItem"].create_and_fill(None, [nested])
        assert eq(item, li(p(), ul(li(p("x")))))

    def test_fills_empty_doc(self):
        assert eq(schema.nodes["doc"].create_and_fill(), doc(p()))

    def test_empty_row_is_valid(self):
        table = schema.nodes["table"].create_and_fill()
        assert eq(table, out["table"](tr()))

    def test_returns_none_when_content_cannot_fit(self):
        assert schema.nodes["doc"].create_and_fill(None, [schema.text("x")]) is None

    def test_keeps_valid_content(self):
        content = [p("a"), p("b")]
        filled = schema.nodes["doc"].create_and_fill(None, content)
        assert eq(filled, doc(p("a"), p("b")))
