import pytest

from studydoc.model import MarkdownParser, MarkdownSerializer, ParseOptions
from studydoc.model.to_markdown import default_marks, default_nodes
from studydoc.test_builder import eq, out
from studydoc.test_builder import test_schema as schema

doc = out["doc"]
p = out["p"]
h1 = out["h1"]
h2 = out["h2"]
li = out["li"]
ul = out["ul"]
ol = out["ol"]
em = out["em"]
strong = out["strong"]
s = out["s"]
code = out["code"]
a = out["a"]
br = out["br"]
hr = out["hr"]
pre = out["pre"]
blockquote = out["blockquote"]
table = out["table"]
tr = out["tr"]
td = out["td"]
th = out["th"]
color = out["color"]
font_size = out["fontSize"]

parser = MarkdownParser.from_schema(schema)
serializer = MarkdownSerializer.from_schema(schema)


def parse(markdown, options=None):
    md = parser if options is None else MarkdownParser(schema, options=options)
    result = md.parse(markdown)
    result.check()
    return result


@pytest.mark.parametrize(
    "desc,markdown,expected",
    [
        ("paragraph", "hello", doc(p("hello"))),
        ("heading", "## Title", doc(h2("Title"))),
        (
            "heading keeps marks",
            "# Hello **world**",
            doc(h1("Hello ", strong("world"))),
        ),
        (
            "emphasis",
            "Some **bold** and *italic* text.",
            doc(p("Some ", strong("bold"), " and ", em("italic"), " text.")),
        ),
        ("bold italic", "***both***", doc(p(strong(em("both"))))),
        (
            "nested emphasis",
            "**a *b* c**",
            doc(p(strong("a ", em("b"), " c"))),
        ),
        ("strikethrough", "~~gone~~", doc(p(s("gone")))),
        ("inline code", "use `x()` here", doc(p("use ", code("x()"), " here"))),
        ("code inside bold", "**`x`**", doc(p(strong(code("x"))))),
        (
            "link",
            "[site](https://example.com)",
            doc(p(a({"href": "https://example.com"}, "site"))),
        ),
        (
            "link with title",
            '[site](https://example.com "Home")',
            doc(p(a({"href": "https://example.com", "title": "Home"}, "site"))),
        ),
        ("bold link", "**[x](u)**", doc(p(strong(a({"href": "u"}, "x"))))),
        ("image keeps alt text", "![a cat](cat.png)", doc(p("a cat"))),
        ("soft break", "one\ntwo", doc(p("one", br, "two"))),
        ("hard break", "one  \ntwo", doc(p("one", br, "two"))),
        ("inline html is dropped", "a <b>b</b>", doc(p("a b"))),
        ("html block is dropped", "<div>x</div>\n\ntext", doc(p("text"))),
        (
            "bullet list",
            "- a\n- b",
            doc(ul(li(p("a")), li(p("b")))),
        ),
        (
            "nested list",
            "- a\n- b\n  - c",
            doc(ul(li(p("a")), li(p("b"), ul(li(p("c")))))),
        ),
        (
            "ordered list",
            "1. one\n2. two",
            doc(ol(li(p("one")), li(p("two")))),
        ),
        ("ordered list start", "3. three", doc(ol({"start": 3}, li(p("three"))))),
        (
            "loose list item",
            "- a\n\n  b",
            doc(ul(li(p("a"), p("b")))),
        ),
        ("empty list item", "-", doc(ul(li(p())))),
        (
            "blockquote",
            "> quote\n>\n> more",
            doc(blockquote(p("quote"), p("more"))),
        ),
        (
            "blockquote with list",
            "> - a",
            doc(blockquote(ul(li(p("a"))))),
        ),
        (
            "fenced code",
            "```python\nprint(1)\n```",
            doc(pre({"language": "python"}, "print(1)")),
        ),
        ("fence without info", "```\ncode\n```", doc(pre("code"))),
        ("empty fence", "```\n```", doc(pre())),
        ("indented code", "    x = 1", doc(pre("x = 1"))),
        ("horizontal rule", "a\n\n---\n\nb", doc(p("a"), hr, p("b"))),
        (
            "table",
            "| a | b |\n| --- | --- |\n| 1 | 2 |",
            doc(
                table(
                    tr(th(p("a")), th(p("b"))),
                    tr(td(p("1")), td(p("2"))),
                )
            ),
        ),
        (
            "aligned table",
            "| a | b |\n| :--- | ---: |\n| 1 | 2 |",
            doc(
                table(
                    tr(
                        th({"textAlign": "left"}, p("a")),
                        th({"textAlign": "right"}, p("b")),
                    ),
                    tr(
                        td({"textAlign": "left"}, p("1")),
                        td({"textAlign": "right"}, p("2")),
                    ),
                )
            ),
        ),
        (
            "table cell marks",
            "| **a** |\n| --- |",
            doc(table(tr(th(p(strong("a")))))),
        ),
    ],
)
def test_parse(desc, markdown, expected):
    assert eq(parse(markdown), expected), desc


class TestParseEdges:
    @pytest.mark.parametrize("markdown", ["", "   ", "\n\n", "\t \n"])
    def test_blank_input_is_empty_doc(self, markdown):
        assert eq(parse(markdown), doc(p()))

    def test_only_html_gives_empty_doc(self):
        assert eq(parse("<!-- comment -->"), doc(p()))

    def test_parser_is_cached(self):
        assert MarkdownParser.from_schema(schema) is parser

    def test_parser_is_reusable(self):
        assert eq(parser.parse("*a*"), parser.parse("*a*"))


class TestOptions:
    def test_heading_literal_text(self):
        result = parse("# Hello **world**", ParseOptions(heading_marks=False))
        assert eq(result, doc(h1("Hello **world**")))

    def test_flat_marks(self):
        result = parse("**a** and *b*", ParseOptions(nested_marks=False))
        assert eq(result, doc(p(strong("a"), " and ", em("b"))))

    def test_flat_marks_drop_nested_content(self):
        result = parse("***x***", ParseOptions(nested_marks=False))
        assert eq(result, doc(p()))

    def test_breaks_as_newlines(self):
        result = parse("one\ntwo", ParseOptions(hard_break_nodes=False))
        assert eq(result, doc(p("one\ntwo")))

    def test_typographer(self):
        result = parse('"quoted"', ParseOptions(typographer=True))
        assert result.text_content == "\u201cquoted\u201d"

    def test_typographer_off_by_default(self):
        assert parse('"quoted"').text_content == '"quoted"'

    def test_options_are_frozen(self):
        options = ParseOptions()
        with pytest.raises(AttributeError):
            options.heading_marks = False


@pytest.mark.parametrize(
    "desc,node,markdown",
    [
        ("empty doc", doc(p()), ""),
        ("paragraphs", doc(p("a"), p("b")), "a\n\nb"),
        ("heading", doc(h2("Title"), p("x")), "## Title\n\nx"),
        ("deep heading", doc(out["heading"]({"level": 6}, "x")), "###### x"),
        ("bold", doc(p(strong("b"))), "**b**"),
        ("italic", doc(p(em("i"))), "*i*"),
        ("bold italic", doc(p(strong(em("x")))), "***x***"),
        ("code", doc(p(code("x"))), "`x`"),
        ("strike", doc(p(s("x"))), "~~x~~"),
        ("link", doc(p(a({"href": "u"}, "x"))), "[x](u)"),
        ("link title", doc(p(a({"href": "u", "title": "T"}, "x"))), '[x](u "T")'),
        ("bold link", doc(p(strong(a({"href": "u"}, "x")))), "[**x**](u)"),
        ("drops style marks", doc(p(color({"value": "red"}, "hi"))), "hi"),
        (
            "drops nested style marks",
            doc(p(font_size({"value": "9px"}, strong("hi")))),
            "**hi**",
        ),
        ("hard break", doc(p("a", br, "b")), "a\nb"),
        ("bullet list", doc(ul(li(p("a")), li(p("b")))), "- a\n- b"),
        ("ordered list", doc(ol(li(p("a")), li(p("b")))), "1. a\n2. b"),
        (
            "ordered list numbers from one",
            doc(ol({"start": 4}, li(p("a")), li(p("b")))),
            "1. a\n2. b",
        ),
        (
            "nested bullet list",
            doc(ul(li(p("a")), li(p("b"), ul(li(p("c")))))),
            "- a\n- b\n  - c",
        ),
        (
            "nested ordered list",
            doc(ol(li(p("a"), ol(li(p("b")))))),
            "1. a\n   1. b",
        ),
        (
            "list item continuation",
            doc(ul(li(p("a"), p("b")))),
            "- a\n\n  b",
        ),
        ("empty list item", doc(ul(li(p()))), "-"),
        (
            "list item starting with a list",
            doc(ul(li(p(), ul(li(p("x")))))),
            "-\n  - x",
        ),
        (
            "list item starting with a heading",
            doc(ul(li(p(), h2("h")))),
            "- ## h",
        ),
        (
            "list item starting with code",
            doc(ol(li(p(), pre("x"), p("after")))),
            "1. ```\n   x\n   ```\n\n   after",
        ),
        (
            "list item code",
            doc(ul(li(p("a"), pre("x\ny")))),
            "- a\n\n  ```\n  x\n  y\n  ```",
        ),
        ("blockquote", doc(blockquote(p("a"), p("b"))), "> a\n>\n> b"),
        (
            "code block",
            doc(pre({"language": "js"}, "let x;\nx = 1")),
            "```js\nlet x;\nx = 1\n```",
        ),
        ("empty code block", doc(pre()), "```\n\n```"),
        ("horizontal rule", doc(p("a"), hr, p("b")), "a\n\n---\n\nb"),
        (
            "table",
            doc(table(tr(th(p("a")), th(p("b"))), tr(td(p("1")), td(p("2"))))),
            "| a | b |\n| --- | --- |\n| 1 | 2 |",
        ),
        (
            "ragged table",
            doc(table(tr(th(p("a")), th(p("b"))), tr(td(p("1"))))),
            "| a | b |\n| --- | --- |\n| 1 |  |",
        ),
        (
            "table alignment",
            doc(table(tr(th({"textAlign": "center"}, p("a"))), tr(td(p("1"))))),
            "| a |\n| :---: |\n| 1 |",
        ),
        ("table pipes", doc(table(tr(td(p("a|b"))))), "| a\\|b |\n| --- |"),
    ],
)
def test_serialize(desc, node, markdown):
    assert serializer.serialize(node) == markdown, desc


class TestSerializer:
    def test_unknown_block_concatenates_children(self):
        nodes = {k: v for k, v in default_nodes.items() if k != "table"}
        md = MarkdownSerializer(nodes, default_marks)
        node = doc(table(tr(td(p("a")), td(p("b")))))
        assert md.serialize(node) == "ab"

    def test_unknown_mark_is_dropped(self):
        marks = {k: v for k, v in default_marks.items() if k != "bold"}
        md = MarkdownSerializer(default_nodes, marks)
        assert md.serialize(doc(p(strong("a"), em("b")))) == "a*b*"

    def test_serializes_single_block(self):
        assert serializer.serialize(h2("x")) == "## x"

    def test_is_cached(self):
        assert MarkdownSerializer.from_schema(schema) is serializer


@pytest.mark.parametrize(
    "markdown",
    [
        "# Heading\n\nSome **bold** and *italic* text.",
        "- a\n- b\n  - c",
        "1. one\n2. two\n   1. nested",
        "> quote\n>\n> - item",
        "```python\nprint(1)\n```",
        "a\n\n---\n\nb",
        "line one\nline two",
        "***both*** and ~~gone~~ and `code`",
        "[link](https://example.com) text",
        "| a | b |\n| :--- | ---: |\n| 1 | 2 |",
        "- a\n\n  b",
        "- # h",
        "- ```\n  x\n  ```",
    ],
)
def test_round_trip(round_trip, markdown):
    round_trip(markdown)
