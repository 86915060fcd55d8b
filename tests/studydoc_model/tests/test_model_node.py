import pytest

from studydoc.model import Fragment, Mark, Node
from studydoc.test_builder import eq, out
from studydoc.test_builder import test_schema as schema

doc = out["doc"]
blockquote = out["blockquote"]
p = out["p"]
h2 = out["h2"]
li = out["li"]
ul = out["ul"]
ol = out["ol"]
em = out["em"]
strong = out["strong"]
code = out["code"]
a = out["a"]
br = out["br"]
hr = out["hr"]
pre = out["pre"]
color = out["color"]
sub = out["subscript"]
sup = out["superscript"]


def mark(name, attrs=None):
    return schema.mark(name, attrs)


class TestToString:
    def test_nesting(self):
        node = doc(ul(li(p("hey"), p()), li(p("foo"))))
        expected = 'doc(bulletList(listItem(paragraph("hey"), paragraph), listItem(paragraph("foo"))))'  # noqa
        assert str(node) == expected

    def test_shows_inline_children(self):
        node = doc(p("foo", br, strong("bar")))
        assert str(node) == 'doc(paragraph("foo", hardBreak, bold("bar")))'

    def test_has_default_tostring_method_text(self):
        assert str(schema.text("hello")) == '"hello"'


class TestTextContent:
    def test_joins_text(self):
        assert doc(p("a", strong("b")), p("c")).text_content == "abc"

    def test_hard_break_reads_as_newline(self):
        assert p("a", br, "b").text_content == "a\nb"

    def test_leaf_without_text_is_empty(self):
        assert doc(p("a"), hr, p("b")).text_content == "ab"

    def test_counts_characters_not_utf16_units(self):
        assert doc(p("😀 ", strong("ü"))).text_content == "😀 ü"


class TestDescendants:
    def test_visits_in_document_order(self):
        node = doc(ul(li(p("a"), ul(li(p("b"))))), p("c"))
        names = []
        node.descendants(lambda child, parent, index: names.append(child.type.name))
        assert names == [
            "bulletList",
            "listItem",
            "paragraph",
            "text",
            "bulletList",
            "listItem",
            "paragraph",
            "text",
            "paragraph",
            "text",
        ]

    def test_passes_parent_and_index(self):
        node = doc(p("a"), p("b", strong("c")))
        seen = []

        def record(child, parent, index):
            seen.append((str(child), parent.type.name, index))

        node.descendants(record)
        assert seen == [
            ('paragraph("a")', "doc", 0),
            ('"a"', "paragraph", 0),
            ('paragraph("b", bold("c"))', "doc", 1),
            ('"b"', "paragraph", 0),
            ('bold("c")', "paragraph", 1),
        ]

    def test_false_skips_children(self):
        node = doc(blockquote(p("hidden")), p("shown"))
        texts = []

        def record(child, parent, index):
            if child.type.name == "blockquote":
                return False
            if child.is_text:
                texts.append(child.text)
            return None

        node.descendants(record)
        assert texts == ["shown"]


class TestMarkSet:
    def test_adds_in_rank_order(self):
        bold, italic = mark("bold"), mark("italic")
        assert italic.add_to_set([bold]) == [bold, italic]
        assert bold.add_to_set([italic]) == [bold, italic]

    def test_later_mark_of_same_type_wins(self):
        red = mark("color", {"value": "red"})
        blue = mark("color", {"value": "blue"})
        result = blue.add_to_set(red.add_to_set(Mark.none))
        assert Mark.same_set(result, [blue])

    def test_subscript_and_superscript_exclude_each_other(self):
        result = mark("superscript").add_to_set([mark("subscript")])
        assert [m.type.name for m in result] == ["superscript"]
        result = mark("subscript").add_to_set(result)
        assert [m.type.name for m in result] == ["subscript"]

    def test_adding_present_mark_keeps_set(self):
        bold = mark("bold")
        marks = [bold, mark("code")]
        assert mark("bold").add_to_set(marks) is marks

    def test_set_from_sorts(self):
        marks = Mark.set_from([mark("fontSize", {"value": "12px"}), mark("bold")])
        assert [m.type.name for m in marks] == ["bold", "fontSize"]

    def test_link_marks_compare_attributes(self):
        foo = mark("link", {"href": "foo"})
        assert foo.eq(mark("link", {"href": "foo"}))
        assert not foo.eq(mark("link", {"href": "bar"}))

    def test_builder_nests_marks(self):
        node = p(strong("a", em("b")))
        assert [m.type.name for m in node.child(1).marks] == ["bold", "italic"]

    def test_builder_outer_script_mark_replaces_inner(self):
        node = p(sub(sup("x")))
        assert [m.type.name for m in node.child(0).marks] == ["subscript"]


class TestCheck:
    def test_accepts_valid_tree(self):
        doc(h2("Title"), ul(li(p("a"), ol(li(p("b"))))), blockquote(p("q")), hr).check()

    def test_rejects_empty_doc(self):
        with pytest.raises(ValueError):
            schema.nodes["doc"].create(None, []).check()

    def test_rejects_text_at_block_level(self):
        with pytest.raises(ValueError):
            doc("text").check()

    def test_rejects_nested_invalid_content(self):
        with pytest.raises(ValueError):
            doc(ul(p("not an item"))).check()

    def test_rejects_marks_in_code_block(self):
        with pytest.raises(ValueError):
            doc(pre(strong("x"))).check()

    def test_rejects_empty_text(self):
        with pytest.raises(ValueError):
            schema.text("")

    def test_create_refuses_text_type(self):
        with pytest.raises(ValueError):
            schema.nodes["text"].create()

    def test_unknown_node_type(self):
        with pytest.raises(ValueError):
            schema.node("image")


class TestFragment:
    def test_merges_adjacent_text_with_same_marks(self):
        frag = Fragment.from_array([schema.text("a"), schema.text("b")])
        assert frag.child_count == 1
        assert frag.child(0).text == "ab"

    def test_keeps_text_with_different_marks_apart(self):
        bold = [mark("bold")]
        frag = Fragment.from_array([schema.text("a"), schema.text("b", bold)])
        assert frag.child_count == 2


class TestJSON:
    def test_text_node(self):
        node = schema.text("b", [mark("bold"), mark("color", {"value": "red"})])
        assert node.to_json() == {
            "type": "text",
            "text": "b",
            "marks": [{"type": "bold"}, {"type": "color", "attrs": {"value": "red"}}],
        }

    def test_leaf_without_attrs(self):
        assert hr.flat[0].to_json() == {"type": "horizontalRule"}

    def test_empty_textblock_has_content_list(self):
        data = p().to_json()
        assert data["type"] == "paragraph"
        assert data["content"] == []

    def test_heading_level(self):
        assert h2("x").to_json()["attrs"]["level"] == 2

    @pytest.mark.parametrize(
        "node",
        [
            doc(p("hello")),
            doc(h2("Title"), p("a", strong("b"), em(a("c")), br, "d")),
            doc(ul(li(p("a"), ul(li(p("b"))))), ol({"start": 3}, li(p("c")))),
            doc(blockquote(p(color({"value": "red"}, "red"))), hr, pre("x = 1")),
            doc(p(code("x"), sub("2"))),
        ],
    )
    def test_round_trip(self, node):
        assert eq(Node.from_json(schema, node.to_json()), node)

    def test_unknown_mark(self):
        with pytest.raises(ValueError):
            Node.from_json(
                schema,
                {"type": "text", "text": "x", "marks": [{"type": "blink"}]},
            )
