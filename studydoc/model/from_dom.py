import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Literal, cast

import lxml.etree
import lxml.html
from cssselect import HTMLTranslator
from lxml.html import HtmlElement as DOMNode

from studydoc.utils import collapse_whitespace

from .fragment import Fragment
from .mark import Mark
from .node import Node, is_text
from .schema import Attrs, NodeType, Schema
from .style import block_attrs, parse_style, resolve_marks, style_marks

logger = logging.getLogger(__name__)

ELEMENT_NODE = 1
TEXT_NODE = 3
COMMENT_NODE = 8

# Structural wrappers whose children are promoted into the parent.
WRAPPER_TAGS = frozenset([
    "html",
    "body",
    "div",
    "section",
    "article",
    "main",
    "header",
    "footer",
    "aside",
    "nav",
])

IGNORE_TAGS = frozenset([
    "head",
    "noscript",
    "object",
    "script",
    "style",
    "template",
    "title",
])

INLINE_TAGS = frozenset([
    "a",
    "abbr",
    "b",
    "big",
    "br",
    "cite",
    "code",
    "del",
    "em",
    "font",
    "i",
    "img",
    "ins",
    "kbd",
    "label",
    "mark",
    "q",
    "s",
    "samp",
    "small",
    "span",
    "strike",
    "strong",
    "sub",
    "sup",
    "time",
    "tt",
    "u",
    "var",
])

TABLE_SECTION_TAGS = frozenset(["thead", "tbody", "tfoot"])

_translator = HTMLTranslator()


@dataclass(frozen=True)
class ParseRule:
    tag: str
    node: str
    priority: int | None = None
    attrs: Attrs | None = None
    get_attrs: Callable[[DOMNode], None | Attrs | Literal[False]] | None = None
    selector: lxml.etree.XPath = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        xpath = _translator.css_to_xpath(self.tag, prefix="self::")
        object.__setattr__(self, "selector", lxml.etree.XPath(xpath))

    def matches(self, dom_: DOMNode) -> bool:
        return bool(self.selector(dom_))

    @classmethod
    def from_json(cls, node: str, data: Dict[str, Any]) -> "ParseRule":
        return ParseRule(
            data["tag"],
            node,
            data.get("priority"),
            data.get("attrs"),
            data.get("getAttrs"),
        )


@dataclass(frozen=True)
class RuleMatch:
    rule: ParseRule
    type: NodeType
    attrs: Attrs | None


class DOMParser:
    """
    Turns an lxml element tree into a document. Block node types are
    found through the `parseDOM` tag rules of the schema's node specs;
    inline marks come from the mark resolver in `style.py`. A parser
    holds no per-parse state, so one instance can be shared.
    """

    schema: Schema
    rules: List[ParseRule]

    def __init__(self, schema: Schema, rules: List[ParseRule]) -> None:
        self.schema = schema
        self.rules = rules

    def parse(self, dom_: DOMNode) -> Node:
        context = ParseContext(self)
        blocks = context.add_all(dom_, top=True)
        return context.finish(blocks)

    def parse_html(self, html: str) -> Node:
        if not html or not html.strip():
            return self.schema.empty_doc()
        try:
            fragment = html_fragment(html)
        except (lxml.etree.ParserError, lxml.etree.ParseError, ValueError) as e:
            logger.warning("Could not parse HTML input, keeping raw text: %s", e)
            return self.raw_text_doc(html)

        context = ParseContext(self)
        blocks = context.add_all(fragment, top=True)
        if not blocks and not context.recognized:
            logger.debug("No recognised HTML content, keeping raw text")
            return self.raw_text_doc(html)
        return context.finish(blocks)

    def raw_text_doc(self, text: str) -> Node:
        text = text.strip()
        paragraph = self.schema.nodes["paragraph"]
        content = [self.schema.text(text)] if text else []
        doc = self.schema.top_node_type.create_and_fill(
            None, paragraph.create(None, content)
        )
        return cast(Node, doc)

    def match_tag(self, dom_: DOMNode) -> RuleMatch | None:
        for rule in self.rules:
            if not rule.matches(dom_):
                continue
            attrs = rule.attrs
            if rule.get_attrs is not None:
                result = rule.get_attrs(dom_)
                if result is False:
                    continue
                attrs = result
            return RuleMatch(rule, self.schema.nodes[rule.node], attrs)
        return None

    @classmethod
    def schema_rules(cls, schema: Schema) -> List[ParseRule]:
        result: List[ParseRule] = []

        def insert(rule: ParseRule) -> None:
            priority = rule.priority if rule.priority is not None else 50
            i = 0

            while i < len(result):
                next = result[i]
                next_priority = next.priority if next.priority is not None else 50
                if next_priority < priority:
                    break
                i += 1

            result.insert(i, rule)

        for name in schema.nodes:
            rules = schema.nodes[name].spec.get("parseDOM")

            if rules:
                for rule in rules:
                    insert(ParseRule.from_json(name, rule))

        return result

    @classmethod
    def from_schema(cls, schema: Schema) -> "DOMParser":
        if "dom_parser" not in schema.cached:
            schema.cached["dom_parser"] = DOMParser(
                schema, DOMParser.schema_rules(schema)
            )

        return schema.cached["dom_parser"]


class ParseContext:
    """The state of a single parse."""

    parser: DOMParser
    recognized: bool

    def __init__(self, parser: DOMParser) -> None:
        self.parser = parser
        self.schema = parser.schema
        self.recognized = False

    def finish(self, blocks: List[Node]) -> Node:
        return cast(Node, self.schema.top_node_type.create_and_fill(None, blocks))

    def add_all(self, dom_: DOMNode, top: bool = False) -> List[Node]:
        """
        Parse the children of `dom_` as a sequence of blocks. `top` is set
        for the document itself and the wrappers directly inside it; only
        there does a lone `code` element become a code block.
        """
        blocks: List[Node] = []
        pending: List[Node] = []

        def flush() -> None:
            if pending:
                paragraph_type = self.schema.nodes["paragraph"]
                paragraph = self.textblock(paragraph_type, None, pending)
                if paragraph.content.child_count:
                    blocks.append(paragraph)
                pending.clear()

        for child in child_nodes(dom_):
            if isinstance(child, str):
                if pending or child.strip():
                    self.recognized = True
                    pending.extend(self.add_text(child, Mark.none))
                continue
            if get_node_type(child) != ELEMENT_NODE:
                continue

            name = child.tag.lower()
            if name in IGNORE_TAGS:
                continue
            if name in WRAPPER_TAGS:
                self.recognized = True
                flush()
                blocks.extend(self.add_all(child, top))
                continue

            match = self.parser.match_tag(child)
            if (
                match is not None
                and "block" in match.type.groups
                and not (name == "code" and self.is_inline_code(child, pending, top))
            ):
                self.recognized = True
                flush()
                blocks.extend(self.add_block(child, match))
            elif name in INLINE_TAGS or (match is not None and match.type.is_inline):
                self.recognized = True
                pending.extend(self.add_inline(child, Mark.none))
            else:
                flush()
                blocks.extend(self.add_unknown(child))

        flush()
        return blocks

    def is_inline_code(self, dom_: DOMNode, pending: List[Node], top: bool) -> bool:
        return not top or bool(pending) or bool((dom_.tail or "").strip())

    def add_block(self, dom_: DOMNode, match: RuleMatch) -> List[Node]:
        type = match.type
        styles = parse_style(dom_.get("style"))
        attrs = {**(match.attrs or {}), **block_attrs(styles, type.attrs)}

        if type.name == "codeBlock":
            return [self.code_block(dom_, type, attrs)]
        if type.name in ("bulletList", "orderedList"):
            return self.add_list(dom_, type, attrs)
        if type.name == "table":
            return self.add_table(dom_, type, attrs)
        if type.is_leaf:
            return [type.create(attrs)]
        if type.inline_content:
            marks = Mark.set_from(style_marks(self.schema, styles))
            return [self.textblock(type, attrs, self.add_inline_children(dom_, marks))]

        node = type.create_and_fill(attrs, self.add_all(dom_))
        return [node] if node is not None else []

    def add_unknown(self, dom_: DOMNode) -> List[Node]:
        paragraph = self.schema.nodes["paragraph"]
        content = self.add_inline_children(dom_, Mark.none)
        node = self.textblock(paragraph, None, content)
        if node.content.child_count:
            self.recognized = True
            return [node]
        text = collapse_whitespace(dom_.text_content()).strip()
        if text:
            self.recognized = True
            return [paragraph.create(None, self.schema.text(text))]
        return []

    def code_block(self, dom_: DOMNode, type: NodeType, attrs: Attrs) -> Node:
        language = code_language(dom_)
        if language:
            attrs = {**attrs, "language": language}
        elif not attrs.get("language"):
            attrs = {**attrs, "language": "text"}
        text = dom_.text_content().replace("\r\n", "\n").rstrip("\n")
        return type.create(attrs, self.schema.text(text) if text else None)

    def add_list(self, dom_: DOMNode, type: NodeType, attrs: Attrs) -> List[Node]:
        item_type = self.schema.nodes["listItem"]
        items = []
        for child in dom_:
            if get_node_type(child) != ELEMENT_NODE or child.tag.lower() != "li":
                continue
            item = item_type.create_and_fill(None, self.add_all(child))
            if item is not None:
                items.append(item)
        if not items:
            return []
        return [type.create(attrs, items)]

    def add_table(self, dom_: DOMNode, type: NodeType, attrs: Attrs) -> List[Node]:
        row_type = self.schema.nodes["tableRow"]
        rows = [row_type.create(None, self.add_cells(tr)) for tr in table_rows(dom_)]
        if not rows:
            return []
        return [type.create(attrs, rows)]

    def add_cells(self, tr: DOMNode) -> List[Node]:
        cells = []
        for child in tr:
            if get_node_type(child) != ELEMENT_NODE:
                continue
            match = self.parser.match_tag(child)
            if match is None or match.type.name not in ("tableCell", "tableHeader"):
                continue
            styles = parse_style(child.get("style"))
            attrs = {**(match.attrs or {}), **block_attrs(styles, match.type.attrs)}
            cell = match.type.create_and_fill(attrs, self.add_all(child))
            if cell is not None:
                cells.append(cell)
        return cells

    def textblock(
        self, type: NodeType, attrs: Attrs | None, content: List[Node]
    ) -> Node:
        nodes = [
            node.mark(type.allowed_marks(node.marks)) for node in trim_inline(content)
        ]
        return type.create(attrs, Fragment.from_array(nodes))

    def add_inline_children(self, dom_: DOMNode, marks: List[Mark]) -> List[Node]:
        result: List[Node] = []
        for child in child_nodes(dom_):
            if isinstance(child, str):
                result.extend(self.add_text(child, marks))
            else:
                result.extend(self.add_inline(child, marks))
        return result

    def add_inline(self, dom_: DOMNode, marks: List[Mark]) -> List[Node]:
        if get_node_type(dom_) != ELEMENT_NODE:
            return []
        name = dom_.tag.lower()
        if name in IGNORE_TAGS:
            return []

        match = self.parser.match_tag(dom_)
        if match is not None and match.type.is_inline and match.type.is_leaf:
            return [match.type.create(match.attrs)]

        styles = parse_style(dom_.get("style"))
        for mark in resolve_marks(self.schema, styles, dom_):
            marks = mark.add_to_set(marks)
        return self.add_inline_children(dom_, marks)

    def add_text(self, value: str, marks: List[Mark]) -> List[Node]:
        value = collapse_whitespace(value)
        if not value:
            return []
        return [self.schema.text(value, marks)]


def child_nodes(dom_: DOMNode) -> Iterator[DOMNode | str]:
    """
    Yield the children of `dom_` the way the DOM sees them: lxml keeps
    text in `.text` and `.tail`, so those come back as plain strings.
    """
    if dom_.text:
        yield dom_.text
    for child in dom_:
        yield child
        if child.tail:
            yield child.tail


def html_fragment(html: str) -> DOMNode:
    """
    Parse `html` into a single element whose children are the content.
    lxml asserts that a whole document has exactly one body; one without
    a body is parsed as a document and its root wrapped instead.
    """
    try:
        return lxml.html.fragment_fromstring(html, create_parent="document-fragment")
    except AssertionError:
        root = lxml.html.document_fromstring(html)
        fragment = lxml.html.Element("body")
        fragment.append(root)
        return fragment


def table_rows(dom_: DOMNode) -> Iterator[DOMNode]:
    for child in dom_:
        if get_node_type(child) != ELEMENT_NODE:
            continue
        name = child.tag.lower()
        if name == "tr":
            yield child
        elif name in TABLE_SECTION_TAGS:
            for row in child:
                if get_node_type(row) == ELEMENT_NODE and row.tag.lower() == "tr":
                    yield row


def code_language(dom_: DOMNode) -> str | None:
    for element in dom_.iter():
        if get_node_type(element) != ELEMENT_NODE:
            continue
        for cls in (element.get("class") or "").split():
            if cls.startswith("language-") and len(cls) > len("language-"):
                return cls[len("language-") :]
    return None


def trim_inline(nodes: List[Node]) -> List[Node]:
    """
    Drop the whitespace a browser would not render: at the start and end
    of a text block, around hard breaks, and doubled across node edges.
    """
    result: List[Node] = []

    def trim_end() -> None:
        while result and is_text(result[-1]):
            last = result[-1]
            text = last.text.rstrip(" ")
            if text:
                result[-1] = last.with_text(text)
                return
            result.pop()

    for node in nodes:
        if is_text(node):
            prev = result[-1] if result else None
            text = node.text
            if prev is None or not is_text(prev) or prev.text.endswith(" "):
                text = text.lstrip(" ")
            if text:
                result.append(node.with_text(text))
        else:
            trim_end()
            result.append(node)
    trim_end()
    return result


def get_node_type(element: DOMNode) -> int:
    if not isinstance(element, lxml.etree._Element):
        raise ValueError("The provided element is not an lxml HtmlElement.")

    if isinstance(element, (lxml.etree._Comment, lxml.etree._ProcessingInstruction)):
        return COMMENT_NODE
    if isinstance(element, lxml.etree._Entity):
        return TEXT_NODE
    return ELEMENT_NODE


def from_html(schema: Schema, html: str) -> Dict[str, Any]:
    return DOMParser.from_schema(schema).parse_html(html).to_json()
