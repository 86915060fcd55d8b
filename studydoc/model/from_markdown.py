import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, List, Optional, cast

from markdown_it import MarkdownIt
from markdown_it.token import Token

from .mark import Mark
from .node import Node
from .schema import NodeType, Schema
from .style import block_attrs, parse_style

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseOptions:
    """
    Options for `MarkdownParser`. The defaults give the lossless
    behaviour; switching them off restores the simpler folding older
    documents were converted with.
    """

    # Keep inline marks inside headings; otherwise a heading holds its
    # literal source text.
    heading_marks: bool = True
    # Track open marks on a stack so `***x***` gets both bold and
    # italic; otherwise each open token pairs with one content token.
    nested_marks: bool = True
    # Represent soft and hard line breaks as `hardBreak` nodes;
    # otherwise they become "\n" inside the text.
    hard_break_nodes: bool = True
    # Smart quotes and dash/ellipsis replacement.
    typographer: bool = False


# inline open token -> (mark name, close token)
MARK_TOKENS: Dict[str, tuple[str, str]] = {
    "strong_open": ("bold", "strong_close"),
    "em_open": ("italic", "em_close"),
    "s_open": ("strike", "s_close"),
    "link_open": ("link", "link_close"),
}

MARK_CLOSE_TOKENS = frozenset(close for _, close in MARK_TOKENS.values())


def create_tokenizer(options: ParseOptions) -> MarkdownIt:
    md = MarkdownIt("commonmark", {"typographer": options.typographer})
    md.enable(["table", "strikethrough"])
    if options.typographer:
        md.enable(["replacements", "smartquotes"])
    return md


class MarkdownParser:
    """
    Folds the flat token stream markdown-it produces into a document.
    The parser and its tokenizer are configured once and then only read,
    so a single instance can serve any number of parses.
    """

    schema: Schema
    tokenizer: MarkdownIt
    options: ParseOptions

    def __init__(
        self,
        schema: Schema,
        tokenizer: Optional[MarkdownIt] = None,
        options: Optional[ParseOptions] = None,
    ) -> None:
        self.schema = schema
        self.options = options or ParseOptions()
        self.tokenizer = tokenizer or create_tokenizer(self.options)

    def parse(self, text: str) -> Node:
        if not text or not text.strip():
            return self.schema.empty_doc()
        tokens = self.tokenizer.parse(text)
        state = MarkdownParseState(self, tokens)
        blocks = state.parse_blocks()
        return cast(Node, self.schema.top_node_type.create_and_fill(None, blocks))

    @classmethod
    def from_schema(cls, schema: Schema) -> "MarkdownParser":
        if "markdown_parser" not in schema.cached:
            schema.cached["markdown_parser"] = MarkdownParser(schema)

        return schema.cached["markdown_parser"]


class MarkdownParseState:
    """Cursor over the token stream of one parse."""

    handlers: ClassVar[Dict[str, Callable[["MarkdownParseState", Token], List[Node]]]]

    def __init__(self, parser: MarkdownParser, tokens: List[Token]) -> None:
        self.parser = parser
        self.schema = parser.schema
        self.options = parser.options
        self.tokens = tokens
        self.pos = 0

    def node_type(self, name: str) -> NodeType:
        return self.schema.nodes[name]

    def parse_blocks(self, close: Optional[str] = None) -> List[Node]:
        """Fold block tokens up to (and including) the `close` token."""
        blocks: List[Node] = []
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1
            if close is not None and token.type == close:
                break
            handler = self.handlers.get(token.type)
            if handler is None:
                logger.debug("Skipping unsupported markdown token %s", token.type)
                continue
            blocks.extend(handler(self, token))
        return blocks

    def take_inline(self, close: str) -> Optional[Token]:
        """Consume tokens up to `close`, returning the inline token among them."""
        inline = None
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1
            if token.type == close:
                break
            if token.type == "inline" and inline is None:
                inline = token
        return inline

    def heading(self, token: Token) -> List[Node]:
        inline = self.take_inline("heading_close")
        level = int(token.tag[1:]) if token.tag[1:].isdigit() else 1
        if inline is None:
            content: List[Node] = []
        elif self.options.heading_marks:
            content = self.fold_inline(inline.children or [])
        else:
            content = [self.schema.text(inline.content)] if inline.content else []
        return [self.node_type("heading").create({"level": level}, content)]

    def paragraph(self, token: Token) -> List[Node]:
        inline = self.take_inline("paragraph_close")
        content = self.fold_inline(inline.children or []) if inline else []
        return [self.node_type("paragraph").create(None, content)]

    def bullet_list(self, token: Token) -> List[Node]:
        items = self.parse_blocks("bullet_list_close")
        return self.list_node("bulletList", None, items)

    def ordered_list(self, token: Token) -> List[Node]:
        start = token.attrGet("start")
        items = self.parse_blocks("ordered_list_close")
        return self.list_node("orderedList", {"start": int(start or 1)}, items)

    def list_node(
        self, name: str, attrs: Optional[Dict[str, Any]], items: List[Node]
    ) -> List[Node]:
        items = [item for item in items if item.type.name == "listItem"]
        if not items:
            return []
        return [self.node_type(name).create(attrs, items)]

    def list_item(self, token: Token) -> List[Node]:
        content = self.parse_blocks("list_item_close")
        item = self.node_type("listItem").create_and_fill(None, content)
        return [item] if item is not None else []

    def blockquote(self, token: Token) -> List[Node]:
        content = self.parse_blocks("blockquote_close")
        quote = self.node_type("blockquote").create_and_fill(None, content)
        return [quote] if quote is not None else []

    def code_block(self, token: Token) -> List[Node]:
        text = token.content
        if text.endswith("\n"):
            text = text[:-1]
        info = token.info.strip().split()
        language = info[0] if info else ""
        content = [self.schema.text(text)] if text else []
        return [self.node_type("codeBlock").create({"language": language}, content)]

    def horizontal_rule(self, token: Token) -> List[Node]:
        return [self.node_type("horizontalRule").create()]

    def table(self, token: Token) -> List[Node]:
        rows = [row for row in self.parse_blocks("table_close")]
        if not rows:
            return []
        return [self.node_type("table").create(None, rows)]

    def table_section(self, token: Token) -> List[Node]:
        return self.parse_blocks(token.type.replace("_open", "_close"))

    def table_row(self, token: Token) -> List[Node]:
        cells = self.parse_blocks("tr_close")
        return [self.node_type("tableRow").create(None, cells)]

    def table_cell(self, token: Token) -> List[Node]:
        type = self.node_type("tableHeader" if token.type == "th_open" else "tableCell")
        close = token.type.replace("_open", "_close")
        inline = self.take_inline(close)
        style = token.attrGet("style")
        attrs = block_attrs(parse_style(str(style) if style else None), type.attrs)
        content = self.fold_inline(inline.children or []) if inline else []
        paragraph = self.node_type("paragraph").create(None, content)
        return [type.create(attrs, paragraph)]

    def fold_inline(self, tokens: List[Token]) -> List[Node]:
        if not self.options.nested_marks:
            return self.fold_inline_flat(tokens)

        result: List[Node] = []
        marks: List[Mark] = Mark.none
        stack: List[List[Mark]] = []
        for token in tokens:
            if token.type in MARK_TOKENS:
                stack.append(marks)
                marks = self.token_mark(token).add_to_set(marks)
            elif token.type in MARK_CLOSE_TOKENS:
                marks = stack.pop() if stack else Mark.none
            else:
                result.extend(self.inline_leaf(token, marks))
        return result

    def fold_inline_flat(self, tokens: List[Token]) -> List[Node]:
        result: List[Node] = []
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if token.type in MARK_TOKENS:
                mark = self.token_mark(token)
                content = tokens[i + 1] if i + 1 < len(tokens) else None
                if content is not None and content.content:
                    result.append(self.schema.text(content.content, [mark]))
                i += 3
                continue
            result.extend(self.inline_leaf(token, Mark.none))
            i += 1
        return result

    def inline_leaf(self, token: Token, marks: List[Mark]) -> List[Node]:
        if token.type == "text" or token.type == "image":
            # an image keeps its alt text; there is no image node
            return [self.schema.text(token.content, marks)] if token.content else []
        if token.type == "code_inline":
            code = self.schema.marks["code"].create()
            return [self.schema.text(token.content, code.add_to_set(marks))]
        if token.type in ("softbreak", "hardbreak"):
            if self.options.hard_break_nodes:
                return [self.node_type("hardBreak").create()]
            return [self.schema.text("\n", marks)]
        return []

    def token_mark(self, token: Token) -> Mark:
        name = MARK_TOKENS[token.type][0]
        if name == "link":
            href = token.attrGet("href")
            title = token.attrGet("title")
            return self.schema.marks["link"].create({
                "href": str(href) if href is not None else "",
                "title": str(title) if title else None,
            })
        return self.schema.marks[name].create()


MarkdownParseState.handlers = {
    "heading_open": MarkdownParseState.heading,
    "paragraph_open": MarkdownParseState.paragraph,
    "bullet_list_open": MarkdownParseState.bullet_list,
    "ordered_list_open": MarkdownParseState.ordered_list,
    "list_item_open": MarkdownParseState.list_item,
    "blockquote_open": MarkdownParseState.blockquote,
    "fence": MarkdownParseState.code_block,
    "code_block": MarkdownParseState.code_block,
    "hr": MarkdownParseState.horizontal_rule,
    "table_open": MarkdownParseState.table,
    "thead_open": MarkdownParseState.table_section,
    "tbody_open": MarkdownParseState.table_section,
    "tr_open": MarkdownParseState.table_row,
    "th_open": MarkdownParseState.table_cell,
    "td_open": MarkdownParseState.table_cell,
}
