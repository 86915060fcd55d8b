from typing import Any, Callable, Dict, List, Optional

from .mark import Mark
from .node import Node, is_text
from .schema import Schema

NodeSerializer = Callable[["MarkdownSerializer", Node, str], str]
MarkSerializer = Callable[[Mark, str], str]

LIST_TYPES = frozenset(["bulletList", "orderedList"])


class MarkdownSerializer:
    """
    Renders a document as Markdown.

    `nodes` maps a block type name to a function `(serializer, node,
    indent)` returning the node's text; `indent` is the prefix every
    continuation line of the node must carry when it sits inside a list.
    `marks` maps a mark name to a function wrapping already rendered
    text, applied in `mark_order`. Block types without an entry render
    as the concatenation of their children; marks without an entry
    render nothing.
    """

    def __init__(
        self,
        nodes: Dict[str, NodeSerializer],
        marks: Dict[str, MarkSerializer],
        mark_order: Optional[List[str]] = None,
    ) -> None:
        self.nodes = nodes
        self.marks = marks
        self.mark_order = mark_order if mark_order is not None else list(marks)

    def serialize(self, node: Node) -> str:
        return self.render_block(node, "")

    def render_block(self, node: Node, indent: str) -> str:
        render = self.nodes.get(node.type.name)
        if render is not None:
            return render(self, node, indent)
        if node.inline_content:
            return self.render_inline(node)
        return "".join(
            self.render_block(child, indent) for child in node.content.content
        )

    def render_blocks(self, node: Node, indent: str, separator: str = "\n\n") -> str:
        return separator.join(
            self.render_block(child, indent) for child in node.content.content
        )

    def render_inline(self, node: Node) -> str:
        parts = []
        for child in node.content.content:
            if is_text(child):
                parts.append(self.render_text(child.text, child.marks))
            elif child.type.name == "hardBreak":
                parts.append("\n")
            elif child.type.name in self.nodes:
                parts.append(self.nodes[child.type.name](self, child, ""))
        return "".join(parts)

    def render_text(self, text: str, marks: List[Mark]) -> str:
        for name in self.mark_order:
            for mark in marks:
                if mark.type.name == name:
                    text = self.marks[name](mark, text)
        return text

    @classmethod
    def from_schema(cls, schema: Schema[Any, Any]) -> "MarkdownSerializer":
        if "markdown_serializer" not in schema.cached:
            schema.cached["markdown_serializer"] = cls(
                dict(default_nodes), dict(default_marks), list(default_mark_order)
            )
        return schema.cached["markdown_serializer"]


def indent_lines(text: str, indent: str, first: str = "") -> str:
    """Prefix the first line with `first` and the rest with `indent`."""
    lines = text.split("\n")
    return "\n".join(
        [first + lines[0]] + [indent + line if line else line for line in lines[1:]]
    )


def doc(state: MarkdownSerializer, node: Node, indent: str) -> str:
    return state.render_blocks(node, indent)


def paragraph(state: MarkdownSerializer, node: Node, indent: str) -> str:
    return state.render_inline(node)


def heading(state: MarkdownSerializer, node: Node, indent: str) -> str:
    level = min(max(int(node.attrs.get("level") or 1), 1), 6)
    return "#" * level + " " + state.render_inline(node)


def blockquote(state: MarkdownSerializer, node: Node, indent: str) -> str:
    lines = state.render_blocks(node, "").split("\n")
    return "\n".join("> " + line if line else ">" for line in lines)


def code_block(state: MarkdownSerializer, node: Node, indent: str) -> str:
    language = node.attrs.get("language") or ""
    return f"```{language}\n{node.text_content}\n```"


def horizontal_rule(state: MarkdownSerializer, node: Node, indent: str) -> str:
    return "---"


def bullet_list(state: MarkdownSerializer, node: Node, indent: str) -> str:
    return "\n".join(
        list_item(state, item, indent, "- ") for item in node.content.content
    )


def ordered_list(state: MarkdownSerializer, node: Node, indent: str) -> str:
    return "\n".join(
        list_item(state, item, indent, f"{i + 1}. ")
        for i, item in enumerate(node.content.content)
    )


def list_item(state: MarkdownSerializer, node: Node, indent: str, marker: str) -> str:
    # nested content lines up with the text after the marker
    inner = indent + " " * len(marker)
    children = node.content.content
    if (
        len(children) > 1
        and children[0].type.name == "paragraph"
        and not children[0].child_count
        and children[1].type.name not in LIST_TYPES
    ):
        # the filler paragraph before a heading or code block; a blank
        # line after a bare marker would end the item
        children = children[1:]
    out = ""
    for i, child in enumerate(children):
        text = state.render_block(child, inner)
        if i == 0:
            if text:
                out = indent_lines(text, inner, indent + marker)
            else:
                out = indent + marker.rstrip()
        elif child.type.name in LIST_TYPES:
            out += "\n" + text
        else:
            # a blank line keeps it from merging into the previous paragraph
            out += "\n\n" + indent_lines(text, inner, inner)
    return out


def table(state: MarkdownSerializer, node: Node, indent: str) -> str:
    rows = [
        [table_cell_text(state, cell) for cell in row.content.content]
        for row in node.content.content
    ]
    if not rows:
        return ""
    width = max(len(row) for row in rows) or 1
    header = node.content.content[0]
    aligns = [
        cell.attrs.get("textAlign") for cell in header.content.content
    ] + [None] * width
    delimiter = [DELIMITERS.get(aligns[i] or "", "---") for i in range(width)]
    lines = [table_line(rows[0], width), table_line(delimiter, width)]
    lines.extend(table_line(row, width) for row in rows[1:])
    return "\n".join(lines)


DELIMITERS = {"left": ":---", "center": ":---:", "right": "---:"}


def table_cell_text(state: MarkdownSerializer, cell: Node) -> str:
    text = " ".join(
        state.render_block(child, "").replace("\n", " ")
        for child in cell.content.content
    )
    return text.replace("|", "\\|")


def table_line(cells: List[str], width: int) -> str:
    cells = cells + [""] * (width - len(cells))
    return "| " + " | ".join(cells) + " |"


def link(mark: Mark, text: str) -> str:
    href = mark.attrs.get("href") or ""
    title = mark.attrs.get("title")
    if title:
        escaped = title.replace('"', '\\"')
        return f'[{text}]({href} "{escaped}")'
    return f"[{text}]({href})"


default_nodes: Dict[str, NodeSerializer] = {
    "doc": doc,
    "paragraph": paragraph,
    "heading": heading,
    "blockquote": blockquote,
    "codeBlock": code_block,
    "horizontalRule": horizontal_rule,
    "bulletList": bullet_list,
    "orderedList": ordered_list,
    "table": table,
}

default_marks: Dict[str, MarkSerializer] = {
    "bold": lambda _, text: f"**{text}**",
    "italic": lambda _, text: f"*{text}*",
    "code": lambda _, text: f"`{text}`",
    "link": link,
    "strike": lambda _, text: f"~~{text}~~",
}

default_mark_order = ["bold", "italic", "code", "link", "strike"]

default_markdown_serializer = MarkdownSerializer(
    default_nodes, default_marks, default_mark_order
)
