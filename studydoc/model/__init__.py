from .content import ContentExpr
from .fragment import Fragment
from .from_dom import DOMParser, ParseRule
from .from_markdown import MarkdownParser, ParseOptions
from .mark import Mark
from .node import Node, TextNode
from .schema import Attrs, MarkType, NodeType, Schema
from .style import block_attrs, parse_style, resolve_marks
from .to_markdown import MarkdownSerializer, default_markdown_serializer

__all__ = [
    "Node",
    "TextNode",
    "Fragment",
    "Mark",
    "Attrs",
    "Schema",
    "NodeType",
    "MarkType",
    "ContentExpr",
    "DOMParser",
    "ParseRule",
    "MarkdownParser",
    "ParseOptions",
    "MarkdownSerializer",
    "default_markdown_serializer",
    "parse_style",
    "resolve_marks",
    "block_attrs",
]
