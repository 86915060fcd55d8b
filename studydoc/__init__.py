from .converter import Converter, is_html, reconcile, to_markdown, to_tree
from .model import Fragment, Mark, Node, ParseOptions, Schema
from .schema import schema

__all__ = [
    "Converter",
    "Fragment",
    "Mark",
    "Node",
    "ParseOptions",
    "Schema",
    "is_html",
    "reconcile",
    "schema",
    "to_markdown",
    "to_tree",
]
