import json
import logging
import re
from typing import Any, Optional

from studydoc.model import (
    DOMParser,
    MarkdownParser,
    MarkdownSerializer,
    Node,
    ParseOptions,
    Schema,
)
from studydoc.schema import schema as default_schema

logger = logging.getLogger(__name__)

HTML_PATTERN = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)

CONTENT_TYPES = ("html", "markdown", "json")


def is_html(content: str) -> bool:
    """Whether `content` looks like markup: anything shaped like a tag."""
    return bool(HTML_PATTERN.search(content))


class Converter:
    """
    Routes document content to the right parser and turns trees back
    into Markdown. Holds only immutable collaborators, so one converter
    can be shared between callers.
    """

    schema: Schema[Any, Any]

    def __init__(
        self,
        schema: Optional[Schema[Any, Any]] = None,
        options: Optional[ParseOptions] = None,
    ) -> None:
        self.schema = schema or default_schema
        if options is None:
            self.markdown_parser = MarkdownParser.from_schema(self.schema)
        else:
            self.markdown_parser = MarkdownParser(self.schema, options=options)
        self.dom_parser = DOMParser.from_schema(self.schema)
        self.serializer = MarkdownSerializer.from_schema(self.schema)

    def detect(self, content: str) -> str:
        if self.load_json(content) is not None:
            return "json"
        return "html" if is_html(content) else "markdown"

    def to_tree(
        self, content: Optional[str], content_type: Optional[str] = None
    ) -> Node:
        if content_type is not None and content_type not in CONTENT_TYPES:
            msg = f"Unknown content type {content_type!r}"
            raise ValueError(msg)
        content = content or ""

        if content_type in (None, "json"):
            doc = self.load_json(content)
            if doc is not None:
                logger.debug("Loaded content as document JSON")
                return doc
            if content_type == "json":
                logger.warning("Content is not a valid document, parsing as Markdown")
                content_type = "markdown"

        if content_type is None:
            content_type = "html" if is_html(content) else "markdown"
        logger.debug("Parsing content as %s", content_type)
        if content_type == "html":
            return self.dom_parser.parse_html(content)
        return self.markdown_parser.parse(content)

    def load_json(self, content: str) -> Optional[Node]:
        """The document stored as editor JSON in `content`, if that is what it is."""
        if not content.lstrip().startswith("{"):
            return None
        try:
            data = json.loads(content)
        except ValueError:
            return None
        top = self.schema.top_node_type.name
        if not isinstance(data, dict) or data.get("type") != top:
            return None
        try:
            doc = Node.from_json(self.schema, data)
            doc.check()
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.debug("Ignoring invalid document JSON: %s", e)
            return None
        return doc

    def to_markdown(self, tree: Node) -> str:
        return self.serializer.serialize(tree)

    def reconcile(
        self,
        current: Optional[Node],
        content: Optional[str],
        content_type: Optional[str] = None,
    ) -> Optional[Node]:
        """
        Return a fresh tree for `content`, or `None` when `current`
        already serializes to it and the caller should keep its tree.
        A trailing newline in `content` is not a difference.
        """
        content = content or ""
        if current is not None and self.to_markdown(current) == content.rstrip("\n"):
            logger.debug("Content unchanged, keeping current document")
            return None
        return self.to_tree(content, content_type)


default_converter = Converter()


def to_tree(content: Optional[str], content_type: Optional[str] = None) -> Node:
    return default_converter.to_tree(content, content_type)


def to_markdown(tree: Node) -> str:
    return default_converter.to_markdown(tree)


def reconcile(
    current: Optional[Node], content: Optional[str], content_type: Optional[str] = None
) -> Optional[Node]:
    return default_converter.reconcile(current, content, content_type)
