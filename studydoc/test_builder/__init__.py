# type: ignore

from studydoc.model import Node
from studydoc.schema import schema as test_schema

from .build import builders

out = builders(
    test_schema,
    {
        "p": {"nodeType": "paragraph"},
        "pre": {"nodeType": "codeBlock"},
        "h1": {"nodeType": "heading", "level": 1},
        "h2": {"nodeType": "heading", "level": 2},
        "h3": {"nodeType": "heading", "level": 3},
        "li": {"nodeType": "listItem"},
        "ul": {"nodeType": "bulletList"},
        "ol": {"nodeType": "orderedList"},
        "br": {"nodeType": "hardBreak"},
        "hr": {"nodeType": "horizontalRule"},
        "tr": {"nodeType": "tableRow"},
        "td": {"nodeType": "tableCell"},
        "th": {"nodeType": "tableHeader"},
        "a": {"markType": "link", "href": "foo"},
        "em": {"markType": "italic"},
        "strong": {"markType": "bold"},
        "s": {"markType": "strike"},
        "u": {"markType": "underline"},
    },
)


def eq(a: Node, b: Node) -> bool:
    return a.eq(b)
