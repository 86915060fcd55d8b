from studydoc.model import Schema
from studydoc.model.schema import AttributeSpecs, MarkSpec, NodeSpec

# Layout attributes carried over from styled HTML. They have no Markdown
# form and are dropped by the serializer.
SPACING_ATTRS: AttributeSpecs = {
    "margin": {"default": None},
    "marginTop": {"default": None},
    "marginBottom": {"default": None},
    "padding": {"default": None},
    "paddingTop": {"default": None},
    "paddingBottom": {"default": None},
}

TEXT_LAYOUT_ATTRS: AttributeSpecs = {
    "textAlign": {"default": None},
    "lineHeight": {"default": None},
    **SPACING_ATTRS,
}


def heading_rule(level: int) -> dict:
    return {"tag": f"h{level}", "attrs": {"level": level}}


nodes: dict[str, NodeSpec] = {
    "doc": {"content": "block+"},
    "paragraph": {
        "content": "inline*",
        "group": "block",
        "attrs": TEXT_LAYOUT_ATTRS,
        "parseDOM": [{"tag": "p"}],
    },
    "heading": {
        "attrs": {"level": {"default": 1}, **TEXT_LAYOUT_ATTRS},
        "content": "inline*",
        "group": "block",
        "parseDOM": [heading_rule(level) for level in range(1, 7)],
    },
    "blockquote": {
        "content": "block+",
        "group": "block",
        "attrs": SPACING_ATTRS,
        "parseDOM": [{"tag": "blockquote"}],
    },
    "codeBlock": {
        "attrs": {"language": {"default": ""}, **SPACING_ATTRS},
        "content": "text*",
        "marks": "",
        "group": "block",
        "code": True,
        "parseDOM": [{"tag": "pre"}, {"tag": "code", "priority": 40}],
    },
    "horizontalRule": {
        "group": "block",
        "parseDOM": [{"tag": "hr"}],
    },
    "text": {"group": "inline"},
    "hardBreak": {
        "inline": True,
        "group": "inline",
        "parseDOM": [{"tag": "br"}],
        "leafText": lambda _: "\n",
    },
}


def href_attrs(dom_) -> dict:
    return {"href": dom_.get("href") or "", "title": dom_.get("title")}


def value_mark(default=None) -> MarkSpec:
    return {"attrs": {"value": {"default": default}}}


# The order of this mapping is the rank order of mark sets.
marks: dict[str, MarkSpec] = {
    "bold": {"parseDOM": [{"tag": "strong"}, {"tag": "b"}]},
    "italic": {"parseDOM": [{"tag": "em"}, {"tag": "i"}]},
    "underline": {"parseDOM": [{"tag": "u"}, {"tag": "ins"}]},
    "strike": {"parseDOM": [{"tag": "s"}, {"tag": "del"}, {"tag": "strike"}]},
    "code": {"parseDOM": [{"tag": "code"}]},
    "link": {
        "attrs": {"href": {}, "title": {"default": None}},
        "parseDOM": [{"tag": "a", "getAttrs": href_attrs}],
    },
    "color": value_mark(),
    "fontFamily": value_mark(),
    "fontSize": value_mark(),
    "highlight": {"attrs": {"color": {"default": None}}},
    "letterSpacing": value_mark(),
    "textDecoration": value_mark(),
    "subscript": {
        "excludes": "subscript superscript",
        "parseDOM": [{"tag": "sub"}],
    },
    "superscript": {
        "excludes": "subscript superscript",
        "parseDOM": [{"tag": "sup"}],
    },
    "textShadow": value_mark(),
    "fontStyle": value_mark(),
    "fontWeight": value_mark(),
}


schema = Schema({"nodes": nodes, "marks": marks})
