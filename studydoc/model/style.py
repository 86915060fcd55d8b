from typing import TYPE_CHECKING, Any, Iterable

from .mark import Mark

if TYPE_CHECKING:
    from lxml.html import HtmlElement as DOMNode

    from .schema import Schema


# CSS property -> mark type carrying the raw value, applied in this order.
VALUE_STYLES: list[tuple[str, str, str]] = [
    ("font-size", "fontSize", "value"),
    ("color", "color", "value"),
    ("font-family", "fontFamily", "value"),
    ("background-color", "highlight", "color"),
]

# CSS property -> block attribute name.
BLOCK_STYLES: dict[str, str] = {
    "text-align": "textAlign",
    "line-height": "lineHeight",
    "margin": "margin",
    "margin-top": "marginTop",
    "margin-bottom": "marginBottom",
    "padding": "padding",
    "padding-top": "paddingTop",
    "padding-bottom": "paddingBottom",
    "background-color": "backgroundColor",
    "border-color": "borderColor",
}


def parse_style(style: str | None) -> dict[str, str]:
    """
    Read an inline `style` attribute into a property -> value dict.

    Declarations without a colon, or with an empty name or value, are
    skipped. This never raises; anything unreadable just yields fewer
    entries.
    """
    result: dict[str, str] = {}
    if not style:
        return result
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        name, value = name.strip().lower(), value.strip()
        if sep and name and value:
            result[name] = value
    return result


def style_marks(schema: "Schema[Any, Any]", styles: dict[str, str]) -> list[Mark]:
    marks: list[Mark] = []

    def add(name: str, attrs: dict[str, Any] | None = None) -> None:
        mark_type = schema.marks.get(name)
        if mark_type is not None:
            marks.append(mark_type.create(attrs))

    for prop, name, attr in VALUE_STYLES:
        if prop in styles:
            add(name, {attr: styles[prop]})

    decoration = styles.get("text-decoration", "")
    if "line-through" in decoration:
        add("strike")
    if "underline" in decoration and "none" not in decoration:
        add("underline")
        if decoration != "line-through":
            add("textDecoration", {"value": decoration})

    vertical_align = styles.get("vertical-align")
    if vertical_align == "sub":
        add("subscript")
    elif vertical_align == "super":
        add("superscript")

    if "letter-spacing" in styles:
        add("letterSpacing", {"value": styles["letter-spacing"]})
    if styles.get("font-weight", "normal") not in ("normal", "400"):
        add("fontWeight", {"value": styles["font-weight"]})
    if "text-shadow" in styles:
        add("textShadow", {"value": styles["text-shadow"]})
    if styles.get("font-style", "normal") != "normal":
        add("fontStyle", {"value": styles["font-style"]})

    return marks


def tag_marks(schema: "Schema[Any, Any]", dom_: "DOMNode") -> list[Mark]:
    """Marks implied by the element's tag, from the mark specs' `parseDOM` rules."""
    tag = dom_.tag.lower() if isinstance(dom_.tag, str) else ""
    marks: list[Mark] = []
    for mark_type in schema.marks.values():
        for rule in mark_type.spec.get("parseDOM", []):
            if rule.get("tag") != tag:
                continue
            get_attrs = rule.get("getAttrs")
            attrs = get_attrs(dom_) if get_attrs is not None else rule.get("attrs")
            if attrs is False:
                continue
            marks.append(mark_type.create(attrs))
            break
    return marks


def resolve_marks(
    schema: "Schema[Any, Any]",
    styles: dict[str, str],
    dom_: "DOMNode | None" = None,
) -> list[Mark]:
    """
    Map an element's style properties, and its tag when `dom_` is given,
    onto marks. The result is in rule order (style rules first); attach
    it with `Mark.set_from` or `add_to_set` to get rank order.
    """
    marks = style_marks(schema, styles)
    if dom_ is not None:
        marks.extend(tag_marks(schema, dom_))
    return marks


def block_attrs(styles: dict[str, str], names: Iterable[str]) -> dict[str, str]:
    """Pick the layout attributes a node type declares out of a style dict."""
    allowed = set(names)
    return {
        attr: styles[prop]
        for prop, attr in BLOCK_STYLES.items()
        if attr in allowed and prop in styles
    }
