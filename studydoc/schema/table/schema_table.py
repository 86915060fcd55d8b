from typing import cast

from studydoc.model.schema import AttributeSpecs, Nodes, NodeSpec
from studydoc.schema.basic.schema_basic import SPACING_ATTRS


def span_attr(dom_, name: str) -> int:
    value = dom_.get(name)
    return int(value) if value and value.isdigit() and int(value) > 0 else 1


def cell_attrs(dom_) -> dict:
    return {
        "colspan": span_attr(dom_, "colspan"),
        "rowspan": span_attr(dom_, "rowspan"),
    }


cell_attr_specs: AttributeSpecs = {
    "colspan": {"default": 1},
    "rowspan": {"default": 1},
    "textAlign": {"default": None},
    "backgroundColor": {"default": None},
    "borderColor": {"default": None},
    **SPACING_ATTRS,
}


def add_table_nodes(
    nodes: dict["Nodes", "NodeSpec"], cell_content: str, table_group: str
) -> dict["Nodes", "NodeSpec"]:
    copy = nodes.copy()
    copy.update({
        cast(Nodes, "table"): NodeSpec(
            content="tableRow+",
            group=table_group,
            parseDOM=[{"tag": "table"}],
        ),
        cast(Nodes, "tableRow"): NodeSpec(
            content="(tableCell | tableHeader)*",
            parseDOM=[{"tag": "tr"}],
        ),
        cast(Nodes, "tableCell"): NodeSpec(
            content=cell_content,
            attrs=cell_attr_specs,
            parseDOM=[{"tag": "td", "getAttrs": cell_attrs}],
        ),
        cast(Nodes, "tableHeader"): NodeSpec(
            content=cell_content,
            attrs=cell_attr_specs,
            parseDOM=[{"tag": "th", "getAttrs": cell_attrs}],
        ),
    })
    return copy
