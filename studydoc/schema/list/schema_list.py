from typing import cast

from studydoc.model.schema import Nodes, NodeSpec


def ordered_list_attrs(dom_) -> dict:
    start = dom_.get("start")
    return {"start": int(start) if start and start.isdigit() else 1}


ordered_list = NodeSpec(
    attrs={"start": {"default": 1}},
    parseDOM=[{"tag": "ol", "getAttrs": ordered_list_attrs}],
)

bullet_list = NodeSpec(parseDOM=[{"tag": "ul"}])

list_item = NodeSpec(parseDOM=[{"tag": "li"}])


def add(obj: "NodeSpec", props: "NodeSpec") -> "NodeSpec":
    return {**obj, **props}


def add_list_nodes(
    nodes: dict["Nodes", "NodeSpec"], item_content: str, list_group: str
) -> dict["Nodes", "NodeSpec"]:
    copy = nodes.copy()
    copy.update({
        cast(Nodes, "bulletList"): add(
            bullet_list, NodeSpec(content="listItem+", group=list_group)
        ),
        cast(Nodes, "orderedList"): add(
            ordered_list, NodeSpec(content="listItem+", group=list_group)
        ),
        cast(Nodes, "listItem"): add(list_item, NodeSpec(content=item_content)),
    })
    return copy
