from typing import Any

from studydoc.model import Schema

from .basic import marks, nodes
from .list import add_list_nodes
from .table import add_table_nodes

schema: Schema[Any, Any] = Schema({
    "nodes": add_table_nodes(
        add_list_nodes(nodes, "paragraph block*", "block"), "block+", "block"
    ),
    "marks": marks,
})

__all__ = ["schema", "add_list_nodes", "add_table_nodes"]
