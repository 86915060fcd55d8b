from .schema_list import add_list_nodes, bullet_list, list_item, ordered_list

__all__ = ["add_list_nodes", "bullet_list", "list_item", "ordered_list"]
