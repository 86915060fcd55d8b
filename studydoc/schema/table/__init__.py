from .schema_table import add_table_nodes

__all__ = ["add_table_nodes"]
