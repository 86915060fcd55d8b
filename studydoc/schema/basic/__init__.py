from .schema_basic import marks, nodes, schema

__all__ = ["nodes", "marks", "schema"]
