from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Iterable,
    Optional,
    Sequence,
    Union,
)

from studydoc.utils import JSONList

if TYPE_CHECKING:
    from studydoc.model.schema import Schema

    from .node import Node


class Fragment:
    """The ordered children of a node."""

    empty: ClassVar["Fragment"]
    content: list["Node"]

    def __init__(self, content: list["Node"]) -> None:
        self.content = content

    @property
    def text_content(self) -> str:
        return "".join(child.text_content for child in self.content)

    def eq(self, other: "Fragment") -> bool:
        if len(self.content) != len(other.content):
            return False
        return all(a.eq(b) for (a, b) in zip(self.content, other.content))

    @property
    def child_count(self) -> int:
        return len(self.content)

    def child(self, index: int) -> "Node":
        return self.content[index]

    def for_each(self, f: Callable[["Node", int], Any]) -> None:
        for i, child in enumerate(self.content):
            f(child, i)

    def to_json(self) -> Optional[JSONList]:
        if self.content:
            return [item.to_json() for item in self.content]
        return None

    @classmethod
    def from_json(cls, schema: "Schema[Any, Any]", value: Any) -> "Fragment":
        if not value:
            return cls.empty

        if isinstance(value, str):
            import json

            value = json.loads(value)

        if not isinstance(value, list):
            raise ValueError("Invalid input for Fragment.from_json")

        return cls.from_array([schema.node_from_json(item) for item in value])

    @classmethod
    def from_array(cls, array: list["Node"]) -> "Fragment":
        if not array:
            return cls.empty
        joined: list["Node"] = []
        for node in array:
            last = joined[-1] if joined else None
            if (
                last is not None
                and sd_node.is_text(node)
                and sd_node.is_text(last)
                and last.same_markup(node)
            ):
                joined[-1] = last.with_text(last.text + node.text)
            else:
                joined.append(node)
        return cls(joined)

    @classmethod
    def from_(
        cls, nodes: Union["Fragment", "Node", Sequence["Node"], None]
    ) -> "Fragment":
        if not nodes:
            return cls.empty
        if isinstance(nodes, Fragment):
            return nodes
        if isinstance(nodes, Iterable):
            return cls.from_array(list(nodes))
        if hasattr(nodes, "attrs"):
            return cls([nodes])
        raise ValueError(f"cannot convert {nodes!r} to a fragment")

    def to_string_inner(self) -> str:
        return ", ".join([str(i) for i in self.content])

    def __str__(self) -> str:
        return f"<{self.to_string_inner()}>"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.__str__()}>"


Fragment.empty = Fragment([])

from . import node as sd_node  # noqa: E402
