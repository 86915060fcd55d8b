import copy
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, TypeGuard, cast

from studydoc.utils import Attrs, JSONDict

from .fragment import Fragment
from .mark import Mark

if TYPE_CHECKING:
    from .schema import NodeType, Schema


empty_attrs: JSONDict = {}


class Node:
    """
    A node in the document tree. Block nodes own a `Fragment` of
    children; text nodes are represented by the `TextNode` subclass.
    Nodes are treated as immutable values: a parse builds a fresh tree
    and nothing edits it in place afterwards.
    """

    def __init__(
        self,
        type: "NodeType",
        attrs: "Attrs",
        content: Fragment | None,
        marks: list[Mark],
    ) -> None:
        self.type = type
        self.attrs = attrs
        self.content = content or Fragment.empty
        self.marks = marks or Mark.none

    @property
    def child_count(self) -> int:
        return self.content.child_count

    def child(self, index: int) -> "Node":
        return self.content.child(index)

    def for_each(self, f: Callable[["Node", int], None]) -> None:
        self.content.for_each(f)

    def descendants(self, f: Callable[["Node", "Node", int], bool | None]) -> None:
        """
        Call `f(node, parent, index)` for every node below this one, in
        document order. When `f` returns `False` the children of that
        node are skipped.
        """
        for index, child in enumerate(self.content.content):
            if f(child, self, index) is not False:
                child.descendants(f)

    @property
    def text_content(self) -> str:
        if self.is_leaf and self.type.spec.get("leafText") is not None:
            return self.type.spec["leafText"](self)
        return self.content.text_content

    def eq(self, other: "Node") -> bool:
        return self is other or (
            self.same_markup(other) and self.content.eq(other.content)
        )

    def same_markup(self, other: "Node") -> bool:
        return self.has_markup(other.type, other.attrs, other.marks)

    def has_markup(
        self,
        type: "NodeType",
        attrs: Optional["Attrs"] = None,
        marks: list[Mark] | None = None,
    ) -> bool:
        return (
            self.type.name == type.name
            and self.attrs == (attrs or type.default_attrs or empty_attrs)
            and Mark.same_set(self.marks, marks or Mark.none)
        )

    def mark(self, marks: list[Mark]) -> "Node":
        if marks == self.marks:
            return self
        return self.__class__(self.type, self.attrs, self.content, marks)

    @property
    def is_block(self) -> bool:
        return self.type.is_block

    @property
    def inline_content(self) -> bool:
        return self.type.inline_content

    @property
    def is_inline(self) -> bool:
        return self.type.is_inline

    @property
    def is_text(self) -> bool:
        return self.type.is_text

    @property
    def is_leaf(self) -> bool:
        return self.type.is_leaf

    def __str__(self) -> str:
        name = self.type.name
        if self.content.child_count:
            name += f"({self.content.to_string_inner()})"
        return wrap_marks(self.marks, name)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.__str__()}>"

    def check(self) -> None:
        if not self.type.valid_content(self.content):
            msg = f"Invalid content for node {self.type.name}: {str(self.content)[:50]}"
            raise ValueError(msg)
        marks = Mark.none
        for mark in self.marks:
            marks = mark.add_to_set(marks)
        if not Mark.same_set(marks, self.marks):
            msg = (
                f"Invalid collection of marks for node {self.type.name}:"
                f" {[m.type.name for m in self.marks]!r}"
            )
            raise ValueError(msg)

        def iteratee(node: "Node", index: int) -> None:
            node.check()

        return self.content.for_each(iteratee)

    def to_json(self) -> JSONDict:
        obj: JSONDict = {"type": self.type.name}
        if self.attrs:
            obj = {
                **obj,
                "attrs": copy.deepcopy(self.attrs),
            }
        if self.content.child_count:
            obj = {
                **obj,
                "content": self.content.to_json(),
            }
        elif not self.is_leaf:
            obj = {**obj, "content": []}
        if len(self.marks):
            obj = {
                **obj,
                "marks": [n.to_json() for n in self.marks],
            }
        return obj

    @classmethod
    def from_json(cls, schema: "Schema[Any, Any]", json_data: JSONDict | str) -> "Node":
        if isinstance(json_data, str):
            import json

            json_data = cast(JSONDict, json.loads(json_data))

        if not json_data:
            msg = "Invalid input for Node.from_json"
            raise ValueError(msg)
        marks = None
        if json_data.get("marks"):
            if not isinstance(json_data["marks"], list):
                msg = "Invalid mark data for Node.from_json"
                raise ValueError(msg)
            marks = [schema.mark_from_json(item) for item in json_data["marks"]]
        if json_data["type"] == "text":
            return schema.text(str(json_data["text"]), marks)
        content = Fragment.from_json(schema, json_data.get("content"))
        return schema.node_type(str(json_data["type"])).create(
            cast("Attrs", json_data.get("attrs")),
            content,
            marks,
        )


class TextNode(Node):
    def __init__(
        self,
        type: "NodeType",
        attrs: "Attrs",
        content: str,
        marks: list[Mark],
    ) -> None:
        super().__init__(type, attrs, None, marks)
        if not content:
            msg = "Empty text nodes are not allowed"
            raise ValueError(msg)
        self.text = content

    def __str__(self) -> str:
        import json

        return wrap_marks(self.marks, json.dumps(self.text))

    @property
    def text_content(self) -> str:
        return self.text

    def mark(self, marks: list[Mark]) -> "TextNode":
        return (
            self
            if marks == self.marks
            else TextNode(self.type, self.attrs, self.text, marks)
        )

    def with_text(self, text: str) -> "TextNode":
        if text == self.text:
            return self
        return TextNode(self.type, self.attrs, text, self.marks)

    def eq(self, other: Node) -> bool:
        return self.same_markup(other) and self.text == getattr(other, "text", None)

    def to_json(
        self,
    ) -> JSONDict:
        obj: JSONDict = {"type": "text", "text": self.text}
        if self.marks:
            obj = {**obj, "marks": [m.to_json() for m in self.marks]}
        return obj


def wrap_marks(marks: list[Mark], str: str) -> str:
    i = len(marks) - 1
    while i >= 0:
        str = marks[i].type.name + "(" + str + ")"
        i -= 1
    return str


def is_text(node: Node) -> TypeGuard[TextNode]:
    """
    Helper function to check if a node is a text node, but with
    type narrowing. (TypeGuard cannot narrow the type of `self`; see
    https://mypy.readthedocs.io/en/stable/type_narrowing.html#typeguards-as-methods)
    """
    return node.is_text
