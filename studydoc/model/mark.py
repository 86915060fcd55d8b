import copy
from typing import TYPE_CHECKING, Any, Final, cast

from studydoc.utils import Attrs, JSONDict

if TYPE_CHECKING:
    from .schema import MarkType, Schema


class Mark:
    """
    A tagged attribute attached to a text node, such as `bold` or
    `link{href}`. Marks are kept in sets ordered by the rank of their
    type in the schema, and a set never holds two marks of one type.
    """

    none: Final[list["Mark"]] = []

    def __init__(self, type: "MarkType", attrs: Attrs) -> None:
        self.type = type
        self.attrs = attrs

    def add_to_set(self, set: list["Mark"]) -> list["Mark"]:
        result: list["Mark"] = []
        placed = False
        for other in set:
            if self.eq(other):
                return set
            if self.type.excludes(other.type):
                # same type (or an excluded one): the mark being added wins
                continue
            if other.type.excludes(self.type):
                return set
            if not placed and other.type.rank > self.type.rank:
                result.append(self)
                placed = True
            result.append(other)
        if not placed:
            result.append(self)
        return result

    def eq(self, other: "Mark") -> bool:
        if self is other:
            return True
        return self.type.name == other.type.name and self.attrs == other.attrs

    def to_json(self) -> JSONDict:
        if not self.attrs:
            return {"type": self.type.name}
        return {"type": self.type.name, "attrs": copy.deepcopy(self.attrs)}

    @classmethod
    def from_json(
        cls,
        schema: "Schema[Any, Any]",
        json_data: JSONDict,
    ) -> "Mark":
        if not json_data:
            raise ValueError("Invalid input for Mark.from_json")
        name = json_data["type"]
        type = schema.marks.get(name)
        if not type:
            raise ValueError(f"There is no mark type {name} in this schema")
        return type.create(cast(JSONDict | None, json_data.get("attrs")))

    @classmethod
    def same_set(cls, a: list["Mark"], b: list["Mark"]) -> bool:
        if a == b:
            return True
        if len(a) != len(b):
            return False
        return all(item_a.eq(item_b) for (item_a, item_b) in zip(a, b))

    @classmethod
    def set_from(cls, marks: "list[Mark] | Mark | None") -> list["Mark"]:
        if not marks:
            return cls.none
        if isinstance(marks, Mark):
            return [marks]
        result = cls.none
        for mark in marks:
            result = mark.add_to_set(result)
        return result

    def __str__(self) -> str:
        if not self.attrs:
            return self.type.name
        attrs = ", ".join(f"{k}={v!r}" for k, v in self.attrs.items())
        return f"{self.type.name}{{{attrs}}}"

    def __repr__(self) -> str:
        return f"<Mark {self}>"
