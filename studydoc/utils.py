import re
from collections.abc import Mapping, Sequence
from typing import TypeAlias

JSONDict: TypeAlias = Mapping[str, "JSON"]
JSONList: TypeAlias = Sequence["JSON"]

JSON: TypeAlias = JSONDict | JSONList | str | int | float | bool | None

Attrs: TypeAlias = JSONDict

WHITESPACE = re.compile(r"[ \t\r\n\u000c]+")


def collapse_whitespace(text: str) -> str:
    return WHITESPACE.sub(" ", text)
