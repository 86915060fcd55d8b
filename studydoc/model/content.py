import re
from typing import TYPE_CHECKING, ClassVar, NamedTuple, NoReturn, Optional

from .fragment import Fragment

if TYPE_CHECKING:
    from .node import Node
    from .schema import NodeType


TOKEN_REGEX = re.compile(r"\w+|\W")


class Term(NamedTuple):
    types: list["NodeType"]
    min: int
    max: int | None

    def matches(self, type: "NodeType") -> bool:
        return any(t.name == type.name for t in self.types)

    @property
    def default_type(self) -> Optional["NodeType"]:
        for type in self.types:
            if not (type.is_text or type.has_required_attrs()):
                return type
        return None


class ContentExpr:
    """
    A compiled node content expression such as `"paragraph block*"` or
    `"(tableCell | tableHeader)*"`: a sequence of terms, each a node
    type, group, or parenthesized choice followed by an optional `*`,
    `+` or `?`. Terms match greedily, which is enough for expressions
    whose terms do not overlap ambiguously.
    """

    empty: ClassVar["ContentExpr"]

    def __init__(self, terms: list[Term]) -> None:
        self.terms = terms

    @classmethod
    def parse(cls, string: str, node_types: dict[str, "NodeType"]) -> "ContentExpr":
        stream = TokenStream(string, node_types)
        if stream.next() is None:
            return ContentExpr.empty
        terms = []
        while stream.next() is not None:
            terms.append(parse_term(stream))
        return cls(terms)

    @property
    def is_empty(self) -> bool:
        return not self.terms

    @property
    def inline_content(self) -> bool:
        return bool(self.terms) and self.terms[0].types[0].is_inline

    @property
    def default_type(self) -> Optional["NodeType"]:
        return self.terms[0].default_type if self.terms else None

    def match_types(self, types: list["NodeType"]) -> bool:
        pos = 0
        for term in self.terms:
            count = 0
            while (
                pos < len(types)
                and (term.max is None or count < term.max)
                and term.matches(types[pos])
            ):
                pos += 1
                count += 1
            if count < term.min:
                return False
        return pos == len(types)

    def match_fragment(self, frag: Fragment) -> bool:
        return self.match_types([child.type for child in frag.content])

    def fill(self, frag: Fragment) -> Fragment | None:
        """
        Return `frag` with default nodes inserted wherever a required
        term found nothing, or `None` when the content can't be made to
        fit.
        """
        children = frag.content
        result: list["Node"] = []
        pos = 0
        for term in self.terms:
            count = 0
            while (
                pos < len(children)
                and (term.max is None or count < term.max)
                and term.matches(children[pos].type)
            ):
                result.append(children[pos])
                pos += 1
                count += 1
            while count < term.min:
                type = term.default_type
                if type is None:
                    return None
                filler = type.create_and_fill()
                if filler is None:
                    return None
                result.append(filler)
                count += 1
        if pos != len(children):
            return None
        return Fragment.from_array(result)


ContentExpr.empty = ContentExpr([])


class TokenStream:
    inline: bool | None
    tokens: list[str]

    def __init__(self, string: str, node_types: dict[str, "NodeType"]) -> None:
        self.string = string
        self.node_types = node_types
        self.inline = None
        self.pos = 0
        self.tokens = [i for i in TOKEN_REGEX.findall(string) if i.strip()]

    def next(self) -> str | None:
        try:
            return self.tokens[self.pos]
        except IndexError:
            return None

    def eat(self, tok: str) -> bool:
        if self.next() == tok:
            self.pos += 1
            return True
        return False

    def err(self, str: str) -> NoReturn:
        msg = f'{str} (in content expression) "{self.string}"'
        raise SyntaxError(msg)


def parse_term(stream: TokenStream) -> Term:
    types = parse_atom(stream)
    if stream.eat("+"):
        return Term(types, 1, None)
    if stream.eat("*"):
        return Term(types, 0, None)
    if stream.eat("?"):
        return Term(types, 0, 1)
    return Term(types, 1, 1)


def parse_atom(stream: TokenStream) -> list["NodeType"]:
    if stream.eat("("):
        types = []
        while True:
            types.extend(resolve_name(stream))
            if not stream.eat("|"):
                break
        if not stream.eat(")"):
            stream.err("missing closing paren")
        return types
    return resolve_name(stream)


def resolve_name(stream: TokenStream) -> list["NodeType"]:
    name = stream.next()
    if name is None or re.match(r"\W", name):
        stream.err(f"Unexpected token '{name}'")
    stream.pos += 1
    type = stream.node_types.get(name)
    result = [type] if type else [
        t for t in stream.node_types.values() if name in t.groups
    ]
    if not result:
        stream.err(f'No node type or group "{name}" found')
    for t in result:
        if stream.inline is None:
            stream.inline = t.is_inline
        elif stream.inline != t.is_inline:
            stream.err("Mixing inline and block content")
    return result
