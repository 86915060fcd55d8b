# type: ignore

from collections.abc import Callable

from studydoc.model import Node, Schema
from studydoc.utils import JSONDict


def flatten(
    schema: Schema[str, str],
    children: list[Node | JSONDict | str],
    f: Callable[[Node], Node],
) -> list[Node]:
    result = []
    for child in children:
        if isinstance(child, str):
            if child:
                result.append(f(schema.text(child)))
        elif isinstance(child, dict) and "flat" in child:
            result.extend(f(item) for item in child["flat"])
        elif getattr(child, "flat", None):
            result.extend(f(item) for item in child.flat)
        else:
            result.append(f(child))
    return result


def id(x):
    return x


def takes_attrs(args) -> bool:
    return bool(
        args
        and args[0]
        and not isinstance(args[0], (str, Node))
        and not getattr(args[0], "flat", None)
        and "flat" not in args[0]
    )


def block(type, attrs):
    def result(*args):
        my_attrs = dict(attrs)
        if takes_attrs(args):
            my_attrs.update(args[0])
            args = args[1:]
        return type.create(my_attrs, flatten(type.schema, args, id))

    if type.is_leaf:
        try:
            result.flat = [type.create(attrs)]
        except ValueError:
            pass

    return result


def mark(type, attrs):
    def result(*args):
        my_attrs = dict(attrs)
        if takes_attrs(args):
            my_attrs.update(args[0])
            args = args[1:]
        mark = type.create(my_attrs)

        def f(n):
            return (
                n if mark.type.is_in_set(n.marks) else n.mark(mark.add_to_set(n.marks))
            )

        return {"flat": flatten(type.schema, args, f)}

    return result


def builders(schema, names):
    result = {"schema": schema}
    for name in schema.nodes:
        result[name] = block(schema.nodes[name], {})
    for name in schema.marks:
        result[name] = mark(schema.marks[name], {})

    if names:
        for name in names:
            value = dict(names[name])
            type_name = (
                value.pop("nodeType", None) or value.pop("markType", None) or name
            )
            type = schema.nodes.get(type_name)
            if type:
                result[name] = block(type, value)
            else:
                type = schema.marks.get(type_name)
                if type:
                    result[name] = mark(type, value)
    return result
