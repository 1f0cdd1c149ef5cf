"""Nodes for literal values."""

__all__ = [
    "Boolean",
    "SimpleString",
    "InterpolatedString",
    "ConstantInt",
    "ConstantFloat",
    "Symbol",
    "Array",
    "Hash",
    "FileNameConstReference",
    "Self",
]

from . import _node


class Boolean(_node.Node):
    """Literal `true` or `false`."""

    def __init__(self, value: bool):
        self.value = value

    def unparse(self) -> str:
        return "true" if self.value else "false"


class SimpleString(_node.Node):
    """String literal with escapes already processed."""

    def __init__(self, value: str):
        self.value = value

    def unparse(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


class InterpolatedString(_node.Node):
    """Double quoted string containing `#{...}`.

    Interpolation is not evaluated, the literal text is the value.
    """

    def __init__(self, value: str):
        self.value = value

    def unparse(self) -> str:
        return f'"{self.value}"'


class ConstantInt(_node.Node):
    """Integer literal."""

    def __init__(self, value: int):
        self.value = value

    def unparse(self) -> str:
        return str(self.value)


class ConstantFloat(_node.Node):
    """Float literal."""

    def __init__(self, value: float):
        self.value = value

    def unparse(self) -> str:
        return repr(self.value)


class Symbol(_node.Node):
    """Symbol literal like `:name`"""

    def __init__(self, name: str):
        self.name = name

    def unparse(self) -> str:
        return f":{self.name}"


class Array(_node.Node):
    """Array literal, elements evaluate in order."""

    def __init__(self, nodes: list[_node.Node]):
        self.nodes = list(nodes)

    def unparse(self) -> str:
        return "[" + ", ".join(n.unparse() for n in self.nodes) + "]"


class Hash(_node.Node):
    """Hash literal of key and value node pairs."""

    def __init__(self, pairs: list[tuple[_node.Node, _node.Node]]):
        self.pairs = [tuple(p) for p in pairs]

    def unparse(self) -> str:
        fields = ", ".join(f"{k.unparse()} => {v.unparse()}" for k, v in self.pairs)
        return "{" + fields + "}"


class FileNameConstReference(_node.Node):
    """The `__FILE__` keyword."""

    def unparse(self) -> str:
        return "__FILE__"


class Self(_node.Node):
    """The `self` keyword."""

    def unparse(self) -> str:
        return "self"
