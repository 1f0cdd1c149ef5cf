"""Nodes that refer to names."""

__all__ = ["BareReference", "GlobalVariable", "InstanceVariable"]

from . import _node


class BareReference(_node.Node):
    """Plain name like `foo`, `Foo` or `nil`.

    Bare names resolve through the local scope, object space, classes and
    modules. Used as an assignment target the name binds into object space,
    unless it is already a local of the current scope.
    """

    def __init__(self, name: str):
        self.name = name

    def unparse(self) -> str:
        return self.name


class GlobalVariable(_node.Node):
    """Global variable, stored without the `$` sigil."""

    def __init__(self, name: str):
        self.name = name

    def unparse(self) -> str:
        return f"${self.name}"


class InstanceVariable(_node.Node):
    """Instance variable on the current context, stored without the `@`."""

    def __init__(self, name: str):
        self.name = name

    def unparse(self) -> str:
        return f"@{self.name}"
