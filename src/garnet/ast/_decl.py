"""Declaration nodes for modules, classes, methods and aliases."""

__all__ = ["ModuleDecl", "ClassDecl", "FuncDecl", "Param", "Alias"]

from . import _node


class ModuleDecl(_node.Node):
    """`module Name ... end`"""

    def __init__(self, name: str, body: list[_node.Node]):
        self.name = name
        self.body = list(body)

    def unparse(self) -> str:
        body = _node.unparse_body(self.body)
        return "\n".join(filter(None, [f"module {self.name}", body, "end"]))


class ClassDecl(_node.Node):
    """`class Name < Super ... end`

    Args:
        name: (str) Class name
        body: (list) Statements evaluated with the class as context
        superclass: (str | None) Name of the superclass, None for Object
    """

    def __init__(self, name: str, body: list[_node.Node], superclass: str | None = None):
        self.name = name
        self.superclass = superclass
        self.body = list(body)

    def unparse(self) -> str:
        header = f"class {self.name}"
        if self.superclass:
            header += f" < {self.superclass}"
        body = _node.unparse_body(self.body)
        return "\n".join(filter(None, [header, body, "end"]))


class Param(_node.Node):
    """Formal method parameter with an optional default expression."""

    def __init__(self, name: str, default: _node.Node | None = None):
        self.name = name
        self.default = default

    def unparse(self) -> str:
        if self.default is None:
            return self.name
        return f"{self.name} = {self.default.unparse()}"


class FuncDecl(_node.Node):
    """`def name(params) ... end` or `def self.name ... end`

    Args:
        name: (str) Method name
        params: (list[Param]) Formal parameters in order
        body: (list) Method body statements
        target: (Node | None) `Self` node when declared as `def self.name`
    """

    def __init__(self, name: str, params: list[Param], body: list[_node.Node], target: _node.Node | None = None):
        self.name = name
        self.params = list(params)
        self.body = list(body)
        self.target = target

    def unparse(self) -> str:
        name = self.name
        if self.target is not None:
            name = f"{self.target.unparse()}.{name}"
        if self.params:
            name += "(" + ", ".join(p.unparse() for p in self.params) + ")"
        body = _node.unparse_body(self.body)
        return "\n".join(filter(None, [f"def {name}", body, "end"]))


class Alias(_node.Node):
    """`alias new_name old_name`"""

    def __init__(self, to: str, source: str):
        self.to = to
        self.source = source

    def unparse(self) -> str:
        return f"alias {self.to} {self.source}"
