"""Nodes for calls, assignment and control flow."""

__all__ = ["CallExpression", "Assignment", "IfBlock", "Begin", "Rescue"]

from . import _node


class CallExpression(_node.Node):
    """Method call, with or without an explicit target.

    Binary operators are calls too: `1 + 2` is a call of `+` on `1`.

    Args:
        target: (Node | None) Receiver expression, None for implicit self
        func: (str) Method name
        args: (list) Argument expressions in order
    """

    def __init__(self, target: _node.Node | None, func: str, args: list[_node.Node] | None = None):
        self.target = target
        self.func = func
        self.args = list(args) if args else []

    def unparse(self) -> str:
        args = ", ".join(a.unparse() for a in self.args)
        if self.target is None:
            return f"{self.func}({args})"
        if not self.func[0].isalpha() and self.func[0] != "_" and len(self.args) == 1:
            return f"{self.target.unparse()} {self.func} {args}"
        if self.args:
            return f"{self.target.unparse()}.{self.func}({args})"
        return f"{self.target.unparse()}.{self.func}"


class Assignment(_node.Node):
    """`lhs = rhs`

    The left side is a BareReference, GlobalVariable or InstanceVariable.
    """

    def __init__(self, lhs: _node.Node, rhs: _node.Node):
        self.lhs = lhs
        self.rhs = rhs

    def unparse(self) -> str:
        return f"{self.lhs.unparse()} = {self.rhs.unparse()}"


class IfBlock(_node.Node):
    """`if cond ... else ... end`

    An `elsif` chain is stored as a nested IfBlock in the else body.
    """

    def __init__(self, condition: _node.Node, body: list[_node.Node], else_body: list[_node.Node] | None = None):
        self.condition = condition
        self.body = list(body)
        self.else_body = list(else_body) if else_body else []

    def unparse(self) -> str:
        lines = [f"if {self.condition.unparse()}", _node.unparse_body(self.body)]
        if self.else_body:
            lines.extend(["else", _node.unparse_body(self.else_body)])
        lines.append("end")
        return "\n".join(filter(None, lines))


class Rescue(_node.Node):
    """`rescue Name, Other` clause inside a Begin."""

    def __init__(self, classes: list[str], body: list[_node.Node]):
        self.classes = list(classes)
        self.body = list(body)

    def unparse(self) -> str:
        header = "rescue " + ", ".join(self.classes)
        return "\n".join(filter(None, [header, _node.unparse_body(self.body)]))


class Begin(_node.Node):
    """`begin ... rescue ... end`"""

    def __init__(self, body: list[_node.Node], rescues: list[Rescue] | None = None):
        self.body = list(body)
        self.rescues = list(rescues) if rescues else []

    def unparse(self) -> str:
        lines = ["begin", _node.unparse_body(self.body)]
        lines.extend(r.unparse() for r in self.rescues)
        lines.append("end")
        return "\n".join(filter(None, lines))
