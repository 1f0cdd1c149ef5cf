"""Ast base node"""

__all__ = ["Node"]


class Node:
    """Base class for all AST nodes.

    Nodes are plain records. They hold their children as named attributes
    (a node, a list of nodes, or None) and never evaluate themselves; the
    vm dispatches on the node class.

    Attributes:
        position: (tuple) Line and column where the node started, or
            (None, None) for nodes built by hand
    """

    position = (None, None)

    def __repr__(self):
        """Compact representation showing type and key attributes."""
        attrs = []
        for key, value in self.__dict__.items():
            if key == "position":
                continue
            attrs.append(f"{key}={value!r}")
        return f"{self.__class__.__name__}({' '.join(attrs)})"

    @property
    def kids(self):
        """Child nodes in source order."""
        kids = []
        for key, value in self.__dict__.items():
            if key == "position":
                continue
            kids.extend(_nodes_in(value))
        return kids

    def tree(self, indent=0):
        """Print tree structure."""
        print(f"{'  '*indent}{self!r}")
        for kid in self.kids:
            kid.tree(indent + 1)

    def find(self, node_type):
        """Find first descendant of given type, including self."""
        if isinstance(self, node_type):
            return self
        for kid in self.kids:
            if result := kid.find(node_type):
                return result
        return None

    def find_all(self, node_type):
        """Find all descendants of given type, including self."""
        results = [self] if isinstance(self, node_type) else []
        for kid in self.kids:
            results.extend(kid.find_all(node_type))
        return results

    def matches(self, other) -> bool:
        """Hierarchical comparison of AST structure.

        Compares node types and attributes, ignoring positions. Child nodes
        are compared recursively. Useful for testing the parser.

        Args:
            other: Another Node to compare against

        Returns:
            True if nodes have same type, attributes, and children structure
        """
        if not isinstance(other, type(self)):
            return False
        mine = {k: v for k, v in self.__dict__.items() if k != "position"}
        theirs = {k: v for k, v in other.__dict__.items() if k != "position"}
        if mine.keys() != theirs.keys():
            return False
        return all(_matches(mine[key], theirs[key]) for key in mine)

    def unparse(self) -> str:
        """Convert back to source representation."""
        return "???"


def _nodes_in(value):
    """Flatten nodes out of an attribute value."""
    if isinstance(value, Node):
        return [value]
    if isinstance(value, (list, tuple)):
        found = []
        for item in value:
            found.extend(_nodes_in(item))
        return found
    return []


def _matches(left, right):
    if isinstance(left, Node):
        return left.matches(right)
    if isinstance(left, (list, tuple)):
        if not isinstance(right, (list, tuple)) or len(left) != len(right):
            return False
        return all(_matches(a, b) for a, b in zip(left, right))
    return left == right


def unparse_body(nodes, indent="  "):
    """Unparse a statement list into indented lines."""
    lines = []
    for node in nodes:
        for line in node.unparse().splitlines():
            lines.append(f"{indent}{line}")
    return "\n".join(lines)
