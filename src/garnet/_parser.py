"""Parser for converting Lark parse trees to garnet AST nodes.

The grammar lives in `ruby.lark` beside this module. Lark produces a
grammar shaped tree which is converted here into the closed set of
`garnet.ast` nodes the vm understands.

Each token the parser consumes is recorded in a trace which travels with
a failed parse as `ParseError.trace`.
"""

__all__ = ["parse"]

import pathlib

import lark

import garnet

# Global parser instances (cached by start rule)
_parsers: dict[str, lark.Lark] = {}

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "s": " ",
    "e": "\x1b",
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}


def parse(text, filename=None):
    """Parse a complete script.

    Tokens are fed to the parser one at a time and each one is recorded in a
    trace. When the parse fails the trace is attached to the raised error so
    the command line can show how far the parser got.

    Args:
        text: Script source code
        filename: Optional source filename for error messages

    Returns:
        (list[garnet.ast.Node]) Top level statements in order

    Raises:
        garnet.ParseError: If the text contains invalid syntax
    """
    trace = []
    token = None
    try:
        interactive = _get_parser("start").parse_interactive(text)
        for token in interactive.iter_parse():
            trace.append(f"line {token.line}: {token.type} {token.value!r}")
        tree = interactive.feed_eof(token)
    except lark.exceptions.LarkError as e:
        trace.append(f"error: {e}")
        raise garnet.ParseError(filename, str(e), trace) from e
    return _convert_tree(tree)


def _convert_tree(tree):
    """Convert a single Lark tree to an AST node.

    This is the main dispatcher that handles all grammar rules.
    Children are converted before the parent node is created.

    Args:
        tree: Lark Tree to convert

    Returns:
        AST node instance, or a list of nodes for statement sequences
    """
    if isinstance(tree, lark.Token):
        raise ValueError(f"Unhandled grammar token: {tree.type} {tree!r}")

    assert isinstance(tree, lark.Tree)
    kids = tree.children
    match tree.data:
        case "start":
            return _convert_stmts(kids[0])

        # Control flow
        case "if_stmt":
            condition = _convert_tree(kids[0])
            body = _convert_stmts(kids[1])
            else_body = _convert_else(kids[2])
            node = garnet.ast.IfBlock(condition, body, else_body)
        case "begin_block":
            body = _convert_stmts(kids[0])
            rescues = [_convert_tree(kid) for kid in kids[1:]]
            node = garnet.ast.Begin(body, rescues)
        case "rescue_clause":
            classes = [token.value for token in kids[0].children]
            node = garnet.ast.Rescue(classes, _convert_stmts(kids[1]))

        # Declarations
        case "alias_stmt":
            to, source = (_alias_name(kid) for kid in kids)
            node = garnet.ast.Alias(to, source)
        case "module_decl":
            node = garnet.ast.ModuleDecl(kids[0].value, _convert_stmts(kids[1]))
        case "class_decl":
            superclass = kids[1].children[-1].value if kids[1] is not None else None
            body = _convert_stmts(kids[2])
            node = garnet.ast.ClassDecl(kids[0].value, body, superclass)
        case "func_decl":
            name_tree, params_tree, body_tree = kids
            target = None
            match name_tree.data:
                case "func_name":
                    name = name_tree.children[0].value
                case "self_func_name":
                    name = name_tree.children[0].value
                    target = _positioned(garnet.ast.Self(), name_tree)
                case "operator_func_name":
                    name = name_tree.children[0].children[0].value
                case _:
                    raise ValueError(f"Unhandled method name rule: {name_tree.data}")
            params = _convert_params(params_tree)
            node = garnet.ast.FuncDecl(name, params, _convert_stmts(body_tree), target)

        # Assignment and calls
        case "assignment":
            node = garnet.ast.Assignment(_convert_tree(kids[0]), _convert_tree(kids[1]))
        case "command_call":
            args = [_convert_tree(kid) for kid in kids[1].children]
            node = garnet.ast.CallExpression(None, kids[0].value, args)
        case "command_method_call":
            target = _convert_tree(kids[0])
            args = [_convert_tree(kid) for kid in kids[2].children]
            node = garnet.ast.CallExpression(target, _method_name(kids[1]), args)
        case "function_call":
            node = garnet.ast.CallExpression(None, kids[0].value, _convert_args(kids[1]))
        case "method_call":
            target = _convert_tree(kids[0])
            node = garnet.ast.CallExpression(target, _method_name(kids[1]), _convert_args(kids[2]))
        case "binary_op":
            left = _convert_tree(kids[0])
            op = kids[1].children[0].value
            right = _convert_tree(kids[2])
            node = garnet.ast.CallExpression(left, op, [right])

        # References
        case "bare_ref":
            node = garnet.ast.BareReference(kids[0].value)
        case "ivar":
            node = garnet.ast.InstanceVariable(kids[0].value[1:])
        case "gvar":
            node = garnet.ast.GlobalVariable(kids[0].value[1:])

        # Literals
        case "true":
            node = garnet.ast.Boolean(True)
        case "false":
            node = garnet.ast.Boolean(False)
        case "self":
            node = garnet.ast.Self()
        case "file_name":
            node = garnet.ast.FileNameConstReference()
        case "integer":
            node = garnet.ast.ConstantInt(int(kids[0].value))
        case "float":
            node = garnet.ast.ConstantFloat(float(kids[0].value))
        case "string":
            node = _convert_string(kids[0].value)
        case "symbol":
            node = garnet.ast.Symbol(kids[0].value[1:])
        case "array":
            elements = [] if kids[0] is None else [_convert_tree(kid) for kid in kids[0].children]
            node = garnet.ast.Array(elements)
        case "hash":
            pairs = []
            if kids[0] is not None:
                for pair in kids[0].children:
                    pairs.append((_convert_tree(pair.children[0]), _convert_tree(pair.children[1])))
            node = garnet.ast.Hash(pairs)
        case _:
            raise ValueError(f"Unhandled grammar rule: {tree.data}")

    return _positioned(node, tree)


def _convert_stmts(tree):
    """Convert an optional `stmts` tree into a list of statement nodes."""
    if tree is None:
        return []
    return [_convert_tree(kid) for kid in tree.children]


def _convert_else(tree):
    """Convert the else or elsif part of an if statement into a body."""
    if tree is None:
        return []
    match tree.data:
        case "else_clause":
            return _convert_stmts(tree.children[0])
        case "elsif_clause":
            kids = tree.children
            condition = _convert_tree(kids[0])
            body = _convert_stmts(kids[1])
            nested = garnet.ast.IfBlock(condition, body, _convert_else(kids[2]))
            return [_positioned(nested, tree)]
    raise ValueError(f"Unhandled else rule: {tree.data}")


def _convert_params(tree):
    """Convert an optional `params` tree into Param nodes."""
    if tree is None or tree.children[0] is None:
        return []
    params = []
    for param in tree.children[0].children:
        name, default = param.children
        if default is not None:
            default = _convert_tree(default)
        params.append(_positioned(garnet.ast.Param(name.value, default), param))
    return params


def _convert_args(tree):
    """Convert an optional `call_args` tree into argument nodes."""
    if tree is None or tree.children[0] is None:
        return []
    return [_convert_tree(kid) for kid in tree.children[0].children]


def _method_name(tree):
    if tree.data == "class_keyword":
        return "class"
    return tree.children[0].value


def _alias_name(token):
    if token.type == "SYMBOL":
        return token.value[1:]
    return token.value


def _convert_string(literal):
    """Create a string node from the quoted source literal."""
    quote, body = literal[0], literal[1:-1]
    if quote == "'":
        return garnet.ast.SimpleString(body.replace("\\\\", "\\").replace("\\'", "'"))
    if "#{" in body:
        return garnet.ast.InterpolatedString(body)
    chars = []
    pos = 0
    while pos < len(body):
        char = body[pos]
        if char == "\\" and pos + 1 < len(body):
            pos += 1
            char = _ESCAPES.get(body[pos], body[pos])
        chars.append(char)
        pos += 1
    return garnet.ast.SimpleString("".join(chars))


def _positioned(node, tree):
    """Copy the source position from a Lark tree onto a node."""
    meta = tree.meta
    if not getattr(meta, "empty", True):
        node.position = (meta.line, meta.column)
    return node


def _get_parser(start):
    """Get a cached Lark parser instance for the given start rule.

    Args:
        start (str): Grammar start rule

    Returns:
        lark.Lark: Cached Lark parser instance
    """
    if start not in _parsers:
        grammar_path = pathlib.Path(__file__).parent / "ruby.lark"
        _parsers[start] = lark.Lark(
            grammar_path.read_text(encoding="utf-8"),
            parser="lalr",
            start=start,
            propagate_positions=True,
            maybe_placeholders=True,
        )
    return _parsers[start]
