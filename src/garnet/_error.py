"""Error classes and helpers"""

__all__ = [
    "EvalError",
    "ParseError",
    "RubyError",
    "UndefinedNameError",
    "NoMethodError",
    "LoadError",
    "ArgumentError",
    "RaisedError",
]


class EvalError(Exception):
    """Error in internal processing of the garnet vm.

    These are never seen by rescue clauses. They mean the evaluator was
    handed something it cannot handle, like an unknown node kind.
    """


class ParseError(Exception):
    """Exception raised for parsing errors.

    Args:
        filename: (str) Name of the source that failed to parse
        message: (str) Error description from the parser
        trace: (list[str]) Tokens consumed before the failure

    Attributes:
        filename: (str) Name of the source that failed to parse
        message: (str) Error description
        trace: (list[str]) Parse trace, oldest entry first
    """

    def __init__(self, filename, message="parse error", trace=()):
        self.filename = filename
        self.message = message
        self.trace = list(trace)
        super().__init__(message)


class RubyError(Exception):
    """Error raised by a running script.

    Script errors can be rescued by `begin`/`rescue` blocks. Rescue clauses
    match on the `display` string of the error.

    Args:
        message: (str) Human readable description
        backtrace: (str) Rendering of the call stack when the error was made

    Attributes:
        message: (str) Human readable description
        backtrace: (str) Rendering of the call stack when the error was made
    """

    kind = "StandardError"

    def __init__(self, message, backtrace=""):
        self.message = message
        self.backtrace = backtrace
        super().__init__(message)

    @property
    def display(self):
        """Name rescue clauses are compared against."""
        return self.kind

    def __str__(self):
        return f"{self.kind}: {self.message}"

    def format(self):
        """Full report with the backtrace lines."""
        if not self.backtrace:
            return str(self)
        return f"{self}\n{self.backtrace}"


class UndefinedNameError(RubyError):
    """Bare name could not be found in any scope or registry."""

    kind = "NameError"

    def __init__(self, name, receiver, class_name, backtrace=""):
        self.name = name
        self.receiver = receiver
        self.class_name = class_name
        message = f"undefined local variable or method `{name}' for {receiver}:{class_name}"
        super().__init__(message, backtrace)


class NoMethodError(RubyError):
    """Method dispatch failed for the receiver."""

    kind = "NoMethodError"

    def __init__(self, name, receiver, class_name, backtrace=""):
        self.name = name
        self.receiver = receiver
        self.class_name = class_name
        message = f"undefined method `{name}' for {receiver}:{class_name}"
        super().__init__(message, backtrace)


class LoadError(RubyError):
    """A `require` could not find the requested file."""

    kind = "LoadError"

    def __init__(self, name, backtrace=""):
        self.name = name
        super().__init__(f"cannot load such file -- {name}", backtrace)


class ArgumentError(RubyError):
    """Wrong number of arguments passed to a method."""

    kind = "ArgumentError"


class RaisedError(RubyError):
    """Error created by the script itself with `raise`.

    When raised with a plain message the message doubles as the display
    name, so `raise "Boom"` is caught by `rescue Boom`. When raised with a
    class, the class name is the display name.

    Args:
        message: (str) Human readable description
        backtrace: (str) Call stack rendering
        kind: (str | None) Display name, defaults to the message
    """

    def __init__(self, message, backtrace="", kind=None):
        self.kind = kind if kind is not None else message
        super().__init__(message, backtrace)

    def __str__(self):
        if self.kind == self.message:
            return self.message
        return f"{self.kind}: {self.message}"
