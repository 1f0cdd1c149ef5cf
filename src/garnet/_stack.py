"""Call stack and local variable stack.

Both stacks are only changed through context managers, so every push is
matched by a pop on every exit path, including when a script error is
propagating through.
"""

__all__ = ["Frame", "CallStack", "LocalVariableStack"]

from contextlib import contextmanager
from dataclasses import dataclass

import garnet


@dataclass(frozen=True)
class Frame:
    """Entry on the call stack."""

    name: str
    filename: str

    def __str__(self):
        return f"\tfrom {self.filename}:in `{self.name}'"


class CallStack:
    """Stack of frames used to attribute errors.

    Iterating or rendering the stack lists the most recent frame first.
    """

    def __init__(self):
        self._frames = []

    def __len__(self):
        return len(self._frames)

    def __iter__(self):
        return reversed(self._frames)

    def __str__(self):
        return "\n".join(str(frame) for frame in self)

    def __repr__(self):
        return f"CallStack<{len(self._frames)}>"

    @contextmanager
    def frame(self, name, filename):
        """Push a frame for the duration of the block.

        Examples:
            with vm.stack.frame(method.name, vm.current_filename):
                result = method.execute(receiver, *args)

        Args:
            name: (str) Method or context name
            filename: (str) Source file active for the frame

        Yields:
            (Frame) The pushed frame
        """
        frame = Frame(name, filename)
        self._frames.append(frame)
        try:
            yield frame
        finally:
            self._frames.pop()


class LocalVariableStack:
    """Stack of local variable scopes.

    Only the topmost scope is ever consulted. A method body never sees
    the locals of its caller.
    """

    def __init__(self):
        self._scopes = []

    def __len__(self):
        return len(self._scopes)

    def __repr__(self):
        return f"LocalVariableStack<{len(self._scopes)}>"

    @contextmanager
    def scope(self):
        """Push an empty scope for the duration of the block.

        Yields:
            (dict) The pushed scope
        """
        scope = {}
        self._scopes.append(scope)
        try:
            yield scope
        finally:
            self._scopes.pop()

    def store(self, name, value):
        """Bind a local in the current scope."""
        if not self._scopes:
            raise garnet.EvalError(f"No local scope to store '{name}' in")
        self._scopes[-1][name] = value

    def retrieve(self, name):
        """Look up a local in the current scope.

        Raises:
            KeyError: When the name is not bound in the current scope
        """
        if not self._scopes:
            raise KeyError(name)
        return self._scopes[-1][name]

