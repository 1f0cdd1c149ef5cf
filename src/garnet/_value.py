"""Runtime values and methods."""

__all__ = ["Value", "Method", "NativeMethod", "RubyMethod"]

import inspect

import garnet


class Value:
    """Any runtime object.

    Every value has a class, a table of instance attributes and tables of
    singleton methods that belong to this value alone. For classes and
    modules the singleton tables hold their class methods and module
    functions.

    Args:
        cls: (Class | None) Owning class. Only the bootstrap classes are
            created without one, and they are fixed up right after.

    Attributes:
        cls: (Class) Owning class, shared with other instances
        ivars: (dict) Instance attributes by name, without the `@`
        methods: (dict) Public singleton methods by name
        private_methods: (dict) Private singleton methods by name
    """

    def __init__(self, cls=None):
        self.cls = cls
        self.ivars = {}
        self.methods = {}
        self.private_methods = {}

    def __repr__(self):
        cls = self.cls.name if self.cls is not None else "?"
        return f"<{cls} {self}>"

    def __str__(self):
        cls = self.cls.name if self.cls is not None else "Object"
        return f"#<{cls}>"

    def method(self, name):
        """Find a public method for a call with an explicit receiver."""
        return garnet.resolve(self, name)

    def private_method(self, name):
        """Find a method for a call on implicit self, private included."""
        return garnet.resolve(self, name, private=True)

    def add_method(self, method):
        self.methods[method.name] = method

    def add_private_method(self, method):
        self.private_methods[method.name] = method

    def get_instance_variable(self, name):
        """Look up an instance attribute, None when unset."""
        return self.ivars.get(name)

    def set_instance_variable(self, name, value):
        self.ivars[name] = value


class Method:
    """Callable bound to a name.

    Attributes:
        name: (str) Name the method is registered under
        vm: (VM) Runtime the method executes in
    """

    def __init__(self, name, vm):
        self.name = name
        self.vm = vm

    def __repr__(self):
        return f"{type(self).__name__}<{self.name}>"

    def execute(self, receiver, *args):
        """Run the method with `receiver` as self.

        Returns:
            (Value) Result of the method
        """
        raise NotImplementedError(f"{type(self).__name__}.execute() not implemented")


class NativeMethod(Method):
    """Method implemented by a Python function.

    The function is called as `func(vm, receiver, *args)` and must return
    a Value. Its signature decides the accepted argument counts; a maximum
    of None means any number.
    """

    def __init__(self, name, vm, func):
        super().__init__(name, vm)
        self.func = func
        self.arity = _signature_arity(func)

    def execute(self, receiver, *args):
        self.vm.check_arity(self, args)
        return self.func(self.vm, receiver, *args)


class RubyMethod(Method):
    """Method declared in script source with `def`.

    Args:
        name: (str) Method name
        params: (list[garnet.ast.Param]) Formal parameters
        body: (list[garnet.ast.Node]) Statements of the body
        vm: (VM) Runtime that declared the method
    """

    def __init__(self, name, params, body, vm):
        super().__init__(name, vm)
        self.params = list(params)
        self.body = list(body)

    @property
    def arity(self):
        """Range of accepted argument counts as (required, maximum)."""
        required = sum(1 for p in self.params if p.default is None)
        return required, len(self.params)

    def execute(self, receiver, *args):
        return self.vm.invoke(self, receiver, args)


def _signature_arity(func):
    """Argument counts a native function accepts after vm and receiver."""
    required = maximum = 0
    for param in list(inspect.signature(func).parameters.values())[2:]:
        if param.kind is param.VAR_POSITIONAL:
            return required, None
        if param.default is param.empty:
            required += 1
        maximum += 1
    return required, maximum
