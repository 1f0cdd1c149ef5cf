"""Classes, modules and method resolution.

Modules and classes are values too. A module owns tables of instance
methods which become visible to any class that includes it. A class is a
module with a superclass and the ability to create instances.

Resolution for a call walks the receiver's singleton methods first, then
`ancestors()` of its class: the class, its included modules with the most
recently included first, then the same for each superclass.
"""

__all__ = ["Module", "Class", "SingletonClass", "resolve", "ancestors"]

import garnet


class Module(garnet.Value):
    """Named collection of methods that can be included elsewhere.

    Modules cannot be instantiated. Their own `methods` table (inherited
    from Value) holds module functions declared with `def self.name`.

    Args:
        name: (str) Module name
        cls: (Class | None) Class of the module value, normally Module

    Attributes:
        name: (str) Module name
        instance_methods: (dict) Public methods for including classes
        private_instance_methods: (dict) Private methods for including classes
        includes: (list[Module]) Included modules in inclusion order
    """

    def __init__(self, name, cls=None):
        super().__init__(cls)
        self.name = name
        self.instance_methods = {}
        self.private_instance_methods = {}
        self.includes = []

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"{type(self).__name__}<{self.name}>"

    def include(self, module):
        """Add a module to the end of the inclusion list.

        Including the same module again has no effect.
        """
        if not any(module is mod for mod in self.includes):
            self.includes.append(module)

    def add_instance_method(self, method):
        self.instance_methods[method.name] = method

    def add_private_instance_method(self, method):
        self.private_instance_methods[method.name] = method

    def instance_method(self, name):
        """Find an instance method visible on instances of this module.

        Searches the ancestors, private tables included.

        Returns:
            (Method | None) The method, or None when not defined
        """
        for module in ancestors(self):
            method = module.instance_methods.get(name)
            if method is None:
                method = module.private_instance_methods.get(name)
            if method is not None:
                return method
        return None


class Class(Module):
    """Module that can create instances and has a superclass.

    Args:
        name: (str) Class name
        superclass: (Class | None) Parent class, None only for BasicObject
        cls: (Class | None) Class of the class value, normally Class
        instance_type: (type) Python type used for new instances

    Attributes:
        superclass: (Class | None) Parent class
        instance_type: (type) Python type used by `allocate`
    """

    def __init__(self, name, superclass=None, cls=None, instance_type=None):
        super().__init__(name, cls)
        self.superclass = superclass
        self.instance_type = instance_type or garnet.Value

    def allocate(self):
        """Create a bare instance without running `initialize`."""
        return self.instance_type(self)

    def new(self, vm, *args):
        """Create an instance and run its `initialize` method.

        Args:
            vm: (VM) Runtime to run `initialize` in
            *args: Arguments passed on to `initialize`

        Returns:
            (Value) The new instance
        """
        instance = self.allocate()
        vm.call(instance, "initialize", *args, private=True)
        return instance


class SingletonClass(Class):
    """Class whose instances are all the same value, like true or nil."""

    def __init__(self, name, superclass=None, cls=None, instance_type=None):
        super().__init__(name, superclass, cls, instance_type)
        self._instance = None

    def allocate(self):
        if self._instance is None:
            self._instance = super().allocate()
        return self._instance

    def new(self, vm, *args):
        return self.allocate()


def ancestors(module):
    """List the modules searched for methods, in resolution order.

    Each module is followed by the modules it includes, most recently
    included first, then the superclass chain repeats the pattern. A module
    reachable more than once keeps its first position.

    Args:
        module: (Module) Class or module to start from

    Returns:
        (list[Module]) Modules in search order, starting with `module`
    """
    found = []

    def visit(mod):
        if any(mod is seen for seen in found):
            return
        found.append(mod)
        for included in reversed(mod.includes):
            visit(included)

    current = module
    while current is not None:
        visit(current)
        current = getattr(current, "superclass", None)
    return found


def resolve(value, name, private=False):
    """Find the method a call on `value` dispatches to.

    Args:
        value: (Value) Receiver of the call
        name: (str) Method name
        private: (bool) Allow private methods, for calls on implicit self

    Returns:
        (Method | None) The method, or None if nothing responds to `name`
    """
    method = value.methods.get(name)
    if method is None and private:
        method = value.private_methods.get(name)
    if method is not None:
        return method
    if value.cls is None:
        return None
    for module in ancestors(value.cls):
        method = module.instance_methods.get(name)
        if method is None and private:
            method = module.private_instance_methods.get(name)
        if method is not None:
            return method
    return None
