"""Runtime state and the statement evaluator.

A VM owns every registry a script can touch: object space, globals,
interned symbols, classes and modules, plus the call stack and the local
variable stack. Nothing is shared between VM instances, so several can
run side by side.

Evaluation walks the AST directly. `execute` runs a statement sequence
against a context value (the object `self` refers to) and returns the value
of the last statement. Script level failures are raised as
`garnet.RubyError` subclasses and abort the rest of the sequence until a
`begin`/`rescue` block or the host catches them.
"""

__all__ = ["VM"]

import os
import pathlib
import sys

import garnet


class VM:
    """Runtime for a single script and everything it requires.

    Args:
        home: (str | Path) Home directory, the load path is `<home>/lib`
        filename: (str) Name of the script being run, used for `__FILE__`
            and call stack frames
        argv: (Sequence[str]) Script arguments exposed as `ARGV`
        stdout: (TextIO | None) Stream for `puts` and friends
        stderr: (TextIO | None) Stream exposed as `$stderr`

    Attributes:
        object_space: (dict) Top level names bound by assignment
        globals: (dict) Global variables without the `$`
        symbols: (dict) Interned symbols by name
        classes: (dict) Registered classes by name
        modules: (dict) Registered modules by name
        stack: (garnet.CallStack) Active method frames
        locals: (garnet.LocalVariableStack) Local variable scopes
        current_filename: (str) File being evaluated
    """

    def __init__(self, home, filename, argv=(), stdout=None, stderr=None):
        self.home = str(home)
        self.current_filename = filename
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

        self.object_space = {}
        self.globals = {}
        self.symbols = {}
        self.classes = {}
        self.modules = {}
        self.stack = garnet.CallStack()
        self.locals = garnet.LocalVariableStack()
        self._bootstrapped = False

        self.bootstrap()

        self.load_path = self.array([self.string(os.path.join(self.home, "lib"))])
        self.globals["LOAD_PATH"] = self.load_path
        self.globals[":"] = self.load_path
        self.globals["stdout"] = garnet.IO(self.classes["IO"], self.stdout)
        self.globals["stderr"] = garnet.IO(self.classes["IO"], self.stderr)
        self.object_space["ARGV"] = self.array(self.string(arg) for arg in argv)
        self.object_space["nil"] = self.nil

        main = self.classes["Object"].new(self)
        main.add_method(garnet.NativeMethod("to_s", self, lambda vm, receiver: vm.string("main")))
        main.add_method(garnet.NativeMethod("require", self, lambda vm, receiver, name: vm.require(vm.text(name))))
        self.object_space["main"] = main

    def __repr__(self):
        return f"VM<{self.current_filename}>"

    def bootstrap(self):
        """Build the builtin class graph.

        The core classes refer to each other, so they are created unlinked
        and wired together afterwards. Kernel is included into both Object
        and Module, which is how classes and modules get Kernel methods.

        Raises:
            garnet.EvalError: When called a second time
        """
        if self._bootstrapped:
            raise garnet.EvalError("VM bootstrap already ran")
        self._bootstrapped = True

        basic_object = garnet.Class("BasicObject")
        object_class = garnet.Class("Object")
        class_class = garnet.Class("Class")
        module_class = garnet.Class("Module")
        for core in (basic_object, object_class, class_class, module_class):
            self.register(core.name, core)

        for name in ("Comparable", "Kernel", "Process"):
            self.register(name, garnet.Module(name, module_class))

        object_class.include(self.modules["Kernel"])
        module_class.include(self.modules["Kernel"])
        class_class.superclass = module_class
        object_class.superclass = basic_object
        basic_object.superclass = None
        for core in (basic_object, object_class, class_class, module_class):
            core.cls = class_class

        self._define_class("IO", garnet.IO)
        self._define_class("Array", garnet.Array)
        self._define_class("Hash", garnet.Hash)
        self._define_class("True", garnet.TrueValue, singleton=True)
        self._define_class("File")
        self._define_class("False", garnet.FalseValue, singleton=True)
        self._define_class("Nil", garnet.NilValue, singleton=True)
        self._define_class("String", garnet.String)
        self._define_class("Fixnum", garnet.Fixnum)
        self._define_class("Float", garnet.Float)
        self._define_class("Symbol", garnet.Symbol)

        self._define_class("StandardError")
        self._define_class("NameError", superclass="StandardError")
        self._define_class("NoMethodError", superclass="NameError")
        self._define_class("LoadError", superclass="StandardError")
        self._define_class("RuntimeError", superclass="StandardError")
        self._define_class("ArgumentError", superclass="StandardError")

        garnet.install_builtins(self)

    def _define_class(self, name, instance_type=None, singleton=False, superclass="Object"):
        kind = garnet.SingletonClass if singleton else garnet.Class
        cls = kind(name, self.classes[superclass], self.classes["Class"], instance_type)
        self.register(name, cls)
        return cls

    # Registries

    def register(self, name, value):
        """Record a class or module under `name`, replacing any earlier one."""
        if isinstance(value, garnet.Class):
            self.classes[name] = value
        elif isinstance(value, garnet.Module):
            self.modules[name] = value
        else:
            raise garnet.EvalError(f"Cannot register {value!r} as '{name}'")

    def lookup_class(self, name):
        """Registered class by name, raises KeyError when absent."""
        return self.classes[name]

    def lookup_module(self, name):
        """Registered module by name, raises KeyError when absent."""
        return self.modules[name]

    def get(self, name):
        """Look up a top level name.

        Searches object space, globals, classes and modules in that order.

        Raises:
            garnet.UndefinedNameError: When nothing is bound to `name`
        """
        for registry in (self.object_space, self.globals, self.classes, self.modules):
            if name in registry:
                return registry[name]
        raise garnet.UndefinedNameError(name, "main", "Object", str(self.stack))

    def get_class(self, name):
        """Registered class by name, raising a script error when absent."""
        try:
            return self.classes[name]
        except KeyError:
            raise garnet.UndefinedNameError(name, "main", "Object", str(self.stack)) from None

    def set(self, name, value):
        self.object_space[name] = value

    # Value constructors

    @property
    def nil(self):
        return self.classes["Nil"].allocate()

    def boolean(self, flag):
        return self.classes["True" if flag else "False"].allocate()

    def string(self, text):
        return garnet.String(self.classes["String"], text)

    def fixnum(self, value):
        return garnet.Fixnum(self.classes["Fixnum"], value)

    def float(self, value):
        return garnet.Float(self.classes["Float"], value)

    def symbol(self, name):
        """Interned symbol, the same value for every request of `name`."""
        symbol = self.symbols.get(name)
        if symbol is None:
            symbol = garnet.Symbol(self.classes["Symbol"], name)
            self.symbols[name] = symbol
        return symbol

    def array(self, members=()):
        return garnet.Array(self.classes["Array"], members)

    def hash(self):
        return garnet.Hash(self.classes["Hash"])

    def truthy(self, value):
        """Ruby truthiness, everything except nil and false."""
        return not isinstance(value, (garnet.NilValue, garnet.FalseValue))

    def text(self, value):
        """Python string from the value's `to_s`."""
        result = self.call(value, "to_s")
        return result.value if isinstance(result, garnet.String) else str(result)

    def inspect(self, value):
        """Python string from the value's `inspect`."""
        result = self.call(value, "inspect")
        return result.value if isinstance(result, garnet.String) else str(result)

    # Evaluation

    def run(self, source):
        """Parse and evaluate script source with `main` as self.

        Args:
            source: (str) Script text

        Returns:
            (garnet.Value) Value of the last top level statement

        Raises:
            garnet.ParseError: If the source does not parse, nothing is run
            garnet.RubyError: For script errors nothing rescued
        """
        nodes = garnet.parse(source, self.current_filename)
        main = self.object_space["main"]
        with self.stack.frame("main", self.current_filename), self.locals.scope():
            return self.execute(main, nodes)

    def execute(self, context, nodes):
        """Evaluate statements in order and return the last value.

        Args:
            context: (garnet.Value) Value bound to `self`
            nodes: (list[garnet.ast.Node]) Statements to evaluate

        Returns:
            (garnet.Value) Value of the last statement, nil when empty
        """
        result = self.nil
        for node in nodes:
            result = self.evaluate(context, node)
        return result

    def evaluate(self, context, node):
        """Evaluate a single node.

        Raises:
            garnet.EvalError: For node kinds the evaluator does not know
        """
        match node:
            case garnet.ast.IfBlock():
                if self._condition(node.condition):
                    return self.execute(context, node.body)
                return self.execute(context, node.else_body)

            case garnet.ast.Alias():
                self._alias(context, node)
                return self.nil

            case garnet.ast.ModuleDecl():
                module = self.modules.get(node.name)
                if module is None:
                    module = garnet.Module(node.name, self.classes["Module"])
                self.register(node.name, module)
                self.execute(module, node.body)
                return module

            case garnet.ast.ClassDecl():
                cls = self.classes.get(node.name)
                if cls is None:
                    superclass = self.get_class(node.superclass or "Object")
                    cls = garnet.Class(node.name, superclass, self.classes["Class"], superclass.instance_type)
                self.register(node.name, cls)
                return self.execute(cls, node.body)

            case garnet.ast.FuncDecl():
                self._define_method(context, node)
                return self.symbol(node.name)

            case garnet.ast.SimpleString() | garnet.ast.InterpolatedString():
                return self.string(node.value)
            case garnet.ast.Boolean():
                return self.boolean(node.value)
            case garnet.ast.ConstantInt():
                return self.fixnum(node.value)
            case garnet.ast.ConstantFloat():
                return self.float(node.value)
            case garnet.ast.Symbol():
                return self.symbol(node.name)
            case garnet.ast.FileNameConstReference():
                return self.string(self.current_filename)
            case garnet.ast.Self():
                return context

            case garnet.ast.GlobalVariable():
                return self.globals.get(node.name, self.nil)
            case garnet.ast.InstanceVariable():
                value = context.get_instance_variable(node.name)
                return self.nil if value is None else value
            case garnet.ast.BareReference():
                return self._reference(context, node.name)

            case garnet.ast.CallExpression():
                return self._call_expression(context, node)
            case garnet.ast.Assignment():
                return self._assign(context, node)
            case garnet.ast.Begin():
                return self._begin(context, node)

            case garnet.ast.Array():
                return self.array([self.evaluate(context, kid) for kid in node.nodes])
            case garnet.ast.Hash():
                hash_value = self.hash()
                for key_node, value_node in node.pairs:
                    key = self.evaluate(context, key_node)
                    hash_value.pairs[key] = self.evaluate(context, value_node)
                return hash_value

            case _:
                raise garnet.EvalError(f"Unknown node type: {type(node).__name__}")

    def _condition(self, condition):
        # Only literal booleans and the bare name nil are ever false.
        # The condition is not evaluated.
        match condition:
            case garnet.ast.Boolean():
                return condition.value
            case garnet.ast.BareReference():
                return condition.name != "nil"
        return True

    def _alias(self, context, node):
        if context is self.object_space.get("main"):
            owner = self.modules["Kernel"]
            table = owner.private_instance_methods
        elif isinstance(context, garnet.Module):
            owner = context
            table = owner.instance_methods
        else:
            raise garnet.EvalError(f"Cannot alias inside {context!r}")

        method = owner.instance_method(node.source)
        if method is None:
            raise garnet.NoMethodError(node.source, str(owner), owner.cls.name, str(self.stack))

        def forward(vm, receiver, *args):
            return method.execute(receiver, *args)

        table[node.to] = garnet.NativeMethod(node.to, self, forward)

    def _define_method(self, context, node):
        method = garnet.RubyMethod(node.name, node.params, node.body, self)
        if context is self.object_space.get("main"):
            self.modules["Kernel"].add_private_instance_method(method)
        elif isinstance(context, garnet.Class):
            context.add_instance_method(method)
        elif isinstance(context, garnet.Module):
            if isinstance(node.target, garnet.ast.Self):
                context.add_method(method)
            else:
                context.add_instance_method(method)
        else:
            raise garnet.EvalError(f"Cannot define method '{node.name}' inside {context!r}")

    def _reference(self, context, name):
        try:
            return self.locals.retrieve(name)
        except KeyError:
            pass
        for registry in (self.object_space, self.classes, self.modules):
            if name in registry:
                return registry[name]
        raise garnet.UndefinedNameError(name, self._display(context), context.cls.name, str(self.stack))

    def _call_expression(self, context, node):
        if node.target is not None:
            receiver = self.evaluate(context, node.target)
            if receiver is self.nil:
                raise self._no_method(receiver, node.func)
            private = False
        else:
            receiver = context
            private = True

        method = garnet.resolve(receiver, node.func, private=private)
        if method is None:
            raise self._no_method(receiver, node.func)

        args = [self.evaluate(context, arg) for arg in node.args]
        with self.stack.frame(method.name, self.current_filename):
            return method.execute(receiver, *args)

    def call(self, receiver, name, *args, private=False):
        """Send a message to a value from Python code.

        Args:
            receiver: (garnet.Value) Value to call the method on
            name: (str) Method name
            *args: (garnet.Value) Evaluated arguments
            private: (bool) Allow private methods, as a call on implicit self

        Raises:
            garnet.NoMethodError: When the receiver has no such method
        """
        method = garnet.resolve(receiver, name, private=private)
        if method is None:
            raise self._no_method(receiver, name)
        with self.stack.frame(method.name, self.current_filename):
            return method.execute(receiver, *args)

    def _no_method(self, receiver, name):
        return garnet.NoMethodError(name, self._display(receiver), receiver.cls.name, str(self.stack))

    def _display(self, value):
        if garnet.resolve(value, "inspect") is None:
            return str(value)
        return self.inspect(value)

    def check_arity(self, method, args):
        """Reject an argument list that does not fit a method.

        Raises:
            garnet.ArgumentError: When the argument count does not fit
        """
        required, maximum = method.arity
        if required <= len(args) and (maximum is None or len(args) <= maximum):
            return
        if maximum is None:
            expected = f"{required}+"
        elif required == maximum:
            expected = str(required)
        else:
            expected = f"{required}..{maximum}"
        raise garnet.ArgumentError(
            f"wrong number of arguments (given {len(args)}, expected {expected})", str(self.stack)
        )

    def invoke(self, method, receiver, args):
        """Run a script defined method body in a fresh local scope.

        Parameters bind as locals. Missing arguments take their default,
        which is evaluated in the new scope with the receiver as self.

        Raises:
            garnet.ArgumentError: When the argument count does not fit
        """
        self.check_arity(method, args)
        with self.locals.scope():
            for index, param in enumerate(method.params):
                if index < len(args):
                    value = args[index]
                else:
                    value = self.evaluate(receiver, param.default)
                self.locals.store(param.name, value)
            return self.execute(receiver, method.body)

    def _assign(self, context, node):
        value = self.evaluate(context, node.rhs)
        match node.lhs:
            case garnet.ast.BareReference(name=name):
                self.object_space[name] = value
            case garnet.ast.GlobalVariable(name=name):
                self.globals[name] = value
            case garnet.ast.InstanceVariable(name=name):
                context.set_instance_variable(name, value)
            case _:
                raise garnet.EvalError(f"Cannot assign to {node.lhs!r}")
        return value

    def _begin(self, context, node):
        try:
            return self.execute(context, node.body)
        except garnet.RubyError as err:
            # A rescue body that fails does not end the search, later
            # clauses are still matched against the first error.
            for rescue in node.rescues:
                for name in rescue.classes:
                    if name != err.display:
                        continue
                    try:
                        return self.execute(context, rescue.body)
                    except garnet.RubyError:
                        continue
            raise

    def require(self, name):
        """Load `<name>.rb` from the first load path entry that has it.

        Requiring "rubygems" does nothing and returns false.

        Returns:
            (garnet.Value) true once the file has been evaluated

        Raises:
            garnet.LoadError: When no load path entry has the file
        """
        if name == "rubygems":
            return self.boolean(False)
        for entry in self.load_path.members:
            path = pathlib.Path(self.text(entry)) / f"{name}.rb"
            try:
                source = path.read_text(encoding="utf-8")
            except OSError:
                continue
            previous = self.current_filename
            self.current_filename = str(path)
            try:
                self.run(source)
            finally:
                self.current_filename = previous
            return self.boolean(True)
        raise garnet.LoadError(name, str(self.stack))
