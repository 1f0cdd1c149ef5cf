"""Builtin value types and their native methods.

Each builtin class gets a Python type for its instances and an installer
that fills the class (or module) method tables with NativeMethods. The
vm creates the classes during bootstrap and calls the installers.

Native functions are called as `func(vm, receiver, *args)` and return a
Value. They raise `garnet.RubyError` subclasses for script level failures
so rescue clauses can see them.
"""

__all__ = [
    "TrueValue",
    "FalseValue",
    "NilValue",
    "Number",
    "Fixnum",
    "Float",
    "String",
    "Symbol",
    "Array",
    "Hash",
    "IO",
    "install_builtins",
]

import os
import pathlib

import garnet


class TrueValue(garnet.Value):
    def __str__(self):
        return "true"


class FalseValue(garnet.Value):
    def __str__(self):
        return "false"


class NilValue(garnet.Value):
    def __str__(self):
        return "nil"


class Number(garnet.Value):
    """Numeric value. Equal numbers of one type hash alike for Hash keys."""

    def __init__(self, cls, value=0):
        super().__init__(cls)
        self.value = value

    def __str__(self):
        return str(self.value)

    def __eq__(self, other):
        return type(other) is type(self) and other.value == self.value

    def __hash__(self):
        return hash((type(self), self.value))


class Fixnum(Number):
    pass


class Float(Number):
    def __init__(self, cls, value=0.0):
        super().__init__(cls, value)

    def __str__(self):
        return repr(float(self.value))


class String(garnet.Value):
    """Mutable text value compared by contents."""

    def __init__(self, cls, value=""):
        super().__init__(cls)
        self.value = value

    def __str__(self):
        return self.value

    def __eq__(self, other):
        return isinstance(other, String) and other.value == self.value

    def __hash__(self):
        return hash(self.value)


class Symbol(garnet.Value):
    """Interned name. The vm hands out one Symbol per name."""

    def __init__(self, cls, name=""):
        super().__init__(cls)
        self.name = name

    def __str__(self):
        return self.name


class Array(garnet.Value):
    def __init__(self, cls, members=None):
        super().__init__(cls)
        self.members = list(members) if members else []

    def __str__(self):
        return "[" + ", ".join(str(m) for m in self.members) + "]"


class Hash(garnet.Value):
    """Insertion ordered mapping from Value keys to Values."""

    def __init__(self, cls):
        super().__init__(cls)
        self.pairs = {}

    def __str__(self):
        return "{" + ", ".join(f"{k}=>{v}" for k, v in self.pairs.items()) + "}"


class IO(garnet.Value):
    def __init__(self, cls, stream=None):
        super().__init__(cls)
        self.stream = stream


def install_builtins(vm):
    """Fill the method tables of every bootstrapped class and module.

    Args:
        vm: (garnet.VM) Runtime whose `classes` and `modules` registries
            already hold the builtin classes
    """
    classes, modules = vm.classes, vm.modules
    _install_kernel(vm, modules["Kernel"])
    _install_basic_object(vm, classes["BasicObject"])
    _install_module(vm, classes["Module"])
    _install_class(vm, classes["Class"])
    _install_comparable(vm, modules["Comparable"])
    _install_process(vm, modules["Process"])
    _install_numeric(vm, classes["Fixnum"])
    _install_numeric(vm, classes["Float"])
    _install_string(vm, classes["String"])
    _install_symbol(vm, classes["Symbol"])
    _install_array(vm, classes["Array"])
    _install_hash(vm, classes["Hash"])
    _install_io(vm, classes["IO"])
    _install_file(vm, classes["File"])
    _install_singletons(vm)


def _define(vm, table, name, func):
    table[name] = garnet.NativeMethod(name, vm, func)


def _text(vm, arg):
    """Python text of a String or Symbol argument."""
    match arg:
        case String():
            return arg.value
        case Symbol():
            return arg.name
    raise garnet.RaisedError(
        f"no implicit conversion of {arg.cls.name} into String", str(vm.stack), kind="TypeError"
    )


def _write_lines(vm, stream, args):
    if not args:
        stream.write("\n")
    for arg in args:
        if isinstance(arg, Array):
            _write_lines(vm, stream, arg.members)
            continue
        line = vm.text(arg)
        stream.write(line if line.endswith("\n") else line + "\n")
    return vm.nil


def _install_kernel(vm, kernel):
    private = kernel.private_instance_methods
    public = kernel.instance_methods

    def puts(vm, receiver, *args):
        return _write_lines(vm, vm.stdout, args)

    def print_(vm, receiver, *args):
        for arg in args:
            vm.stdout.write(vm.text(arg))
        return vm.nil

    def p(vm, receiver, *args):
        for arg in args:
            vm.stdout.write(vm.inspect(arg) + "\n")
        if not args:
            return vm.nil
        if len(args) == 1:
            return args[0]
        return vm.array(args)

    def raise_(vm, receiver, *args):
        backtrace = str(vm.stack)
        match args:
            case ():
                raise garnet.RaisedError("unhandled exception", backtrace, kind="RuntimeError")
            case (String() as message,):
                raise garnet.RaisedError(message.value, backtrace)
            case (garnet.Class() as klass,):
                raise garnet.RaisedError(klass.name, backtrace, kind=klass.name)
            case (garnet.Class() as klass, message):
                raise garnet.RaisedError(vm.text(message), backtrace, kind=klass.name)
        raise garnet.RaisedError("exception class/object expected", backtrace, kind="TypeError")

    _define(vm, private, "puts", puts)
    _define(vm, private, "print", print_)
    _define(vm, private, "p", p)
    _define(vm, private, "raise", raise_)

    def not_equal(vm, receiver, other):
        return vm.boolean(not vm.truthy(vm.call(receiver, "==", other)))

    def respond_to(vm, receiver, name):
        return vm.boolean(garnet.resolve(receiver, _text(vm, name)) is not None)

    def is_a(vm, receiver, klass):
        return vm.boolean(any(klass is mod for mod in garnet.ancestors(receiver.cls)))

    def ivar_get(vm, receiver, name):
        value = receiver.get_instance_variable(_text(vm, name).lstrip("@"))
        return vm.nil if value is None else value

    def ivar_set(vm, receiver, name, value):
        receiver.set_instance_variable(_text(vm, name).lstrip("@"), value)
        return value

    def send(vm, receiver, name, *args):
        return vm.call(receiver, _text(vm, name), *args, private=True)

    _define(vm, public, "class", lambda vm, receiver: receiver.cls)
    _define(vm, public, "to_s", lambda vm, receiver: vm.string(str(receiver)))
    _define(vm, public, "inspect", lambda vm, receiver: vm.call(receiver, "to_s"))
    _define(vm, public, "==", lambda vm, receiver, other: vm.boolean(receiver is other))
    _define(vm, public, "!=", not_equal)
    _define(vm, public, "nil?", lambda vm, receiver: vm.boolean(receiver is vm.nil))
    _define(vm, public, "respond_to?", respond_to)
    _define(vm, public, "is_a?", is_a)
    _define(vm, public, "object_id", lambda vm, receiver: vm.fixnum(id(receiver)))
    _define(vm, public, "instance_variable_get", ivar_get)
    _define(vm, public, "instance_variable_set", ivar_set)
    _define(vm, public, "send", send)


def _install_basic_object(vm, basic_object):
    _define(vm, basic_object.private_instance_methods, "initialize", lambda vm, receiver, *args: vm.nil)
    _define(vm, basic_object.instance_methods, "!", lambda vm, receiver: vm.boolean(not vm.truthy(receiver)))


def _install_module(vm, module_class):
    """Methods available on every module and class value."""
    table = module_class.instance_methods

    def include(vm, receiver, *mods):
        for mod in mods:
            if not isinstance(mod, garnet.Module) or isinstance(mod, garnet.Class):
                raise garnet.RaisedError(
                    f"wrong argument type {mod.cls.name} (expected Module)", str(vm.stack), kind="TypeError"
                )
            receiver.include(mod)
        return receiver

    def instance_methods(vm, receiver):
        names = []
        for mod in garnet.ancestors(receiver):
            names.extend(n for n in mod.instance_methods if n not in names)
        return vm.array(vm.symbol(n) for n in names)

    def attr_reader(vm, receiver, *names):
        for name in names:
            attr = _text(vm, name)
            _define(vm, receiver.instance_methods, attr, _reader(attr))
        return vm.nil

    def includes(vm, receiver, mod):
        return vm.boolean(any(mod is m for m in garnet.ancestors(receiver)[1:] if not isinstance(m, garnet.Class)))

    _define(vm, table, "include", include)
    _define(vm, table, "name", lambda vm, receiver: vm.string(receiver.name))
    _define(vm, table, "to_s", lambda vm, receiver: vm.string(receiver.name))
    _define(vm, table, "ancestors", lambda vm, receiver: vm.array(garnet.ancestors(receiver)))
    _define(vm, table, "instance_methods", instance_methods)
    _define(vm, table, "attr_reader", attr_reader)
    _define(vm, table, "include?", includes)


def _install_class(vm, class_class):
    table = class_class.instance_methods

    def superclass(vm, receiver):
        return vm.nil if receiver.superclass is None else receiver.superclass

    _define(vm, table, "new", lambda vm, receiver, *args: receiver.new(vm, *args))
    _define(vm, table, "superclass", superclass)


def _install_comparable(vm, comparable):
    """Comparison operators built on the receiver's `<=>`."""
    table = comparable.instance_methods

    def compare(vm, receiver, other):
        result = vm.call(receiver, "<=>", other)
        if not isinstance(result, Fixnum):
            raise garnet.ArgumentError(
                f"comparison of {receiver.cls.name} with {vm.inspect(other)} failed", str(vm.stack)
            )
        return result.value

    def comparison(test):
        return lambda vm, receiver, other: vm.boolean(test(compare(vm, receiver, other)))

    def between(vm, receiver, low, high):
        return vm.boolean(compare(vm, receiver, low) >= 0 and compare(vm, receiver, high) <= 0)

    _define(vm, table, "<", comparison(lambda c: c < 0))
    _define(vm, table, "<=", comparison(lambda c: c <= 0))
    _define(vm, table, ">", comparison(lambda c: c > 0))
    _define(vm, table, ">=", comparison(lambda c: c >= 0))
    _define(vm, table, "==", comparison(lambda c: c == 0))
    _define(vm, table, "between?", between)


def _install_process(vm, process):
    _define(vm, process.methods, "pid", lambda vm, receiver: vm.fixnum(os.getpid()))


def _reader(attr):
    """Native getter for the instance variable `attr`."""

    def reader(vm, instance):
        value = instance.get_instance_variable(attr)
        return vm.nil if value is None else value

    return reader


def _number(vm, receiver, other):
    """Python value of a numeric operand."""
    if not isinstance(other, Number):
        name = "nil" if other is vm.nil else other.cls.name
        raise garnet.RaisedError(
            f"{name} can't be coerced into {receiver.cls.name}", str(vm.stack), kind="TypeError"
        )
    return other.value


def _install_numeric(vm, numeric):
    """Arithmetic shared by Fixnum and Float.

    Integer results stay Fixnum, anything touching a Float becomes one.
    """
    table = numeric.instance_methods

    def wrap(value):
        return vm.fixnum(value) if isinstance(value, int) else vm.float(value)

    def divide(vm, receiver, other):
        right = _number(vm, receiver, other)
        if right == 0 and isinstance(right, int) and isinstance(receiver.value, int):
            raise garnet.RaisedError("divided by 0", str(vm.stack), kind="ZeroDivisionError")
        if isinstance(right, int) and isinstance(receiver.value, int):
            return wrap(receiver.value // right)
        if right == 0:
            return vm.float(float("nan") if receiver.value == 0 else float("inf") * receiver.value)
        return wrap(receiver.value / right)

    def modulo(vm, receiver, other):
        right = _number(vm, receiver, other)
        if right == 0:
            raise garnet.RaisedError("divided by 0", str(vm.stack), kind="ZeroDivisionError")
        return wrap(receiver.value % right)

    def arithmetic(op):
        return lambda vm, receiver, other: wrap(op(receiver.value, _number(vm, receiver, other)))

    def comparison(op):
        return lambda vm, receiver, other: vm.boolean(op(receiver.value, _number(vm, receiver, other)))

    def spaceship(vm, receiver, other):
        if not isinstance(other, Number):
            return vm.nil
        return vm.fixnum((receiver.value > other.value) - (receiver.value < other.value))

    def equal(vm, receiver, other):
        return vm.boolean(isinstance(other, Number) and receiver.value == other.value)

    _define(vm, table, "+", arithmetic(lambda a, b: a + b))
    _define(vm, table, "-", arithmetic(lambda a, b: a - b))
    _define(vm, table, "*", arithmetic(lambda a, b: a * b))
    _define(vm, table, "/", divide)
    _define(vm, table, "%", modulo)
    _define(vm, table, "<", comparison(lambda a, b: a < b))
    _define(vm, table, "<=", comparison(lambda a, b: a <= b))
    _define(vm, table, ">", comparison(lambda a, b: a > b))
    _define(vm, table, ">=", comparison(lambda a, b: a >= b))
    _define(vm, table, "==", equal)
    _define(vm, table, "<=>", spaceship)
    _define(vm, table, "to_s", lambda vm, receiver: vm.string(str(receiver)))
    _define(vm, table, "to_i", lambda vm, receiver: vm.fixnum(int(receiver.value)))
    _define(vm, table, "to_f", lambda vm, receiver: vm.float(float(receiver.value)))


def _install_string(vm, string):
    table = string.instance_methods
    string.include(vm.modules["Comparable"])

    def concat(vm, receiver, other):
        if not isinstance(other, String):
            raise garnet.RaisedError(
                f"no implicit conversion of {other.cls.name} into String", str(vm.stack), kind="TypeError"
            )
        return vm.string(receiver.value + other.value)

    def repeat(vm, receiver, count):
        if not isinstance(count, Fixnum) or count.value < 0:
            raise garnet.ArgumentError(f"invalid repeat count {vm.inspect(count)}", str(vm.stack))
        return vm.string(receiver.value * count.value)

    def spaceship(vm, receiver, other):
        if not isinstance(other, String):
            return vm.nil
        return vm.fixnum((receiver.value > other.value) - (receiver.value < other.value))

    def inspect(vm, receiver):
        escaped = receiver.value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\t", "\\t")
        return vm.string(f'"{escaped}"')

    _define(vm, table, "+", concat)
    _define(vm, table, "*", repeat)
    _define(vm, table, "==", lambda vm, receiver, other: vm.boolean(receiver == other))
    _define(vm, table, "<=>", spaceship)
    _define(vm, table, "length", lambda vm, receiver: vm.fixnum(len(receiver.value)))
    _define(vm, table, "upcase", lambda vm, receiver: vm.string(receiver.value.upper()))
    _define(vm, table, "downcase", lambda vm, receiver: vm.string(receiver.value.lower()))
    _define(vm, table, "to_s", lambda vm, receiver: receiver)
    _define(vm, table, "to_sym", lambda vm, receiver: vm.symbol(receiver.value))
    _define(vm, table, "inspect", inspect)


def _install_symbol(vm, symbol):
    table = symbol.instance_methods
    _define(vm, table, "to_s", lambda vm, receiver: vm.string(receiver.name))
    _define(vm, table, "to_sym", lambda vm, receiver: receiver)
    _define(vm, table, "inspect", lambda vm, receiver: vm.string(f":{receiver.name}"))


def _install_array(vm, array):
    table = array.instance_methods

    def first(vm, receiver):
        return receiver.members[0] if receiver.members else vm.nil

    def last(vm, receiver):
        return receiver.members[-1] if receiver.members else vm.nil

    def push(vm, receiver, *values):
        receiver.members.extend(values)
        return receiver

    def at(vm, receiver, index):
        pos = _number(vm, receiver, index)
        if -len(receiver.members) <= pos < len(receiver.members):
            return receiver.members[int(pos)]
        return vm.nil

    def equal(vm, receiver, other):
        if not isinstance(other, Array) or len(other.members) != len(receiver.members):
            return vm.boolean(False)
        return vm.boolean(
            all(vm.truthy(vm.call(a, "==", b)) for a, b in zip(receiver.members, other.members))
        )

    def includes(vm, receiver, value):
        return vm.boolean(any(vm.truthy(vm.call(m, "==", value)) for m in receiver.members))

    def join(vm, receiver, separator=None):
        sep = "" if separator is None else _text(vm, separator)
        return vm.string(sep.join(vm.text(m) for m in receiver.members))

    def inspect(vm, receiver):
        return vm.string("[" + ", ".join(vm.inspect(m) for m in receiver.members) + "]")

    _define(vm, table, "length", lambda vm, receiver: vm.fixnum(len(receiver.members)))
    _define(vm, table, "size", lambda vm, receiver: vm.fixnum(len(receiver.members)))
    _define(vm, table, "first", first)
    _define(vm, table, "last", last)
    _define(vm, table, "push", push)
    _define(vm, table, "<<", push)
    _define(vm, table, "at", at)
    _define(vm, table, "==", equal)
    _define(vm, table, "include?", includes)
    _define(vm, table, "join", join)
    _define(vm, table, "to_s", inspect)
    _define(vm, table, "inspect", inspect)


def _install_hash(vm, hash_class):
    table = hash_class.instance_methods

    def fetch(vm, receiver, key, *default):
        if key in receiver.pairs:
            return receiver.pairs[key]
        if default:
            return default[0]
        raise garnet.RaisedError(f"key not found: {vm.inspect(key)}", str(vm.stack), kind="KeyError")

    def store(vm, receiver, key, value):
        receiver.pairs[key] = value
        return value

    def inspect(vm, receiver):
        pairs = ", ".join(f"{vm.inspect(k)}=>{vm.inspect(v)}" for k, v in receiver.pairs.items())
        return vm.string("{" + pairs + "}")

    _define(vm, table, "fetch", fetch)
    _define(vm, table, "store", store)
    _define(vm, table, "key?", lambda vm, receiver, key: vm.boolean(key in receiver.pairs))
    _define(vm, table, "keys", lambda vm, receiver: vm.array(receiver.pairs.keys()))
    _define(vm, table, "values", lambda vm, receiver: vm.array(receiver.pairs.values()))
    _define(vm, table, "size", lambda vm, receiver: vm.fixnum(len(receiver.pairs)))
    _define(vm, table, "to_s", inspect)
    _define(vm, table, "inspect", inspect)


def _install_io(vm, io):
    table = io.instance_methods

    def print_(vm, receiver, *args):
        for arg in args:
            receiver.stream.write(vm.text(arg))
        return vm.nil

    def write(vm, receiver, *args):
        count = 0
        for arg in args:
            text = vm.text(arg)
            receiver.stream.write(text)
            count += len(text)
        return vm.fixnum(count)

    _define(vm, table, "puts", lambda vm, receiver, *args: _write_lines(vm, receiver.stream, args))
    _define(vm, table, "print", print_)
    _define(vm, table, "write", write)


def _install_file(vm, file):
    """File is used through class methods on the File class value."""
    table = file.methods

    def read(vm, receiver, path):
        name = _text(vm, path)
        try:
            return vm.string(pathlib.Path(name).read_text(encoding="utf-8"))
        except OSError as e:
            raise garnet.RaisedError(
                f"No such file or directory @ rb_sysopen - {name}", str(vm.stack), kind="Errno::ENOENT"
            ) from e

    def join(vm, receiver, *parts):
        return vm.string(os.path.join(*(_text(vm, part) for part in parts)) if parts else "")

    _define(vm, table, "read", read)
    _define(vm, table, "exist?", lambda vm, receiver, path: vm.boolean(os.path.exists(_text(vm, path))))
    _define(vm, table, "join", join)
    _define(vm, table, "basename", lambda vm, receiver, path: vm.string(os.path.basename(_text(vm, path))))
    _define(vm, table, "dirname", lambda vm, receiver, path: vm.string(os.path.dirname(_text(vm, path)) or "."))


def _install_singletons(vm):
    """Display and equality for true, false and nil."""
    for name in ("True", "False", "Nil"):
        table = vm.classes[name].instance_methods
        _define(vm, table, "to_s", lambda vm, receiver: vm.string(str(receiver)))
        _define(vm, table, "inspect", lambda vm, receiver: vm.string(str(receiver)))
    _define(vm, vm.classes["Nil"].instance_methods, "to_s", lambda vm, receiver: vm.string(""))
    _define(vm, vm.classes["Nil"].instance_methods, "to_a", lambda vm, receiver: vm.array(()))
