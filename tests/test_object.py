"""Tests for values, modules and classes used directly from Python."""

import garnet


def test_include_ignores_duplicates():
    mod = garnet.Module("Mod")
    other = garnet.Module("Other")
    cls = garnet.Class("Thing")
    cls.include(mod)
    cls.include(other)
    cls.include(mod)
    assert cls.includes == [mod, other]


def test_ancestors_keep_first_position():
    shared = garnet.Module("Shared")
    base = garnet.Class("Base")
    base.include(shared)
    child = garnet.Class("Child", base)
    child.include(shared)
    assert [m.name for m in garnet.ancestors(child)] == ["Child", "Shared", "Base"]


def test_resolve_visibility():
    cls = garnet.Class("Thing")
    hidden = garnet.NativeMethod("hidden", None, lambda vm, receiver: receiver)
    shown = garnet.NativeMethod("shown", None, lambda vm, receiver: receiver)
    cls.add_private_instance_method(hidden)
    cls.add_instance_method(shown)
    value = cls.allocate()
    assert garnet.resolve(value, "shown") is shown
    assert garnet.resolve(value, "hidden") is None
    assert garnet.resolve(value, "hidden", private=True) is hidden
    assert value.private_method("hidden") is hidden
    assert cls.instance_method("hidden") is hidden


def test_private_singleton_methods():
    value = garnet.Value(garnet.Class("Thing"))
    secret = garnet.NativeMethod("secret", None, lambda vm, receiver: receiver)
    value.add_private_method(secret)
    assert value.method("secret") is None
    assert value.private_method("secret") is secret


def test_native_method_execute():
    method = garnet.NativeMethod("echo", "vm", lambda vm, receiver, *args: (vm, receiver, args))
    assert method.execute("self", 1, 2) == ("vm", "self", (1, 2))
    assert repr(method) == "NativeMethod<echo>"


def test_ruby_method_arity():
    params = [garnet.ast.Param("a"), garnet.ast.Param("b", garnet.ast.ConstantInt(1))]
    method = garnet.RubyMethod("f", params, [], None)
    assert method.arity == (1, 2)


def test_singleton_class_has_one_instance():
    cls = garnet.SingletonClass("Only", instance_type=garnet.NilValue)
    assert cls.allocate() is cls.allocate()
    assert cls.new(None) is cls.allocate()
    assert str(cls.allocate()) == "nil"


def test_instance_variables():
    value = garnet.Value(garnet.Class("Thing"))
    assert value.get_instance_variable("x") is None
    value.set_instance_variable("x", 1)
    assert value.get_instance_variable("x") == 1
    assert str(value) == "#<Thing>"


def test_value_equality():
    cls = garnet.Class("String")
    assert garnet.String(cls, "a") == garnet.String(cls, "a")
    assert len({garnet.String(cls, "a"), garnet.String(cls, "a")}) == 1
    assert garnet.Fixnum(cls, 1) != garnet.Float(cls, 1.0)
    assert garnet.Fixnum(cls, 1) == garnet.Fixnum(cls, 1)
