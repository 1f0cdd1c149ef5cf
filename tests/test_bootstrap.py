"""Tests for the builtin class graph built by a new vm."""

import pytest

import garnet
import rubytest


def test_core_cycle(vm):
    cls = vm.lookup_class("Class")
    module = vm.lookup_class("Module")
    obj = vm.lookup_class("Object")
    basic = vm.lookup_class("BasicObject")

    assert cls.cls is cls
    assert module.cls is cls
    assert obj.cls is cls
    assert basic.cls is cls
    assert cls.superclass is module
    assert obj.superclass is basic
    assert basic.superclass is None
    assert module.superclass is None


def test_kernel_included_in_object_and_module(vm):
    kernel = vm.lookup_module("Kernel")
    assert kernel in vm.lookup_class("Object").includes
    assert kernel in vm.lookup_class("Module").includes


def test_kernel_method_on_bare_module(vm):
    result = rubytest.run_code("Comparable.class", vm)
    assert result is vm.lookup_class("Module")
    assert rubytest.run_code("Kernel.nil?", vm) is vm.boolean(False)


def test_class_ancestors(vm):
    names = [m.name for m in garnet.ancestors(vm.lookup_class("Class"))]
    assert names == ["Class", "Module", "Kernel"]
    names = [m.name for m in garnet.ancestors(vm.lookup_class("String"))]
    assert names == ["String", "Comparable", "Object", "Kernel", "BasicObject"]


@rubytest.params(
    "name",
    io="IO", array="Array", hash="Hash", true="True", file="File", false="False",
    nil="Nil", string="String", fixnum="Fixnum", float="Float", symbol="Symbol",
    standard_error="StandardError", name_error="NameError",
    no_method_error="NoMethodError", load_error="LoadError",
    runtime_error="RuntimeError",
)
def test_builtin_classes_registered(key, name, vm):
    cls = vm.lookup_class(name)
    assert cls.name == name
    assert cls.cls is vm.lookup_class("Class")


def test_builtin_modules_registered(vm):
    for name in ("Kernel", "Comparable", "Process"):
        assert vm.lookup_module(name).name == name
    with pytest.raises(KeyError):
        vm.lookup_module("Object")
    with pytest.raises(KeyError):
        vm.lookup_class("Kernel")


def test_second_bootstrap_fails(vm):
    with pytest.raises(garnet.EvalError):
        vm.bootstrap()


def test_vms_are_independent():
    first = rubytest.make_vm()
    second = rubytest.make_vm()
    rubytest.run_code("class OnlyHere\nend", first)
    assert "OnlyHere" in first.classes
    assert "OnlyHere" not in second.classes
    assert first.lookup_class("Object") is not second.lookup_class("Object")


def test_runtime_globals(vm):
    load_path = vm.globals["LOAD_PATH"]
    assert vm.globals[":"] is load_path
    assert [str(m) for m in load_path.members] == ["/nonexistent/garnet-home/lib"]
    assert vm.get("ARGV").members == []
    assert vm.get("nil") is vm.nil
    assert isinstance(vm.globals["stdout"], garnet.IO)


def test_argv():
    vm = rubytest.make_vm(argv=["one", "two"])
    assert [m.value for m in vm.get("ARGV").members] == ["one", "two"]


def test_main_object(vm):
    main = vm.get("main")
    assert main.cls is vm.lookup_class("Object")
    assert vm.text(main) == "main"
    assert rubytest.run_code("self", vm) is main


def test_registry_lookups(vm):
    assert vm.get_class("String") is vm.lookup_class("String")
    assert vm.get("Kernel") is vm.lookup_module("Kernel")
    with pytest.raises(garnet.UndefinedNameError):
        vm.get_class("Missing")
    with pytest.raises(garnet.UndefinedNameError):
        vm.get("missing")
    vm.set("answer", vm.fixnum(42))
    assert rubytest.run_code("answer", vm).value == 42


def test_register_rejects_plain_values(vm):
    with pytest.raises(garnet.EvalError):
        vm.register("oops", vm.fixnum(1))
