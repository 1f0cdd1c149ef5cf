"""Tests for method lookup order and visibility."""

import pytest

import garnet
import rubytest

HIERARCHY = """
class Base
  def who
    "base"
  end
  def from_base
    "base only"
  end
end

module Mixin
  def who
    "mixin"
  end
  def from_mixin
    "mixin only"
  end
end

class Child < Base
  include Mixin
end
"""


def test_module_wins_over_superclass(vm):
    rubytest.run_code(HIERARCHY, vm)
    assert rubytest.run_code("Child.new.who", vm).value == "mixin"
    assert rubytest.run_code("Child.new.from_base", vm).value == "base only"
    assert rubytest.run_code("Child.new.from_mixin", vm).value == "mixin only"


def test_class_wins_over_module(vm):
    rubytest.run_code(HIERARCHY, vm)
    rubytest.run_code('class Child\n  def who\n    "child"\n  end\nend', vm)
    assert rubytest.run_code("Child.new.who", vm).value == "child"


def test_last_included_module_wins(vm):
    code = """
module First
  def name_of
    "first"
  end
end
module Second
  def name_of
    "second"
  end
end
class Both
  include First
  include Second
end
"""
    rubytest.run_code(code, vm)
    assert rubytest.run_code("Both.new.name_of", vm).value == "second"
    names = [m.name for m in garnet.ancestors(vm.lookup_class("Both"))]
    assert names[:3] == ["Both", "Second", "First"]


def test_nested_module_includes(vm):
    code = """
module Inner
  def deep
    "inner"
  end
end
module Outer
  include Inner
end
class User
  include Outer
end
"""
    rubytest.run_code(code, vm)
    assert rubytest.run_code("User.new.deep", vm).value == "inner"


def test_resolve_helper(vm):
    rubytest.run_code(HIERARCHY, vm)
    child = vm.lookup_class("Child").allocate()
    assert garnet.resolve(child, "who") is vm.lookup_module("Mixin").instance_methods["who"]
    assert garnet.resolve(child, "missing") is None
    assert child.method("from_base") is vm.lookup_class("Base").instance_methods["from_base"]


def test_singleton_methods_come_first(vm):
    rubytest.run_code(HIERARCHY, vm)
    child = vm.lookup_class("Child").new(vm)
    child.add_method(garnet.NativeMethod("who", vm, lambda vm, receiver: vm.string("singleton")))
    assert vm.text(vm.call(child, "who")) == "singleton"


def test_private_needs_implicit_self(vm):
    rubytest.run_code('def helper\n  "help"\nend', vm)
    assert rubytest.run_code("helper()", vm).value == "help"
    with pytest.raises(garnet.NoMethodError) as info:
        rubytest.run_code("self.helper", vm)
    assert "helper" in info.value.message


def test_top_level_def_is_private_kernel_method(vm):
    rubytest.run_code("def shout(x)\n  x\nend", vm)
    kernel = vm.lookup_module("Kernel")
    assert "shout" in kernel.private_instance_methods
    assert "shout" not in kernel.instance_methods
    main = vm.get("main")
    assert main.private_method("shout") is kernel.private_instance_methods["shout"]
    assert main.method("shout") is None


def test_private_method_visible_inside_classes(vm):
    code = """
def helper
  "from kernel"
end
class Widget
  def run
    helper()
  end
end
Widget.new.run
"""
    assert rubytest.run_code(code, vm).value == "from kernel"


def test_module_function_with_self(vm):
    code = """
module Tools
  def self.version
    3
  end
  def mixed
    "instance"
  end
end
"""
    rubytest.run_code(code, vm)
    tools = vm.lookup_module("Tools")
    assert "version" in tools.methods
    assert "mixed" in tools.instance_methods
    assert rubytest.run_code("Tools.version", vm).value == 3
    with pytest.raises(garnet.NoMethodError):
        rubytest.run_code("Tools.mixed", vm)


def test_class_def_with_self_is_instance_method(vm):
    rubytest.run_code("class Maker\n  def self.build\n    1\n  end\nend", vm)
    assert "build" in vm.lookup_class("Maker").instance_methods
    assert rubytest.run_code("Maker.new.build", vm).value == 1


def test_no_method_error_details(vm):
    rubytest.run_code("class Foo\nend", vm)
    with pytest.raises(garnet.NoMethodError) as info:
        rubytest.run_code("Foo.new.nope", vm)
    err = info.value
    assert err.name == "nope"
    assert err.class_name == "Foo"
    assert err.receiver == "#<Foo>"
    assert err.display == "NoMethodError"


def test_call_on_nil(vm):
    with pytest.raises(garnet.NoMethodError) as info:
        rubytest.run_code("$unset.length", vm)
    assert info.value.receiver == "nil"
    assert info.value.class_name == "Nil"
    assert "undefined method `length' for nil:Nil" in str(info.value)


def test_nil_target_skips_resolution(vm):
    # Nil defines to_s, but a call with a nil target is never resolved
    with pytest.raises(garnet.NoMethodError) as info:
        rubytest.run_code("$missing.to_s", vm)
    assert info.value.name == "to_s"
    assert info.value.receiver == "nil"
