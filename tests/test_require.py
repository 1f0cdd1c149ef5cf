"""Tests for loading files from the load path."""

import pytest

import garnet
import rubytest


def test_missing_file(home):
    vm = rubytest.make_vm(home=home)
    with pytest.raises(garnet.LoadError) as info:
        rubytest.run_code('require "missing_file"', vm)
    assert "missing_file" in info.value.message
    assert info.value.display == "LoadError"
    assert "\tfrom test.rb:in `require'" in info.value.backtrace


def test_rubygems_is_skipped(home):
    vm = rubytest.make_vm(home=home)
    assert rubytest.run_code('require "rubygems"', vm) is vm.boolean(False)


def test_require_runs_file(home):
    (home / "lib" / "greeter.rb").write_text(
        'class Greeter\n  def greet(name)\n    "Hello, " + name\n  end\nend\nputs __FILE__\n'
    )
    vm = rubytest.make_vm(home=home)
    result = rubytest.run_code('require "greeter"\nGreeter.new.greet("Ann")', vm)
    assert result.value == "Hello, Ann"
    assert rubytest.output(vm) == f"{home / 'lib' / 'greeter.rb'}\n"
    assert vm.current_filename == "test.rb"


def test_require_returns_true(home):
    (home / "lib" / "empty.rb").write_text("")
    vm = rubytest.make_vm(home=home)
    assert rubytest.run_code('require "empty"', vm) is vm.boolean(True)


def test_filename_restored_after_error(home):
    (home / "lib" / "broken.rb").write_text("undefined_thing\n")
    vm = rubytest.make_vm(home=home)
    with pytest.raises(garnet.UndefinedNameError):
        rubytest.run_code('require "broken"', vm)
    assert vm.current_filename == "test.rb"
    assert len(vm.stack) == 0
    assert len(vm.locals) == 0


def test_nested_require(home):
    (home / "lib" / "outer.rb").write_text('require "inner"\n$loaded = $loaded + 1\n')
    (home / "lib" / "inner.rb").write_text("$loaded = 1\n")
    vm = rubytest.make_vm(home=home)
    rubytest.run_code('require "outer"', vm)
    assert vm.globals["loaded"].value == 2


def test_load_path_order(home, tmp_path_factory):
    extra = tmp_path_factory.mktemp("extra")
    (extra / "which.rb").write_text('$which = "extra"\n')
    (home / "lib" / "which.rb").write_text('$which = "home"\n')
    vm = rubytest.make_vm(home=home)
    vm.load_path.members.insert(0, vm.string(str(extra)))
    rubytest.run_code('require "which"', vm)
    assert vm.globals["which"].value == "extra"


def test_load_path_push_from_script(home, tmp_path_factory):
    extra = tmp_path_factory.mktemp("pushed")
    (extra / "plugin.rb").write_text("$plugin = true\n")
    vm = rubytest.make_vm(home=home)
    rubytest.run_code(f'$:.push("{extra}")\nrequire "plugin"', vm)
    assert vm.globals["plugin"] is vm.boolean(True)


def test_locals_do_not_leak_into_required_file(home):
    (home / "lib" / "peek.rb").write_text("def peek(x)\n  require \"spy\"\nend\n")
    (home / "lib" / "spy.rb").write_text("x\n")
    vm = rubytest.make_vm(home=home)
    rubytest.run_code('require "peek"', vm)
    with pytest.raises(garnet.UndefinedNameError):
        rubytest.run_code("peek(1)", vm)
