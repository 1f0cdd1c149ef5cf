"""Tests for the call stack and local variable scopes."""

import pytest

import garnet
import rubytest


def test_call_stack_rendering():
    stack = garnet.CallStack()
    with stack.frame("main", "app.rb"):
        with stack.frame("run", "lib/run.rb"):
            assert len(stack) == 2
            assert str(stack) == "\tfrom lib/run.rb:in `run'\n\tfrom app.rb:in `main'"
            assert [f.name for f in stack] == ["run", "main"]
    assert len(stack) == 0
    assert str(stack) == ""


def test_call_stack_pops_on_error():
    stack = garnet.CallStack()
    with pytest.raises(RuntimeError):
        with stack.frame("main", "app.rb"):
            raise RuntimeError("boom")
    assert len(stack) == 0


def test_local_scopes():
    scopes = garnet.LocalVariableStack()
    with pytest.raises(garnet.EvalError):
        scopes.store("x", 1)
    with pytest.raises(KeyError):
        scopes.retrieve("x")
    with scopes.scope():
        scopes.store("x", 1)
        assert scopes.retrieve("x") == 1
        with scopes.scope() as inner:
            assert inner == {}
            with pytest.raises(KeyError):
                scopes.retrieve("x")
        assert scopes.retrieve("x") == 1
    assert len(scopes) == 0


def test_scope_isolation(vm):
    code = """
def inner
  secret
end
def outer(secret)
  inner()
end
"""
    rubytest.run_code(code, vm)
    with pytest.raises(garnet.UndefinedNameError) as info:
        rubytest.run_code("outer(1)", vm)
    assert "secret" in info.value.message


def test_assignment_to_parameter_name_binds_object_space(vm):
    code = """
def bump(n)
  n = n + 1
  n
end
"""
    rubytest.run_code(code, vm)
    assert rubytest.run_code("bump(1)", vm).value == 1
    assert vm.object_space["n"].value == 2


@rubytest.params(
    "code",
    success=("def f(a)\n  a\nend\nf(1)",),
    name_error=("def f(a)\n  missing\nend\nf(1)",),
    no_method=("1.nope",),
    argument_error=("def f(a)\nend\nf()",),
    raised=('raise "Boom"',),
    rescued=('begin\n  raise "Boom"\nrescue Boom\n  1\nend',),
    parse_error=("def (",),
)
def test_stack_balance(key, code, vm):
    assert len(vm.stack) == 0
    assert len(vm.locals) == 0
    try:
        rubytest.run_code(code, vm)
    except (garnet.RubyError, garnet.ParseError):
        pass
    assert len(vm.stack) == 0
    assert len(vm.locals) == 0


def test_backtrace_names_frames(vm):
    code = """
def level_two
  missing
end
def level_one
  level_two()
end
level_one()
"""
    with pytest.raises(garnet.UndefinedNameError) as info:
        rubytest.run_code(code, vm)
    assert info.value.backtrace.splitlines() == [
        "\tfrom test.rb:in `level_two'",
        "\tfrom test.rb:in `level_one'",
        "\tfrom test.rb:in `main'",
    ]
    assert info.value.format().startswith("NameError: undefined local variable or method `missing'")
