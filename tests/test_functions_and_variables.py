from troll.environment import Symbol
from troll.errors import InterpreterError
from troll.interpreter import Interpreter, compile_script
from troll.parser import parse_args
from troll.reporter import CollectingErrorReporter
from troll.scanner import scan
from troll.values import Collection


def run(source, seed=0, interpreter=None):
    if interpreter is None:
        interpreter = Interpreter(reporter=CollectingErrorReporter(), seed=seed)
    compiled = compile_script(source, interpreter.reporter)
    assert compiled.is_ok, interpreter.reporter.messages
    interpreter.add(compiled.value.functions)
    return interpreter.evaluate(compiled.value.expression)


def test_function_round_trip():
    for seed in range(20):
        result = run("function myroll(N,M) = N d M call myroll(5,10)", seed).value
        assert len(result) == 5
        assert all(1 <= v <= 10 for v in result)


def test_functions_may_follow_the_expression():
    assert run("call double(4) function double(x) = x * 2").value == Collection.of(8)


def test_recursion():
    source = "function down(n) = if n > 0 then {n, call down(n - 1)} else {} call down(4)"
    assert run(source).value == Collection.of(1, 2, 3, 4)


def test_later_arguments_see_earlier_parameters():
    assert run("function f(a, b) = b call f(3, a + 1)").value == Collection.of(4)


def test_parameters_are_popped_after_call():
    interpreter = Interpreter(reporter=CollectingErrorReporter())
    run("function f(a) = a call f(1)", interpreter=interpreter)
    assert interpreter.lookup("a") is None
    assert len(interpreter.stack) == 0


def test_function_body_sees_caller_bindings():
    assert run("function f() = y y := 7; call f()").value == Collection.of(7)


def test_incorrect_argument_count():
    assert run("function f(a) = a call f(1, 2)").error is InterpreterError.INCORRECT_ARGUMENT_COUNT
    assert run("function f(a) = a call f()").error is InterpreterError.INCORRECT_ARGUMENT_COUNT


def test_unknown_function():
    assert run("call nope(1)").error is InterpreterError.UNKNOWN_FUNCTION


def test_functions_persist_across_evaluations():
    interpreter = Interpreter(reporter=CollectingErrorReporter())
    run("function f() = 42 1", interpreter=interpreter)
    assert run("call f()", interpreter=interpreter).value == Collection.of(42)


def test_unknown_variable():
    reporter = CollectingErrorReporter()
    interpreter = Interpreter(reporter=reporter)
    assert run("N d6", interpreter=interpreter).error is InterpreterError.UNKNOWN_VARIABLE
    assert reporter.errors[0][:2] == (-1, -1)


def test_bound_variable():
    result = run("N := 5; N d6").value
    assert len(result) == 5


def test_variable_default():
    assert run("x ~ 3").value == Collection.of(3)
    interpreter = Interpreter(reporter=CollectingErrorReporter())
    interpreter.push(Symbol("x", Collection.of(9)))
    assert run("x ~ 3", interpreter=interpreter).value == Collection.of(9)


def test_default_is_only_evaluated_when_needed():
    interpreter = Interpreter(reporter=CollectingErrorReporter())
    interpreter.push(Symbol("x", Collection.of(9)))
    assert run("x ~ (1 / 0)", interpreter=interpreter).value == Collection.of(9)


def test_seeding_variables_from_arguments():
    interpreter = Interpreter(reporter=CollectingErrorReporter())
    interpreter.push(parse_args(scan("x=2 y=3").value).value)
    assert run("x * y", interpreter=interpreter).value == Collection.of(6)
    assert interpreter.remove("x")
    assert run("x", interpreter=interpreter).error is InterpreterError.UNKNOWN_VARIABLE
    assert not interpreter.remove("x")


def test_remove_takes_innermost_binding():
    interpreter = Interpreter(reporter=CollectingErrorReporter())
    interpreter.push([Symbol("x", Collection.of(1)), Symbol("x", Collection.of(2))])
    interpreter.remove("x")
    assert interpreter.lookup("x") == Collection.of(1)
