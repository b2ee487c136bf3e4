import random

from troll.errors import InterpreterError
from troll.interpreter import Interpreter, compile_script
from troll.reporter import CollectingErrorReporter
from troll.values import Collection


def compiled(source):
    result = compile_script(source, CollectingErrorReporter())
    assert result.is_ok
    return result.value.expression


def test_question_yields_one_or_nothing():
    expr = compiled("?0.3")
    interpreter = Interpreter(reporter=CollectingErrorReporter(), seed=17)
    hits = 0
    for _ in range(1000):
        result = interpreter.evaluate(expr).value
        assert result in (Collection.of(1), Collection())
        hits += len(result)
    assert 200 < hits < 400


def test_question_needs_probability_strictly_between_zero_and_one():
    interpreter = Interpreter(reporter=CollectingErrorReporter())
    for source in ("?0.0", "?0."):
        assert interpreter.evaluate(compiled(source)).error is InterpreterError.NEEDS_REAL, source


def test_injected_rng_drives_choice():
    expr = compiled("{1, 2, 3, 4, 5, 6} pick 3")
    first = Interpreter(reporter=CollectingErrorReporter(), rng=random.Random(99))
    second = Interpreter(reporter=CollectingErrorReporter(), rng=random.Random(99))
    for _ in range(20):
        assert first.evaluate(expr).value == second.evaluate(expr).value


def test_if_with_question():
    expr = compiled('if ?0.5 then "heads" else "tails"')
    interpreter = Interpreter(reporter=CollectingErrorReporter(), seed=1)
    seen = {str(interpreter.evaluate(expr).value) for _ in range(100)}
    assert seen == {"heads", "tails"}
