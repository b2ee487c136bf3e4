import json

import pytest

from troll.ast import Literal
from troll.ast_json import ast_from_obj, ast_to_obj, script_from_obj, script_to_obj
from troll.interpreter import Interpreter, compile_script
from troll.reporter import CollectingErrorReporter
from troll.values import Collection, Pair, Real, Text

SOURCE = """
function pairup(a, b) = [a, b]
x := 3;
if ?0.5 then "a<>bcd" else
  call pairup(foreach y in 1..x do y * 2, accumulate w := x~1 until w >= {0})
"""


def compiled(source=SOURCE):
    result = compile_script(source, CollectingErrorReporter())
    assert result.is_ok
    return result.value


def test_script_survives_json():
    script = compiled()
    loaded = script_from_obj(json.loads(json.dumps(script_to_obj(script))))
    assert str(loaded.expression) == str(script.expression)
    assert loaded.functions == script.functions


def test_reloaded_script_evaluates_identically():
    script = compiled()
    loaded = script_from_obj(json.loads(json.dumps(script_to_obj(script))))
    results = []
    for s in (script, loaded):
        interpreter = Interpreter(reporter=CollectingErrorReporter(), seed=4)
        interpreter.add(s.functions)
        results.append([interpreter.evaluate(s.expression).value for _ in range(10)])
    assert results[0] == results[1]


def test_tokens_keep_positions():
    script = compiled("1 +\n  2")
    obj = ast_to_obj(script.expression)
    assert obj["op"]["line"] == 1
    assert obj["op"]["column"] == 3
    assert ast_from_obj(obj).op == script.expression.op


def test_literal_values():
    for value in (Collection.of(1, 2), Real(0.5), Text("a\nb"), Pair(Collection.of(1), Text("x"))):
        assert ast_from_obj(ast_to_obj(Literal(value))) == Literal(value)


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({"type": "Nope"})
    with pytest.raises(ValueError):
        script_from_obj({"type": "Literal"})


def test_unsupported_object():
    with pytest.raises(TypeError):
        ast_to_obj(object())


def test_every_statement_kind_survives_json():
    obj = script_to_obj(compiled())
    kinds = set()

    def walk(node):
        if isinstance(node, dict):
            kinds.add(node.get("type"))
            for child in node.values():
                walk(child)
        elif isinstance(node, list):
            for child in node:
                walk(child)

    walk(obj)
    assert {"Binding", "If", "Foreach", "Accumulate", "FunctionCall", "Variable", "TupleLiteral"} <= kinds
