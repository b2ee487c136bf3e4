from troll.errors import InterpreterError
from troll.interpreter import Interpreter, compile_script
from troll.operators import hconc, vconcc, vconcl, vconcr
from troll.reporter import CollectingErrorReporter
from troll.values import Text


def run(source):
    interpreter = Interpreter(reporter=CollectingErrorReporter())
    compiled = compile_script(source, interpreter.reporter)
    assert compiled.is_ok, interpreter.reporter.messages
    return interpreter.evaluate(compiled.value.expression)


def test_hconc_pads_shorter_box():
    assert hconc("ab\ncd", "x") == "abx\ncd "
    assert hconc("a\nbcd", "x\ny\nz") == "a  x\nbcdy\n   z"


def test_vconcl_aligns_left():
    assert vconcl("abc", "d") == "abc\nd  "
    assert vconcl("d", "abc") == "d  \nabc"


def test_vconcr_aligns_right():
    assert vconcr("abc", "d") == "abc\n  d"
    assert vconcr("a\nbb", "cccc") == "  a \n  bb\ncccc"


def test_vconcc_centres():
    assert vconcc("abcd", "a") == "abcd\n a  "
    assert vconcc("abc", "a") == "abc\n a "


def test_equal_widths_just_stack():
    assert vconcl("ab", "cd") == "ab\ncd"
    assert vconcr("ab", "cd") == "ab\ncd"
    assert vconcc("ab", "cd") == "ab\ncd"


def test_operators_inside_string_literal():
    assert run('"a<>bcd"').value == Text(" a \nbcd")
    assert run('"ab||cd"').value == Text("abcd")


def test_operators_between_strings():
    assert run('"abc" |> "d"').value == Text("abc\nd  ")
    assert run('"abc" <| "d"').value == Text("abc\n  d")


def test_layout_is_left_associative():
    assert run('"a" || "b" <| "ccc"').value == Text(" ab\nccc")


def test_formatting_values_for_layout():
    assert run("\"Str: \" || '15").value == Text("Str: 15")
    assert run("('{1, 2}) <| ('7)").value == Text("1 2\n  7")


def test_layout_needs_strings():
    assert run('1 || "a"').error is InterpreterError.NEEDS_STRING
    assert run('"a" <> {1}').error is InterpreterError.NEEDS_STRING
