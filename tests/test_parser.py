from troll.ast import Binary, BinarySchema, Binding, TupleLiteral, Unary, UnarySchema, Variable
from troll.environment import Symbol
from troll.errors import ParserError
from troll.parser import parse, parse_args
from troll.reporter import CollectingErrorReporter
from troll.scanner import scan
from troll.values import Collection


def parse_source(source):
    reporter = CollectingErrorReporter()
    tokens = scan(source, reporter)
    assert tokens.is_ok
    return parse(tokens.value, reporter), reporter


def tree(source):
    result, reporter = parse_source(source)
    assert result.is_ok, reporter.messages
    return result.value.expression


def parse_error(source):
    result, reporter = parse_source(source)
    assert not result.is_ok
    return result.error


def test_left_associative_arithmetic():
    assert str(tree("5 - 1 + 4")) == "(+ (- 5 1) 4)"
    assert str(tree("2 * 3 + 4")) == "(+ (* 2 3) 4)"
    assert str(tree("2 + 3 * 4")) == "(+ 2 (* 3 4))"


def test_dice_forms():
    assert str(tree("3d6")) == "(d 3 6)"
    assert str(tree("d6")) == "(d 6)"
    assert str(tree("d d6")) == "(d (d 6))"
    assert str(tree("2d6d4")) == "(d (d 2 6) 4)"


def test_prefix_operators_bind_tighter_than_arithmetic():
    assert str(tree("sum 3d6 + 1")) == "(+ (sum (d 3 6)) 1)"
    assert str(tree("-3d6")) == "(- (d 3 6))"


def test_comparison_is_right_recursive():
    assert str(tree("a = b = c")) == "(= a (= b c))"


def test_range_does_not_chain():
    assert str(tree("1..6")) == "(.. 1 6)"
    assert parse_error("1..3..5") is ParserError.UNEXPECTED_TOKEN


def test_schemas_follow_operators():
    assert tree("{1, 2} pick 1").schema is BinarySchema.COLLECTION_SINGLETON
    assert tree("{1, 2} drop {1}").schema is BinarySchema.COLLECTION_COLLECTION
    assert tree("3 < {1, 2}").schema is BinarySchema.SINGLETON_COLLECTION
    assert tree("1 + 2").schema is BinarySchema.SINGLETON_SINGLETON
    assert tree('"a" || "b"').schema is BinarySchema.STRING_STRING
    assert tree("3 # d6").schema is BinarySchema.DEFERRED
    assert tree("3 ' d6").schema is BinarySchema.DEFERRED


def test_unary_schemas():
    assert tree("count {1}").schema is UnarySchema.COLLECTION
    assert tree("sgn 3").schema is UnarySchema.SINGLETON
    assert tree("'d6").schema is UnarySchema.DEFERRED
    assert tree("?0.5").schema is UnarySchema.REAL
    assert tree("%1 [1, 2]").schema is UnarySchema.TUPLE


def test_least_takes_two_operands():
    expr = tree("least 2 4d6")
    assert isinstance(expr, Binary)
    assert expr.schema is BinarySchema.SINGLETON_COLLECTION
    assert str(expr) == "(least 2 (d 4 6))"


def test_binding():
    expr = tree("x := 3; x + 1")
    assert isinstance(expr, Binding)
    assert expr.identifier == "x"
    assert str(expr.use) == "(+ x 1)"


def test_variable_default():
    expr = tree("x ~ 5")
    assert isinstance(expr, Variable)
    assert expr.identifier == "x"
    assert str(expr.default) == "5"


def test_default_needs_variable():
    assert parse_error("3 ~ 4") is ParserError.NEEDS_VARIABLE


def test_missing_loop_condition():
    assert parse_error("repeat x := d6 5") is ParserError.MISSING_CONDITION
    assert parse_error("accumulate x := d6") is ParserError.MISSING_CONDITION


def test_if_requires_then_and_else():
    assert parse_error("if {1} 2 else 3") is ParserError.UNEXPECTED_TOKEN
    assert parse_error("if {1} then 2") is ParserError.UNEXPECTED_TOKEN


def test_functions_before_and_after_expression():
    result, _ = parse_source("function f(x) = x + 1 call f(2) function g() = 3")
    script = result.value
    assert sorted(script.functions) == ["f", "g"]
    assert script.functions["f"].parameters == ("x",)
    assert script.functions["g"].arity == 0


def test_function_redefinition():
    assert parse_error("function f(x) = x function f(y) = y call f(1)") is ParserError.INVALID_REDEFINITION


def test_tuple_needs_two_elements():
    assert isinstance(tree("[1, 2]"), TupleLiteral)
    assert parse_error("[1, 2, 3]") is ParserError.UNEXPECTED_TOKEN
    assert parse_error("[1]") is ParserError.UNEXPECTED_TOKEN


def test_trailing_tokens_are_reported_at_their_position():
    result, reporter = parse_source("1 2")
    assert result.error is ParserError.UNEXPECTED_TOKEN
    assert reporter.errors[0][:2] == (1, 3)


def test_question_needs_real():
    assert parse_error("?5") is ParserError.UNEXPECTED_TOKEN


def test_unary_minus_nests():
    expr = tree("- -3")
    assert isinstance(expr, Unary)
    assert str(expr) == "(- (- 3))"


def test_parse_args():
    result = parse_args(scan("x=5 y=10").value)
    assert result.value == [Symbol("x", Collection.of(5)), Symbol("y", Collection.of(10))]


def test_parse_args_malformed():
    for source in ("x=y", "x=5 3", "x 5", "5=x"):
        reporter = CollectingErrorReporter()
        result = parse_args(scan(source).value, reporter)
        assert result.error is ParserError.MALFORMED_ARGUMENT, source
        assert reporter.errors
