from troll.errors import ScannerError
from troll.reporter import CollectingErrorReporter
from troll.scanner import extract_concatenation_operators, scan
from troll.tokens import TokenType


def types(source):
    result = scan(source, CollectingErrorReporter())
    assert result.is_ok
    return [t.type for t in result.value]


def scan_error(source):
    reporter = CollectingErrorReporter()
    result = scan(source, reporter)
    assert not result.is_ok
    return result.error, reporter


def test_dice_expression():
    assert types("3d6") == [TokenType.INTEGER, TokenType.DIE, TokenType.INTEGER, TokenType.EOF]
    assert types("2Z10") == [TokenType.INTEGER, TokenType.ZERO_DIE, TokenType.INTEGER, TokenType.EOF]


def test_integer_literal_values():
    tokens = scan("12 0 7").value
    assert [t.literal for t in tokens[:-1]] == [12, 0, 7]


def test_real_literal():
    tokens = scan("?0.25").value
    assert tokens[1].type is TokenType.REAL
    assert tokens[1].literal == 0.25


def test_zero_followed_by_range():
    assert types("0..5") == [TokenType.INTEGER, TokenType.DOT_DOT, TokenType.INTEGER, TokenType.EOF]


def test_one_or_two_character_operators():
    assert types("- -- > >= < <= <> <| = =/=")[:-1] == [
        TokenType.MINUS, TokenType.SET_MINUS, TokenType.GT, TokenType.GE,
        TokenType.LT, TokenType.LE, TokenType.VCONCC, TokenType.VCONCR,
        TokenType.EQ, TokenType.NEQ,
    ]


def test_mandatory_two_character_operators():
    assert types(":= || |> %1 %2 ..")[:-1] == [
        TokenType.ASSIGN, TokenType.HCONC, TokenType.VCONCL,
        TokenType.FIRST, TokenType.SECOND, TokenType.DOT_DOT,
    ]


def test_keywords_and_identifiers():
    assert types("sum x U y @ z")[:-1] == [
        TokenType.SUM, TokenType.IDENTIFIER, TokenType.UNION, TokenType.IDENTIFIER,
        TokenType.UNION, TokenType.ZERO_DIE,
    ]
    tokens = scan("largest foo").value
    assert tokens[0].type is TokenType.LARGEST
    assert tokens[1].lexeme == "foo"


def test_comment_runs_to_end_of_line():
    assert types("3 \\ a comment + 7\n+ 4") == [
        TokenType.INTEGER, TokenType.PLUS, TokenType.INTEGER, TokenType.EOF,
    ]


def test_token_positions():
    tokens = scan("12 + d6\n  sum").value
    assert [(t.line, t.column) for t in tokens[:-1]] == [(1, 1), (1, 4), (1, 6), (1, 7), (2, 3)]


def test_string_split_on_concatenation_operators():
    tokens = scan('"a<>b||c"').value
    assert [t.type for t in tokens[:-1]] == [
        TokenType.STRING, TokenType.VCONCC, TokenType.STRING, TokenType.HCONC, TokenType.STRING,
    ]
    assert [t.literal for t in tokens if t.type is TokenType.STRING] == ["a", "b", "c"]


def test_string_with_only_operator_keeps_empty_pieces():
    tokens = scan('"<|"').value
    assert [t.type for t in tokens[:-1]] == [TokenType.STRING, TokenType.VCONCR, TokenType.STRING]
    assert tokens[0].literal == ""
    assert tokens[2].literal == ""


def test_parentheses_inside_string_are_text():
    tokens = scan('"(x)"').value
    assert tokens[0].type is TokenType.STRING
    assert tokens[0].literal == "(x)"


def test_extract_concatenation_operators():
    assert extract_concatenation_operators("a||b|>c") == ["a", "||", "b", "|>", "c"]
    assert extract_concatenation_operators("plain") == ["plain"]


def test_no_source():
    error, reporter = scan_error("")
    assert error is ScannerError.NO_SOURCE
    assert len(reporter.errors) == 1


def test_unexpected_character_reports_position():
    error, reporter = scan_error("3 $ 4")
    assert error is ScannerError.UNEXPECTED_CHARACTER
    assert reporter.errors[0][:2] == (1, 3)


def test_unterminated_string():
    error, _ = scan_error('"abc')
    assert error is ScannerError.UNTERMINATED_STRING
    error, _ = scan_error('"abc\n"')
    assert error is ScannerError.UNTERMINATED_STRING


def test_malformed_tokens():
    for source in (":", "|x", "%3", "=/x", ". 1"):
        error, _ = scan_error(source)
        assert error is ScannerError.MALFORMED_TOKEN, source


def test_scanning_stops_at_first_error():
    error, reporter = scan_error("$ : %")
    assert error is ScannerError.UNEXPECTED_CHARACTER
    assert len(reporter.errors) == 1
