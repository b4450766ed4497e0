"""Test class ExpressionParser."""
from typing import List

import pytest

from rpn_calculator.common.errors import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    ErrorKind,
    EvaluationError,
    InvalidCharacterError,
    LiteralOverflowError,
    MalformedExpressionError,
    NoResultError,
    TrailingOperatorError,
    UnbalancedParenthesesError,
    UnexpectedOperatorError,
)
from rpn_calculator.common.normalizer import Normalizer
from rpn_calculator.common.parser import ExpressionParser, checked_apply, evaluate
from rpn_calculator.common.tokens import INT64_MAX, INT64_MIN, CloseParen, Number, OpenParen, Operator, format_tokens


def rpn_of(expr: str) -> str:
    return format_tokens(ExpressionParser.to_rpn(Normalizer.normalize(ExpressionParser.tokenize(expr))))


def test_tokenize_ignores_whitespace() -> None:
    """Tokenize strips whitespace before lexing."""
    assert ExpressionParser.tokenize(" 3 +\t4 * 2\n") == ExpressionParser.tokenize("3+4*2")


def test_to_rpn_basic() -> None:
    """to_rpn converts tokens to correct Reverse Polish Notation."""
    tokens = [Number(value=3), Operator(symbol="+"), Number(value=4), Operator(symbol="*"), Number(value=2)]
    rpn = ExpressionParser.to_rpn(tokens)
    # Numbers in order, operators according to precedence
    assert format_tokens(rpn) == "3 4 2 * +"


@pytest.mark.parametrize("expr,expected", [
    ("3 + 4", "3 4 +"),
    ("3 + 4 * 2", "3 4 2 * +"),
    ("10 / 2 - 1", "10 2 / 1 -"),
    ("1 - 2 - 3", "1 2 - 3 -"),
    ("8 / 4 / 2", "8 4 / 2 /"),
    ("2 * (3 + 4)", "2 3 4 + *"),
    ("-5 + 3", "-1 5 * 3 +"),
    ("3 - -2", "3 -1 2 * -"),
])
def test_to_rpn_various(expr: str, expected: str) -> None:
    """to_rpn handles precedence, left associativity and parentheses."""
    assert rpn_of(expr) == expected


@pytest.mark.parametrize("tokens", [
    [Number(value=1), CloseParen()],
    [OpenParen(), Number(value=1)],
    [OpenParen(), OpenParen(), Number(value=1), CloseParen()],
    [CloseParen(), OpenParen()],
])
def test_to_rpn_unbalanced(tokens: List) -> None:
    """Unmatched parentheses raise instead of crashing, even on raw tokens."""
    with pytest.raises(UnbalancedParenthesesError):
        ExpressionParser.to_rpn(tokens)


def test_evaluate_rpn_basic() -> None:
    rpn = [Number(value=7), Number(value=2), Operator(symbol="-")]
    # op2 is the most recently pushed operand
    assert ExpressionParser.evaluate_rpn(rpn) == 5


@pytest.mark.parametrize("tokens", [
    [Operator(symbol="+")],
    [Number(value=1), Operator(symbol="+")],
    [Number(value=1), Number(value=2)],
    [Number(value=1), OpenParen()],
])
def test_evaluate_rpn_malformed(tokens: List) -> None:
    """Structurally invalid postfix sequences are reported, never crash."""
    with pytest.raises(MalformedExpressionError):
        ExpressionParser.evaluate_rpn(tokens)


def test_evaluate_rpn_empty() -> None:
    with pytest.raises(NoResultError):
        ExpressionParser.evaluate_rpn([])


@pytest.mark.parametrize("symbol,op1,op2,expected", [
    ("/", 7, 2, 3),
    ("/", -7, 2, -3),
    ("/", 7, -2, -3),
    ("/", -7, -2, 3),
    ("+", INT64_MAX - 1, 1, INT64_MAX),
    ("-", INT64_MIN + 1, 1, INT64_MIN),
    ("*", INT64_MIN, 1, INT64_MIN),
])
def test_checked_apply(symbol: str, op1: int, op2: int, expected: int) -> None:
    """Division truncates toward zero, results at the 64-bit bounds are allowed."""
    assert checked_apply(symbol, op1, op2) == expected


@pytest.mark.parametrize("symbol,op1,op2", [
    ("+", INT64_MAX, 1),
    ("-", INT64_MIN, 1),
    ("*", INT64_MAX, 2),
    ("*", INT64_MIN, -1),
    ("/", INT64_MIN, -1),
])
def test_checked_apply_overflow(symbol: str, op1: int, op2: int) -> None:
    with pytest.raises(ArithmeticOverflowError) as exc_info:
        checked_apply(symbol, op1, op2)
    assert (exc_info.value.op1, exc_info.value.symbol, exc_info.value.op2) == (op1, symbol, op2)


@pytest.mark.parametrize("expr,expected", [
    ("1+1", 2),
    ("3 + 4", 7),
    ("10 - 2", 8),
    ("3 * 5", 15),
    ("8 / 2", 4),
    ("2*3+4", 10),  # tests precedence
    ("2*(3+4)", 14),  # parentheses override precedence
    ("7 + 3 * 2 - 4 / 2", 11),
    ("-5+3", -2),
    ("3--2", 5),
    ("3-2", 1),
    ("(4)-2", 2),
    ("7/2", 3),
    ("-7/2", -3),
    ("1-2-3", -4),
    ("100/10/5", 2),
    ("-(2+3)*4", -20),
    ("2*-3", -6),
    ("--2", 2),
    ("(+3)", 3),
    ("((((1))))", 1),
    ("9223372036854775807", INT64_MAX),
    ("-9223372036854775807-1", INT64_MIN),
])
def test_evaluate_valid(expr: str, expected: int) -> None:
    """Evaluate returns correct result for valid expressions."""
    assert ExpressionParser.evaluate(expr) == expected


def test_evaluate_ignores_whitespace() -> None:
    """Whitespace is irrelevant to the result."""
    assert evaluate("1 + 2") == evaluate("1+2") == 3
    assert evaluate(" ( 1 +\t2 ) * 3 ") == 9


@pytest.mark.parametrize("expr,error", [
    ("10/0", DivisionByZeroError),
    ("1/(2-2)", DivisionByZeroError),
    ("(1+2", UnbalancedParenthesesError),
    ("1+2)", UnbalancedParenthesesError),
    ("1+", TrailingOperatorError),
    ("3 *", TrailingOperatorError),
    ("+ 3 4", UnexpectedOperatorError),
    ("9223372036854775807+1", ArithmeticOverflowError),
    ("-9223372036854775807-2", ArithmeticOverflowError),
    ("9223372036854775808", LiteralOverflowError),
    ("2^3", InvalidCharacterError),
    ("", NoResultError),
    ("   ", NoResultError),
])
def test_evaluate_invalid_expression(expr: str, error: type) -> None:
    """Evaluate raises the typed error of the failing stage."""
    with pytest.raises(error):
        ExpressionParser.evaluate(expr)


@pytest.mark.parametrize("expr", ["3 +", "+ 3 4", "3 + * 5", "", "(1", "1/0"])
def test_evaluate_errors_are_value_errors(expr: str) -> None:
    """Callers that only know about ValueError still catch every failure."""
    with pytest.raises(ValueError):
        ExpressionParser.evaluate(expr)


@pytest.mark.parametrize("expr", ["2*(3+4)", "10/0", "(1+2", "1+", "9223372036854775807+1", "1$"])
def test_evaluate_is_deterministic(expr: str) -> None:
    """Evaluating twice yields the same value or the same error kind."""

    def outcome(text: str):
        try:
            return ExpressionParser.evaluate(text)
        except EvaluationError as exc:
            return exc.kind, str(exc)

    assert outcome(expr) == outcome(expr)


def test_error_kinds() -> None:
    with pytest.raises(EvaluationError) as exc_info:
        ExpressionParser.evaluate("10/0")
    assert exc_info.value.kind is ErrorKind.DIVISION_BY_ZERO
