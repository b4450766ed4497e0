"""Test function tokenize."""
import pytest

from rpn_calculator.common.errors import ErrorKind, InvalidCharacterError, LexError, LiteralOverflowError
from rpn_calculator.common.lexer import tokenize
from rpn_calculator.common.tokens import CloseParen, Number, OpenParen, Operator


def test_tokenize_basic() -> None:
    """Tokenize splits a simple expression into correct tokens."""
    tokens = tokenize("3+4*2")
    assert tokens == [
        Number(value=3),
        Operator(symbol="+"),
        Number(value=4),
        Operator(symbol="*"),
        Number(value=2),
    ]


def test_tokenize_multi_digit_literal() -> None:
    """Consecutive digits are assembled into a single number."""
    assert tokenize("1234-56") == [Number(value=1234), Operator(symbol="-"), Number(value=56)]


def test_tokenize_parentheses() -> None:
    tokens = tokenize("(1)")
    assert tokens == [OpenParen(), Number(value=1), CloseParen()]


def test_tokenize_does_not_interpret_grammar() -> None:
    """Lexing keeps a leading minus as a plain operator."""
    assert tokenize("-5") == [Operator(symbol="-"), Number(value=5)]


def test_tokenize_empty() -> None:
    assert tokenize("") == []


def test_tokenize_max_int64() -> None:
    """The largest signed 64-bit value is still accepted."""
    assert tokenize("9223372036854775807") == [Number(value=9223372036854775807)]


@pytest.mark.parametrize("text,position", [
    ("9223372036854775808", 0),
    ("1+99999999999999999999", 2),
])
def test_tokenize_overflow(text: str, position: int) -> None:
    """Literals beyond the signed 64-bit range are rejected, not wrapped."""
    with pytest.raises(LiteralOverflowError) as exc_info:
        tokenize(text)
    assert exc_info.value.position == position
    assert exc_info.value.kind is ErrorKind.LITERAL_OVERFLOW


@pytest.mark.parametrize("text,character,position", [
    ("1+a", "a", 2),
    ("2^3", "^", 1),
    ("1.5", ".", 1),
    ("x", "x", 0),
    ("1+٣", "٣", 2),  # Unicode digits are not digits here
])
def test_tokenize_invalid_character(text: str, character: str, position: int) -> None:
    """Characters outside digits, operators and parentheses are rejected with their position."""
    with pytest.raises(InvalidCharacterError) as exc_info:
        tokenize(text)
    assert exc_info.value.character == character
    assert exc_info.value.position == position
    assert isinstance(exc_info.value, LexError)
