"""
Errors raised while evaluating an arithmetic expression.

Every error derives from :class:`EvaluationError`, itself a ``ValueError``, and
is grouped by the pipeline stage that raises it:

    - :class:`LexError`: the text contains something that is not a token
    - :class:`ExpressionSyntaxError`: tokens are in an invalid grammatical order
    - :class:`ParenError`: parentheses do not balance
    - :class:`EvalError`: the arithmetic itself fails

``str(error)`` is a message suitable for direct display to a user.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Kind of an evaluation error, independent of its message."""

    INVALID_CHARACTER = "invalid_character"
    LITERAL_OVERFLOW = "literal_overflow"
    UNEXPECTED_OPERATOR = "unexpected_operator"
    UNEXPECTED_CLOSE_PAREN = "unexpected_close_paren"
    TRAILING_OPERATOR = "trailing_operator"
    UNEXPECTED_OPERAND = "unexpected_operand"
    UNBALANCED = "unbalanced"
    DIVISION_BY_ZERO = "division_by_zero"
    OVERFLOW = "overflow"
    NO_RESULT = "no_result"
    MALFORMED_EXPRESSION = "malformed_expression"


class EvaluationError(ValueError):
    """Base class of every error produced by the evaluation pipeline."""

    kind: ErrorKind


# Lexing


class LexError(EvaluationError):
    pass


class InvalidCharacterError(LexError):
    kind = ErrorKind.INVALID_CHARACTER

    def __init__(self, character: str, position: int):
        self.character = character
        self.position = position
        super().__init__(f"Character {character!r} at position {position} is not allowed")


class LiteralOverflowError(LexError):
    kind = ErrorKind.LITERAL_OVERFLOW

    def __init__(self, position: int):
        self.position = position
        super().__init__(f"Overflow detected. Number at position {position} is too big")


# Grammar


class ExpressionSyntaxError(EvaluationError):
    pass


class UnexpectedOperatorError(ExpressionSyntaxError):
    kind = ErrorKind.UNEXPECTED_OPERATOR

    def __init__(self, symbol: str, position: int):
        self.symbol = symbol
        self.position = position
        super().__init__(f"Unexpected operator {symbol!r} at token {position}")


class UnexpectedCloseParenError(ExpressionSyntaxError):
    kind = ErrorKind.UNEXPECTED_CLOSE_PAREN

    def __init__(self, position: int):
        self.position = position
        super().__init__(f"Unexpected ')' at token {position}")


class TrailingOperatorError(ExpressionSyntaxError):
    kind = ErrorKind.TRAILING_OPERATOR

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Expression cannot end with operator {symbol!r}")


class UnexpectedOperandError(ExpressionSyntaxError):
    """A value directly follows another value, e.g. ``2(3)`` or ``(1)2``."""

    kind = ErrorKind.UNEXPECTED_OPERAND

    def __init__(self, position: int):
        self.position = position
        super().__init__(f"Missing operator before token {position}")


# Parentheses


class ParenError(EvaluationError):
    pass


class UnbalancedParenthesesError(ParenError):
    kind = ErrorKind.UNBALANCED

    def __init__(self):
        super().__init__("An unclosed parenthesis was found")


# Arithmetic


class EvalError(EvaluationError):
    pass


class DivisionByZeroError(EvalError):
    kind = ErrorKind.DIVISION_BY_ZERO

    def __init__(self, dividend: int):
        self.dividend = dividend
        super().__init__(f"Division by zero: {dividend} / 0")


class ArithmeticOverflowError(EvalError):
    kind = ErrorKind.OVERFLOW

    def __init__(self, op1: int, symbol: str, op2: int):
        self.op1 = op1
        self.symbol = symbol
        self.op2 = op2
        super().__init__(f"Overflow detected while computing {op1} {symbol} {op2}")


class NoResultError(EvalError):
    kind = ErrorKind.NO_RESULT

    def __init__(self):
        super().__init__("Empty expression")


class MalformedExpressionError(EvalError):
    """Internal invariant violation: an earlier stage produced an invalid sequence."""

    kind = ErrorKind.MALFORMED_EXPRESSION

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Fail evaluate a expression: {detail}")
