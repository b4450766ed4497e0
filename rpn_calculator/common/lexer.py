"""Turn an expression string into a flat list of tokens."""
from typing import List

from rpn_calculator.common.errors import InvalidCharacterError, LiteralOverflowError
from rpn_calculator.common.tokens import INT64_MAX, CloseParen, Number, OpenParen, Operator, Token

DIGITS: str = "0123456789"
OPERATOR_SYMBOLS: str = "+-*/"


def tokenize(text: str) -> List[Token]:
    """
    Split a whitespace-free expression into tokens.

    Consecutive digits are assembled into a single Number token, every operator
    and parenthesis becomes its own token.

    :param str text: Expression with all whitespace already removed

    :return: Tokens in input order
    :rtype: List[Token]
    :raises LiteralOverflowError: If a literal does not fit in a signed 64-bit integer
    :raises InvalidCharacterError: If a character is not a digit, operator or parenthesis
    """
    tokens: List[Token] = []
    position = 0

    while position < len(text):
        char = text[position]

        if char in DIGITS:
            start = position
            value = 0
            # Greedy: consume the whole digit run
            while position < len(text) and text[position] in DIGITS:
                digit = ord(text[position]) - ord("0")
                if value > (INT64_MAX - digit) // 10:
                    raise LiteralOverflowError(start)
                value = value * 10 + digit
                position += 1
            tokens.append(Number(value=value))
            continue

        if char in OPERATOR_SYMBOLS:
            tokens.append(Operator(symbol=char))
        elif char == "(":
            tokens.append(OpenParen())
        elif char == ")":
            tokens.append(CloseParen())
        else:
            raise InvalidCharacterError(char, position)

        position += 1

    return tokens
