"""Parse and evaluate integer arithmetic expressions safely."""
from collections.abc import Callable as ABCCallable
from typing import Callable, List, Sequence

from rpn_calculator.common.errors import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    MalformedExpressionError,
    NoResultError,
    UnbalancedParenthesesError,
)
from rpn_calculator.common.lexer import tokenize
from rpn_calculator.common.logger import logger
from rpn_calculator.common.normalizer import Normalizer
from rpn_calculator.common.tokens import (
    INT64_MAX,
    INT64_MIN,
    CloseParen,
    Number,
    OpenParen,
    Operator,
    Token,
    format_tokens,
)


# Type alias for operator functions (taking two ints, returning an int)
OperatorFn: ABCCallable[[int, int], int] = Callable[[int, int], int]


def _truncating_div(op1: int, op2: int) -> int:
    """Integer division rounding toward zero, as opposed to Python's floor division."""
    quotient = abs(op1) // abs(op2)
    return quotient if (op1 < 0) == (op2 < 0) else -quotient


# Mapping of operator symbols to their unchecked implementation
OPERATIONS: dict[str, OperatorFn] = {
    "+": lambda op1, op2: op1 + op2,
    "-": lambda op1, op2: op1 - op2,
    "*": lambda op1, op2: op1 * op2,
    "/": _truncating_div,
}


def checked_apply(symbol: str, op1: int, op2: int) -> int:
    """
    Apply a binary operator, failing instead of leaving the signed 64-bit range.

    :param str symbol: Operator symbol
    :param int op1: Left-hand operand
    :param int op2: Right-hand operand

    :return: Result of ``op1 <symbol> op2``
    :rtype: int
    :raises DivisionByZeroError: If dividing by zero
    :raises ArithmeticOverflowError: If the result does not fit in 64 bits
    """
    if symbol == "/" and op2 == 0:
        raise DivisionByZeroError(op1)

    result = OPERATIONS[symbol](op1, op2)
    if not INT64_MIN <= result <= INT64_MAX:
        raise ArithmeticOverflowError(op1, symbol, op2)
    return result


class ExpressionParser:
    """
    Parse and evaluate integer arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Signed 64-bit results, overflow is reported instead of wrapping
        - Every failure is a typed EvaluationError, never a crash

    Algorithm:
        1. Strip whitespace and tokenize
        2. Normalize: validate grammar and rewrite unary minus as ``( -1 * x )``
        3. Convert to Reverse Polish Notation (RPN) using Shunting-yard
        4. Evaluate RPN using a stack

    Examples:
        - Infix expression (standard notation): 3 + 4 * 2
        - Corresponding Reverse Polish Notation (RPN): 3 4 2 * +
    """

    @staticmethod
    def strip(expr: str) -> str:
        """Remove every whitespace character from the expression."""
        return "".join(expr.split())

    @staticmethod
    def tokenize(expr: str) -> List[Token]:
        """
        Split an arithmetic expression into tokens, whitespace is ignored.

        :param str expr: Arithmetic expression as a string

        :return: List of tokens
        :rtype: List[Token]
        :raises LexError: If the expression contains an invalid character or literal
        """
        return tokenize(ExpressionParser.strip(expr))

    @staticmethod
    def to_rpn(tokens: Sequence[Token]) -> List[Token]:
        """
        Convert normalized infix tokens into Reverse Polish Notation (RPN) using the Shunting-yard algorithm.

        :param Sequence[Token] tokens: Normalized infix tokens

        :return: List of tokens in RPN order
        :rtype: List[Token]
        :raises UnbalancedParenthesesError: If parentheses do not match
        """
        output: List[Token] = []
        stack: List[Token] = []

        for token in tokens:
            if isinstance(token, Number):
                # Numbers are added directly to the output
                output.append(token)
            elif isinstance(token, OpenParen):
                stack.append(token)
            elif isinstance(token, CloseParen):
                # Pop operators until the matching "(" which is discarded
                while True:
                    if not stack:
                        raise UnbalancedParenthesesError()
                    top = stack.pop()
                    if isinstance(top, OpenParen):
                        break
                    output.append(top)
            elif isinstance(token, Operator):
                # Pop operators with higher or equal priority (left-associative)
                while stack and isinstance(stack[-1], Operator) and stack[-1].priority >= token.priority:
                    output.append(stack.pop())
                stack.append(token)
            else:
                raise MalformedExpressionError(f"unknown token {token!r}")

        # Append remaining operators in reverse order (stack top first)
        while stack:
            top = stack.pop()
            if isinstance(top, OpenParen):
                raise UnbalancedParenthesesError()
            output.append(top)

        logger.debug(f"RPN tokens: {format_tokens(output)}")
        return output

    @staticmethod
    def evaluate_rpn(tokens: Sequence[Token]) -> int:
        """
        Evaluate tokens in Reverse Polish Notation using an operand stack.

        :param Sequence[Token] tokens: Tokens in RPN order

        :return: Computed result
        :rtype: int
        :raises EvalError: If the computation fails or the sequence is malformed
        """
        stack: List[int] = []
        for token in tokens:
            if isinstance(token, Number):
                stack.append(token.value)
            elif isinstance(token, Operator):
                # Operator requires two operands
                if len(stack) < 2:
                    raise MalformedExpressionError(f"not enough operands for {token.symbol!r}")
                op2: int = stack.pop()
                op1: int = stack.pop()
                stack.append(checked_apply(token.symbol, op1, op2))
            else:
                raise MalformedExpressionError(f"unexpected {token} in postfix sequence")

        if not stack:
            raise NoResultError()
        if len(stack) > 1:
            raise MalformedExpressionError(f"remaining operands {stack}")

        return stack[0]

    @staticmethod
    def evaluate(expr: str) -> int:
        """
        Evaluate an arithmetic expression safely.

        :param str expr: Arithmetic expression string

        :return: Computed result as a signed 64-bit integer
        :rtype: int
        :raises EvaluationError: If expression is invalid or cannot be computed
        """
        tokens: List[Token] = ExpressionParser.tokenize(expr)
        normalized: List[Token] = Normalizer.normalize(tokens)
        rpn: List[Token] = ExpressionParser.to_rpn(normalized)
        result: int = ExpressionParser.evaluate_rpn(rpn)
        logger.debug(f"Evaluated {expr!r} = {result}")
        return result


def evaluate(expr: str) -> int:
    """Evaluate ``expr``, see :meth:`ExpressionParser.evaluate`."""
    return ExpressionParser.evaluate(expr)
