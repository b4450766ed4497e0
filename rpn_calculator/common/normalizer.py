"""
Validate the token grammar and rewrite unary minus into binary form.

The normalizer is a small state machine folded over the lexed tokens. Its state
records the kind of the previously emitted token, the current parenthesis
depth and the unary-minus rewrites still waiting for their closing parenthesis.

A unary minus is rewritten as ``( -1 *`` and the matching ``)`` is emitted as
soon as its operand is complete:

    - ``-5+3``  becomes ``( -1 * 5 ) + 3``
    - ``3--2``  becomes ``3 - ( -1 * 2 )``
    - ``-(1+2)`` becomes ``( -1 * ( 1 + 2 ) )``

After normalization, every remaining ``-`` is a binary subtraction.
"""
from enum import Enum
from typing import List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from rpn_calculator.common.errors import (
    MalformedExpressionError,
    TrailingOperatorError,
    UnexpectedCloseParenError,
    UnexpectedOperandError,
    UnexpectedOperatorError,
)
from rpn_calculator.common.logger import logger
from rpn_calculator.common.tokens import CloseParen, Number, OpenParen, Operator, Token, format_tokens


class Previous(str, Enum):
    """Kind of the last emitted token."""

    OPERATOR = "operator"
    NUMBER = "number"
    OPEN_PAREN = "open_paren"
    CLOSE_PAREN = "close_paren"


# States after which a value (number or parenthesized group) is complete
AFTER_VALUE: Tuple[Previous, ...] = (Previous.NUMBER, Previous.CLOSE_PAREN)


class NormalizerState(BaseModel):
    """Accumulator threaded through the normalization fold."""

    model_config = ConfigDict(frozen=True)

    # The expression starts as if right after an operator
    previous: Previous = Field(default=Previous.OPERATOR, description="Kind of the last emitted token")
    depth: int = Field(default=0, description="Nesting depth of input parentheses")
    pending_closes: Tuple[int, ...] = Field(
        default=(), description="Depths at which a unary-minus rewrite still owes a ')'"
    )
    last_operator: str = Field(default="", description="Symbol of the last emitted operator")


class Normalizer:
    """Grammar validation and unary-minus desugaring over a token sequence."""

    @staticmethod
    def _close_pending(state: NormalizerState, emitted: List[Token]) -> NormalizerState:
        """
        Emit the ')' owed by unary-minus rewrites whose operand just completed.

        :param NormalizerState state: State after emitting a number or ')'
        :param List[Token] emitted: Output buffer, extended in place

        :return: State with the satisfied rewrites removed
        :rtype: NormalizerState
        """
        pending = state.pending_closes
        while pending and pending[-1] == state.depth:
            emitted.append(CloseParen())
            pending = pending[:-1]
        if pending == state.pending_closes:
            return state
        return state.model_copy(update={"pending_closes": pending, "previous": Previous.CLOSE_PAREN})

    @staticmethod
    def step(state: NormalizerState, token: Token, position: int) -> Tuple[NormalizerState, List[Token]]:
        """
        Apply one transition of the normalization state machine.

        :param NormalizerState state: Current state
        :param Token token: Next lexed token
        :param int position: Index of the token in the lexed sequence, used in errors

        :return: Tuple of (next state, tokens to emit)
        :rtype: Tuple[NormalizerState, List[Token]]
        :raises ExpressionSyntaxError: If the token is not allowed in the current state
        """
        emitted: List[Token] = []

        if isinstance(token, Number):
            if state.previous in AFTER_VALUE:
                raise UnexpectedOperandError(position)
            emitted.append(token)
            state = state.model_copy(update={"previous": Previous.NUMBER})
            return Normalizer._close_pending(state, emitted), emitted

        if isinstance(token, OpenParen):
            # No implicit multiplication: "2(3)" is rejected
            if state.previous in AFTER_VALUE:
                raise UnexpectedOperandError(position)
            emitted.append(token)
            return state.model_copy(update={"previous": Previous.OPEN_PAREN, "depth": state.depth + 1}), emitted

        if isinstance(token, CloseParen):
            if state.previous not in AFTER_VALUE:
                raise UnexpectedCloseParenError(position)
            emitted.append(token)
            # An unmatched ')' may drive depth negative; the postfix stage reports it
            state = state.model_copy(update={"previous": Previous.CLOSE_PAREN, "depth": state.depth - 1})
            return Normalizer._close_pending(state, emitted), emitted

        if isinstance(token, Operator):
            if state.previous in AFTER_VALUE:
                # Binary operator, including "-" right after a value
                emitted.append(token)
                return state.model_copy(
                    update={"previous": Previous.OPERATOR, "last_operator": token.symbol}
                ), emitted

            if token.symbol == "-":
                emitted.extend([OpenParen(), Number(value=-1), Operator(symbol="*")])
                return state.model_copy(
                    update={
                        "previous": Previous.OPERATOR,
                        "pending_closes": state.pending_closes + (state.depth,),
                        "last_operator": token.symbol,
                    }
                ), emitted

            if token.symbol == "+" and state.previous == Previous.OPEN_PAREN:
                # Unary plus after "(" has no effect and is dropped
                return state.model_copy(update={"previous": Previous.OPERATOR, "last_operator": "+"}), emitted

            raise UnexpectedOperatorError(token.symbol, position)

        raise MalformedExpressionError(f"unknown token {token!r}")

    @staticmethod
    def normalize(tokens: Sequence[Token]) -> List[Token]:
        """
        Validate the grammar of a lexed expression and desugar unary minus.

        :param Sequence[Token] tokens: Tokens produced by the lexer

        :return: Binary-operator-only token sequence, ready for the shunting-yard stage
        :rtype: List[Token]
        :raises ExpressionSyntaxError: If the tokens do not form a valid expression
        """
        state = NormalizerState()
        output: List[Token] = []

        for position, token in enumerate(tokens):
            state, emitted = Normalizer.step(state, token, position)
            output.extend(emitted)

        if tokens and state.previous == Previous.OPERATOR:
            raise TrailingOperatorError(state.last_operator)

        logger.debug(f"Normalized tokens: {format_tokens(output)}")
        return output
