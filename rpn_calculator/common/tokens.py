"""Token types shared by every stage of the evaluation pipeline."""
from typing import Annotated, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# Bounds of a signed 64-bit integer
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# Operator symbols mapped to their priority; higher binds tighter
PRIORITIES: dict[str, int] = {
    "+": 1,
    "-": 1,
    "*": 2,
    "/": 2,
}

OperatorSymbol = Literal["+", "-", "*", "/"]


class Number(BaseModel):
    """Integer literal, already assembled from its digits."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    value: int = Field(..., ge=INT64_MIN, le=INT64_MAX, description="Signed 64-bit value")

    def __str__(self) -> str:
        return str(self.value)


class Operator(BaseModel):
    """Binary arithmetic operator."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["operator"] = "operator"
    symbol: OperatorSymbol = Field(..., description="One of + - * /")

    @property
    def priority(self) -> int:
        """Priority derived from the symbol: 1 for ``+ -``, 2 for ``* /``."""
        return PRIORITIES[self.symbol]

    def __str__(self) -> str:
        return self.symbol


class OpenParen(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["open_paren"] = "open_paren"

    def __str__(self) -> str:
        return "("


class CloseParen(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["close_paren"] = "close_paren"

    def __str__(self) -> str:
        return ")"


# Tagged union over the four token variants, discriminated by ``kind``
Token = Annotated[Union[Number, Operator, OpenParen, CloseParen], Field(discriminator="kind")]


def format_tokens(tokens: Iterable[Token]) -> str:
    """
    Render a token sequence as space-separated text.

    Examples:
        - ``[Number(3), Number(4), Operator('+')]`` renders as ``3 4 +``

    :param Iterable[Token] tokens: Tokens to render

    :return: Space-separated representation
    :rtype: str
    """
    return " ".join(str(token) for token in tokens)
