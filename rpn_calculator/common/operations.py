"""Pydantic models for arithmetic operation requests and results."""
from typing import Union

from pydantic import BaseModel, Field

from rpn_calculator.common.tokens import INT64_MAX, INT64_MIN


class OperationRequest(BaseModel):
    """Represents a single arithmetic expression read from a batch input."""

    line: int = Field(..., ge=1, description="Line number of the expression in the input")
    expression: str = Field(..., min_length=1, description="Arithmetic expression as a string")


class OperationResult(BaseModel):
    """Represents the result of a successfully evaluated expression."""

    line: int = Field(..., ge=1, description="Line number of the expression in the input")
    expression: str = Field(..., description="Original arithmetic expression")
    result: int = Field(..., ge=INT64_MIN, le=INT64_MAX, description="Evaluated integer result")

    def render(self) -> str:
        return f"{self.expression} = {self.result}"


class OperationError(BaseModel):
    """Represents an expression that could not be evaluated."""

    line: int = Field(..., ge=1, description="Line number of the expression in the input")
    expression: str = Field(..., description="Original arithmetic expression")
    error: str = Field(..., description="Human readable error message")

    def render(self) -> str:
        return f"{self.expression} -> ERROR: {self.error}"


OperationOutcome = Union[OperationResult, OperationError]
