"""Worker process for evaluating arithmetic expressions."""
from multiprocessing.connection import Connection
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rpn_calculator.common.errors import EvaluationError
from rpn_calculator.common.logger import logger
from rpn_calculator.common.operations import OperationError, OperationResult
from rpn_calculator.common.parser import ExpressionParser


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the batch evaluator
        - Receives one expression only
        - Sends the computed result or error through a Pipe, as a plain dict
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to the evaluator")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def compute(self) -> Union[OperationResult, OperationError]:
        """
        Evaluate the expression without touching the connection.

        :return: Result model on success, error model otherwise
        :rtype: Union[OperationResult, OperationError]
        """
        try:
            result = ExpressionParser.evaluate(self.expression)
        except EvaluationError as exc:
            logger.error(
                f"👷❌ Worker failed on line {self.line_number}: {exc}\n"
                f"Invalid arithmetic expression, could not evaluate: {self.expression!r}"
            )
            return OperationError(line=self.line_number, expression=self.expression, error=str(exc))

        return OperationResult(line=self.line_number, expression=self.expression, result=result)

    def run(self) -> None:
        """
        Evaluate the arithmetic expression and send the result or error through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")

        outcome: Union[OperationResult, OperationError, None] = None

        try:
            outcome = self.compute()
            self.conn.send(outcome.model_dump())

        except Exception as exc:
            # Unexpected failure: still report it so the batch keeps going
            logger.exception(f"👷💥 Worker crashed on line {self.line_number}: {exc}")
            self.conn.send(
                OperationError(line=self.line_number, expression=self.expression, error=str(exc)).model_dump()
            )

        finally:
            # Always close the connection
            self.conn.close()

            if isinstance(outcome, OperationResult):
                logger.info(f"👷✅ Worker finished on line {self.line_number}: {outcome.result}")
