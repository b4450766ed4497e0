"""Interactive prompt around the expression evaluator."""
import sys
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rpn_calculator.common.errors import EvaluationError
from rpn_calculator.common.normalizer import Normalizer
from rpn_calculator.common.parser import ExpressionParser
from rpn_calculator.common.tokens import format_tokens

EXIT_SUCCESS: int = 0
EXIT_FAILURE: int = 1


def render_rpn(expr: str) -> str:
    """Return the postfix form of ``expr`` as space-separated tokens."""
    return format_tokens(ExpressionParser.to_rpn(Normalizer.normalize(ExpressionParser.tokenize(expr))))


class ExpressionPrompt(BaseModel):
    """
    Prompt the user for expressions and print their value.

    Typing the sentinel (``0`` by default) exits immediately, without evaluating it.
    """

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(default="Please write a expression: ", description="Text displayed before reading")
    sentinel: str = Field(default="0", description="Input that terminates the prompt")
    show_rpn: bool = Field(default=False, description="Print the postfix form instead of the value")
    # Text streams, any object with readline/write/flush
    stdin: Any = Field(default_factory=lambda: sys.stdin)
    stdout: Any = Field(default_factory=lambda: sys.stdout)
    stderr: Any = Field(default_factory=lambda: sys.stderr)

    def answer(self, expr: str) -> int:
        """
        Evaluate one expression and print its value or error.

        :param str expr: Expression typed by the user

        :return: Process exit code for this expression
        :rtype: int
        """
        try:
            output = render_rpn(expr) if self.show_rpn else f"Result: {ExpressionParser.evaluate(expr)}"
        except EvaluationError as exc:
            print(exc, file=self.stderr)
            return EXIT_FAILURE

        print(output, file=self.stdout)
        return EXIT_SUCCESS

    def _read(self) -> str:
        """Display the prompt and read one line, empty string on end of input."""
        self.stdout.write(self.prompt)
        self.stdout.flush()
        return self.stdin.readline()

    def ask_once(self) -> int:
        """
        Read a single expression and answer it.

        :return: 0 on success or sentinel, 1 on error
        :rtype: int
        """
        line = self._read()
        expr = line.rstrip("\r\n")
        if expr.strip() == self.sentinel:
            return EXIT_SUCCESS
        return self.answer(expr)

    def loop(self) -> int:
        """
        Answer expressions until the sentinel or end of input.

        Errors are printed and the loop continues.

        :return: Always 0
        :rtype: int
        """
        while True:
            line = self._read()
            if not line:
                # End of input: leave the prompt on its own line
                self.stdout.write("\n")
                break
            expr = line.rstrip("\r\n")
            if expr.strip() == self.sentinel:
                break
            if not expr.strip():
                continue
            self.answer(expr)
        return EXIT_SUCCESS
