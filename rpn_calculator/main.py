"""
Command line entrypoint.

Modes:
- no argument: prompt once for an expression and print its value
- ``--repl``: keep prompting until ``0`` or end of input
- ``-e EXPR``: evaluate an expression given on the command line
- ``--batch FILE``: evaluate every line of a text file or archive in worker processes

Exit code is 0 on success and 1 when an expression cannot be evaluated.
"""

import argparse
from pathlib import Path
import sys
from typing import List, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError, model_validator

from rpn_calculator.batch.loader import ExpressionLoader
from rpn_calculator.batch.runner import BatchEvaluator, count_results
from rpn_calculator.cli.repl import EXIT_FAILURE, EXIT_SUCCESS, ExpressionPrompt


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expression : str, optional
        Expression to evaluate without prompting.
    repl : bool
        Keep prompting until the sentinel is typed.
    rpn : bool
        Print the postfix form instead of the value.
    batch : FilePath, optional
        Path to the file containing arithmetic operations.
    output : Path, optional
        Where batch results are written.
    workers : int, optional
        Maximum number of concurrent batch workers.
    """

    expression: Optional[str] = None
    repl: bool = False
    rpn: bool = False
    batch: Optional[FilePath] = None
    output: Optional[Path] = None
    workers: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def modes_are_exclusive(self) -> "CliArgs":
        """Only one of --expression, --repl and --batch may be given."""
        selected = [self.expression is not None, self.repl, self.batch is not None]
        if sum(selected) > 1:
            raise ValueError("--expression, --repl and --batch are mutually exclusive")
        if self.batch is None and (self.output is not None or self.workers is not None):
            raise ValueError("--output and --workers require --batch")
        return self


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param list argv: Arguments, defaults to sys.argv[1:]

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        prog="rpn-calc",
        description="Evaluate integer arithmetic expressions",
    )

    parser.add_argument("-e", "--expression", help="Expression to evaluate")
    parser.add_argument("--repl", action="store_true", help="Prompt for expressions until '0' is typed")
    parser.add_argument("--rpn", action="store_true", help="Print the Reverse Polish Notation instead of the value")
    parser.add_argument("--batch", help="Path to a .txt file (or .zip, .tar.xz, .7z archive) of expressions")
    parser.add_argument("--output", help="Where batch results are written")
    parser.add_argument("--workers", type=int, help="Maximum number of concurrent batch workers")

    args = parser.parse_args(argv)

    try:
        return CliArgs(**vars(args))
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations_short.7z
    output: resources/operations_short_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    # Path.stem only drops the last suffix, strip them all
    base = input_path.name[: -len("".join(input_path.suffixes))] if input_path.suffixes else input_path.name
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{base}{suffix_safe}_results.txt")


def run_batch(cli_args: CliArgs) -> int:
    """
    Evaluate a batch file and write its results.

    :return: 0 if every expression succeeded, 1 otherwise
    :rtype: int
    """
    input_path = Path(cli_args.batch)
    output_path = cli_args.output or build_output_path(input_path)

    try:
        requests = ExpressionLoader(input_file=input_path).load()
    except (ValueError, OSError) as exc:
        print(exc, file=sys.stderr)
        return EXIT_FAILURE

    results = BatchEvaluator(output_file=output_path, max_workers=cli_args.workers).run(requests)
    succeeded, failed = count_results(results)
    print(f"{succeeded} succeeded, {failed} failed, results written to {output_path}")
    return EXIT_SUCCESS if failed == 0 else EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function executed by the ``rpn-calc`` console script.
    """
    cli_args = parse_args(argv)

    if cli_args.batch is not None:
        return run_batch(cli_args)

    prompt = ExpressionPrompt(show_rpn=cli_args.rpn)
    if cli_args.expression is not None:
        return prompt.answer(cli_args.expression)
    if cli_args.repl:
        return prompt.loop()
    return prompt.ask_once()


if __name__ == "__main__":
    sys.exit(main())
