"""Evaluate a batch of arithmetic expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection, wait
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from rpn_calculator.batch.worker import WorkerProcess
from rpn_calculator.common.logger import logger
from rpn_calculator.common.operations import OperationError, OperationOutcome, OperationRequest, OperationResult

_outcome_adapter: TypeAdapter = TypeAdapter(OperationOutcome)


class BatchEvaluator(BaseModel):
    """
    Evaluate many expressions in parallel and write the results to a file.

    Features:
        - Spawns one worker process per expression.
        - Never runs more workers than max_workers (CPU core count by default).
        - Ensures each worker is joined as soon as it finishes.
        - Writes results in input order, as soon as they are available.
    """

    model_config = ConfigDict(frozen=True)

    output_file: Path = Field(..., description="Path to write computation results")
    max_workers: Optional[int] = Field(default=None, ge=1, description="Maximum number of concurrent workers")

    def _spawn_worker(self, request: OperationRequest) -> Tuple[Process, Connection]:
        """
        Spawn a WorkerProcess for the given request and return process and pipe.

        :param OperationRequest request: Expression and its line number

        :return: Tuple of (Process, parent_pipe)
        :rtype: Tuple[Process, Connection]
        """
        parent_conn, child_conn = Pipe()
        worker = WorkerProcess(conn=child_conn, expression=request.expression, line_number=request.line)
        process = Process(target=worker.run)
        process.start()
        # The child owns its end of the pipe now
        child_conn.close()
        return process, parent_conn

    def _collect_finished_workers(
        self, active_workers: List[Tuple[Process, Connection]], finished: Dict[int, OperationOutcome]
    ) -> None:
        """
        Collect results from all workers that sent a payload or exited.

        A worker sending a large payload blocks until it is read, so the pipe is
        drained before the process is joined. Collected workers are removed from
        the active_workers list.

        :param list active_workers: List of tuples (Process, Pipe)
        :param dict finished: Outcomes keyed by line number, filled in place
        """
        # Block until at least one worker has data to read or has exited
        ready = wait([proc.sentinel for proc, _ in active_workers] + [conn for _, conn in active_workers])

        # Iterate in reverse to safely remove collected workers while iterating
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn = active_workers[i]
            if pipe_conn in ready or proc.sentinel in ready:
                outcome = self._receive_outcome(pipe_conn)
                pipe_conn.close()
                proc.join()
                active_workers.pop(i)
                if outcome is not None:
                    finished[outcome.line] = outcome

    @staticmethod
    def _receive_outcome(pipe_conn: Connection) -> Optional[OperationOutcome]:
        """Read the payload sent by a worker, None if it died without sending one."""
        try:
            payload = pipe_conn.recv()
        except EOFError:
            return None
        return _outcome_adapter.validate_python(payload)

    @staticmethod
    def _write_ready(
        requests: List[OperationRequest],
        finished: Dict[int, OperationOutcome],
        next_index: int,
        f_out: TextIO,
        results: List[OperationOutcome],
    ) -> int:
        """
        Write every outcome that is next in input order.

        :return: Index of the first request still waiting for its outcome
        :rtype: int
        """
        while next_index < len(requests) and requests[next_index].line in finished:
            outcome = finished.pop(requests[next_index].line)
            f_out.write(outcome.render() + "\n")
            f_out.flush()
            results.append(outcome)
            next_index += 1
        return next_index

    def run(self, requests: List[OperationRequest]) -> List[OperationOutcome]:
        """
        Evaluate every request and write one output line per request.

        Steps:
            1. Spawn worker processes, respecting max_workers.
            2. Collect each worker as soon as it exits.
            3. Write outcomes to the output file in input order.

        :param List[OperationRequest] requests: Expressions to evaluate

        :return: Outcomes in input order
        :rtype: List[OperationOutcome]
        """
        logger.info(f"🧮 Evaluating {len(requests)} expressions into {self.output_file}")

        results: List[OperationOutcome] = []
        finished: Dict[int, OperationOutcome] = {}
        active_workers: List[Tuple[Process, Connection]] = []
        next_index = 0

        # Limit number of active workers to CPU cores or number of expressions
        max_workers: int = max(1, min(self.max_workers or cpu_count(), len(requests)))

        with self.output_file.open("w", encoding="utf-8") as f_out:
            for request in requests:
                # Wait until a worker slot is available
                while len(active_workers) >= max_workers:
                    self._collect_finished_workers(active_workers, finished)
                    next_index = self._write_ready(requests, finished, next_index, f_out, results)

                active_workers.append(self._spawn_worker(request))

            # Collect remaining active workers
            while active_workers:
                self._collect_finished_workers(active_workers, finished)
                next_index = self._write_ready(requests, finished, next_index, f_out, results)

            # Workers that died without a payload still get an output line
            for request in requests[next_index:]:
                finished.setdefault(
                    request.line,
                    OperationError(line=request.line, expression=request.expression, error="Worker exited without result"),
                )
            self._write_ready(requests, finished, next_index, f_out, results)

        succeeded, failed = count_results(results)
        logger.info(f"✅ Batch finished: {succeeded} succeeded, {failed} failed")
        return results


def count_results(results: List[OperationOutcome]) -> Tuple[int, int]:
    """Return the number of (successful, failed) outcomes."""
    succeeded = sum(1 for outcome in results if isinstance(outcome, OperationResult))
    return succeeded, len(results) - succeeded
