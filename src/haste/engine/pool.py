from __future__ import annotations

import threading
import time
from typing import Callable, Iterable

from haste.engine.channel import JobChannel
from haste.engine.report import JobFailure, TransferReport, WorkerTally
from haste.errors import TransferError
from haste.logging_config import get_logger, with_context

logger = get_logger(__name__)

Operation = Callable[[str], None]


class TransferWorker(threading.Thread):
    """Pulls keys from the channel until it is closed and drained."""

    def __init__(self, number: int, channel: JobChannel[str], operation: Operation, verb: str):
        super().__init__(name=f"haste-worker-{number:03d}", daemon=True)
        self.number = number
        self.channel = channel
        self.operation = operation
        self.verb = verb
        self.tally = WorkerTally(worker=number)
        self.log = with_context(logger, worker=number)

    def _record_failure(self, key: str, exc: Exception) -> None:
        self.tally.failures.append(
            JobFailure(key=key, worker=self.number, error=str(exc), status=getattr(exc, "status", None))
        )

    def run(self) -> None:
        for key in self.channel:
            self.log.info("Starting %s: key=%s", self.verb, key)
            try:
                self.operation(key)
            except (TransferError, OSError) as exc:
                self._record_failure(key, exc)
                self.log.warning("Failed %s: key=%s error=%s", self.verb, key, exc)
                continue
            except Exception as exc:
                # workers must outlive every job or the producer blocks on send
                self._record_failure(key, exc)
                self.log.exception("Unexpected error during %s: key=%s", self.verb, key)
                continue
            self.tally.succeeded += 1
            self.log.info("Completed %s: key=%s", self.verb, key)
        self.log.debug("Worker exiting: succeeded=%s failed=%s", self.tally.succeeded, len(self.tally.failures))


class WorkerPool:
    """Fixed number of worker threads fed from a single job source."""

    def __init__(self, operation: Operation, concurrency: int, verb: str | None = None):
        if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, got: {concurrency!r}")
        self.operation = operation
        self.concurrency = concurrency
        self.verb = verb or getattr(operation, "name", "transfer")

    def run(self, jobs: Iterable[str]) -> TransferReport:
        """Dispatch every key in ``jobs`` and wait for all workers to finish.

        Workers start before the first send. The channel is closed once the
        source is exhausted, or when it raises, and the error is re-raised
        only after every worker has returned.
        """
        started_at = time.perf_counter()
        channel: JobChannel[str] = JobChannel()
        workers = [TransferWorker(number, channel, self.operation, self.verb) for number in range(self.concurrency)]
        for worker in workers:
            worker.start()

        dispatched = 0
        try:
            for key in jobs:
                if not key.strip():
                    continue
                channel.send(key)
                dispatched += 1
        finally:
            channel.close()
            for worker in workers:
                worker.join()

        report = TransferReport(operation=self.verb)
        for worker in workers:
            report.merge(worker.tally)
        report.elapsed_seconds = time.perf_counter() - started_at
        logger.info(
            "Transfer complete: operation=%s dispatched=%s succeeded=%s failed=%s workers=%s elapsed_seconds=%.3f",
            self.verb,
            dispatched,
            report.succeeded,
            report.failed,
            self.concurrency,
            report.elapsed_seconds,
        )
        return report
