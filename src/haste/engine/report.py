from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class JobFailure:
    key: str
    worker: int
    error: str
    status: int | None = None


@dataclass
class WorkerTally:
    """Owned by one worker thread; merged into the report after the barrier."""

    worker: int
    succeeded: int = 0
    failures: list[JobFailure] = field(default_factory=list)


@dataclass
class TransferReport:
    operation: str
    succeeded: int = 0
    failures: list[JobFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_keys(self) -> list[str]:
        return sorted(failure.key for failure in self.failures)

    def merge(self, tally: WorkerTally) -> None:
        self.succeeded += tally.succeeded
        self.failures.extend(tally.failures)
