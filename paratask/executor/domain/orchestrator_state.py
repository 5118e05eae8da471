"""Per-invocation orchestration state."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any


@dataclass
class OrchestratorState:
    """State tracking for a single orchestrate() invocation.

    Results are stored by task index, so their order follows the caller's
    task list no matter which worker finishes first. ``finalized`` is a
    one-shot latch: once set, recording is refused.

    Attributes:
        run_id: Unique identifier for this invocation
        results: Per-task results, None until reported
        pending_count: Number of workers that have not reached a terminal state
        finalized: Whether the completion callback has been claimed
        start_time: Timestamp when the invocation started
    """

    run_id: str
    results: list[Any]
    pending_count: int
    finalized: bool = False
    start_time: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        """Validate the state."""
        if not self.run_id:
            raise ValueError("run_id must not be empty")
        if self.pending_count < 0:
            raise ValueError("pending_count must be non-negative")

    @classmethod
    def for_tasks(cls, run_id: str, task_count: int) -> OrchestratorState:
        """Create state for a list of task_count tasks.

        Args:
            run_id: Invocation identifier
            task_count: Number of tasks

        Returns:
            Fresh state with a None placeholder for every task
        """
        return cls(run_id=run_id, results=[None] * task_count, pending_count=task_count)

    def get_execution_time(self) -> float:
        """Get total execution time so far.

        Returns:
            Time elapsed since start in seconds
        """
        return time.time() - self.start_time

    def record_result(self, task_index: int, result: Any) -> bool:
        """Store the result of one task.

        Args:
            task_index: Position of the task
            result: Value reported by the task

        Returns:
            True if stored, False if already finalized
        """
        if self.finalized:
            return False
        self.results[task_index] = result
        return True

    def mark_worker_done(self) -> int:
        """Account for one worker reaching a terminal state.

        Returns:
            Remaining pending count
        """
        if self.pending_count > 0:
            self.pending_count -= 1
        return self.pending_count

    def claim_finalize(self) -> bool:
        """Trip the one-shot finalize latch.

        Returns:
            True for the first caller only
        """
        if self.finalized:
            return False
        self.finalized = True
        return True

    def snapshot(self) -> list[Any]:
        """Copy of the results collected so far."""
        return list(self.results)
