"""Executor module for running tasks in isolated worker processes."""

from paratask.executor.domain import (
    OrchestratorState,
    Outcome,
    ProcessStatus,
    TaskDescriptor,
    WorkerRequest,
)
from paratask.executor.infrastructure import (
    Orchestrator,
    ProcessHandle,
    TaskRuntime,
    get_orchestrator,
    orchestrate,
)

__all__ = [
    "Orchestrator",
    "OrchestratorState",
    "Outcome",
    "ProcessHandle",
    "ProcessStatus",
    "TaskDescriptor",
    "TaskRuntime",
    "WorkerRequest",
    "get_orchestrator",
    "orchestrate",
]
