"""Executor infrastructure: worker processes and the orchestrator."""

from paratask.executor.infrastructure.orchestrator import (
    OrchestrationRun,
    Orchestrator,
    get_orchestrator,
    orchestrate,
)
from paratask.executor.infrastructure.process_handle import ProcessHandle
from paratask.executor.infrastructure.task_executor import TaskRuntime
from paratask.executor.infrastructure.worker import send_outcome, worker_entrypoint

__all__ = [
    "OrchestrationRun",
    "Orchestrator",
    "ProcessHandle",
    "TaskRuntime",
    "get_orchestrator",
    "orchestrate",
    "send_outcome",
    "worker_entrypoint",
]
