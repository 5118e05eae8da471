"""Executor domain models."""

from paratask.exceptions import (
    ArgumentError,
    ExchangeError,
    ParataskError,
    TaskFailedError,
    TaskRuntimeError,
    TaskValidationError,
    WorkerDiedError,
)
from paratask.executor.domain.orchestrator_state import OrchestratorState
from paratask.executor.domain.outcome import Outcome, WorkerRequest
from paratask.executor.domain.process_status import ProcessStatus
from paratask.executor.domain.task_descriptor import TaskDescriptor
from paratask.executor.domain.validation import validate_arguments, validate_task

__all__ = [
    "ArgumentError",
    "ExchangeError",
    "OrchestratorState",
    "Outcome",
    "ParataskError",
    "ProcessStatus",
    "TaskDescriptor",
    "TaskFailedError",
    "TaskRuntimeError",
    "TaskValidationError",
    "WorkerDiedError",
    "WorkerRequest",
    "validate_arguments",
    "validate_task",
]
