"""
Run independent tasks in parallel, each in its own operating-system process.

orchestrate() starts one worker process per task and reports either the
ordered results of every task or the first error, in which case all other
workers are killed.

Example:
    ```python
    from paratask import Orchestrator, task

    @task()
    def multiply(context, done):
        done(None, context["count"] * 10)

    async def main():
        results = await Orchestrator().run([
            {"logic": "multiply", "context": {"count": 10}},
            {"logic": multiply, "context": {"count": 20}},
        ])
        # results == [100, 200]
    ```
"""

from paratask.config import ParataskSettings
from paratask.exceptions import (
    ArgumentError,
    ExchangeError,
    ParataskError,
    TaskFailedError,
    TaskRuntimeError,
    TaskValidationError,
    WorkerDiedError,
)
from paratask.exchange import ExchangePayload, ExchangePort, FilesystemExchange
from paratask.executor import (
    Orchestrator,
    Outcome,
    ProcessHandle,
    ProcessStatus,
    TaskDescriptor,
    get_orchestrator,
    orchestrate,
)
from paratask.task_registry import TaskMetadata, TaskRegistry, clear_registry, get_registry, task

__all__ = [
    "ArgumentError",
    "ExchangeError",
    "ExchangePayload",
    "ExchangePort",
    "FilesystemExchange",
    "Orchestrator",
    "Outcome",
    "ParataskError",
    "ParataskSettings",
    "ProcessHandle",
    "ProcessStatus",
    "TaskDescriptor",
    "TaskFailedError",
    "TaskMetadata",
    "TaskRegistry",
    "TaskRuntimeError",
    "TaskValidationError",
    "WorkerDiedError",
    "clear_registry",
    "get_orchestrator",
    "get_registry",
    "orchestrate",
    "task",
]
