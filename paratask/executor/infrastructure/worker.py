"""Worker process implementation for task execution."""

from __future__ import annotations

import functools
import logging
import pickle
from typing import TYPE_CHECKING

from paratask.exceptions import ExchangeError, TaskRuntimeError
from paratask.executor.domain.outcome import Outcome, WorkerRequest
from paratask.executor.infrastructure.task_executor import TaskRuntime

if TYPE_CHECKING:
    from multiprocessing.connection import Connection

    from paratask.exchange.domain.exchange_port import ExchangePort
    from paratask.task_registry.infrastructure.task_registry import TaskRegistry

logger = logging.getLogger(__name__)


def send_outcome(connection: Connection, outcome: Outcome) -> None:
    """Send an outcome back to the orchestrator.

    An outcome that cannot be pickled is replaced by a TaskRuntimeError
    describing why. A hung-up orchestrator is not an error: it has already
    finalized and killed or forgotten this worker.

    Args:
        connection: Worker end of the pipe
        outcome: Outcome to send
    """
    try:
        connection.send(outcome)
    except BrokenPipeError:
        logger.debug("Orchestrator hung up before receiving outcome")
    except (pickle.PicklingError, TypeError, AttributeError) as error:
        logger.error("Outcome is not picklable: %s", error)
        replacement = Outcome.failure(
            TaskRuntimeError(
                f"Outcome is not picklable: {error}",
                error_type=type(error).__name__,
            )
        )
        try:
            connection.send(replacement)
        except BrokenPipeError:
            logger.debug("Orchestrator hung up before receiving outcome")


def worker_entrypoint(
    connection: Connection,
    exchange: ExchangePort,
    registry: TaskRegistry,
) -> None:
    """Entry point of a worker process running exactly one task.

    Waits for a WorkerRequest, reads (and thereby deletes) the payload it
    points to, resolves the task by name and runs it under TaskRuntime.
    Problems before the task starts are reported as the outcome too.

    Args:
        connection: Worker end of the pipe shared with the orchestrator
        exchange: Exchange the payload was written to
        registry: Task registry to look up task functions by name
    """
    send = functools.partial(send_outcome, connection)
    try:
        try:
            request = connection.recv()
        except EOFError:
            logger.debug("Orchestrator hung up before sending a request")
            return

        try:
            if not isinstance(request, WorkerRequest):
                raise ExchangeError(f"Unexpected request: {type(request).__name__}")
            payload = exchange.read(request.payload_location)
        except ExchangeError as error:
            send(Outcome.failure(error))
            return

        task_metadata = registry.get(payload.task_name)
        if task_metadata is None:
            send(
                Outcome.failure(
                    TaskRuntimeError(
                        f"Task '{payload.task_name}' not found in registry",
                        error_type="LookupError",
                    )
                )
            )
            return

        logger.debug("Running task '%s'", task_metadata.name)
        TaskRuntime(send).run(task_metadata.func, payload.context)
    finally:
        connection.close()
