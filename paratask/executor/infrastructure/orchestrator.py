"""Orchestrator running every task of a list in its own worker process."""

from __future__ import annotations

import asyncio
import logging
import pickle
from collections.abc import Callable, Sequence
from multiprocessing import get_context
from typing import TYPE_CHECKING, Any

from uuid6 import uuid7

from paratask.config import ParataskSettings
from paratask.exceptions import (
    ExchangeError,
    TaskFailedError,
    TaskValidationError,
    WorkerDiedError,
)
from paratask.exchange.domain.exchange_payload import ExchangePayload
from paratask.exchange.infrastructure.filesystem_exchange import FilesystemExchange
from paratask.executor.domain.orchestrator_state import OrchestratorState
from paratask.executor.domain.outcome import Outcome, WorkerRequest
from paratask.executor.domain.validation import validate_arguments, validate_task
from paratask.executor.infrastructure.process_handle import ProcessHandle
from paratask.executor.infrastructure.worker import worker_entrypoint
from paratask.task_registry import get_registry

if TYPE_CHECKING:
    from multiprocessing.context import BaseContext

    from paratask.exchange.domain.exchange_port import ExchangePort
    from paratask.task_registry.infrastructure.task_registry import TaskRegistry

logger = logging.getLogger(__name__)

Callback = Callable[[Any, list[Any]], None]


def _noop(error: Any, results: list[Any]) -> None:
    """Completion callback used when the caller gives none."""
    return None


class OrchestrationRun:
    """State machine of a single orchestrate() invocation.

    All methods run on one event loop thread; notifications from workers are
    serialized by the loop, so no locking is needed.

    Transitions:
    - outcome with error -> finalize(error)
    - outcome with result -> store result by index, kill worker, delete payload
    - disconnect -> release pipe and payload
    - exit -> release, count down pending; zero pending -> finalize(None)
    - exit without outcome and without kill() -> finalize(WorkerDiedError)

    finalize() is one-shot: it kills every worker, deletes every payload and
    calls the callback exactly once.
    """

    def __init__(
        self,
        task_count: int,
        callback: Callback,
        loop: asyncio.AbstractEventLoop,
        registry: TaskRegistry,
        exchange: ExchangePort,
        mp_context: BaseContext,
    ) -> None:
        """Initialize a run.

        Args:
            task_count: Number of tasks in the caller's list
            callback: Completion callback, called exactly once
            loop: Event loop dispatching worker notifications
            registry: Registry resolving task logic; functions registered on the
                      fly go to a per-run snapshot and never into it
            exchange: Exchange the payloads are written to
            mp_context: multiprocessing context used to start workers
        """
        self.state = OrchestratorState.for_tasks(str(uuid7()), task_count)
        self.handles: list[ProcessHandle] = []
        self._callback = callback
        self._loop = loop
        self._registry = registry.snapshot()
        self._exchange = exchange
        self._mp_context = mp_context
        # Only fork hands task functions to workers without pickling them
        self._require_picklable = mp_context.get_start_method() != "fork"

        # task_index -> payload location, removed once deleted
        self._locations: dict[int, str] = {}
        # task indexes whose worker sent an outcome
        self._reported: set[int] = set()
        self._live_workers = 0

    @property
    def run_id(self) -> str:
        return self.state.run_id

    def start(self, tasks: Sequence[Any]) -> None:
        """Validate and spawn every task in order.

        The first task that cannot be validated or started stops the spawn
        sequence; the error is delivered through finalize() on the next
        loop iteration, like any error a worker would report.

        Args:
            tasks: Caller's task list
        """
        for task_index, task in enumerate(tasks):
            try:
                task_metadata, context = validate_task(
                    task_index, task, self._registry, require_picklable=self._require_picklable
                )
                self._spawn(task_index, ExchangePayload(task_metadata.name, context))
            except Exception as error:
                logger.error("Run %s: task %s not started: %s", self.run_id, task_index, error)
                self._loop.call_soon(self._finalize, error)
                break

    def kill_all(self) -> None:
        """Kill every worker of this run."""
        for handle in self.handles:
            self._release(handle, kill=True)

    def _spawn(self, task_index: int, payload: ExchangePayload) -> None:
        """Write the payload, start the worker and hand it the payload location."""
        location = self._exchange.write(self.run_id, task_index, payload)
        self._locations[task_index] = location

        parent_conn, child_conn = self._mp_context.Pipe(duplex=True)
        process = self._mp_context.Process(  # type: ignore[attr-defined]
            target=worker_entrypoint,
            args=(child_conn, self._exchange, self._registry.snapshot([payload.task_name])),
            name=f"paratask-{self.run_id}-{task_index}",
            daemon=True,
        )
        try:
            process.start()
        except BaseException as error:
            parent_conn.close()
            self._delete_payload(task_index)
            if isinstance(error, (pickle.PicklingError, AttributeError, TypeError)):
                raise TaskValidationError(
                    task_index, f"could not be sent to a worker process: {error}"
                ) from error
            raise
        finally:
            # Only the worker holds this end, so its exit shows up as EOF
            child_conn.close()

        handle = ProcessHandle(task_index, process, parent_conn)
        self.handles.append(handle)
        self._live_workers += 1
        handle.watch(self._loop, self._on_message, self._on_disconnect, self._on_exit)
        logger.debug(
            "Run %s: spawned worker pid=%s for task %s (%s)",
            self.run_id,
            handle.pid,
            task_index,
            payload.task_name,
        )

        try:
            handle.send(WorkerRequest(payload_location=location))
        except BrokenPipeError:
            # Worker died at once, its exit notification reports it
            logger.warning("Run %s: worker for task %s hung up early", self.run_id, task_index)

    def _on_message(self, handle: ProcessHandle, message: Any) -> None:
        if not isinstance(message, Outcome):
            logger.warning(
                "Run %s: ignoring unexpected message from task %s: %r",
                self.run_id,
                handle.task_index,
                message,
            )
            return

        self._reported.add(handle.task_index)
        if message.failed:
            logger.info("Run %s: task %s reported an error", self.run_id, handle.task_index)
            self._finalize(message.error)
            return

        self.state.record_result(handle.task_index, message.result)
        # The outcome was the worker's whole job
        self._release(handle, kill=True)

    def _on_disconnect(self, handle: ProcessHandle) -> None:
        self._release(handle, kill=False)

    def _on_exit(self, handle: ProcessHandle) -> None:
        self._release(handle, kill=False)
        self._live_workers -= 1

        if handle.task_index not in self._reported and not handle.killed:
            self._finalize(WorkerDiedError(handle.task_index, handle.exitcode))

        if self.state.mark_worker_done() == 0:
            self._finalize(None)

        if self._live_workers == 0:
            self._clear_exchange()

    def _release(self, handle: ProcessHandle, *, kill: bool) -> None:
        """Free everything held for one worker."""
        if kill:
            handle.kill()
        self._delete_payload(handle.task_index)
        handle.release()

    def _delete_payload(self, task_index: int) -> None:
        location = self._locations.pop(task_index, None)
        if location is None:
            return
        try:
            self._exchange.delete(location)
        except ExchangeError as error:
            logger.error("Run %s: %s", self.run_id, error)

    def _clear_exchange(self) -> None:
        try:
            self._exchange.clear_run(self.run_id)
        except ExchangeError as error:
            logger.error("Run %s: %s", self.run_id, error)

    def _finalize(self, error: Any) -> None:
        if not self.state.claim_finalize():
            if error is not None:
                logger.debug("Run %s: dropping error after finalize: %r", self.run_id, error)
            return

        self.kill_all()
        # Payloads of tasks that never got a worker
        for task_index in list(self._locations):
            self._delete_payload(task_index)

        logger.info(
            "Run %s finished %s in %.3fs",
            self.run_id,
            "successfully" if error is None else "with error",
            self.state.get_execution_time(),
        )
        try:
            self._callback(error, self.state.snapshot())
        except Exception:
            logger.exception("Run %s: completion callback raised", self.run_id)


class Orchestrator:
    """Runs lists of tasks in parallel, one worker process per task.

    Example:
        ```python
        def multiply(context, done):
            done(None, context["count"] * 10)

        async def main():
            orchestrator = Orchestrator()
            results = await orchestrator.run([
                {"logic": multiply, "context": {"count": 10}},
                {"logic": multiply, "context": {"count": 20}},
            ])
            assert results == [100, 200]
        ```
    """

    def __init__(
        self,
        registry: TaskRegistry | None = None,
        exchange: ExchangePort | None = None,
        settings: ParataskSettings | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Task registry (default: global registry)
            exchange: Exchange channel (default: FilesystemExchange under settings.exchange_dir)
            settings: Settings (default: ParataskSettings())
        """
        self.settings = settings or ParataskSettings()
        self.registry = registry if registry is not None else get_registry()
        self.exchange = exchange or FilesystemExchange(self.settings.exchange_dir)
        self.mp_context = get_context(self.settings.start_method)

    def orchestrate(
        self,
        tasks: Sequence[Any],
        callback: Callback | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> list[ProcessHandle]:
        """Start one worker per task and return their handles immediately.

        ``callback(error, results)`` is called exactly once on the event
        loop: with ``error=None`` and every result in task order once all
        workers have finished, or with the first error, after every other
        worker has been killed.

        Args:
            tasks: Non-empty list of TaskDescriptor or {"logic", "context"} mappings
            callback: Completion callback (optional)
            loop: Event loop for notifications (default: the running loop)

        Returns:
            Handles of the spawned workers, in task order

        Raises:
            ArgumentError: If tasks is not a non-empty sequence or callback is not callable
            RuntimeError: If no loop is given and none is running
        """
        validate_arguments(tasks, callback)
        if loop is None:
            loop = asyncio.get_running_loop()

        run = OrchestrationRun(
            task_count=len(tasks),
            callback=callback or _noop,
            loop=loop,
            registry=self.registry,
            exchange=self.exchange,
            mp_context=self.mp_context,
        )
        run.start(tasks)
        return run.handles

    async def run(self, tasks: Sequence[Any]) -> list[Any]:
        """Run tasks and wait for all of their results.

        Cancelling the awaiting coroutine kills every worker.

        Args:
            tasks: Non-empty list of TaskDescriptor or {"logic", "context"} mappings

        Returns:
            Results in task order

        Raises:
            ArgumentError: If tasks is malformed at the top level
            TaskFailedError: If any task failed; carries the error and partial results
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[list[Any]] = loop.create_future()

        def callback(error: Any, results: list[Any]) -> None:
            if future.done():
                return
            if error is None:
                future.set_result(results)
            else:
                future.set_exception(TaskFailedError(error, results))

        handles = self.orchestrate(tasks, callback, loop=loop)
        try:
            return await future
        except asyncio.CancelledError:
            for handle in handles:
                handle.kill()
            raise


_default_orchestrator: Orchestrator | None = None


def get_orchestrator() -> Orchestrator:
    """
    Get the default orchestrator, configured from PARATASK_* environment variables.

    Returns:
        The shared Orchestrator instance.
    """
    global _default_orchestrator
    if _default_orchestrator is None:
        _default_orchestrator = Orchestrator(settings=ParataskSettings.from_env())
    return _default_orchestrator


def orchestrate(
    tasks: Sequence[Any],
    callback: Callback | None = None,
) -> list[ProcessHandle]:
    """Run tasks with the default orchestrator. See Orchestrator.orchestrate()."""
    return get_orchestrator().orchestrate(tasks, callback)
