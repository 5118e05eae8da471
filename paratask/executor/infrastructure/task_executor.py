"""Task execution logic for worker processes."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import Any

from paratask.exceptions import TaskRuntimeError
from paratask.executor.domain.outcome import Outcome

logger = logging.getLogger(__name__)


class TaskRuntime:
    """Runs one task function on a private event loop and reports one Outcome.

    The task function is called as ``func(context, done)``. The first call to
    ``done(error, result)`` sends the Outcome and stops the loop; later calls
    are ignored. Until then the loop keeps running, so the task may finish
    from a deferred callback, an asyncio task or a thread of its own.

    Faults are converted into ``Outcome(error=TaskRuntimeError)`` wherever
    they happen on the worker's timeline:
    - raised synchronously by the task function
    - raised by callbacks scheduled on the loop (loop exception handler)
    - raised by asyncio tasks created on the loop (task factory)
    - raised and left uncaught in threads (threading.excepthook)

    Example:
        ```python
        runtime = TaskRuntime(send=connection.send)
        outcome = runtime.run(func, {"count": 10})
        ```
    """

    def __init__(self, send: Callable[[Outcome], None]) -> None:
        """Initialize the runtime.

        Args:
            send: Delivers the outcome to the orchestrator, called at most once
        """
        self._send = send
        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: int | None = None
        self.outcome: Outcome | None = None

    @property
    def reported(self) -> bool:
        """Whether the outcome has been sent."""
        return self.outcome is not None

    def done(self, error: Any = None, result: Any = None) -> None:
        """Completion function handed to the task.

        Args:
            error: None on success, anything else reports a failure
            result: Value to report on success
        """
        loop = self._loop
        if loop is not None and threading.get_ident() != self._loop_thread:
            # Called from a thread the task started
            loop.call_soon_threadsafe(self.done, error, result)
            return

        if self.outcome is not None:
            logger.debug("Ignoring repeated completion (error=%r)", error)
            return

        self.outcome = Outcome(error=error, result=result)
        self._send(self.outcome)

        if loop is not None:
            loop.stop()

    def fail(self, error: BaseException) -> None:
        """Report a captured fault, unless an outcome was already sent.

        Args:
            error: Exception raised somewhere on the worker's timeline
        """
        if self.outcome is not None:
            logger.warning("Dropping fault raised after completion: %r", error)
            return
        self.done(TaskRuntimeError.from_exception(error))

    def run(self, func: Callable[..., Any], context: dict[str, Any]) -> Outcome | None:
        """Run the task function until it calls done() or faults.

        Args:
            func: Task function called as func(context, done)
            context: First argument for the task function

        Returns:
            The reported outcome, None if the loop ended without one
        """
        # Forked children inherit the parent's running-loop marker
        asyncio._set_running_loop(None)

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        loop.set_exception_handler(self._handle_loop_exception)
        loop.set_task_factory(self._task_factory)

        previous_hook = threading.excepthook
        threading.excepthook = self._handle_thread_exception

        self._loop = loop
        self._loop_thread = threading.get_ident()
        try:
            loop.call_soon(self._invoke, func, context)
            loop.run_forever()
        finally:
            self._loop = None
            threading.excepthook = previous_hook
            try:
                _cancel_pending_tasks(loop)
            finally:
                asyncio.set_event_loop(None)
                loop.close()

        return self.outcome

    def _invoke(self, func: Callable[..., Any], context: dict[str, Any]) -> None:
        """Call the task function inside the fault boundary."""
        try:
            returned = func(context, self.done)
            if inspect.iscoroutine(returned):
                asyncio.get_running_loop().create_task(returned)
        except Exception as error:
            self.fail(error)

    def _task_factory(
        self,
        loop: asyncio.AbstractEventLoop,
        coro: Coroutine[Any, Any, Any],
        **kwargs: Any,
    ) -> asyncio.Task[Any]:
        """Create tasks that report their exception instead of losing it."""
        task = asyncio.Task(coro, loop=loop, **kwargs)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.fail(error)

    def _handle_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
    ) -> None:
        error = context.get("exception")
        if error is None:
            error = RuntimeError(context.get("message", "Unhandled event loop error"))
        self.fail(error)

    def _handle_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        loop = self._loop
        if loop is None or loop.is_closed() or args.exc_value is None:
            threading.__excepthook__(args)
            return
        loop.call_soon_threadsafe(self.fail, args.exc_value)


def _cancel_pending_tasks(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel whatever the task left behind and let it unwind."""
    pending = asyncio.all_tasks(loop)
    for task in pending:
        task.cancel()
    if pending:
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
    loop.run_until_complete(loop.shutdown_asyncgens())
