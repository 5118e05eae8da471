"""Supervision handle for one worker process."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from paratask.executor.domain.process_status import ProcessStatus

if TYPE_CHECKING:
    import asyncio
    from multiprocessing.connection import Connection
    from multiprocessing.process import BaseProcess

logger = logging.getLogger(__name__)


class ProcessHandle:
    """
    The orchestrator's view of one worker process.

    Handles are returned to the caller by orchestrate() so workers can be
    inspected or killed while they run. A handle moves from SPAWNED to
    KILLED or EXITED and is never reused.

    Two notifications are delivered independently through an event loop:
    - disconnect: the pipe reached EOF (the worker closed its end or died)
    - exit: the process sentinel became ready; the process is reaped here

    Handles can be neither copied nor pickled.
    """

    __slots__ = (
        "task_index",
        "_process",
        "_connection",
        "_loop",
        "_on_message",
        "_on_disconnect",
        "_on_exit",
        "_pid",
        "_killed",
        "_exitcode",
    )

    def __init__(self, task_index: int, process: BaseProcess, connection: Connection) -> None:
        """
        A handle for a started process and the parent end of its pipe.

        Args:
            task_index: Position of the task this worker runs
            process: Started worker process
            connection: Parent end of the duplex pipe to the worker

        Raises:
            ValueError: If the process was never started
        """
        if process.pid is None:
            raise ValueError(f"Process {process.name} must be started before it can be handled")
        self.task_index = task_index
        self._process: BaseProcess | None = process
        self._connection: Connection | None = connection
        self._loop: asyncio.AbstractEventLoop | None = None
        self._on_message: Callable[[ProcessHandle, Any], None] | None = None
        self._on_disconnect: Callable[[ProcessHandle], None] | None = None
        self._on_exit: Callable[[ProcessHandle], None] | None = None
        self._pid = process.pid
        self._killed = False
        self._exitcode: int | None = None

    def __repr__(self) -> str:
        return f"ProcessHandle(task_index={self.task_index}, pid={self.pid}, status={self.status})"

    def __copy__(self) -> Any:
        raise NotImplementedError("ProcessHandles cannot be copied.")

    def __reduce__(self) -> Any:
        raise NotImplementedError("ProcessHandles cannot be pickled.")

    @property
    def pid(self) -> int:
        """Operating-system process id."""
        return self._pid

    @property
    def killed(self) -> bool:
        """Whether kill() terminated this worker. Stays True once set."""
        return self._killed

    @property
    def exitcode(self) -> int | None:
        """Exit code once the exit notification was handled, else None."""
        return self._exitcode

    @property
    def exited(self) -> bool:
        """Whether the process has been reaped."""
        return self._process is None

    @property
    def status(self) -> ProcessStatus:
        """Current lifecycle status."""
        if self._killed:
            return ProcessStatus.KILLED
        if self.exited:
            return ProcessStatus.EXITED
        return ProcessStatus.SPAWNED

    def send(self, message: Any) -> None:
        """
        Send a message to the worker.

        Args:
            message: Picklable message

        Raises:
            BrokenPipeError: If the worker already hung up
            OSError: If the pipe was already released
        """
        if self._connection is None:
            raise OSError(f"Connection to worker {self.pid} is released")
        self._connection.send(message)

    def kill(self) -> bool:
        """
        Terminate the worker with SIGTERM.

        Returns:
            True on the call that terminates the process, False when it is
            already killed or exited
        """
        if self._killed or self._process is None:
            return False
        if self._process.exitcode is not None:
            # Exited on its own, the exit notification is still on its way
            return False

        self._process.terminate()
        self._killed = True
        logger.debug("Killed worker pid=%s (task %s)", self.pid, self.task_index)
        return True

    def watch(
        self,
        loop: asyncio.AbstractEventLoop,
        on_message: Callable[[ProcessHandle, Any], None],
        on_disconnect: Callable[[ProcessHandle], None],
        on_exit: Callable[[ProcessHandle], None],
    ) -> None:
        """
        Deliver worker notifications on the given event loop.

        Args:
            loop: Event loop dispatching the notifications
            on_message: Called with each message received from the worker
            on_disconnect: Called once when the pipe reaches EOF
            on_exit: Called once when the process has exited and been reaped

        Raises:
            RuntimeError: If the handle was already released or its process reaped
        """
        if self._process is None or self._connection is None:
            raise RuntimeError(f"Worker {self.pid} is already reaped or released")
        self._loop = loop
        self._on_message = on_message
        self._on_disconnect = on_disconnect
        self._on_exit = on_exit
        loop.add_reader(self._connection.fileno(), self._on_readable)
        loop.add_reader(self._process.sentinel, self._on_sentinel)

    def release(self) -> None:
        """Stop listening to the pipe and close it. Safe to call repeatedly."""
        connection, self._connection = self._connection, None
        if connection is None:
            return
        if self._loop is not None and not self._loop.is_closed():
            self._loop.remove_reader(connection.fileno())
        connection.close()

    def _on_readable(self) -> None:
        if self._connection is None:
            return
        try:
            message = self._connection.recv()
        except (EOFError, OSError):
            # Any EOFError is treated as the worker hanging up
            self.release()
            if self._on_disconnect is not None:
                self._on_disconnect(self)
            return
        if self._on_message is not None:
            self._on_message(self, message)

    def _on_sentinel(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        if self._loop is not None:
            self._loop.remove_reader(process.sentinel)

        # The sentinel may be dispatched before the last message is read
        while self._connection is not None and self._connection.poll(0):
            self._on_readable()

        # Now join(...) and close() thus reclaiming OS/Python resources.
        process.join()
        self._exitcode = process.exitcode
        process.close()
        logger.debug(
            "Worker pid=%s (task %s) exited with code %s",
            self.pid,
            self.task_index,
            self._exitcode,
        )
        if self._on_exit is not None:
            self._on_exit(self)
