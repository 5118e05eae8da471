"""Test fixtures for executor tests."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

from paratask.exceptions import ExchangeError
from paratask.exchange.domain.exchange_port import ExchangePort

if TYPE_CHECKING:
    from multiprocessing.connection import Connection

    from paratask.exchange.domain.exchange_payload import ExchangePayload
    from paratask.executor.infrastructure.process_handle import ProcessHandle


class InMemoryExchange(ExchangePort):
    """In-memory implementation of ExchangePort for testing.

    Workers started with the fork start method see a copy of the payloads
    written before they were spawned. Deletions made by a worker stay in
    the worker, so tests can only observe deletions made by the parent.
    """

    def __init__(self) -> None:
        """Initialize in-memory exchange."""
        self.payloads: dict[str, ExchangePayload] = {}
        self.cleared_runs: list[str] = []

    def write(self, run_id: str, task_index: int, payload: ExchangePayload) -> str:
        location = f"memory://{run_id}/{task_index}"
        self.payloads[location] = payload
        return location

    def read(self, location: str) -> ExchangePayload:
        try:
            return self.payloads.pop(location)
        except KeyError as e:
            raise ExchangeError(f"Payload not found: {location}") from e

    def exists(self, location: str) -> bool:
        return location in self.payloads

    def delete(self, location: str) -> bool:
        return self.payloads.pop(location, None) is not None

    def clear_run(self, run_id: str) -> int:
        prefix = f"memory://{run_id}/"
        stale = [location for location in self.payloads if location.startswith(prefix)]
        for location in stale:
            del self.payloads[location]
        self.cleared_runs.append(run_id)
        return len(stale)


class FailingExchange(InMemoryExchange):
    """Exchange whose writes fail from a given task index on."""

    def __init__(self, fail_from: int = 0) -> None:
        """Initialize failing exchange.

        Args:
            fail_from: First task index whose payload cannot be written
        """
        super().__init__()
        self.fail_from = fail_from

    def write(self, run_id: str, task_index: int, payload: ExchangePayload) -> str:
        if task_index >= self.fail_from:
            raise ExchangeError("No space left on device")
        return super().write(run_id, task_index, payload)


class CallbackRecorder:
    """Completion callback that records every call and can be awaited."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, list[Any]]] = []
        self.observed_handles: list[list[bool]] = []
        self.handles: list[ProcessHandle] = []
        self._called = asyncio.Event()

    def __call__(self, error: Any, results: list[Any]) -> None:
        self.calls.append((error, results))
        # What the caller could see from inside the callback
        self.observed_handles.append([handle.killed for handle in self.handles])
        self._called.set()

    async def wait(self, timeout: float = 10.0) -> tuple[Any, list[Any]]:
        """Wait for the first call.

        Returns:
            The (error, results) pair of the first call
        """
        await asyncio.wait_for(self._called.wait(), timeout)
        return self.calls[0]


async def wait_for_exit(handles: list[ProcessHandle], timeout: float = 10.0) -> None:
    """Wait until every handle has been reaped."""
    deadline = time.monotonic() + timeout
    while not all(handle.exited for handle in handles):
        if time.monotonic() > deadline:
            raise TimeoutError(f"Workers still running: {handles}")
        await asyncio.sleep(0.02)


def send_and_exit(connection: Connection, message: Any) -> None:
    """Process target: send one message, then exit."""
    connection.send(message)
    connection.close()


def sleep_forever(connection: Connection) -> None:
    """Process target: block until terminated."""
    while True:
        time.sleep(1)
