"""Exchange port interface for moving task payloads to worker processes."""

from abc import ABC, abstractmethod

from paratask.exchange.domain.exchange_payload import ExchangePayload


class ExchangePort(ABC):
    """
    Abstract port for the transient store between orchestrator and workers.

    A payload is written once by the orchestrator and consumed once by the
    worker it was written for. Deletion is idempotent so every side that
    may be last to touch a payload can clean it up.
    """

    @abstractmethod
    def write(self, run_id: str, task_index: int, payload: ExchangePayload) -> str:
        """
        Persist a payload for one task.

        Args:
            run_id: Unique identifier for the orchestrate() invocation.
            task_index: Position of the task in the caller's list.
            payload: Payload to store (must be picklable).

        Returns:
            Location (path, key, etc.) unique across invocations.

        Raises:
            ExchangeError: If the payload cannot be stored.
        """
        raise NotImplementedError

    @abstractmethod
    def read(self, location: str) -> ExchangePayload:
        """
        Retrieve a payload and delete it.

        Args:
            location: Location returned by write().

        Returns:
            The stored payload.

        Raises:
            ExchangeError: If the payload is missing or cannot be decoded.
        """
        raise NotImplementedError

    @abstractmethod
    def exists(self, location: str) -> bool:
        """
        Check if a payload is still stored.

        Args:
            location: Location returned by write().

        Returns:
            True if the payload exists, False otherwise.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, location: str) -> bool:
        """
        Delete a payload; a no-op when it is already gone.

        Args:
            location: Location returned by write().

        Returns:
            True if a payload was deleted, False if it didn't exist.
        """
        raise NotImplementedError

    @abstractmethod
    def clear_run(self, run_id: str) -> int:
        """
        Delete everything left over from one invocation.

        Args:
            run_id: Unique identifier for the orchestrate() invocation.

        Returns:
            Number of payloads deleted.
        """
        raise NotImplementedError
