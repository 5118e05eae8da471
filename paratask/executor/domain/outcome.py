"""Messages exchanged with worker processes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class WorkerRequest:
    """Sent to a freshly spawned worker: where its payload is stored.

    Attributes:
        payload_location: Exchange location returned by ExchangePort.write()
    """

    payload_location: str

    def __post_init__(self) -> None:
        """Validate the request."""
        if not self.payload_location:
            raise ValueError("payload_location must not be empty")


@dataclass(frozen=True)
class Outcome:
    """The single (error, result) message a worker reports.

    Like the arguments of the ``done`` function, a task succeeded exactly
    when ``error`` is None.

    Attributes:
        error: First argument passed to done(), or a captured fault
        result: Second argument passed to done()
    """

    error: Any = None
    result: Any = None

    @property
    def failed(self) -> bool:
        """Check if the outcome carries an error.

        Returns:
            True if error is not None
        """
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation.

        Returns:
            Dictionary with error and result
        """
        return {"error": self.error, "result": self.result}

    @classmethod
    def success(cls, result: Any) -> Outcome:
        """Create a successful outcome.

        Args:
            result: Value produced by the task

        Returns:
            Outcome without error
        """
        return cls(error=None, result=result)

    @classmethod
    def failure(cls, error: Any) -> Outcome:
        """Create a failed outcome.

        Args:
            error: Error reported by the task or captured by the worker

        Returns:
            Outcome with error and no result

        Raises:
            ValueError: If error is None
        """
        if error is None:
            raise ValueError("failure outcome requires an error")
        return cls(error=error, result=None)
