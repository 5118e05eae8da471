"""Exception hierarchy for paratask."""

from __future__ import annotations

import traceback
from typing import Any

__all__ = (
    "ArgumentError",
    "ExchangeError",
    "ParataskError",
    "TaskFailedError",
    "TaskRuntimeError",
    "TaskValidationError",
    "WorkerDiedError",
)


class ParataskError(Exception):
    """Base exception for all paratask errors."""


class ArgumentError(ParataskError, TypeError):
    """Raised synchronously when orchestrate() is called with malformed arguments."""


class TaskValidationError(ParataskError, TypeError):
    """Reports a task that failed shape validation.

    Delivered through the completion callback, never raised from orchestrate().
    """

    def __init__(self, task_index: int, message: str) -> None:
        super().__init__(f"Task with index {task_index} {message}")
        self.task_index = task_index
        self.detail = message

    def __reduce__(self) -> tuple[Any, ...]:
        return type(self), (self.task_index, self.detail)


class ExchangeError(ParataskError, OSError):
    """Raised when the exchange channel cannot persist or retrieve a payload."""


class TaskRuntimeError(ParataskError):
    """
    A fault captured inside a worker while running task logic.

    Carries the original exception's type name and formatted traceback as
    text, so it survives the trip back through the worker's pipe even when
    the original exception cannot be pickled.
    """

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        traceback_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.traceback_text = traceback_text

    def __reduce__(self) -> tuple[Any, ...]:
        return type(self), (str(self), self.error_type, self.traceback_text)

    @classmethod
    def from_exception(cls, error: BaseException) -> TaskRuntimeError:
        """Describe an exception raised by task logic.

        Args:
            error: The captured exception

        Returns:
            TaskRuntimeError with "Type: message" text and the traceback
        """
        error_type = type(error).__name__
        message = f"{error_type}: {error}" if str(error) else error_type
        traceback_text = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        return cls(message, error_type=error_type, traceback_text=traceback_text)


class WorkerDiedError(ParataskError):
    """Reports a worker process that exited without sending an outcome.

    Workers killed through their ProcessHandle do not produce this error.
    """

    def __init__(self, task_index: int, exitcode: int | None) -> None:
        super().__init__(
            f"Worker for task with index {task_index} exited with code {exitcode} "
            "before reporting an outcome"
        )
        self.task_index = task_index
        self.exitcode = exitcode

    def __reduce__(self) -> tuple[Any, ...]:
        return type(self), (self.task_index, self.exitcode)


class TaskFailedError(ParataskError):
    """Raised by Orchestrator.run() when the invocation finished with an error.

    Attributes:
        error: The first error reported (any value a task passed to done())
        results: Results collected before cancellation, indexed by task
    """

    def __init__(self, error: Any, results: list[Any]) -> None:
        super().__init__(str(error))
        self.error = error
        self.results = results
