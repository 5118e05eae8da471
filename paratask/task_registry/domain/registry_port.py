"""
Task registry port.
What the orchestrator and workers need to resolve task logic.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from paratask.task_registry.domain.task_model import TaskMetadata


class RegistryPort(ABC):
    """
    Name-to-function lookup shared by the orchestrator and its workers.

    The orchestrator registers (or ensures) task logic before a worker is
    spawned; the worker only ever resolves names.
    """

    @abstractmethod
    def register(self, task: TaskMetadata) -> None:
        """
        Add a task under its name.

        Raises:
            ValueError: If the name is taken.
        """
        ...

    @abstractmethod
    def get(self, name: str) -> TaskMetadata | None:
        """Resolve a name, or None when nothing is registered under it."""
        ...

    @abstractmethod
    def find(self, func: Callable[..., Any]) -> TaskMetadata | None:
        """Resolve a function by identity, or None when it is not registered."""
        ...

    @abstractmethod
    def ensure(self, func: Callable[..., Any]) -> TaskMetadata:
        """
        Resolve a function, registering it under a generated name if needed.

        Raises:
            ValueError: If func does not accept (context, done).
        """
        ...

    @abstractmethod
    def get_all(self) -> dict[str, TaskMetadata]:
        """Snapshot of every registration, keyed by name."""
        ...

    @abstractmethod
    def get_tasks_by_tag(self, tag: str) -> list[TaskMetadata]:
        """Registrations carrying the tag."""
        ...
