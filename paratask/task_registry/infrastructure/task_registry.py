"""
In-memory task registry.
Resolves task names to task functions on both sides of the worker pipe.
"""

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import Any

from paratask.task_registry.domain.registry_port import RegistryPort
from paratask.task_registry.domain.task_model import TaskMetadata
from paratask.task_registry.utils.signature_utils import is_async_function, qualified_name


class TaskRegistry(RegistryPort):
    """
    Dictionary-backed registry of task logic.

    Each worker receives a snapshot() holding only its own task and looks it
    up by name, so functions never travel as source text.

    Example:
        registry = TaskRegistry()

        # Register under a chosen name
        registry.register(TaskMetadata(name="multiply", func=multiply))

        # Or let the registry name an unregistered function
        metadata = registry.ensure(other_function)
    """

    def __init__(self) -> None:
        self._by_name: dict[str, TaskMetadata] = {}
        self._by_tag: defaultdict[str, set[str]] = defaultdict(set)

    def register(self, task: TaskMetadata) -> None:
        """
        Add a task under its name.

        Args:
            task: Metadata of the task.

        Raises:
            ValueError: If the name is taken.
        """
        if task.name in self._by_name:
            raise ValueError(f"Task '{task.name}' is already registered")

        self._by_name[task.name] = task
        for tag in task.tags:
            self._by_tag[tag].add(task.name)

        logging.info(f"Registered task '{task.name}' (tags: {task.tags})")

    def get(self, name: str) -> TaskMetadata | None:
        return self._by_name.get(name)

    def find(self, func: Callable[..., Any]) -> TaskMetadata | None:
        """
        Look a task up by identity of its function.

        Args:
            func: A function that may have been registered.

        Returns:
            The first registration of func, or None.
        """
        return next((task for task in self._by_name.values() if task.func is func), None)

    def ensure(self, func: Callable[..., Any]) -> TaskMetadata:
        """
        Return the registration of func, registering it under its qualified name if needed.

        Args:
            func: Task function.

        Returns:
            Metadata the worker can resolve by name.

        Raises:
            ValueError: If func does not accept (context, done).
        """
        existing = self.find(func)
        if existing is not None:
            return existing

        # Lambdas and closures from one scope share a qualified name
        base = qualified_name(func)
        name, suffix = base, 1
        while name in self._by_name:
            suffix += 1
            name = f"{base}#{suffix}"

        metadata = TaskMetadata(
            name=name,
            func=func,
            description=func.__doc__,
            is_async=is_async_function(func),
        )
        self.register(metadata)
        return metadata

    def snapshot(self, names: Iterable[str] | None = None) -> "TaskRegistry":
        """
        Copy registrations into a new registry.

        Registrations added to the copy, for instance by ensure(), never
        reach this registry.

        Args:
            names: Names to copy (default: all).

        Returns:
            Independent registry holding the selected tasks.

        Raises:
            KeyError: If a name is not registered.
        """
        selected = self._by_name.values() if names is None else [self._by_name[n] for n in names]
        copy = TaskRegistry()
        for task in selected:
            copy._by_name[task.name] = task
            for tag in task.tags:
                copy._by_tag[tag].add(task.name)
        return copy

    def get_all(self) -> dict[str, TaskMetadata]:
        return dict(self._by_name)

    def get_tasks_by_tag(self, tag: str) -> list[TaskMetadata]:
        names = self._by_tag.get(tag, set())
        return [self._by_name[name] for name in sorted(names)]

    def unregister(self, name: str) -> bool:
        """
        Remove a task.

        Args:
            name: Registered name.

        Returns:
            False if nothing was registered under name.
        """
        task = self._by_name.pop(name, None)
        if task is None:
            return False

        for tag in task.tags:
            names = self._by_tag.get(tag)
            if names is None:
                continue
            names.discard(name)
            if not names:
                del self._by_tag[tag]

        logging.info(f"Unregistered task '{name}'")
        return True

    def get_stats(self) -> dict[str, Any]:
        """Counts of tasks and tags, split by sync and async."""
        async_count = sum(1 for task in self._by_name.values() if task.is_async)
        return {
            "total_tasks": len(self._by_name),
            "total_tags": len(self._by_tag),
            "async_tasks": async_count,
            "sync_tasks": len(self._by_name) - async_count,
        }

    def clear(self) -> None:
        self._by_name.clear()
        self._by_tag.clear()
        logging.info("Task registry cleared")

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __getstate__(self) -> dict[str, Any]:
        # Workers started with spawn/forkserver receive the registry pickled
        return {"tasks": list(self._by_name.values())}

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__init__()  # type: ignore[misc]
        for task in state["tasks"]:
            self._by_name[task.name] = task
            for tag in task.tags:
                self._by_tag[tag].add(task.name)
