"""
Registered task model.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from paratask.task_registry.utils.signature_utils import has_task_signature


@dataclass
class TaskMetadata:
    """
    A task function and the name workers know it by.

    Attributes:
        name: Registry key, sent to workers in place of the function.
        func: Task logic called as ``func(context, done)`` (sync or async).
        tags: Free-form labels.
        description: Free text, usually the docstring.
        is_async: Whether func is a coroutine function.
    """

    name: str
    func: Callable[..., Any]
    tags: list[str] = field(default_factory=list)
    description: str | None = None
    is_async: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Task name cannot be empty")

        if not callable(self.func):
            raise ValueError(f"Task '{self.name}': func must be callable")

        if not has_task_signature(self.func):
            raise ValueError(
                f"Task '{self.name}': func must accept exactly (context, done) arguments"
            )

    def to_dict(self) -> dict[str, Any]:
        """Describe the task without its function."""
        return {
            "name": self.name,
            "tags": list(self.tags),
            "description": self.description,
            "is_async": self.is_async,
        }
