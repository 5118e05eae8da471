"""Task descriptor model supplied by callers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TaskDescriptor:
    """One independently executable unit of work plus its data context.

    Callers may pass instances of this class or plain mappings with the same
    keys to orchestrate(). Validation happens at orchestration time so that
    a bad task is reported through the completion callback.

    Attributes:
        logic: Task function called as ``logic(context, done)``, or the name
               of a task registered with the @task decorator
        context: Picklable values handed to the task function as its first
                 argument (optional)
    """

    logic: Callable[..., Any] | str
    context: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation.

        Returns:
            Dictionary with logic and context
        """
        return {"logic": self.logic, "context": self.context}
