"""Payload moved through the exchange channel."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ExchangePayload:
    """What a worker needs to run one task.

    Task logic travels by registered name; the worker resolves it in its
    own copy of the task registry.

    Attributes:
        task_name: Registered task name
        context: Values passed to the task function as its first argument
    """

    task_name: str
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the payload."""
        if not self.task_name:
            raise ValueError("task_name must not be empty")
