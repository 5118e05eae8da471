"""Infrastructure layer for task registry."""

from paratask.task_registry.infrastructure.task_registry import TaskRegistry

__all__ = ["TaskRegistry"]
