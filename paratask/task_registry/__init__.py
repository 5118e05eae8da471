"""
Task Registry System.

Provides task registration and lookup so workers can resolve task logic by name.
"""

from paratask.task_registry.decorator import clear_registry, get_registry, task
from paratask.task_registry.domain import RegistryPort, TaskMetadata
from paratask.task_registry.infrastructure import TaskRegistry
from paratask.task_registry.utils import has_task_signature, is_async_function

__all__ = [
    # Decorator
    "task",
    "get_registry",
    "clear_registry",
    # Domain
    "TaskMetadata",
    "RegistryPort",
    # Infrastructure
    "TaskRegistry",
    # Utils
    "has_task_signature",
    "is_async_function",
]
