"""
@task decorator.
Registers task logic in the process-wide registry under a stable name.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from paratask.task_registry.domain.task_model import TaskMetadata
from paratask.task_registry.infrastructure.task_registry import TaskRegistry
from paratask.task_registry.utils.signature_utils import is_async_function

TaskFunc = TypeVar("TaskFunc", bound=Callable[..., Any])

# Used by Orchestrator() when no registry is passed
_global_registry = TaskRegistry()


def task(
    name: str | None = None,
    *,
    tags: list[str] | None = None,
    description: str | None = None,
) -> Callable[[TaskFunc], TaskFunc]:
    """
    Register a function as task logic.

    The function must accept exactly ``(context, done)``: the task's context
    mapping and the completion function ``done(error=None, result=None)``.
    Registered tasks can be referred to by name in a task's ``logic``.

    Args:
        name: Registered name (default: the function's __name__).
        tags: Labels for get_tasks_by_tag().
        description: Free text (default: the function's docstring).

    Returns:
        A decorator that registers and returns the function as is.

    Raises:
        ValueError: If the name is taken or the signature is wrong.

    Example:
        @task(name="multiply", tags=["math"])
        def multiply(context, done):
            done(None, context["count"] * 10)

        @task()
        async def fetch(context, done):
            await asyncio.sleep(context["delay"])
            done(None, "fetched")
    """

    def register(func: TaskFunc) -> TaskFunc:
        _global_registry.register(
            TaskMetadata(
                name=name or func.__name__,
                func=func,
                tags=list(tags or ()),
                description=description or func.__doc__,
                is_async=is_async_function(func),
            )
        )
        return func

    return register


def get_registry() -> TaskRegistry:
    """Process-wide registry filled by @task."""
    return _global_registry


def clear_registry() -> None:
    """Forget every @task registration. Meant for tests."""
    _global_registry.clear()
