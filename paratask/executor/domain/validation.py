"""Validation of orchestrate() arguments and individual tasks."""

from __future__ import annotations

import pickle
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from paratask.exceptions import ArgumentError, TaskValidationError
from paratask.executor.domain.task_descriptor import TaskDescriptor
from paratask.task_registry.utils.signature_utils import has_task_signature

if TYPE_CHECKING:
    from paratask.task_registry.domain.task_model import TaskMetadata
    from paratask.task_registry.infrastructure.task_registry import TaskRegistry


def _describe(value: Any) -> str:
    """Short "{type} repr" description used in error messages."""
    text = repr(value)
    if len(text) > 80:
        text = text[:77] + "..."
    return f"{{{type(value).__name__}}} {text}"


def _is_picklable(func: Any) -> bool:
    try:
        pickle.dumps(func)
    except (pickle.PicklingError, AttributeError, TypeError):
        return False
    return True


def validate_arguments(tasks: Any, callback: Any) -> None:
    """Check the top-level shape of an orchestrate() call.

    Args:
        tasks: Candidate task list
        callback: Candidate completion callback (None allowed)

    Raises:
        ArgumentError: If tasks is not a non-empty list/tuple, or callback is
                       given but not callable
    """
    if (
        not isinstance(tasks, Sequence)
        or isinstance(tasks, (str, bytes, bytearray))
        or not tasks
    ):
        raise ArgumentError(
            f"1st argument must be a non-empty sequence of tasks but was: {_describe(tasks)}"
        )

    if callback is not None and not callable(callback):
        raise ArgumentError(
            f"2nd argument, if sent, must be callable but was: {_describe(callback)}"
        )


def validate_task(
    task_index: int,
    task: Any,
    registry: TaskRegistry,
    *,
    require_picklable: bool = False,
) -> tuple[TaskMetadata, dict[str, Any]]:
    """Validate one task and resolve it against the registry.

    Unregistered functions with the right signature are registered under
    their qualified name so the worker can look them up.

    Args:
        task_index: Position of the task in the caller's list
        task: TaskDescriptor or mapping with "logic" and optional "context"
        registry: Registry used to resolve and register task logic
        require_picklable: Whether the function must be picklable by reference,
                           as workers started with spawn or forkserver need

    Returns:
        Tuple of (task metadata, context dict)

    Raises:
        TaskValidationError: If the task is malformed
    """
    if isinstance(task, TaskDescriptor):
        logic, context = task.logic, task.context
    elif isinstance(task, Mapping) and task:
        logic, context = task.get("logic"), task.get("context")
    else:
        raise TaskValidationError(task_index, f"is invalid object: {_describe(task)}")

    if isinstance(logic, str):
        metadata = registry.get(logic)
        if metadata is None:
            raise TaskValidationError(
                task_index, f'refers to task "{logic}" which is not registered'
            )
    elif callable(logic):
        if not has_task_signature(logic):
            raise TaskValidationError(
                task_index,
                f'must have "logic" accepting exactly (context, done) but was: {_describe(logic)}',
            )
        metadata = registry.ensure(logic)
    else:
        raise TaskValidationError(
            task_index,
            f'must have "logic" as a function or registered task name but was: {_describe(logic)}',
        )

    if require_picklable and not _is_picklable(metadata.func):
        raise TaskValidationError(
            task_index,
            f'must have "logic" defined at module level so worker processes can import it '
            f"but was: {_describe(metadata.func)}",
        )

    if context is None:
        return metadata, {}

    if not isinstance(context, Mapping):
        raise TaskValidationError(
            task_index,
            f'"context", if sent, must be a mapping but was: {_describe(context)}',
        )

    bad_keys = [key for key in context if not isinstance(key, str)]
    if bad_keys:
        raise TaskValidationError(
            task_index, f'"context" keys must be strings but got: {bad_keys!r}'
        )

    return metadata, dict(context)
