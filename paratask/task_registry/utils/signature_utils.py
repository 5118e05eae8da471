"""
Signature inspection utilities.
Checks that a function has the shape of task logic.
"""

import inspect
from typing import Any

# logic(context, done)
TASK_ARITY = 2


def is_async_function(func: Any) -> bool:
    """
    Check if a function is async.

    Args:
        func: Function to check.

    Returns:
        True if function is async, False otherwise.
    """
    return inspect.iscoroutinefunction(func)


def has_task_signature(func: Any) -> bool:
    """
    Check that a callable accepts exactly the task logic arguments.

    Task logic is called as ``logic(context, done)``: two positional
    parameters and nothing else required. Extra parameters with defaults,
    ``*args`` and ``**kwargs`` are rejected to keep the contract explicit.

    Args:
        func: Callable to check.

    Returns:
        True if the callable has the task logic shape, False otherwise.

    Example:
        def good(context, done): ...
        # Returns: True

        def bad(done): ...
        # Returns: False
    """
    if not callable(func):
        return False

    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures
        return False

    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )
    params = list(sig.parameters.values())
    return len(params) == TASK_ARITY and all(p.kind in positional for p in params)


def qualified_name(func: Any) -> str:
    """
    Build a registry name for a callable from its module and qualified name.

    Args:
        func: Callable to name.

    Returns:
        Name of the form ``module:qualname``.
    """
    module = getattr(func, "__module__", None) or "__main__"
    qualname = getattr(func, "__qualname__", None) or type(func).__qualname__
    return f"{module}:{qualname}"
