"""Utilities for task registry."""

from paratask.task_registry.utils.signature_utils import (
    has_task_signature,
    is_async_function,
    qualified_name,
)

__all__ = ["has_task_signature", "is_async_function", "qualified_name"]
