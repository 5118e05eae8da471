"""Pytest configuration and shared fixtures."""

import contextlib
import multiprocessing as mp
from collections.abc import Generator

import pytest

from paratask.task_registry import TaskRegistry, clear_registry

# Set multiprocessing start method to 'fork' for tests
# This allows worker processes to inherit the parent's state, including
# in-memory test doubles and tasks registered inside test functions
with contextlib.suppress(RuntimeError):
    mp.set_start_method("fork", force=True)


@pytest.fixture(autouse=True)
def clean_global_registry() -> Generator[None, None, None]:
    """Clean the global registry before and after each test."""
    clear_registry()
    yield
    clear_registry()


@pytest.fixture
def registry() -> TaskRegistry:
    """Create an empty task registry."""
    return TaskRegistry()
