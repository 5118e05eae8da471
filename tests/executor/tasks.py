"""Module-level task functions for testing.

These functions are defined at module level so they can be resolved by
name in worker processes regardless of the start method.
"""

import asyncio
import os
import threading
import time


def _raise_value_error() -> None:
    raise ValueError("Intentional failure")


async def _failing_coroutine() -> None:
    await asyncio.sleep(0)
    _raise_value_error()


def multiply(context, done):
    """Multiply the "count" context value by 10."""
    done(None, context["count"] * 10)


def echo_context(context, done):
    """Report the context it was given."""
    done(None, dict(context))


def slow_square(context, done):
    """Sleep for "delay" seconds, then report "value" squared."""
    time.sleep(context["delay"])
    done(None, context["value"] ** 2)


def delayed_result(context, done):
    """Report "value" from a callback scheduled "delay" seconds later."""
    asyncio.get_running_loop().call_later(context["delay"], done, None, context["value"])


async def async_multiply(context, done):
    """Async variant of multiply."""
    await asyncio.sleep(context.get("delay", 0))
    done(None, context["count"] * 10)


def fail_with_boom(context, done):
    """Report 'boom' as the error."""
    done("boom")


def raise_value_error(context, done):
    """Raise synchronously."""
    _raise_value_error()


def raise_in_callback(context, done):
    """Raise from a callback scheduled on the event loop."""
    asyncio.get_running_loop().call_soon(_raise_value_error)


def raise_in_asyncio_task(context, done):
    """Raise from an asyncio task that nobody awaits."""
    asyncio.get_running_loop().create_task(_failing_coroutine())


async def async_raise(context, done):
    """Raise from the body of an async task function."""
    await asyncio.sleep(0)
    _raise_value_error()


def raise_in_thread(context, done):
    """Raise from a thread started by the task."""
    threading.Thread(target=_raise_value_error).start()


def done_from_thread(context, done):
    """Report the result from another thread."""
    threading.Thread(target=done, args=(None, context.get("value", 42))).start()


def done_twice(context, done):
    """Call done twice; only the first call counts."""
    done(None, "first")
    done("second call must be ignored")


def raise_after_done(context, done):
    """Raise after reporting a result."""
    done(None, "reported")
    _raise_value_error()


def return_unpicklable(context, done):
    """Report a result that cannot be pickled."""
    done(None, lambda: None)


def exit_without_outcome(context, done):
    """Exit the worker without reporting anything."""
    os._exit(3)


def never_finish(context, done):
    """Never call done; the worker runs until killed."""
    return None


def wrong_arity(done):
    """Task function with the wrong signature."""
    done(None, None)


def delayed_failure(context, done):
    """Report "error" from a callback scheduled "delay" seconds later."""
    asyncio.get_running_loop().call_later(context["delay"], done, context["error"])
