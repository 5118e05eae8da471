"""
Orchestrate Example

This example demonstrates how to use paratask to:
1. Register tasks using the @task decorator
2. Run tasks in parallel, one worker process per task
3. Collect ordered results
4. Observe fail-fast cancellation when one task fails
"""

import asyncio
import logging
import time

from paratask import Orchestrator, TaskFailedError, get_registry, task


@task(name="multiply", tags=["math"])
def multiply(context, done):
    """Multiply the count by 10."""
    done(None, context["count"] * 10)


@task(name="slow_sum", tags=["math"])
async def slow_sum(context, done):
    """Sum the values after a delay (async example)."""
    await asyncio.sleep(context["delay"])
    done(None, sum(context["values"]))


@task(name="fail", tags=["demo"])
def fail(context, done):
    """Report an error."""
    done("boom")


def sleep_forever(context, done):
    """Never finishes on its own (plain function, registered on the fly)."""
    while True:
        time.sleep(1)


async def main() -> None:
    """Main execution function."""
    print("=" * 60)
    print("Orchestrate Example")
    print("=" * 60)

    print("\n1. Registered Tasks:")
    for task_meta in get_registry().get_all().values():
        print(f"   - {task_meta.name} (async: {task_meta.is_async}, tags: {task_meta.tags})")

    orchestrator = Orchestrator()

    print("\n2. Running tasks in parallel:")
    results = await orchestrator.run(
        [
            {"logic": "multiply", "context": {"count": 10}},
            {"logic": "multiply", "context": {"count": 20}},
            {"logic": slow_sum, "context": {"values": [1, 2, 3], "delay": 0.2}},
        ]
    )
    print(f"   Results: {results}")

    print("\n3. Fail-fast:")
    loop = asyncio.get_running_loop()
    finished: asyncio.Future[None] = loop.create_future()

    def callback(error, partial_results):
        print(f"   Error: {error!r}, partial results: {partial_results}")
        print(f"   Killed: {[handle.killed for handle in handles]}")
        finished.set_result(None)

    handles = orchestrator.orchestrate(
        [{"logic": sleep_forever}, {"logic": "fail"}],
        callback,
    )
    print(f"   Worker pids: {[handle.pid for handle in handles]}")
    await finished

    print("\n4. Awaiting a failing run:")
    try:
        await orchestrator.run([{"logic": "multiply", "context": {"count": 1}}, {"logic": "fail"}])
    except TaskFailedError as e:
        print(f"   TaskFailedError: error={e.error!r}, results={e.results}")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
