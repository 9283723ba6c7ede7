"""Tests for background task handling."""

import asyncio

from nutrition_pipeline.services.background import BackgroundTasks


def test_drain_waits_for_spawned_and_nested_tasks() -> None:
    background = BackgroundTasks()
    done: list[str] = []

    async def child() -> None:
        done.append("child")

    async def parent() -> None:
        await asyncio.sleep(0)
        background.spawn("child", child)
        done.append("parent")

    async def run() -> None:
        background.spawn("parent", parent)
        await background.drain()

    asyncio.run(run())

    assert done == ["parent", "child"]
    assert background.pending == 0


def test_failing_task_is_contained() -> None:
    background = BackgroundTasks()

    async def boom() -> None:
        raise RuntimeError("write failed")

    async def run() -> None:
        background.spawn("boom", boom)
        await background.drain()

    asyncio.run(run())

    assert background.pending == 0


def test_spawn_without_running_loop_is_dropped() -> None:
    background = BackgroundTasks()
    called: list[bool] = []

    async def work() -> None:
        called.append(True)

    background.spawn("work", work)

    assert background.pending == 0
    assert called == []
