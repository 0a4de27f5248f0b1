import asyncio

from scaling.session_registry import GenerationRegistry


async def test_cancel_sets_abort_only_for_unfinished_generations():
    registry = GenerationRegistry(eviction_seconds=60)
    first = await registry.register("s1", "job-a")
    second = await registry.register("s1", "job-b")
    other = await registry.register("s2", "job-c")
    await registry.complete("s1", "job-a")

    cancelled = await registry.cancel("s1")

    assert cancelled == 1
    assert not first.abort.is_set()
    assert second.abort.is_set()
    assert not other.abort.is_set()
    await registry.close()


async def test_cancel_by_job_id():
    registry = GenerationRegistry(eviction_seconds=60)
    first = await registry.register("s1", "job-a")
    second = await registry.register("s1", "job-b")

    assert await registry.cancel("s1", "job-b") == 1
    assert await registry.cancel("missing") == 0
    assert not first.abort.is_set() and second.abort.is_set()
    await registry.close()


async def test_idle_session_is_evicted_after_timeout():
    registry = GenerationRegistry(eviction_seconds=0.05)
    await registry.register("s1", "job-a")
    await registry.complete("s1", "job-a")

    await asyncio.sleep(0.2)

    assert await registry.cancel("s1") == 0
    assert registry._sessions == {}


async def test_new_work_disarms_eviction():
    registry = GenerationRegistry(eviction_seconds=0.05)
    await registry.register("s1", "job-a")
    await registry.complete("s1", "job-a")
    await registry.register("s1", "job-b")

    await asyncio.sleep(0.2)

    assert [e.job_id for e in await registry.active("s1")] == ["job-b"]
    await registry.close()


async def test_close_aborts_everything_in_flight():
    registry = GenerationRegistry()
    entry = await registry.register("s1", "job-a")

    await registry.close()

    assert entry.abort.is_set()
    assert await registry.active() == []
