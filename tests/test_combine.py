"""Tests for the combine() fan-in merge engine.

Cross-source interleaving is a race, so tests assert per-source order and
completeness, and only pin cross-source order where delays make it certain.
"""

from __future__ import annotations

import anyio
import pytest

from klaw_pipes._logging import add_log_hook, clear_log_hooks, configure_logging
from klaw_pipes.stream import collect, combine, first, take
from tests.sources import TrackedSource, Unbounded, delayed, settle


def assert_interleaving(result: list[object], *sources: list[object]) -> None:
    """Assert `result` is some interleaving of `sources`."""
    assert sorted(map(repr, result)) == sorted(repr(item) for source in sources for item in source)
    for source in sources:
        assert [item for item in result if item in source] == source


class TestCombineBasic:
    """Tests for basic merge behavior."""

    async def test_empty_source_list(self) -> None:
        assert await collect(combine([])) == []

    async def test_single_source(self) -> None:
        assert await collect(combine([[1, 2, 3]])) == [1, 2, 3]

    async def test_all_items_exactly_once(self) -> None:
        result = await collect(combine([['a1', 'a2'], ['b1'], [], ['c1', 'c2', 'c3']]))
        assert_interleaving(result, ['a1', 'a2'], ['b1'], ['c1', 'c2', 'c3'])

    async def test_mixes_sync_and_async_sources(self) -> None:
        result = await collect(combine([delayed(['x', 'y'], 0.001), ['p', 'q']]))
        assert_interleaving(result, ['x', 'y'], ['p', 'q'])

    async def test_awaitable_source_list(self) -> None:
        """The list of sources may itself be pending."""

        async def sources() -> list[list[int]]:
            await anyio.sleep(0)
            return [[1], [2]]

        assert sorted(await collect(combine(sources()))) == [1, 2]

    async def test_lazy_until_first_pull(self) -> None:
        source = TrackedSource([1])
        merged = combine([source])
        await anyio.sleep(0.01)
        assert source.pulls == 0
        assert await collect(merged) == [1]


class TestCombineOrdering:
    """Tests for race ordering."""

    async def test_ready_first_wins(self) -> None:
        """A yields a0, a1 after d and 2d; B yields b0 immediately."""
        a = delayed(['a0', 'a1'], 0.02)
        b = delayed(['b0'], 0)
        assert await collect(combine([a, b])) == ['b0', 'a0', 'a1']

    async def test_faster_source_not_blocked_by_slower(self) -> None:
        slow = delayed(['slow'], 0.05)
        fast = delayed(['f1', 'f2', 'f3'], 0.001)
        result = await collect(combine([slow, fast]))
        assert result == ['f1', 'f2', 'f3', 'slow']

    async def test_per_source_order_preserved(self) -> None:
        a = delayed(range(0, 10), 0.001)
        b = delayed(range(100, 110), 0.0015)
        result = await collect(combine([a, b]))
        assert_interleaving(result, list(range(0, 10)), list(range(100, 110)))

    async def test_one_fetch_in_flight_per_source(self) -> None:
        """A source is not pulled again until its previous item was taken."""
        source = TrackedSource(range(5))
        merged = combine([source])
        assert await anext(merged) == 0
        await anyio.sleep(0.01)
        # The item after the one just yielded may be in flight, no more.
        assert source.pulls <= 2
        await merged.aclose()


class TestCombineRelease:
    """Tests for cooperative release of sources on exit."""

    async def test_early_stop_releases_every_active_source_once(self) -> None:
        sources = [TrackedSource(range(10), delay=0.01) for _ in range(3)]
        assert len(await collect(take(combine(sources), 1))) == 1
        await settle()
        for source in sources:
            assert source.closes == 1

    async def test_exhausted_sources_not_released(self) -> None:
        done = TrackedSource([])
        busy = Unbounded()
        assert len(await collect(take(combine([done, busy]), 3))) == 3
        await settle()
        assert done.closes == 0
        assert busy.closes == 1

    async def test_in_flight_fetch_is_cancelled(self) -> None:
        hung = TrackedSource(['never'], delay=10)
        assert await collect(take(combine([hung, ['now']]), 1)) == ['now']
        await settle()
        assert hung.cancelled == 1
        assert hung.closes == 1

    async def test_release_does_not_block_consumer(self) -> None:
        """The merge returns without waiting for sibling release."""
        may_close = anyio.Event()

        class SlowClose(TrackedSource):
            async def aclose(self) -> None:
                await may_close.wait()
                await super().aclose()

        slow = SlowClose(['x'], delay=10)
        with anyio.fail_after(1):
            assert await collect(take(combine([slow, ['fast']]), 1)) == ['fast']
        assert slow.closes == 0

        may_close.set()
        await settle()
        assert slow.closes == 1

    async def test_async_generator_sources_finalized(self) -> None:
        finalized: list[str] = []

        async def producer(name: str):
            try:
                while True:
                    await anyio.sleep(0.001)
                    yield name
            finally:
                finalized.append(name)

        result = await first(combine([producer('a'), producer('b')]))
        assert result.is_some()
        await settle()
        assert sorted(finalized) == ['a', 'b']

    async def test_natural_drain_needs_no_release(self) -> None:
        a = TrackedSource([1, 2])
        b = TrackedSource([3])
        assert sorted(await collect(combine([a, b]))) == [1, 2, 3]
        await settle()
        assert a.closes == 0
        assert b.closes == 0


class TestCombineFailure:
    """Tests for source failures during a merge."""

    async def test_source_failure_propagates(self) -> None:
        broken = TrackedSource([1, 2], fail_at=1)
        with pytest.raises(RuntimeError, match='source failed at item 1'):
            await collect(combine([broken, delayed([9], 0.05)]))

    async def test_siblings_released_after_failure(self) -> None:
        broken = TrackedSource([1], fail_at=0)
        sibling = TrackedSource(range(5), delay=0.01)
        with pytest.raises(RuntimeError):
            await collect(combine([broken, sibling]))
        await settle()
        assert sibling.closes == 1

    async def test_invalid_source_closes_valid_ones(self) -> None:
        """A non-iterable source fails the merge without leaking the others."""
        first_source = TrackedSource([1])
        last_source = TrackedSource([2])
        with pytest.raises(TypeError, match='not iterable'):
            await collect(combine([first_source, 42, last_source]))
        assert first_source.closes == 1
        assert last_source.closes == 1
        assert first_source.pulls == 0

    async def test_items_before_failure_are_delivered(self) -> None:
        broken = TrackedSource(['ok'], fail_at=1)
        merged = combine([broken])
        assert await anext(merged) == 'ok'
        with pytest.raises(RuntimeError):
            await anext(merged)

    async def test_release_failure_is_logged_not_raised(self) -> None:
        events: list[dict[str, object]] = []

        class BadClose(TrackedSource):
            async def aclose(self) -> None:
                msg = 'close failed'
                raise OSError(msg)

        configure_logging(level='DEBUG', json_output=True)
        clear_log_hooks()
        add_log_hook(events.append)
        try:
            bad = BadClose(range(3), delay=0.01)
            assert await collect(take(combine([bad, ['fast']]), 1)) == ['fast']
            await settle()
        finally:
            clear_log_hooks()

        failures = [e for e in events if e.get('event') == 'combine.release_failed']
        assert len(failures) == 1
        assert failures[0]['source'] == 0
        assert 'close failed' in str(failures[0]['error'])
