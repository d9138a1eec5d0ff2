"""Tests for terminal consumers: for_each, collect, fold, find, join, first."""

from __future__ import annotations

import anyio
import pytest

from klaw_pipes.option import Nothing, Some
from klaw_pipes.stream import Indexed, collect, find, first, fold, for_each, join
from tests.sources import TrackedSource, Unbounded


class TestForEach:
    """Tests for for_each()."""

    async def test_visits_every_item_with_index(self) -> None:
        seen: list[tuple[str, int]] = []
        await for_each('abc', lambda item, index: seen.append((item, index)))
        assert seen == [('a', 0), ('b', 1), ('c', 2)]

    async def test_awaits_async_callback(self) -> None:
        seen: list[int] = []

        async def record(item: int, _index: int) -> None:
            await anyio.sleep(0)
            seen.append(item)

        await for_each([1, 2], record)
        assert seen == [1, 2]

    async def test_stops_at_first_failure(self) -> None:
        source = TrackedSource([1, 2, 3])

        def fail_on_two(item: int, _index: int) -> None:
            if item == 2:
                msg = 'two'
                raise ValueError(msg)

        with pytest.raises(ValueError, match='two'):
            await for_each(source, fail_on_two)
        assert source.pulls == 2
        assert source.closes == 1


class TestCollect:
    """Tests for collect()."""

    async def test_all_items_in_order(self, numbers: list[int]) -> None:
        assert await collect(numbers) == numbers

    async def test_limit(self, numbers: list[int]) -> None:
        assert await collect(numbers, 2) == [1, 2]

    async def test_limit_pulls_at_most_limit(self, tracked: TrackedSource) -> None:
        assert await collect(tracked, limit=3) == [1, 2, 3]
        assert tracked.pulls == 3

    async def test_limit_on_unbounded(self) -> None:
        source = Unbounded()
        assert await collect(source, limit=5) == [0, 1, 2, 3, 4]
        assert source.pulls == 5

    async def test_limit_zero(self, tracked: TrackedSource) -> None:
        assert await collect(tracked, 0) == []
        assert tracked.pulls == 0

    async def test_empty(self) -> None:
        assert await collect([]) == []


class TestFold:
    """Tests for fold()."""

    async def test_sum(self) -> None:
        assert await fold([1, 2, 3], lambda acc, item, _: acc + item, 0) == 6

    async def test_empty_returns_initial(self) -> None:
        assert await fold([], lambda acc, item, _: acc + item, 'init') == 'init'

    async def test_async_reducer(self) -> None:
        async def concat(acc: str, item: str, _index: int) -> str:
            await anyio.sleep(0)
            return acc + item

        assert await fold('xyz', concat, '>') == '>xyz'

    async def test_reducer_sees_index(self) -> None:
        result = await fold('ab', lambda acc, item, index: [*acc, (index, item)], [])
        assert result == [(0, 'a'), (1, 'b')]


class TestFind:
    """Tests for find()."""

    async def test_found_with_index(self) -> None:
        result = await find([1, 2, 3], lambda item, _: item == 2)
        assert result == Some(Indexed(2, 1))
        assert result.unwrap().index == 1

    async def test_not_found(self) -> None:
        result = await find([1, 2, 3], lambda item, _: item == 9)
        assert result is Nothing

    async def test_found_none_item_is_not_nothing(self) -> None:
        result = await find([0, None], lambda item, _: item is None)
        assert result == Some(Indexed(None, 1))

    async def test_stops_pulling_at_match(self) -> None:
        source = Unbounded()
        result = await find(source, lambda item, _: item == 3)
        assert result.unwrap().item == 3
        assert source.pulls == 4
        assert source.closes == 1

    async def test_async_predicate(self) -> None:
        async def is_b(item: str, _index: int) -> bool:
            return item == 'b'

        assert (await find('abc', is_b)).unwrap() == Indexed('b', 1)


class TestJoin:
    """Tests for join()."""

    async def test_empty(self) -> None:
        assert await join([], ',') == ''

    async def test_separator_between_items(self) -> None:
        assert await join(['a', 'b', 'c'], ',') == 'a,b,c'

    async def test_single_item_no_separator(self) -> None:
        assert await join(['a'], ', ') == 'a'

    async def test_async_source(self, slow_letters) -> None:
        assert await join(slow_letters, '+') == 'a+b+c'

    async def test_stringifies_items(self) -> None:
        assert await join([1, None, 2.5], '-') == '1-None-2.5'


class TestFirst:
    """Tests for first()."""

    async def test_first_item(self) -> None:
        assert await first([7, 8]) == Some(7)

    async def test_empty(self) -> None:
        assert await first([]) is Nothing

    async def test_pulls_one_and_releases(self) -> None:
        source = Unbounded()
        assert (await first(source)).unwrap() == 0
        assert source.pulls == 1
        assert source.closes == 1
