"""Source constructors: sequences built from non-sequence inputs."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Iterable
from typing import TYPE_CHECKING

import anyio

from klaw_pipes.stream._util import closing, resolve, to_async_iterator

if TYPE_CHECKING:
    from klaw_pipes.protocols import Source

__all__ = [
    'chain',
    'from_awaitable',
    'from_iterable',
    'interval',
]


async def from_iterable[T](values: Iterable[T | Awaitable[T]]) -> AsyncIterator[T]:
    """Yield each value of a sync iterable, awaiting awaitable values first.

    Example:
        ```python
        values = from_iterable([asyncio.sleep(0.1, result=1), 2])
        assert await collect(values) == [1, 2]
        ```
    """
    async with closing(to_async_iterator(values)) as iterator:
        async for value in iterator:
            yield await resolve(value)


async def from_awaitable[T](awaitable: Awaitable[T]) -> AsyncIterator[T]:
    """Yield the resolved value of `awaitable` as a one-item sequence."""
    yield await awaitable


async def chain[T](first: Source[T], second: Source[T]) -> AsyncIterator[T]:
    """Yield everything from `first`, then everything from `second`.

    `second` is not pulled until `first` is exhausted. Unlike `combine()`,
    this is concatenation, not interleaving.
    """
    async with closing(to_async_iterator(second)) as tail:
        async with closing(to_async_iterator(first)) as head:
            async for item in head:
                yield item
        async for item in tail:
            yield item


async def interval(period: float, count: int | None = None) -> AsyncIterator[int]:
    """Yield 0, 1, 2, ... with `period` seconds before each tick.

    Unbounded when `count` is None. Combined with other sources, a tick
    marks elapsed time, e.g. to bound how long a merge is consumed.

    Example:
        ```python
        async for tick in interval(0.5, count=3):
            print(tick)  # 0, 1, 2 - half a second apart
        ```
    """
    tick = 0
    while count is None or tick < count:
        await anyio.sleep(period)
        yield tick
        tick += 1
