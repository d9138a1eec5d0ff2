"""Terminal consumers: drive a sequence and produce one result.

Each consumer pulls only as far as it needs to and releases the sequence
before returning or raising.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from klaw_pipes.option import Nothing, NothingType, Some
from klaw_pipes.stream._util import closing, resolve, to_async_iterator
from klaw_pipes.stream.transform import Indexed, enumerate, take

if TYPE_CHECKING:
    from klaw_pipes.protocols import Source

__all__ = [
    'collect',
    'find',
    'first',
    'fold',
    'for_each',
    'join',
]


async def for_each[T](stream: Source[T], func: Callable[[T, int], Any]) -> None:
    """Call `func(item, index)` for every item, awaiting awaitable results.

    Stops at the end of the sequence or at the first exception raised by
    `func`, which propagates.
    """
    async with closing(enumerate(stream)) as indexed:
        async for item, index in indexed:
            await resolve(func(item, index))


async def collect[T](stream: Source[T], limit: int | None = None) -> list[T]:
    """Gather items into a list, in sequence order.

    Args:
        stream: The sequence to drain.
        limit: Maximum number of items. The sequence is wrapped in
            `take(stream, limit)`, so no item beyond the limit is pulled.

    Example:
        ```python
        assert await collect(interval(0.01), limit=3) == [0, 1, 2]
        ```
    """
    source = stream if limit is None else take(stream, limit)
    async with closing(to_async_iterator(source)) as iterator:
        return [item async for item in iterator]


async def fold[T, R](
    stream: Source[T],
    reducer: Callable[[R, T, int], R | Awaitable[R]],
    initial: R,
) -> R:
    """Reduce the sequence with `acc = reducer(acc, item, index)`.

    Example:
        ```python
        total = await fold([1, 2, 3], lambda acc, item, _: acc + item, 0)
        assert total == 6
        ```
    """
    acc = initial

    async def step(item: T, index: int) -> None:
        nonlocal acc
        acc = await resolve(reducer(acc, item, index))

    await for_each(stream, step)
    return acc


async def find[T](stream: Source[T], predicate: Callable[[T, int], Any]) -> Some[Indexed] | NothingType:
    """Return the first item matching `predicate(item, index)`.

    Pulling stops at the match.

    Returns:
        `Some(Indexed(item, index))` for the first match, or `Nothing` if the
        sequence ends without one.
    """
    async with closing(enumerate(stream)) as indexed:
        async for entry in indexed:
            if await resolve(predicate(entry.item, entry.index)):
                return Some(entry)
    return Nothing


async def join(stream: Source[Any], separator: str) -> str:
    """Concatenate `str(item)` of every item with `separator` between them."""

    def append(text: str, item: Any, index: int) -> str:
        if index > 0:
            text += separator
        return text + str(item)

    return await fold(stream, append, '')


async def first[T](stream: Source[T]) -> Some[T] | NothingType:
    """Pull a single item.

    Returns:
        `Some(item)`, or `Nothing` for an empty sequence. The sequence is
        released afterwards either way.
    """
    async with closing(to_async_iterator(stream)) as iterator:
        async for item in iterator:
            return Some(item)
    return Nothing
