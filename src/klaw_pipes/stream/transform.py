"""Transformation combinators: build one lazy sequence from another.

Every combinator here is an async generator. Nothing runs until the first
pull, and the upstream is released when the produced sequence stops for any
reason: upstream exhaustion, an early stop (`take`), a failing callback, or
the consumer closing it.

Callbacks receive `(item, index)` and may be plain functions or return an
awaitable, which is awaited before its result is used.

Example:
    ```python
    evens = filter(range(10), lambda item, _: item % 2 == 0)
    squares = map(evens, lambda item, _: item * item)
    assert await collect(take(squares, 3)) == [0, 4, 16]
    ```
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any, NamedTuple

from klaw_pipes.protocols import is_scalar
from klaw_pipes.stream._util import closing, resolve, to_async_iterator

if TYPE_CHECKING:
    from klaw_pipes.protocols import Source

__all__ = [
    'Indexed',
    'enumerate',
    'filter',
    'flatten',
    'map',
    'peek',
    'skip',
    'take',
]


class Indexed(NamedTuple):
    """An item paired with the number of items pulled before it."""

    item: Any
    index: int


async def enumerate[T](stream: Source[T]) -> AsyncIterator[Indexed]:  # noqa: A001 - intentionally shadows builtin
    """Pair each item with its position in the upstream sequence.

    The index counts upstream pulls, so it is unaffected by any filtering
    applied further down the chain.
    """
    async with closing(to_async_iterator(stream)) as iterator:
        index = 0
        async for item in iterator:
            yield Indexed(item, index)
            index += 1


async def map[T, U](  # noqa: A001 - intentionally shadows builtin
    stream: Source[T],
    func: Callable[[T, int], U | Awaitable[U]],
) -> AsyncIterator[U]:
    """Yield `func(item, index)` for every item.

    A failure in `func` ends the sequence with that exception; no further
    items are pulled.
    """
    async with closing(enumerate(stream)) as indexed:
        async for item, index in indexed:
            yield await resolve(func(item, index))


async def filter[T](  # noqa: A001 - intentionally shadows builtin
    stream: Source[T],
    predicate: Callable[[T, int], Any],
) -> AsyncIterator[T]:
    """Yield the items for which `predicate(item, index)` is truthy."""
    async with closing(enumerate(stream)) as indexed:
        async for item, index in indexed:
            if await resolve(predicate(item, index)):
                yield item


async def take[T](stream: Source[T], count: int) -> AsyncIterator[T]:
    """Yield at most `count` items.

    Item `count + 1` is never pulled: once the limit is reached the upstream
    is released. With `count <= 0` nothing is pulled at all.
    """
    async with closing(to_async_iterator(stream)) as iterator:
        remaining = count
        while remaining > 0:
            try:
                item = await anext(iterator)
            except StopAsyncIteration:
                return
            remaining -= 1
            yield item


async def skip[T](stream: Source[T], count: int) -> AsyncIterator[T]:
    """Discard the first `count` items, then yield the rest.

    Skipped items are pulled, not short-circuited, so their side effects
    happen.
    """
    async with closing(enumerate(stream)) as indexed:
        async for item, index in indexed:
            if index < count:
                continue
            yield item


async def peek[T](
    stream: Source[T],
    peek_fn: Callable[[T, int], Any],
) -> AsyncIterator[T]:
    """Yield items unchanged after calling `peek_fn(item, index)` on each."""

    async def observe(item: T, index: int) -> T:
        await resolve(peek_fn(item, index))
        return item

    async with closing(map(stream, observe)) as observed:
        async for item in observed:
            yield item


async def flatten[T](stream: Source[Source[T] | T]) -> AsyncIterator[T]:
    """Expand items that are themselves sequences, one level deep.

    Sync and async iterable items are replaced by their sub-items, in order.
    Strings, bytes and mappings are passed through as single items, as is
    anything that is not iterable.
    """
    async with closing(to_async_iterator(stream)) as iterator:
        async for item in iterator:
            if isinstance(item, AsyncIterable) or (isinstance(item, Iterable) and not is_scalar(item)):
                async with closing(to_async_iterator(item)) as inner:
                    async for sub_item in inner:
                        yield sub_item
            else:
                yield item
