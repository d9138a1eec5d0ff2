"""Iterator adaptation and cooperative release helpers shared by combinators."""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Iterable, Iterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from klaw_pipes.protocols import Cancellable

if TYPE_CHECKING:
    from klaw_pipes.protocols import Source

__all__ = [
    'aclose',
    'closing',
    'resolve',
    'to_async_iterator',
]


async def resolve[T](value: T | Awaitable[T]) -> T:
    """Await `value` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value  # type: ignore[return-value]


async def _iterate_sync[T](iterator: Iterator[T]) -> AsyncIterator[T]:
    """Drive a sync iterator from async code, closing it on exit."""
    try:
        for item in iterator:
            yield item
    finally:
        close = getattr(iterator, 'close', None)
        if close is not None:
            close()


def to_async_iterator[T](stream: Source[T]) -> AsyncIterator[T]:
    """Return an async iterator pulling from `stream`.

    Async iterators are returned as-is so that their identity (and their
    `aclose()`) is preserved. Sync iterables are adapted lazily; their items
    are passed through unchanged.

    Raises:
        TypeError: If `stream` is neither async iterable nor iterable.
    """
    if isinstance(stream, AsyncIterator):
        return stream
    if isinstance(stream, AsyncIterable):
        return aiter(stream)
    if isinstance(stream, Iterable):
        return _iterate_sync(iter(stream))
    msg = f'{type(stream).__name__!r} object is not iterable or async iterable'
    raise TypeError(msg)


async def aclose(iterator: Any) -> None:
    """Tell `iterator` it will not be pulled again, if it supports that.

    `Cancellable` producers get `aclose()`; sync iterators with a `close()`
    (generators) are closed directly. Anything else is left alone.
    """
    if isinstance(iterator, Cancellable):
        await iterator.aclose()
        return
    close = getattr(iterator, 'close', None)
    if close is not None:
        close()


@asynccontextmanager
async def closing[T](iterator: AsyncIterator[T]) -> AsyncIterator[AsyncIterator[T]]:
    """Release `iterator` when the block exits, however it exits.

    Example:
        ```python
        async with closing(to_async_iterator(stream)) as iterator:
            async for item in iterator:
                ...
        ```
    """
    try:
        yield iterator
    finally:
        await aclose(iterator)
