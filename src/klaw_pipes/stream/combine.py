"""Fan-in merge engine: race many sources into one sequence.

`combine()` keeps exactly one fetch in flight per live source and yields
whichever item becomes ready first. Per-source order is preserved because a
source's next fetch is only launched after its previous item has been
received. Order across sources is a race and is not otherwise specified.

Sources still live when the merge exits (early stop by the consumer, or a
failure in one source) are released in the background: their pending fetch
is cancelled and their `aclose()` is called, without the merge waiting for
either. A slow or hung source therefore never blocks the consumer.

Note:
    The engine runs on asyncio tasks; it needs a running asyncio event loop
    (anyio's asyncio backend included).
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator, Awaitable, Iterable
from typing import TYPE_CHECKING, Any, Final

from klaw_pipes._logging import get_logger
from klaw_pipes.stream._util import aclose, to_async_iterator

if TYPE_CHECKING:
    from klaw_pipes.protocols import Source

__all__ = ['combine']

logger = get_logger(__name__)

_EXHAUSTED: Final = object()

# Release tasks are not awaited by the merge; hold references until they finish.
_release_tasks: set[asyncio.Task[None]] = set()


async def _pull(iterator: AsyncIterator[Any]) -> Any:
    """Fetch the next item, or `_EXHAUSTED` once the source completes."""
    try:
        return await anext(iterator)
    except StopAsyncIteration:
        return _EXHAUSTED


def _consume_outcome(fetch: asyncio.Task[Any]) -> None:
    # Mark an abandoned fetch's exception as retrieved.
    if not fetch.cancelled():
        fetch.exception()


async def _release(index: int, iterator: AsyncIterator[Any], fetch: asyncio.Task[Any]) -> None:
    """Wait out a cancelled fetch, then close its source."""
    try:
        await asyncio.wait([fetch])
        _consume_outcome(fetch)
        await aclose(iterator)
    except Exception as exc:  # noqa: BLE001
        logger.debug('combine.release_failed', source=index, error=repr(exc))


def _dispatch_release(index: int, iterator: AsyncIterator[Any], fetch: asyncio.Task[Any]) -> None:
    fetch.cancel()
    task = asyncio.get_running_loop().create_task(_release(index, iterator, fetch))
    _release_tasks.add(task)
    task.add_done_callback(_release_tasks.discard)


async def combine[T](sources: Iterable[Source[T]] | Awaitable[Iterable[Source[T]]]) -> AsyncIterator[T]:
    """Merge sources into one sequence, yielding items as they become ready.

    Args:
        sources: The sources to merge, or an awaitable resolving to them.
            Awaited once, on the first pull.

    Yields:
        Items from all sources, in the order they became ready. Item k of a
        source always precedes its item k + 1.

    Raises:
        TypeError: If a source is neither iterable nor async iterable. The
            valid sources are closed before the error propagates.
        Exception: The first failure raised by any source. The other sources
            are still released.

    Example:
        ```python
        async def slow():
            await anyio.sleep(0.2)
            yield 'slow'

        async def fast():
            yield 'fast'

        assert await collect(combine([slow(), fast()])) == ['fast', 'slow']
        ```
    """
    if inspect.isawaitable(sources):
        sources = await sources
    sources = list(sources)
    try:
        iterators = [to_async_iterator(source) for source in sources]
    except TypeError:
        # The merge owns every source handed to it, valid or not.
        for source in sources:
            await aclose(source)
        raise

    loop = asyncio.get_running_loop()
    # One slot per source: its in-flight fetch, or None once it has completed.
    fetches: list[asyncio.Task[Any] | None] = [loop.create_task(_pull(iterator)) for iterator in iterators]
    live = len(fetches)

    try:
        while live:
            done, _ = await asyncio.wait(
                [fetch for fetch in fetches if fetch is not None],
                return_when=asyncio.FIRST_COMPLETED,
            )
            index = next(i for i, fetch in enumerate(fetches) if fetch in done)
            item = fetches[index].result()  # type: ignore[union-attr]
            if item is _EXHAUSTED:
                fetches[index] = None
                live -= 1
                continue
            fetches[index] = loop.create_task(_pull(iterators[index]))
            yield item
    finally:
        for index, fetch in enumerate(fetches):
            if fetch is not None:
                _dispatch_release(index, iterators[index], fetch)
