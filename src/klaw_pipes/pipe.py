"""Pipe: a fluent handle that owns one sequence at a time.

Sequences are single-pass cursors; two consumers pulling the same one
corrupt each other's ordering. A `Pipe` enforces one owner per sequence:

- With `move_on_chain` (the default), every chaining call (`map`, `filter`,
  ...) moves the sequence into a new handle and leaves a placeholder in the
  old one. Terminal calls (`collect`, `fold`, ...) move it out for
  consumption the same way.
- A placeholder either ends immediately or, with `err_on_move`, raises
  `UseAfterMoveError` on its first pull.
- Without `move_on_chain` the handle is updated in place and returned, so
  there is one handle and no move protection.

Example:
    ```python
    numbers = pipe([1, 2, 3], [10, 20])
    doubled = numbers.map(lambda item, _: item * 2)
    assert sorted(await doubled.collect()) == [2, 4, 6, 20, 40]
    assert await numbers.collect() == []  # moved
    ```
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any

from klaw_pipes._config import get_config
from klaw_pipes._logging import get_logger
from klaw_pipes.errors import UseAfterMoveError
from klaw_pipes.protocols import InputKind, classify
from klaw_pipes.stream import (
    chain,
    collect,
    combine,
    filter,
    find,
    first,
    flatten,
    fold,
    for_each,
    from_awaitable,
    join,
    map,
    peek,
    skip,
    take,
)
from klaw_pipes.stream._util import to_async_iterator

if TYPE_CHECKING:
    from klaw_pipes.option import NothingType, Some
    from klaw_pipes.protocols import PipeInput, Source
    from klaw_pipes.stream import Indexed

__all__ = ['Pipe', 'pipe']

logger = get_logger(__name__)


async def _moved() -> AsyncIterator[Any]:
    return
    yield


async def _moved_err(operation: str) -> AsyncIterator[Any]:
    logger.debug('pipe.used_after_move', operation=operation)
    raise UseAfterMoveError(operation)
    yield


class Pipe[T]:
    """Handle owning a single sequence, with fluent chaining and consumers.

    Args:
        stream: The sequence to own.
        err_on_move: Raise on pulls of a moved handle instead of ending
            silently. Defaults to `get_config().err_on_move`.
        move_on_chain: Move the sequence into a new handle on each chaining or
            terminal call. Defaults to `get_config().move_on_chain`.
    """

    __slots__ = ('_err_on_move', '_move_on_chain', '_stream')

    def __init__(
        self,
        stream: Source[T],
        *,
        err_on_move: bool | None = None,
        move_on_chain: bool | None = None,
    ) -> None:
        config = get_config()
        self._stream: Source[T] = stream
        self._err_on_move = config.err_on_move if err_on_move is None else err_on_move
        self._move_on_chain = config.move_on_chain if move_on_chain is None else move_on_chain

    @property
    def err_on_move(self) -> bool:
        """Whether placeholders installed from now on raise when pulled."""
        return self._err_on_move

    @err_on_move.setter
    def err_on_move(self, on: bool) -> None:
        self._err_on_move = on

    @property
    def move_on_chain(self) -> bool:
        """Whether chaining and terminal calls move the sequence out of this handle."""
        return self._move_on_chain

    @move_on_chain.setter
    def move_on_chain(self, on: bool) -> None:
        self._move_on_chain = on

    # --- Chaining ---

    def filter(self, predicate: Callable[[T, int], Any]) -> Pipe[T]:
        return self._chained(filter(self._stream, predicate), 'filter')

    def map[U](self, func: Callable[[T, int], U | Awaitable[U]]) -> Pipe[U]:
        return self._chained(map(self._stream, func), 'map')

    def take(self, count: int) -> Pipe[T]:
        return self._chained(take(self._stream, count), 'take')

    def skip(self, count: int) -> Pipe[T]:
        return self._chained(skip(self._stream, count), 'skip')

    def peek(self, peek_fn: Callable[[T, int], Any]) -> Pipe[T]:
        return self._chained(peek(self._stream, peek_fn), 'peek')

    def chain(self, next_stream: Source[T]) -> Pipe[T]:
        """Append `next_stream`, pulled only once this pipe's sequence ends."""
        return self._chained(chain(self._stream, next_stream), 'chain')

    def combine(self, streams: Iterable[Source[T]]) -> Pipe[T]:
        """Merge `streams` into this pipe, interleaving items as they become ready."""
        return self._chained(combine([self._stream, *streams]), 'combine')

    def flat(self) -> Pipe[Any]:
        """Expand iterable items one level deep."""
        return self._chained(flatten(self._stream), 'flat')

    # --- Terminal ---

    async def first(self) -> Some[T] | NothingType:
        """Pull one item: `Some(item)`, or `Nothing` when the sequence is empty."""
        return await first(self._move('first'))

    async def for_each(self, func: Callable[[T, int], Any]) -> None:
        await for_each(self._move('for_each'), func)

    async def collect(self, limit: int | None = None) -> list[T]:
        return await collect(self._move('collect'), limit)

    async def fold[R](self, reducer: Callable[[R, T, int], R | Awaitable[R]], initial: R) -> R:
        return await fold(self._move('fold'), reducer, initial)

    async def find(self, predicate: Callable[[T, int], Any]) -> Some[Indexed] | NothingType:
        return await find(self._move('find'), predicate)

    async def join(self, separator: str) -> str:
        return await join(self._move('join'), separator)

    def __aiter__(self) -> AsyncIterator[T]:
        return aiter(to_async_iterator(self._stream))

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}(err_on_move={self._err_on_move!r}, '
            f'move_on_chain={self._move_on_chain!r})'
        )

    # --- Ownership ---

    def _placeholder(self, operation: str) -> AsyncIterator[Any]:
        return _moved_err(operation) if self._err_on_move else _moved()

    def _chained[U](self, stream: AsyncIterator[U], operation: str) -> Pipe[U]:
        if self._move_on_chain:
            self._stream = self._placeholder(operation)
            return Pipe(stream, err_on_move=self._err_on_move, move_on_chain=self._move_on_chain)
        self._stream = stream  # type: ignore[assignment]
        return self  # type: ignore[return-value]

    def _move(self, operation: str) -> Source[T]:
        stream = self._stream
        if self._move_on_chain:
            self._stream = self._placeholder(operation)
        return stream


def _normalize(value: Any) -> Source[Any]:
    """Turn one `pipe(...)` argument into a sequence."""
    match classify(value):
        case InputKind.AWAITABLE:
            return flatten(from_awaitable(value))
        case InputKind.ASYNC_ITERABLE | InputKind.ITERABLE:
            return value
        case InputKind.VALUE:
            return [value]


def pipe[T](
    *inputs: PipeInput[T],
    err_on_move: bool | None = None,
    move_on_chain: bool | None = None,
) -> Pipe[T]:
    """Merge any mix of values, iterables, async iterables and awaitables into a Pipe.

    Each input is normalized first:
    - an awaitable is awaited when first pulled; if it resolves to a
      sequence, that sequence is expanded in place
    - an iterable or async iterable is used as-is
    - anything else (including str, bytes and mappings) is a single item

    The normalized sequences are then raced together with `combine()`.

    Example:
        ```python
        async def load() -> list[str]:
            return ['b', 'c']

        items = await pipe('a', load()).collect()
        assert sorted(items) == ['a', 'b', 'c']
        ```
    """
    sources = [_normalize(value) for value in inputs]
    return Pipe(combine(sources), err_on_move=err_on_move, move_on_chain=move_on_chain)
