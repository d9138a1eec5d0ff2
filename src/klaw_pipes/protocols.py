"""Sequence capabilities and input classification.

A sequence is anything that can be pulled: an `AsyncIterator`, or an
`AsyncIterable` / `Iterable` that produces one. The only optional capability a
producer may add is cooperative cancellation through `aclose()`, which
consumers call when they will pull no further.

Inputs handed to `pipe(...)` are classified once into an `InputKind` at the
call site, so the rest of the library works with plain async iterators.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterable, Awaitable, Iterable, Mapping
from enum import StrEnum
from typing import Protocol, runtime_checkable

__all__ = [
    'Cancellable',
    'InputKind',
    'PipeInput',
    'Source',
    'classify',
    'is_scalar',
]


type Source[T] = AsyncIterable[T] | Iterable[T]
"""Anything a combinator accepts as its upstream sequence."""

type PipeInput[T] = Source[T] | Awaitable[Source[T]] | Awaitable[T] | T
"""Anything `pipe(...)` accepts as one of its arguments."""


@runtime_checkable
class Cancellable(Protocol):
    """Producer that can be told it will not be pulled again.

    Async generators satisfy this protocol out of the box. Hand-written
    async iterators opt in by defining `aclose()`.
    """

    async def aclose(self) -> None:
        """Release any resources held for unpulled items."""
        ...


class InputKind(StrEnum):
    """How an argument to `pipe(...)` becomes a sequence."""

    AWAITABLE = 'awaitable'  # resolved, then flattened one level
    ASYNC_ITERABLE = 'async_iterable'  # used as-is
    ITERABLE = 'iterable'  # used as-is
    VALUE = 'value'  # becomes a single-item sequence


def is_scalar(value: object) -> bool:
    """Return True for iterables that are treated as single values.

    Strings, bytes and mappings are iterable in Python but are payloads, not
    sequences of items.
    """
    return isinstance(value, str | bytes | bytearray | Mapping)


def classify(value: object) -> InputKind:
    """Classify a `pipe(...)` argument.

    Example:
        ```python
        classify([1, 2])  # InputKind.ITERABLE
        classify('abc')  # InputKind.VALUE
        classify(asyncio.sleep(0))  # InputKind.AWAITABLE
        ```
    """
    if isinstance(value, AsyncIterable):
        return InputKind.ASYNC_ITERABLE
    if inspect.isawaitable(value):
        return InputKind.AWAITABLE
    if isinstance(value, Iterable) and not is_scalar(value):
        return InputKind.ITERABLE
    return InputKind.VALUE
