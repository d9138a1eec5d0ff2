"""@piped and @piped_async decorators for returning a Pipe from any producer."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import wrapt

from klaw_pipes.pipe import Pipe, pipe

__all__ = ['piped', 'piped_async']


def piped[**P](func: Callable[P, Any]) -> Callable[P, Pipe[Any]]:
    """Decorator that wraps the return value in a Pipe via `pipe(...)`.

    Whatever the function returns is normalized like a `pipe(...)` argument:
    a list or generator becomes the pipe's sequence, a coroutine is awaited
    lazily on first pull and expanded, and a bare value becomes a one-item
    pipe. Works for plain, async and async generator functions alike.

    Args:
        func: The function to wrap.

    Returns:
        A wrapped function returning a Pipe.

    Example:
        ```python
        @piped
        async def ticks():
            for i in range(3):
                await anyio.sleep(0.1)
                yield i

        assert await ticks().map(lambda item, _: item * 10).collect() == [0, 10, 20]
        ```
    """

    @wrapt.decorator
    def wrapper(
        wrapped: Callable[P, Any],
        instance: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Pipe[Any]:
        return pipe(wrapped(*args, **kwargs))

    return wrapper(func)  # type: ignore[return-value]


def piped_async[**P, T](
    func: Callable[P, Awaitable[T]],
) -> Callable[P, Awaitable[Pipe[Any]]]:
    """Async decorator that awaits the function, then wraps its result in a Pipe.

    Unlike `@piped`, the coroutine runs when the decorated function is
    awaited, so failures surface at the call site instead of on first pull.

    Example:
        ```python
        @piped_async
        async def load_rows() -> list[dict]:
            return await db.fetch_all()

        rows = await load_rows()
        count = await rows.fold(lambda acc, _row, _: acc + 1, 0)
        ```
    """

    @wrapt.decorator
    async def wrapper(
        wrapped: Callable[P, Awaitable[T]],
        instance: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Pipe[Any]:
        result = await wrapped(*args, **kwargs)
        return pipe(result)

    return wrapper(func)  # type: ignore[return-value]
