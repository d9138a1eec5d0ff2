"""Pipe error types: dual struct+exception for Result and raise-based code."""

from __future__ import annotations

import msgspec

__all__ = [
    'UseAfterMove',
    'UseAfterMoveError',
]


class UseAfterMove(msgspec.Struct, frozen=True, gc=False):
    """A moved pipe handle was pulled - struct variant for Result[T, UseAfterMove]."""

    operation: str | None = None

    def to_exception(self) -> UseAfterMoveError:
        """Convert to exception for raise-based code."""
        return UseAfterMoveError(self.operation)


class UseAfterMoveError(Exception):
    """A moved pipe handle was pulled - exception variant.

    Raised on the first pull of a stale `Pipe` handle when the handle was
    moved with `err_on_move` enabled. `operation` names the chaining or
    terminal call that moved the stream out of the handle.
    """

    def __init__(self, operation: str | None = None) -> None:
        self.operation = operation
        msg = 'use after move'
        if operation:
            msg = f'{msg} (moved by {operation})'
        super().__init__(msg)

    def to_struct(self) -> UseAfterMove:
        """Convert to struct for Result-based code."""
        return UseAfterMove(self.operation)
