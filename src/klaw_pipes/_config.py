"""Pipe configuration: PipeConfig, initialization and environment detection."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from klaw_pipes._logging import configure_logging

__all__ = [
    'PipeConfig',
    'get_config',
    'init',
    'reset',
]

_TRUE_VALUES = frozenset({'1', 'true', 'yes', 'on'})
_FALSE_VALUES = frozenset({'0', 'false', 'no', 'off'})


@dataclass(frozen=True)
class PipeConfig:
    """Process-wide defaults for new `Pipe` handles.

    Attributes:
        err_on_move: Moved handles raise UseAfterMoveError when pulled
            instead of silently ending.
        move_on_chain: Chaining and terminal calls move the stream into a
            new handle instead of mutating the current one.
        log_level: Logging level (e.g., "DEBUG", "INFO"). None = leave logging alone.
    """

    err_on_move: bool = False
    move_on_chain: bool = True
    log_level: str | None = None


# Global configuration (set by init())
_config: PipeConfig | None = None


def _detect_flag(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment.

    Unknown values log a warning and fall back to `default`.
    """
    raw = os.environ.get(name, '').strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    logging.warning("Unknown %s value '%s', defaulting to %s", name, raw, default)
    return default


def _detect_err_on_move() -> bool:
    return _detect_flag('KLAW_PIPES_ERR_ON_MOVE', PipeConfig.err_on_move)


def _detect_move_on_chain() -> bool:
    return _detect_flag('KLAW_PIPES_MOVE_ON_CHAIN', PipeConfig.move_on_chain)


def init(
    err_on_move: bool | None = None,
    move_on_chain: bool | None = None,
    log_level: str | None = None,
) -> PipeConfig:
    """Initialize klaw-pipes with the given defaults.

    Args:
        err_on_move: Default for new pipes. Read from KLAW_PIPES_ERR_ON_MOVE if None.
        move_on_chain: Default for new pipes. Read from KLAW_PIPES_MOVE_ON_CHAIN if None.
        log_level: Logging level ("DEBUG", "INFO", etc.). None = leave logging alone.

    Returns:
        The PipeConfig that was set.

    Example:
        ```python
        from klaw_pipes import init

        init(err_on_move=True, log_level='DEBUG')
        ```
    """
    global _config  # noqa: PLW0603

    _config = PipeConfig(
        err_on_move=_detect_err_on_move() if err_on_move is None else err_on_move,
        move_on_chain=_detect_move_on_chain() if move_on_chain is None else move_on_chain,
        log_level=log_level,
    )

    if log_level is not None:
        configure_logging(log_level)

    return _config


def get_config() -> PipeConfig:
    """Get the current configuration.

    Falls back to environment-derived defaults when `init()` has not been
    called, so pipes can be built without any setup.

    Returns:
        The current PipeConfig.
    """
    if _config is None:
        return PipeConfig(
            err_on_move=_detect_err_on_move(),
            move_on_chain=_detect_move_on_chain(),
        )
    return _config


def reset() -> None:
    """Forget the configuration set by `init()`."""
    global _config  # noqa: PLW0603
    _config = None
