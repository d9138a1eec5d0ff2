"""Logging for klaw-pipes.

The library emits a handful of debug events (`combine.release_failed`,
`pipe.used_after_move`) through loggers from `get_logger()`. Those loggers
hand every event to stdlib `logging`, so a host that never configures
logging sees nothing, and a host that does gets the events through its own
handlers and levels.

`configure_logging()` is an opt-in convenience for applications and tests:
it installs a structlog `ProcessorFormatter` on the root logger so library
events and plain stdlib records render the same way, as JSON or console
lines.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Callable
from typing import Any

import structlog

__all__ = [
    'LogHook',
    'add_log_hook',
    'clear_log_hooks',
    'configure_logging',
    'get_logger',
    'remove_log_hook',
]

type LogHook = Callable[[dict[str, Any]], None]

_hooks: list[LogHook] = []


def add_log_hook(hook: LogHook) -> None:
    """Call `hook` with a copy of every event that passes the level filter.

    Hooks only run once `configure_logging()` has been called.
    """
    _hooks.append(hook)


def remove_log_hook(hook: LogHook) -> None:
    """Unregister `hook`; unknown hooks are ignored."""
    with contextlib.suppress(ValueError):
        _hooks.remove(hook)


def clear_log_hooks() -> None:
    _hooks.clear()


def _call_hooks(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for hook in tuple(_hooks):
        # A broken hook must not stop the event or the remaining hooks.
        with contextlib.suppress(Exception):
            hook(dict(event_dict))
    return event_dict


def _enrich() -> list[Any]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
        _call_hooks,
    ]


def configure_logging(level: str = 'INFO', *, json_output: bool = True) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Replaces the root logger's handlers.

    Args:
        level: Root logging level ("DEBUG", "INFO", "WARNING", ...).
            Unknown names fall back to INFO.
        json_output: Render JSON lines; otherwise console output, colored
            when stderr is a terminal.

    Example:
        ```python
        configure_logging('DEBUG', json_output=False)
        ```
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_enrich(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_enrich(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger backed by the stdlib logger `name`.

    Until `configure_logging()` (or the host's own `structlog.configure()`)
    runs, events go straight to stdlib `logging` and obey its levels, so
    debug events are dropped by default.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
