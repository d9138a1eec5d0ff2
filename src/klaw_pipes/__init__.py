"""klaw-pipes: composable async sequence combinators for the Klaw ecosystem.

Lazy transformations, terminal consumers, a racing fan-in merge and a
move-aware fluent `Pipe` handle, for Python 3.13+ on asyncio.

Flat imports (preferred):
    from klaw_pipes import pipe, Pipe, combine, collect, take
    from klaw_pipes import Some, Nothing, UseAfterMoveError

Submodule imports (for organization):
    from klaw_pipes.stream import map, filter, fold
    from klaw_pipes.pipe import Pipe, pipe
    from klaw_pipes.decorators import piped
"""

# Configuration
from klaw_pipes._config import PipeConfig, get_config, init

# Logging
from klaw_pipes._logging import configure_logging, get_logger

# Decorators
from klaw_pipes.decorators import piped, piped_async

# Errors
from klaw_pipes.errors import UseAfterMove, UseAfterMoveError
from klaw_pipes.option import Nothing, NothingType, Option, Some

# Pipe
from klaw_pipes.pipe import Pipe, pipe
from klaw_pipes.protocols import Cancellable, InputKind, PipeInput, Source, classify

# Combinators
from klaw_pipes.stream import (
    Indexed,
    chain,
    collect,
    combine,
    enumerate,
    filter,
    find,
    first,
    flatten,
    fold,
    for_each,
    from_awaitable,
    from_iterable,
    interval,
    join,
    map,
    peek,
    skip,
    take,
)

__all__ = [
    # Protocols
    'Cancellable',
    # Combinators
    'Indexed',
    'InputKind',
    # Option types
    'Nothing',
    'NothingType',
    'Option',
    # Pipe
    'Pipe',
    # Configuration
    'PipeConfig',
    'PipeInput',
    'Some',
    'Source',
    # Errors
    'UseAfterMove',
    'UseAfterMoveError',
    'chain',
    'classify',
    'collect',
    'combine',
    # Logging
    'configure_logging',
    'enumerate',
    'filter',
    'find',
    'first',
    'flatten',
    'fold',
    'for_each',
    'from_awaitable',
    'from_iterable',
    'get_config',
    'get_logger',
    'init',
    'interval',
    'join',
    'map',
    'peek',
    'pipe',
    # Decorators
    'piped',
    'piped_async',
    'skip',
    'take',
]
