"""Sequence combinators: transformations, sources, fan-in merge and consumers.

All functions take any `AsyncIterable` or `Iterable` as their input sequence:
- transformations return a lazy async iterator (`map`, `filter`, `take`, ...)
- consumers are coroutines returning one value (`collect`, `fold`, `find`, ...)
- `combine()` races many sources into one; `chain()` concatenates two
"""

from klaw_pipes.stream.combine import combine
from klaw_pipes.stream.consume import collect, find, first, fold, for_each, join
from klaw_pipes.stream.sources import chain, from_awaitable, from_iterable, interval
from klaw_pipes.stream.transform import (
    Indexed,
    enumerate,
    filter,
    flatten,
    map,
    peek,
    skip,
    take,
)

__all__ = [
    'Indexed',
    'chain',
    'collect',
    'combine',
    'enumerate',
    'filter',
    'find',
    'first',
    'flatten',
    'fold',
    'for_each',
    'from_awaitable',
    'from_iterable',
    'interval',
    'join',
    'map',
    'peek',
    'skip',
    'take',
]
