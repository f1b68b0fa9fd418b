from __future__ import annotations
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')

# Upper bound on threads per pmap call; large batches queue on the pool instead of spawning one thread each.
DEFAULT_MAX_WORKERS = 16


def normalize_keys(obj: Any) -> Any:
    """Recursively rebuild dicts/lists so every mapping key is a `str`.

    Bytes keys are decoded; keys of any other type are left alone.
    """
    if isinstance(obj, list):
        return [normalize_keys(v) for v in obj]
    if isinstance(obj, dict):
        out = {}
        for key, val in obj.items():
            if isinstance(key, bytes):
                key = key.decode('utf-8')
            out[key] = normalize_keys(val)
        return out
    return obj


def pmap(collection: Iterable[T], operation: Optional[Callable[[T], R]] = None,
         max_workers: int = DEFAULT_MAX_WORKERS):
    """Run `operation` over `collection` in threads, keeping input order.

    One element runs inline on the calling thread. Without an operation a
    reusable partial is returned; call it with the operation to run the map.
    If any call fails, every call is still allowed to finish and then the
    first failure (in input order) is raised.
    """
    if operation is None:
        # materialized so every call of the partial sees the same inputs
        return functools.partial(pmap, list(collection), max_workers=max_workers)
    items = list(collection)
    if len(items) <= 1:
        return [operation(item) for item in items]
    workers = max(1, min(len(items), max_workers))
    logger.debug('pmap: %d items on %d workers', len(items), workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(operation, item) for item in items]
    # leaving the block joined every future
    return [f.result() for f in futures]


def flat_pmap(collection: Iterable[T], operation: Optional[Callable[[T], Iterable[R]]] = None,
              max_workers: int = DEFAULT_MAX_WORKERS):
    """Like `pmap`, concatenating one level of the per-item results."""
    if operation is None:
        return functools.partial(flat_pmap, list(collection), max_workers=max_workers)
    flat: List[R] = []
    for chunk in pmap(collection, operation, max_workers=max_workers):
        if isinstance(chunk, (list, tuple)):
            flat.extend(chunk)
        else:
            flat.append(chunk)
    return flat


def deprecated_alias(old_name: str, new_name: str) -> Callable[..., Any]:
    """Build a method named `old_name` that logs a deprecation notice and calls `new_name`."""
    def alias(self, *args, **kwargs):
        logger.warning('[DEPRECATION] %s.%s is deprecated. Use %s.%s instead.',
                       type(self).__name__, old_name, type(self).__name__, new_name)
        return getattr(self, new_name)(*args, **kwargs)
    alias.__name__ = old_name
    alias.__doc__ = f"Deprecated alias of `{new_name}`."
    return alias
