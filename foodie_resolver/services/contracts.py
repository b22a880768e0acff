"""
Contracts of the external collaborators and the guard used to call them.

The resolver only knows these protocols. Any extractor or geocoder call may
raise or hang; `guarded_call` turns both into a logged `None` so the
pipelines can fall through to their next tier. Cancellation is not
intercepted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Optional, Protocol, TypeVar, runtime_checkable

from ..models import (
    CuisineIdentification,
    KeywordExtraction,
    LocationResolution,
    RegionIdentification,
)
from .errors import map_exception
from .metrics import ResolutionMetrics

T = TypeVar("T")


@runtime_checkable
class KeywordExtractor(Protocol):
    async def extract_keywords(self, text: str) -> KeywordExtraction: ...

    async def identify_region(self, text: str) -> RegionIdentification: ...

    async def identify_cuisine_and_dish(self, text: str) -> CuisineIdentification: ...


@runtime_checkable
class Geocoder(Protocol):
    async def search_location(self, query: str) -> Optional[LocationResolution]: ...


async def guarded_call(
    awaitable: Awaitable[T],
    *,
    operation: str,
    timeout: float | None,
    log: logging.Logger | logging.LoggerAdapter,
    metrics: ResolutionMetrics,
) -> Optional[T]:
    """Await an external call with a timeout; failures become None."""
    start = time.perf_counter()
    try:
        result = await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        metrics.record_external_failure(operation, timeout=True)
        log.warning("%s timed out after %.1fs", operation, timeout or 0.0)
        return None
    except Exception as exc:
        code, reason = map_exception(exc)
        metrics.record_external_failure(operation)
        log.warning("%s failed code=%s reason=%s", operation, code, reason, exc_info=log.isEnabledFor(logging.DEBUG))
        return None
    elapsed_ms = (time.perf_counter() - start) * 1000
    metrics.record_external_call(operation, latency_ms=elapsed_ms)
    log.debug("%s completed latency_ms=%.1f", operation, elapsed_ms)
    return result
