"""
LocationResolver - turns a half-written place description into a structured location.

Pipeline, first usable result wins:
1. location cache, keyed by the normalized input
2. keyword extractor: structured address, then city, then plain location
3. region identifier: first landmark, then area (only above the confidence bar)
4. the raw input itself
5. geocoder on the chosen query; nothing usable -> None, nothing cached
6. cache the result under the normalized *original* input

Extractor and geocoder failures are logged and treated as "this tier
produced nothing".
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import Settings, get_settings
from ..models import LocationResolution
from ..utils.logging import get_resolution_logger
from .cache import TTLCache
from .contracts import Geocoder, KeywordExtractor, guarded_call
from .metrics import ResolutionMetrics, get_metrics
from .nlu import normalize

logger = logging.getLogger(__name__)

ENTITY = "location"


class LocationResolver:
    def __init__(
        self,
        *,
        extractor: KeywordExtractor,
        geocoder: Geocoder,
        cache: TTLCache[LocationResolution],
        settings: Settings | None = None,
        metrics: ResolutionMetrics | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._extractor = extractor
        self._geocoder = geocoder
        self._cache = cache
        self._metrics = metrics or get_metrics()
        self._min_confidence = self._settings.external_min_confidence

    async def resolve(
        self,
        text: str,
        *,
        timeout: float | None = None,
        trace_id: str | None = None,
    ) -> Optional[LocationResolution]:
        key = normalize(text)
        if not key:
            return None
        log = get_resolution_logger(logger, trace_id=trace_id, entity=ENTITY, key=key)
        call_timeout = timeout if timeout is not None else self._settings.external_call_timeout_seconds

        cached = self._cache.get(key)
        self._metrics.record_cache_lookup(cached is not None)
        if cached is not None:
            log.debug("cache hit")
            return cached

        query = await self._choose_query(text, timeout=call_timeout, log=log)

        resolution = await guarded_call(
            self._geocoder.search_location(query),
            operation="search_location",
            timeout=call_timeout,
            log=log,
            metrics=self._metrics,
        )
        if resolution is None:
            log.info("no geocoder result for query=%r", query)
            return None
        if not resolution.is_valid:
            log.info("geocoder result without location or address for query=%r", query)
            return None

        self._cache.put(key, resolution)
        log.info("resolved query=%r location=%r", query, resolution.location)
        return resolution

    async def _choose_query(
        self,
        text: str,
        *,
        timeout: float | None,
        log: logging.LoggerAdapter,
    ) -> str:
        keywords = await guarded_call(
            self._extractor.extract_keywords(text),
            operation="extract_keywords",
            timeout=timeout,
            log=log,
            metrics=self._metrics,
        )
        query = keywords.location_query() if keywords is not None else None
        if query:
            log.debug("query from keywords=%r", query)
            return query

        region = await guarded_call(
            self._extractor.identify_region(text),
            operation="identify_region",
            timeout=timeout,
            log=log,
            metrics=self._metrics,
        )
        if region is not None and region.confidence > self._min_confidence and region.context:
            landmarks = [landmark for landmark in region.context.landmarks if landmark and landmark.strip()]
            if landmarks:
                log.debug("query from region landmark=%r", landmarks[0])
                return landmarks[0].strip()
            if region.context.area and region.context.area.strip():
                log.debug("query from region area=%r", region.context.area)
                return region.context.area.strip()

        return text
