from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List


@dataclass
class MetricsSnapshot:
    resolutions_total: int
    resolutions_by_strategy: Dict[str, int]
    absent_results: int
    cache_hits: int
    cache_misses: int
    cache_hit_rate: float
    external_calls: Dict[str, int]
    external_failures: Dict[str, int]
    external_timeouts: int = 0
    avg_external_latency_ms: float = 0.0
    rejected_external_labels: int = 0
    entities: Dict[str, int] = field(default_factory=dict)


class ResolutionMetrics:
    """In-process counters for the resolution pipeline."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._resolutions_total = 0
        self._by_strategy: Dict[str, int] = {}
        self._by_entity: Dict[str, int] = {}
        self._absent = 0
        self._cache_hits = 0
        self._cache_misses = 0
        self._external_calls: Dict[str, int] = {}
        self._external_failures: Dict[str, int] = {}
        self._external_timeouts = 0
        self._rejected_labels = 0
        self._external_latencies: List[float] = []
        self._max_latency_samples = 1000

    def record_resolution(self, *, entity: str, strategy: str | None) -> None:
        """Record the outcome of one top-level resolution; strategy None means absent."""
        with self._lock:
            self._resolutions_total += 1
            self._by_entity[entity] = self._by_entity.get(entity, 0) + 1
            if strategy is None:
                self._absent += 1
                return
            self._by_strategy[strategy] = self._by_strategy.get(strategy, 0) + 1

    def record_cache_lookup(self, hit: bool) -> None:
        with self._lock:
            if hit:
                self._cache_hits += 1
            else:
                self._cache_misses += 1

    def record_external_call(self, operation: str, *, latency_ms: float | None = None) -> None:
        with self._lock:
            self._external_calls[operation] = self._external_calls.get(operation, 0) + 1
            if latency_ms is not None:
                self._external_latencies.append(latency_ms)
                # Keep only recent samples
                if len(self._external_latencies) > self._max_latency_samples:
                    self._external_latencies = self._external_latencies[-self._max_latency_samples:]

    def record_external_failure(self, operation: str, *, timeout: bool = False) -> None:
        with self._lock:
            self._external_failures[operation] = self._external_failures.get(operation, 0) + 1
            if timeout:
                self._external_timeouts += 1

    def record_rejected_label(self) -> None:
        """Record an external cuisine label that did not resolve to a canonical value."""
        with self._lock:
            self._rejected_labels += 1

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            lookups = self._cache_hits + self._cache_misses
            hit_rate = (self._cache_hits / lookups) if lookups else 0.0
            avg_latency = (
                sum(self._external_latencies) / len(self._external_latencies)
                if self._external_latencies else 0.0
            )
            return MetricsSnapshot(
                resolutions_total=self._resolutions_total,
                resolutions_by_strategy=dict(self._by_strategy),
                absent_results=self._absent,
                cache_hits=self._cache_hits,
                cache_misses=self._cache_misses,
                cache_hit_rate=hit_rate,
                external_calls=dict(self._external_calls),
                external_failures=dict(self._external_failures),
                external_timeouts=self._external_timeouts,
                avg_external_latency_ms=avg_latency,
                rejected_external_labels=self._rejected_labels,
                entities=dict(self._by_entity),
            )


_metrics = ResolutionMetrics()


def get_metrics() -> ResolutionMetrics:
    return _metrics
