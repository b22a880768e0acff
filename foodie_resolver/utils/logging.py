from __future__ import annotations

import logging
from typing import Any


class ResolutionLoggerAdapter(logging.LoggerAdapter):
    """
    Prefixes every message with the resolution context: trace id, entity
    (cuisine/location/...) and the normalized cache key of the input.
    """

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        trace_id = self.extra.get("trace_id") or "-"
        entity = self.extra.get("entity") or "-"
        key = self.extra.get("key") or "-"
        return f'trace_id={trace_id} entity={entity} key={key} msg="{msg}"', kwargs


def get_resolution_logger(
    logger: logging.Logger | str,
    *,
    trace_id: str | None,
    entity: str | None,
    key: str | None = None,
) -> ResolutionLoggerAdapter:
    base_logger = logging.getLogger(logger) if isinstance(logger, str) else logger
    return ResolutionLoggerAdapter(
        base_logger,
        {
            "trace_id": trace_id or "-",
            "entity": entity or "-",
            "key": key or "-",
        },
    )
