from __future__ import annotations

import traceback
from typing import Any, Tuple


class ResolverError(Exception):
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        reason: str | None = None,
        debug: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or reason or "")
        self.reason = reason or message or self.code
        self.debug = debug or {}


class InvalidInputError(ResolverError):
    code = "BAD_REQUEST"


class ConfigurationError(ResolverError):
    """Raised at startup when synonym tables or credentials are unusable."""

    code = "CONFIGURATION_ERROR"


class ExternalServiceError(ResolverError):
    code = "UPSTREAM_UNAVAILABLE"


class ExtractorError(ExternalServiceError):
    """Raised when the keyword/region/cuisine extractor fails."""


class GeocoderError(ExternalServiceError):
    """Raised when the place-search geocoder fails."""


def _format_trace(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).strip()


def map_exception(exc: BaseException) -> Tuple[str, str]:
    """
    Return (code, reason_for_logs) for an exception raised by the resolver.
    """

    if isinstance(exc, ResolverError):
        return exc.code, exc.reason or exc.__class__.__name__

    if isinstance(exc, TimeoutError):
        return "UPSTREAM_UNAVAILABLE", "timeout"

    if isinstance(exc, (TypeError, ValueError)):
        return "BAD_REQUEST", str(exc) or exc.__class__.__name__

    return "INTERNAL_ERROR", _format_trace(exc)
