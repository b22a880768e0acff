"""
Foodie resolver package.

Maps free-form food search text (cuisines, services, establishment types,
Malaysian locations) onto canonical values.

The engine is imported lazily so that importing the package does not read
settings or build LLM/geocoder clients.
"""


def get_engine():
    """Lazy import wrapper returning the process-wide ResolutionEngine."""
    from .services.engine import get_resolution_engine
    return get_resolution_engine()


__all__ = ["get_engine"]
