"""Resolution services: matchers, caches, external adapters and the engine."""
