"""Shared engine constants and runtime configuration.

This module centralizes the limits and defaults used by the pagination,
lookup and runtime layers so individual components stay small and focused.
"""

from __future__ import annotations

from dataclasses import dataclass

# Maximum number of chained lookup queries below a root endpoint
LOOKUP_QUERY_LIMIT = 5

# Endpoint name that selects a user-written suffix instead of a catalog endpoint
CUSTOM_ENDPOINT = "CUSTOM"

# JSON path that selects the whole document
DEFAULT_JSON_PATH = "$"

# Content type of request bodies unless an endpoint names another
DEFAULT_CONTENT_TYPE = "application/json"

# Seconds allowed for a single page request
DEFAULT_TIMEOUT = 30.0

# Pages fetched per iterator while in live (preview) mode
LIVE_MODE_PAGE_LIMIT = 1


@dataclass(frozen=True)
class EngineConfig:
    """Runtime limits for a query engine.

    Attributes:
        timeout: Seconds allowed for a single page request
        live_page_limit: Pages fetched per iterator in live mode
        max_rows: Row cap applied by the default sink (None = unbounded)
        lookup_depth_limit: Maximum lookup chain length
    """

    timeout: float = DEFAULT_TIMEOUT
    live_page_limit: int = LIVE_MODE_PAGE_LIMIT
    max_rows: int | None = None
    lookup_depth_limit: int = LOOKUP_QUERY_LIMIT

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.live_page_limit < 1:
            raise ValueError("live_page_limit must be at least 1")
        if self.max_rows is not None and self.max_rows < 0:
            raise ValueError("max_rows cannot be negative")
        if not 0 <= self.lookup_depth_limit <= LOOKUP_QUERY_LIMIT:
            raise ValueError(f"lookup_depth_limit must be between 0 and {LOOKUP_QUERY_LIMIT}")
