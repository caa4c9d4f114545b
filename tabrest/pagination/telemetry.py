"""Structured logging for pagination and lookup runs.

This module provides telemetry hooks for data iterators and the lookup
resolver, emitting one structured log record per fetched page plus records
for completion, cancellation, failures and skipped lookups.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def log_page_fetched(
    *,
    endpoint_id: str,
    page_index: int,
    url: str,
    status: int,
    latency_ms: float | None = None,
) -> None:
    """Log a successfully fetched page.

    Args:
        endpoint_id: Endpoint identifier
        page_index: Zero-based fetch counter
        url: Full request URL
        status: HTTP status code
        latency_ms: Latency in milliseconds (optional)
    """
    logger.info(
        "page_fetched",
        extra={
            "endpoint_id": endpoint_id,
            "page_index": page_index,
            "url": url,
            "status": status,
            "latency_ms": latency_ms,
        },
    )


def log_pagination_complete(
    *,
    endpoint_id: str,
    pages_fetched: int,
    total_latency_ms: float | None = None,
) -> None:
    """Log the end of a pagination run.

    Args:
        endpoint_id: Endpoint identifier
        pages_fetched: Number of pages fetched
        total_latency_ms: Total latency in milliseconds (optional)
    """
    logger.info(
        "pagination_complete",
        extra={
            "endpoint_id": endpoint_id,
            "pages_fetched": pages_fetched,
            "total_latency_ms": total_latency_ms,
        },
    )


def log_pagination_cancelled(*, endpoint_id: str, pages_fetched: int) -> None:
    logger.info(
        "pagination_cancelled",
        extra={"endpoint_id": endpoint_id, "pages_fetched": pages_fetched},
    )


def log_page_error(
    *,
    endpoint_id: str,
    page_index: int,
    url: str,
    error_type: str,
    error_message: str,
) -> None:
    """Log a page fetch error.

    Args:
        endpoint_id: Endpoint identifier
        page_index: Zero-based fetch counter of the failing page
        url: Full request URL
        error_type: Type of error (e.g., "FetchError", "ClientConnectorError")
        error_message: Error message
    """
    logger.error(
        "page_error",
        extra={
            "endpoint_id": endpoint_id,
            "page_index": page_index,
            "url": url,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_lookup_skipped(
    *,
    endpoint_id: str,
    lookup: str,
    reason: str,
    path: str | None = None,
) -> None:
    """Log a lookup that could not be resolved and was skipped.

    Args:
        endpoint_id: Parent endpoint identifier
        lookup: Lookup endpoint name
        reason: Why the lookup was skipped
        path: Match path involved (optional)
    """
    logger.warning(
        "lookup_skipped",
        extra={
            "endpoint_id": endpoint_id,
            "lookup": lookup,
            "reason": reason,
            "path": path,
        },
    )
