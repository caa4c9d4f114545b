"""Cooperative cancellation shared by an iterator and its nested lookups."""

from __future__ import annotations

import threading


class CancellationToken:
    """Thread-safe cancellation flag.

    The engine never blocks on the token; it only polls ``cancelled`` before
    each page fetch, each record and each nested lookup query.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()
