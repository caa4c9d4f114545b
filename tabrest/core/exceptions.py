"""Custom exception hierarchy."""

from __future__ import annotations


class RestQueryError(Exception):
    """Base exception for all library errors."""

    pass


class ConfigurationError(RestQueryError):
    """Query, endpoint or pagination configuration is missing or malformed.

    Raised synchronously while building strategies, templates or requests,
    before any network I/O happens. Never retried.
    """

    pass


class TemplateSyntaxError(ConfigurationError):
    """Endpoint template is structurally malformed (unbalanced braces)."""

    def __init__(self, message: str, template: str | None = None, position: int | None = None) -> None:
        super().__init__(message)
        self.template = template
        self.position = position


class FetchError(RestQueryError):
    """A page fetch failed.

    Covers transport failures, non-success HTTP statuses and response parse
    failures. Fatal to the whole iteration unless the caller had already
    requested cancellation.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class LookupResolutionError(RestQueryError):
    """A lookup references a missing endpoint or an unresolvable path.

    Always non-fatal: the resolver logs it and skips that lookup.
    """

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.path = path
