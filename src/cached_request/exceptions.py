"""Exception hierarchy for cached_request.

All exceptions inherit from :class:`CachedRequestError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`cached_request.exit_codes`. The CLI entry point in
:func:`cached_request.app.main` catches ``CachedRequestError`` and exits
with the matching code.

The cache layer itself never raises: key derivation and freshness checks
are total. The only error that crosses :meth:`CacheClient.get
<cached_request.client.CacheClient.get>` is whatever the network caller
raised, which for the default httpx caller is :class:`TransportError`.

Subclass hierarchy::

    CachedRequestError  (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- TransportError      (exit 6)
"""

from __future__ import annotations

from typing import Optional

from cached_request.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TRANSPORT_ERROR,
)


class CachedRequestError(Exception):
    """Base exception for all cached_request errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CachedRequestError):
    """Raised for invalid CLI arguments or an unparseable request body."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(CachedRequestError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class TransportError(CachedRequestError):
    """Raised by the network caller when a request cannot be completed.

    Covers DNS failures, refused connections, TLS failures, timeouts and,
    when the caller is configured to check status codes, HTTP error
    responses. The original library exception is chained as
    ``__cause__``.

    Args:
        message: Human-readable error description.
        method: HTTP method of the failed request.
        url: Target URL of the failed request.
        status_code: HTTP status when the failure was a status check,
            otherwise ``None``.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
