"""cached_request -- a time-bounded response cache in front of an HTTP client.

Memoizes GET and POST calls keyed by URL (and, for POST, the serialized
request body). A cached response is served while it is fresh; once the
configured threshold has elapsed the next call goes back to the network.

Typical usage::

    from cached_request import CacheClient

    async with CacheClient(cache_threshold=10) as client:
        body = await client.get("https://api.example.com/status")

Modules:
    models: Pydantic models for configuration and cache entries.
    cache: In-memory store, key derivation and freshness evaluation.
    client: The caching client and its network caller collaborators.
    config: XDG-aware persisted defaults and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    log: Per-instance loggers.
    output: stdout/stderr formatting for the command-line front end.
    app: Typer application and CLI entry point.
"""

__version__ = "0.3.0"

from cached_request.client import CacheClient, HttpxCaller, NetworkCaller  # noqa: E402
from cached_request.exceptions import CachedRequestError, TransportError  # noqa: E402
from cached_request.models import BasicAuth, CacheEntry, ClientConfig  # noqa: E402

__all__ = [
    "BasicAuth",
    "CacheClient",
    "CacheEntry",
    "CachedRequestError",
    "ClientConfig",
    "HttpxCaller",
    "NetworkCaller",
    "TransportError",
    "__version__",
]
