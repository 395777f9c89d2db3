"""Caching HTTP client for cached_request.

Classes:
    :class:`CacheClient` -- the asynchronous time-bounded response cache.
    :class:`NetworkCaller` -- protocol for the network collaborator.
    :class:`HttpxCaller` -- default collaborator backed by :class:`httpx.AsyncClient`.

Example::

    from cached_request.client import CacheClient

    async with CacheClient(cache_threshold=5) as client:
        body = await client.get("https://api.example.com/users")
"""

from cached_request.client.cached_client import CacheClient
from cached_request.client.transport import HttpxCaller, NetworkCaller

__all__ = ["CacheClient", "HttpxCaller", "NetworkCaller"]
