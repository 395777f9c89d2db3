"""In-memory response caching for cached_request.

This package provides the three pure pieces of the caching engine:

* :func:`key_for` -- derive the cache key for a request.
* :class:`CacheStore` -- the per-client mapping from key to
  :class:`~cached_request.models.CacheEntry`.
* :func:`is_fresh` -- decide whether an entry may still be served.

The store is consumed by :class:`~cached_request.client.CacheClient`,
which owns exactly one store per instance.
"""

from cached_request.cache.freshness import is_fresh, threshold_from_minutes
from cached_request.cache.store import CacheStore, key_for, utc_now

__all__ = ["CacheStore", "is_fresh", "key_for", "threshold_from_minutes", "utc_now"]
