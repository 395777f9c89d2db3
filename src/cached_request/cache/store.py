"""In-memory cache store and cache key derivation.

Entries live in a plain ``dict`` owned by a single
:class:`~cached_request.client.CacheClient`. Nothing here expires on its
own: staleness is decided by :mod:`cached_request.cache.freshness` at
lookup time and stale entries are evicted by the client.

Cache keys are the request URL for GET and the URL followed by a canonical
JSON serialisation of the body for POST. Mapping keys are sorted so that
two equal bodies always produce the same key regardless of insertion
order. Text bodies are serialised as JSON strings, quotes included, so a
raw ``'{"a":1}'`` body never shares a key with the mapping ``{"a": 1}``
and an empty string still extends the URL.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional

from cached_request.models import CacheEntry


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def key_for(url: str, body: Any = None) -> str:
    """Derive the cache key for a request.

    Args:
        url: The full request URL.
        body: The POST body, or ``None`` for GET.  Only ``None`` counts as
            an absent body; an empty mapping still appends ``{}`` and an
            empty string ``""``, so a POST never shares a key with a GET
            to the same URL.  ``bytes`` are decoded as UTF-8 and keyed
            like the equivalent text.

    Returns:
        ``url`` unchanged when *body* is ``None``, otherwise *url* followed
        by the canonical serialisation of *body*.
    """
    if body is None:
        return url
    return url + _canonical(body)


def _canonical(body: Any) -> str:
    if isinstance(body, (bytes, bytearray)):
        body = bytes(body).decode("utf-8", errors="replace")
    return json.dumps(body, sort_keys=True, separators=(",", ":"), default=str)


class CacheStore:
    """Mapping of cache key to :class:`~cached_request.models.CacheEntry`.

    All operations are total: looking up or evicting a missing key is not
    an error.  The store is not thread-safe; it is meant to be touched
    only from the event loop of the client that owns it.

    Args:
        clock: Callable returning the current aware datetime, used to stamp
            ``stored_at`` on :meth:`put`.  Defaults to :func:`utc_now`.

    Example::

        store = CacheStore()
        store.put("https://api.example.com/x", "A")
        entry = store.lookup("https://api.example.com/x")
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or utc_now
        self._entries: dict[str, CacheEntry] = {}

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """Return the entry stored under *key*, or ``None`` on a miss."""
        return self._entries.get(key)

    def put(self, key: str, value: Any) -> CacheEntry:
        """Insert or overwrite the entry for *key*, stamped with the current time.

        Args:
            key: Cache key from :func:`key_for`.
            value: The response payload of a successful call.

        Returns:
            The newly stored entry.
        """
        entry = CacheEntry(key=key, value=value, stored_at=self._clock())
        self._entries[key] = entry
        return entry

    def evict(self, key: str) -> None:
        """Remove the entry for *key* if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def stats(self) -> dict[str, Any]:
        """Return the number of entries and their keys."""
        return {"size": len(self._entries), "keys": self.keys()}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(list(self._entries.values()))
