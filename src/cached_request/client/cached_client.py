"""Asynchronous caching client -- the read path and request executor.

This module provides :class:`CacheClient`, which memoizes GET and POST
calls for a configurable number of minutes.  Every call follows the same
pipeline:

1. Derive the cache key with :func:`~cached_request.cache.key_for`.
2. Look the key up in the client's own :class:`~cached_request.cache.CacheStore`.
3. **Fresh hit** -- return the cached value without touching the network.
4. **Stale hit** -- evict the entry, then fall through to a miss.
5. **Miss** -- run the network caller.  On success the body is stored and
   returned; on failure the exception propagates unchanged and the store
   is left as it is (a key evicted in step 4 stays cold).

Network calls run as :class:`asyncio.Task` objects owned by the client and
are awaited through :func:`asyncio.shield`, so a caller that gives up does
not cancel the request: it still completes and still fills the cache.

Concurrent misses for the same key each issue their own network call and
the last success wins, unless ``coalesce_requests`` is enabled, in which
case they share a single in-flight task.

See Also:
    :class:`~cached_request.client.transport.HttpxCaller` for the default
    network caller.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from cached_request.cache import CacheStore, is_fresh, key_for, threshold_from_minutes, utc_now
from cached_request.client.transport import HttpxCaller, NetworkCaller
from cached_request.log import get_client_logger, level_from_name
from cached_request.models import BasicAuth, ClientConfig


class CacheClient:
    """Time-bounded response cache in front of a network caller.

    Args:
        config: Client configuration.  When omitted, one is built from
            ``**overrides``.
        caller: Network caller to use.  Defaults to an
            :class:`~cached_request.client.transport.HttpxCaller` built from
            *config* on first use and closed by :meth:`aclose`.
        logger: Logger for cache and request events.  Defaults to
            :func:`~cached_request.log.get_client_logger` for the
            configured ``instance_id`` and ``log_level``.
        clock: Callable returning the current aware datetime.  Used both
            to stamp entries and to evaluate freshness.
        **overrides: :class:`~cached_request.models.ClientConfig` fields,
            applied on top of *config*.

    Example::

        async with CacheClient(cache_threshold=10, instance_id="billing") as client:
            first = await client.get("https://api.example.com/invoices")
            again = await client.get("https://api.example.com/invoices")  # cached
            quote = await client.post("https://api.example.com/quote", {"qty": 2})
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        caller: Optional[NetworkCaller] = None,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        **overrides: Any,
    ) -> None:
        if config is None:
            config = ClientConfig(**overrides)
        elif overrides:
            config = ClientConfig.model_validate({**config.model_dump(), **overrides})

        self._config = config
        self._threshold = threshold_from_minutes(config.cache_threshold)
        self._clock = clock or utc_now
        self._store = CacheStore(clock=self._clock)
        self._caller = caller
        self._owns_caller = caller is None
        self._logger = logger or get_client_logger(config.instance_id, config.log_level)
        # An injected logger is filtered by its own level only.
        self._log_level = logging.NOTSET if logger else level_from_name(config.log_level)

        self._pending: set[asyncio.Task[Any]] = set()
        self._in_flight: dict[str, asyncio.Task[Any]] = {}
        self._counters = {"hits": 0, "misses": 0, "network_calls": 0, "errors": 0}

        if not config.verify_ssl:
            self._log(logging.WARNING, "TLS certificate validation is disabled")

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> CacheClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Wait for outstanding network calls, then close an owned caller."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        if self._owns_caller and self._caller is not None:
            await self._caller.aclose()
            self._caller = None

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def threshold(self) -> timedelta:
        """Freshness window, fixed at construction."""
        return self._threshold

    @property
    def auth(self) -> Optional[BasicAuth]:
        return self._config.auth

    @property
    def instance_id(self) -> Optional[str]:
        return self._config.instance_id

    @property
    def store(self) -> CacheStore:
        return self._store

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def get(self, url: str) -> Any:
        """Return the body for a GET of *url*, from cache while fresh.

        Args:
            url: Absolute request URL.  Used verbatim as the cache key.

        Returns:
            The response body produced by the network caller.

        Raises:
            TransportError: When the network call fails (default caller).
                Custom callers' exceptions propagate unchanged.
        """
        return await self._fetch("GET", url, None)

    async def post(self, url: str, body: Any) -> Any:
        """Return the body for a POST of *body* to *url*, from cache while fresh.

        Args:
            url: Absolute request URL.
            body: Request payload.  Its canonical serialisation is part of
                the cache key, so different payloads never share an entry.

        Returns:
            The response body produced by the network caller.

        Raises:
            TransportError: When the network call fails (default caller).
        """
        return await self._fetch("POST", url, body)

    # ------------------------------------------------------------------ #
    # Cache housekeeping
    # ------------------------------------------------------------------ #

    def invalidate(self, url: str, body: Any = None) -> None:
        """Drop the cached entry for a request, if any.

        Args:
            url: Request URL.
            body: The POST body, or ``None`` for the GET entry.
        """
        self._store.evict(key_for(url, body))

    def clear(self) -> None:
        """Drop every cached entry."""
        self._store.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache counters for this instance.

        Returns:
            A ``dict`` with ``size``, ``hits``, ``misses``,
            ``network_calls``, ``errors``, ``in_flight``,
            ``threshold_seconds`` and ``instance_id``.
        """
        return {
            "size": len(self._store),
            **self._counters,
            "in_flight": len(self._pending),
            "threshold_seconds": self._threshold.total_seconds(),
            "instance_id": self._config.instance_id,
        }

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _fetch(self, method: str, url: str, body: Any) -> Any:
        key = key_for(url, body)
        entry = self._store.lookup(key)

        if entry is not None:
            if is_fresh(entry, self._threshold, self._clock()):
                self._log(logging.INFO, "%s has a valid cache", url)
                self._counters["hits"] += 1
                return entry.value
            self._log(logging.INFO, "%s has a cache but it is expired", url)
            self._store.evict(key)

        self._log(logging.INFO, "%s has no cache", url)
        self._counters["misses"] += 1
        task = self._start_request(key, method, url, body)
        return await asyncio.shield(task)

    def _start_request(self, key: str, method: str, url: str, body: Any) -> asyncio.Task[Any]:
        """Schedule the network call for *key*, or join one already running."""
        if self._config.coalesce_requests:
            running = self._in_flight.get(key)
            if running is not None:
                self._log(logging.DEBUG, "%s joining in-flight request", url)
                return running

        task = asyncio.create_task(self._request(key, method, url, body))
        self._pending.add(task)
        if self._config.coalesce_requests:
            self._in_flight[key] = task
        task.add_done_callback(functools.partial(self._on_request_done, key))
        return task

    async def _request(self, key: str, method: str, url: str, body: Any) -> Any:
        """Run the network call and store the result on success."""
        self._log(logging.INFO, "%s request started", url)
        self._counters["network_calls"] += 1
        try:
            data = await self._get_caller().perform_request(
                method, url, body=body, auth=self._config.auth,
            )
        except Exception as exc:
            self._counters["errors"] += 1
            self._log(logging.WARNING, "%s request error: %s", url, exc)
            raise

        self._log(logging.INFO, "%s request success", url)
        self._store.put(key, data)
        return data

    def _on_request_done(self, key: str, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Failures are logged by _request and re-raised to every awaiting caller.
        if not task.cancelled():
            task.exception()

    def _get_caller(self) -> NetworkCaller:
        if self._caller is None:
            self._caller = HttpxCaller(
                verify_ssl=self._config.verify_ssl,
                timeout=self._config.timeout,
                body_encoding=self._config.body_encoding,
                raise_for_status=self._config.raise_for_status,
            )
        return self._caller

    def _log(self, level: int, msg: str, *args: Any) -> None:
        if level >= self._log_level:
            self._logger.log(level, msg, *args)
