"""Network caller collaborators for :class:`~cached_request.client.CacheClient`.

The cache layer treats the transport as an opaque capability: one
coroutine that performs a request and either returns the response body or
raises.  :class:`NetworkCaller` spells out that contract and
:class:`HttpxCaller` is the default implementation, a thin wrapper over
:class:`httpx.AsyncClient`.

HTTP status codes are not interpreted unless ``raise_for_status`` is set;
a 404 page is a successful call as far as the cache is concerned.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from cached_request.exceptions import TransportError
from cached_request.models import BasicAuth, BodyEncoding


@runtime_checkable
class NetworkCaller(Protocol):
    """Capability consumed by the cache client to reach the network."""

    async def perform_request(
        self,
        method: str,
        url: str,
        body: Any = None,
        auth: Optional[BasicAuth] = None,
    ) -> Any: ...

    async def aclose(self) -> None: ...


class HttpxCaller:
    """Perform requests with :class:`httpx.AsyncClient`.

    Args:
        verify_ssl: Verify TLS certificates.  Passed to httpx as ``verify``.
        timeout: Request timeout in seconds.
        body_encoding: How mapping bodies are sent: ``form`` (urlencoded)
            or ``json``.
        raise_for_status: Raise :class:`TransportError` for 4xx/5xx
            responses instead of returning their body.
        client: Pre-built :class:`httpx.AsyncClient` to use instead of
            creating one.  The caller does not close an injected client.

    Example::

        caller = HttpxCaller(verify_ssl=False, timeout=5)
        text = await caller.perform_request("GET", "https://self-signed.local/")
        await caller.aclose()
    """

    def __init__(
        self,
        verify_ssl: bool = True,
        timeout: float = 30,
        body_encoding: BodyEncoding = BodyEncoding.FORM,
        raise_for_status: bool = False,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._body_encoding = BodyEncoding(body_encoding)
        self._raise_for_status = raise_for_status
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            verify=verify_ssl,
            timeout=timeout,
            follow_redirects=True,
        )

    async def perform_request(
        self,
        method: str,
        url: str,
        body: Any = None,
        auth: Optional[BasicAuth] = None,
    ) -> str:
        """Send one request and return the response text.

        Args:
            method: HTTP method, ``GET`` or ``POST``.
            url: Absolute request URL.
            body: Request body; see :meth:`_body_kwargs` for the encoding.
            auth: Credentials sent as HTTP Basic auth.

        Returns:
            The decoded response body.

        Raises:
            TransportError: On connection, TLS, timeout or protocol
                failures, on a malformed URL, and on 4xx/5xx when
                ``raise_for_status`` is enabled.
        """
        kwargs: dict[str, Any] = {"method": method, "url": url}
        kwargs.update(self._body_kwargs(body))
        if auth is not None:
            kwargs["auth"] = httpx.BasicAuth(auth.username, auth.password)

        try:
            response = await self._client.request(**kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(
                f"{method} {url} failed: {exc}", method=method, url=url,
            ) from exc

        if self._raise_for_status and response.is_error:
            raise TransportError(
                f"{method} {url} returned HTTP {response.status_code}",
                method=method,
                url=url,
                status_code=response.status_code,
            )

        return response.text

    async def aclose(self) -> None:
        """Close the underlying httpx client if this caller created it."""
        if self._owns_client:
            await self._client.aclose()

    def _body_kwargs(self, body: Any) -> dict[str, Any]:
        """Translate *body* into the matching :meth:`httpx.AsyncClient.request` keyword."""
        if body is None:
            return {}
        if isinstance(body, (str, bytes)):
            return {"content": body}
        if isinstance(body, Mapping) and self._body_encoding == BodyEncoding.FORM:
            return {"data": dict(body)}
        return {"json": body}
