"""Request commands -- issue cached GET and POST calls from the shell.

Each invocation builds one :class:`~cached_request.client.CacheClient`
from the resolved configuration and issues the request ``--repeat`` times,
optionally sleeping ``--interval`` seconds in between.  Since the client
lives for the whole invocation, repeats inside the freshness window are
served from cache, which makes these commands a quick way to watch the
threshold at work.

The last response body goes to stdout; a hit/miss summary goes to stderr.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer

from cached_request.client import CacheClient
from cached_request.config import resolve_client_config
from cached_request.exceptions import InvalidUsageError
from cached_request.models import BodyEncoding, ClientConfig
from cached_request.output import debug, print_body, info


def get_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL to fetch."),
    repeat: int = typer.Option(
        1, "--repeat", "-r", min=1, help="Number of sequential calls to issue."
    ),
    interval: float = typer.Option(
        0.0, "--interval", min=0, help="Seconds to wait between repeated calls."
    ),
) -> None:
    """Fetch URL with GET, serving repeats from cache while fresh.

    Example::

        cached-request get https://api.example.com/status --repeat 3
    """
    _run(ctx, "GET", url, None, repeat, interval)


def post_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL to post to."),
    body: Optional[str] = typer.Option(
        None, "--body", "-b", help="Request body. JSON is parsed; anything else is sent raw."
    ),
    json_body: bool = typer.Option(
        False, "--json-body", help="Send object bodies as JSON instead of form fields."
    ),
    repeat: int = typer.Option(
        1, "--repeat", "-r", min=1, help="Number of sequential calls to issue."
    ),
    interval: float = typer.Option(
        0.0, "--interval", min=0, help="Seconds to wait between repeated calls."
    ),
) -> None:
    """POST a body to URL, caching the response per URL and body.

    Example::

        cached-request post https://api.example.com/quote --body '{"qty": 2}'
    """
    overrides: dict[str, Any] = {}
    if json_body:
        overrides["body_encoding"] = BodyEncoding.JSON
    parsed = _parse_body(body)
    _run(ctx, "POST", url, {} if parsed is None else parsed, repeat, interval, overrides)


def _run(
    ctx: typer.Context,
    method: str,
    url: str,
    body: Any,
    repeat: int,
    interval: float,
    overrides: Optional[dict[str, Any]] = None,
) -> None:
    if not url.startswith(("http://", "https://")):
        raise InvalidUsageError(f"URL must start with http:// or https://: {url}")

    opts = ctx.obj or {}
    config = resolve_client_config(
        cli_threshold=opts.get("threshold"),
        cli_auth_source=opts.get("auth_source"),
        cli_log_level=opts.get("log_level"),
        cli_insecure=opts.get("insecure", False),
        cli_coalesce=opts.get("coalesce", False),
        cli_raise_for_status=opts.get("raise_for_status", False),
        instance_id=opts.get("instance_id"),
    )

    result, stats = asyncio.run(
        _issue(config, method, url, body, repeat, interval, overrides or {})
    )

    print_body(result)
    info(
        f"{repeat} call(s): {stats['hits']} cache hit(s), "
        f"{stats['network_calls']} network call(s)"
    )


async def _issue(
    config: ClientConfig,
    method: str,
    url: str,
    body: Any,
    repeat: int,
    interval: float,
    overrides: dict[str, Any],
) -> tuple[Any, dict[str, Any]]:
    """Issue *repeat* sequential calls through one client and return the last body and stats."""
    result: Any = None
    async with CacheClient(config, **overrides) as client:
        for attempt in range(repeat):
            if attempt and interval:
                await asyncio.sleep(interval)
            if method == "GET":
                result = await client.get(url)
            else:
                result = await client.post(url, body)
            debug(f"{method} {url} ({attempt + 1}/{repeat})")
        stats = client.stats()
    return result, stats


def _parse_body(body: str | None) -> Any:  # noqa: ANN401
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body
