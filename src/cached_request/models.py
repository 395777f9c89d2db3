"""Canonical Pydantic models shared across all cached_request modules.

The models fall into two groups:

**Runtime models** -- built in memory by library callers:
    :class:`BasicAuth`, :class:`ClientConfig` and :class:`CacheEntry`.

**Persisted models** -- serialised as JSON in the user's config directory
and consumed by the command-line front end:
    :class:`RequestSettings`, :class:`OutputConfig` and :class:`GlobalConfig`.

:class:`ClientConfig` extends :class:`RequestSettings` with the two fields
that must never be written to disk or shared between clients: the
credential pair and the instance identifier.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVELS = ("OFF", "DEBUG", "INFO", "WARN", "WARNING", "ERROR")
OUTPUT_FORMATS = ("auto", "json", "plain", "rich")


class BodyEncoding(str, enum.Enum):
    """How the httpx caller encodes a mapping POST body on the wire."""

    FORM = "form"
    JSON = "json"


class BasicAuth(BaseModel):
    """Username/password pair forwarded verbatim to every network call.

    Example::

        BasicAuth(username="foo", password="bar")
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)

    @classmethod
    def from_credential(cls, raw: str) -> BasicAuth:
        """Build from a ``"username:password"`` string.

        Raises:
            ValueError: If *raw* has no colon separator.
        """
        if ":" not in raw:
            raise ValueError(
                "Basic auth credential must be in 'username:password' format "
                "(colon separator is required)"
            )
        username, password = raw.split(":", 1)
        return cls(username=username, password=password)


class RequestSettings(BaseModel):
    """Cache and transport settings that may be persisted as user defaults."""

    cache_threshold: float = Field(
        default=1.0, ge=0, description="Freshness window in minutes"
    )
    log_level: str = Field(
        default="OFF", description="Diagnostic verbosity: OFF, DEBUG, INFO, WARN, ERROR"
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    timeout: float = Field(default=30.0, gt=0, description="Network timeout in seconds")
    body_encoding: BodyEncoding = Field(
        default=BodyEncoding.FORM, description="POST body encoding: form or json"
    )
    raise_for_status: bool = Field(
        default=False, description="Treat HTTP 4xx/5xx responses as transport errors"
    )
    coalesce_requests: bool = Field(
        default=False,
        description="Share one in-flight network call between concurrent identical misses",
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


class ClientConfig(RequestSettings):
    """Immutable configuration for one :class:`~cached_request.client.CacheClient`.

    Example::

        ClientConfig(
            cache_threshold=10,
            auth=BasicAuth(username="foo", password="bar"),
            log_level="WARN",
            instance_id="inventory",
        )
    """

    model_config = ConfigDict(frozen=True)

    auth: Optional[BasicAuth] = None
    instance_id: Optional[str] = Field(
        default=None, description="Identifier used to name this client's logger"
    )


class CacheEntry(BaseModel):
    """A successful response remembered under its cache key.

    ``value`` is always the payload of a call that completed without error;
    failed calls never produce an entry.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    value: Any = None
    stored_at: datetime


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )

    @field_validator("format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(f"format must be one of {', '.join(OUTPUT_FORMATS)}")
        return fmt


class GlobalConfig(BaseModel):
    """User-wide defaults persisted at ``~/.config/cached-request/config.json``.

    Loaded and saved by :func:`~cached_request.config.load_global_config`
    and :func:`~cached_request.config.save_global_config`. Credentials are
    never stored here, only the *source* they are read from (see
    :func:`~cached_request.config.resolve_credential`).
    """

    request: RequestSettings = Field(default_factory=RequestSettings)
    auth_source: Optional[str] = Field(
        default=None,
        description="Credential source resolving to 'username:password': env:VAR, file:/path, prompt",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
