"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles persisted defaults for the ``cached-request`` command:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.cached-request/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Global config** -- A single :class:`~cached_request.models.GlobalConfig`
  JSON file storing default cache and transport settings.
* **Precedence resolution** -- :func:`resolve_client_config` merges CLI
  flags, environment variables and the global config into the
  :class:`~cached_request.models.ClientConfig` a client is built from.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts.

Library users never need this module; it exists for the CLI.  All file
writes use an atomic temp-file-then-rename strategy (:func:`_atomic_write`).
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional

from cached_request.exceptions import ConfigError
from cached_request.models import BasicAuth, ClientConfig, GlobalConfig

_APP_NAME = "cached-request"
_CONFIG_FILENAME = "config.json"

ENV_THRESHOLD = "CACHED_REQUEST_THRESHOLD"
ENV_LOG_LEVEL = "CACHED_REQUEST_LOG_LEVEL"
ENV_VERIFY_SSL = "CACHED_REQUEST_VERIFY_SSL"
ENV_AUTH = "CACHED_REQUEST_AUTH"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses the XDG Base Directory layout (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/cached-request/`` (default
    ``~/.config/cached-request/``).  On macOS/Windows: ``~/.cached-request/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/cached-request/`` (default
    ``~/.local/share/cached-request/``).  On macOS/Windows:
    ``~/.cached-request/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  On any failure
    the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~cached_request.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def resolve_client_config(
    cli_threshold: Optional[float] = None,
    cli_auth_source: Optional[str] = None,
    cli_log_level: Optional[str] = None,
    cli_insecure: bool = False,
    cli_coalesce: bool = False,
    cli_raise_for_status: bool = False,
    instance_id: Optional[str] = None,
) -> ClientConfig:
    """Resolve the effective client configuration.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``CACHED_REQUEST_THRESHOLD``,
           ``CACHED_REQUEST_LOG_LEVEL``, ``CACHED_REQUEST_VERIFY_SSL``,
           ``CACHED_REQUEST_AUTH``)
        3. User config (``~/.config/cached-request/config.json``)
        4. Defaults

    Boolean flags only ever switch a setting on; they cannot undo a value
    set at a lower level.

    Returns:
        A validated :class:`~cached_request.models.ClientConfig`.

    Raises:
        ConfigError: If the merged settings fail validation or the
            credential source cannot be resolved.
    """
    # 4 + 3. Defaults and user config
    global_cfg = load_global_config()
    settings: dict[str, Any] = global_cfg.request.model_dump()
    auth_source = global_cfg.auth_source

    # 2. Environment variables
    env_threshold = os.environ.get(ENV_THRESHOLD)
    if env_threshold:
        settings["cache_threshold"] = env_threshold
    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        settings["log_level"] = env_level
    env_verify = os.environ.get(ENV_VERIFY_SSL)
    if env_verify:
        settings["verify_ssl"] = _env_bool(env_verify)
    env_auth = os.environ.get(ENV_AUTH)
    if env_auth:
        auth_source = env_auth

    # 1. CLI flags
    if cli_threshold is not None:
        settings["cache_threshold"] = cli_threshold
    if cli_log_level is not None:
        settings["log_level"] = cli_log_level
    if cli_auth_source is not None:
        auth_source = cli_auth_source
    if cli_insecure:
        settings["verify_ssl"] = False
    if cli_coalesce:
        settings["coalesce_requests"] = True
    if cli_raise_for_status:
        settings["raise_for_status"] = True

    auth: Optional[BasicAuth] = None
    if auth_source:
        try:
            auth = BasicAuth.from_credential(resolve_credential(auth_source))
        except ValueError as exc:
            raise ConfigError(f"{exc} (source: {auth_source})") from exc

    try:
        return ClientConfig.model_validate(
            {**settings, "auth": auth, "instance_id": instance_id}
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential (username:password): ")

    raise ConfigError(f"Unknown credential source format: {source}")
