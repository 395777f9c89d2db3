"""Shared test fixtures for cached_request.

Provides a controllable clock, a scripted network caller, isolated config
directories, an output-state reset and a CLI runner.  These fixtures are
discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

import pytest

from cached_request.models import BasicAuth
from cached_request.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams, so a stale manager would
    write to closed files in the next test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Clock and network caller doubles
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class ScriptedCaller:
    """Network caller that replays queued results and records every call.

    Queue items are either a value to return or an exception instance to
    raise.  When the queue is empty the last item is reused.
    """

    def __init__(self, *results: Any) -> None:
        self.results = list(results) or ["body"]
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def perform_request(
        self,
        method: str,
        url: str,
        body: Any = None,
        auth: Optional[BasicAuth] = None,
    ) -> Any:
        self.calls.append({"method": method, "url": url, "body": body, "auth": auth})
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def caller() -> ScriptedCaller:
    return ScriptedCaller("A")


@pytest.fixture
def make_caller() -> type[ScriptedCaller]:
    """Return the ScriptedCaller class for tests that script several results."""
    return ScriptedCaller


@pytest.fixture
def shared_client_logger():
    """Reset the shared client logger level around a test."""
    logger = logging.getLogger("cached_request.client")
    level = logger.level
    logger.setLevel(logging.NOTSET)
    yield logger
    logger.setLevel(level)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    forces the XDG code path, and clears all CACHED_REQUEST_* variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("cached_request.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "CACHED_REQUEST_THRESHOLD",
        "CACHED_REQUEST_LOG_LEVEL",
        "CACHED_REQUEST_VERIFY_SSL",
        "CACHED_REQUEST_AUTH",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
