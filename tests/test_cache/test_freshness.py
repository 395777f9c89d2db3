"""Tests for freshness evaluation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cached_request.cache import is_fresh, threshold_from_minutes
from cached_request.models import CacheEntry

STORED_AT = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
ONE_MINUTE = timedelta(minutes=1)


def _entry() -> CacheEntry:
    return CacheEntry(key="http://x", value="A", stored_at=STORED_AT)


class TestIsFresh:
    @pytest.mark.parametrize("age", [timedelta(0), timedelta(seconds=30), timedelta(seconds=59.999)])
    def test_fresh_before_threshold(self, age: timedelta) -> None:
        assert is_fresh(_entry(), ONE_MINUTE, STORED_AT + age) is True

    def test_exact_boundary_is_stale(self) -> None:
        """stored_at == now - threshold is not strictly after, so it is stale."""
        assert is_fresh(_entry(), ONE_MINUTE, STORED_AT + ONE_MINUTE) is False

    def test_one_microsecond_before_boundary_is_fresh(self) -> None:
        now = STORED_AT + ONE_MINUTE - timedelta(microseconds=1)
        assert is_fresh(_entry(), ONE_MINUTE, now) is True

    def test_past_threshold_is_stale(self) -> None:
        assert is_fresh(_entry(), ONE_MINUTE, STORED_AT + timedelta(seconds=61)) is False

    def test_zero_threshold_is_never_fresh(self) -> None:
        assert is_fresh(_entry(), timedelta(0), STORED_AT) is False

    def test_custom_threshold(self) -> None:
        ten_minutes = timedelta(minutes=10)
        assert is_fresh(_entry(), ten_minutes, STORED_AT + timedelta(minutes=9)) is True
        assert is_fresh(_entry(), ten_minutes, STORED_AT + timedelta(minutes=10)) is False


class TestThresholdFromMinutes:
    def test_whole_minutes(self) -> None:
        assert threshold_from_minutes(1) == timedelta(minutes=1)

    def test_fractional_minutes(self) -> None:
        assert threshold_from_minutes(0.5) == timedelta(seconds=30)
