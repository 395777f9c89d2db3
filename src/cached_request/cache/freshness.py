"""Freshness evaluation for cache entries.

An entry is fresh while its age is strictly less than the threshold.  At
exactly ``stored_at + threshold`` it is already stale, so a threshold of
zero never yields a hit.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from cached_request.models import CacheEntry


def threshold_from_minutes(minutes: float) -> timedelta:
    """Convert a configured threshold in minutes to a :class:`~datetime.timedelta`."""
    return timedelta(minutes=minutes)


def is_fresh(entry: CacheEntry, threshold: timedelta, now: datetime) -> bool:
    """Return ``True`` iff *entry* was stored strictly after ``now - threshold``.

    Args:
        entry: The cached entry to check.
        threshold: Freshness window.
        now: The current time, sampled once by the caller for this lookup.
    """
    return entry.stored_at > now - threshold
