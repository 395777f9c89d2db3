"""Tests for the CacheStore and cache key derivation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from cached_request.cache import CacheStore, key_for


@pytest.fixture()
def store(clock) -> CacheStore:
    return CacheStore(clock=clock)


# ------------------------------------------------------------------ #
# Key derivation
# ------------------------------------------------------------------ #


class TestKeyFor:
    def test_get_key_is_url(self) -> None:
        """Without a body the key is the URL unchanged."""
        assert key_for("http://x") == "http://x"

    def test_post_key_appends_serialised_body(self) -> None:
        assert key_for("http://x", {"a": 1}) == 'http://x{"a":1}'

    def test_different_bodies_produce_different_keys(self) -> None:
        assert key_for("http://x", {"a": 1}) != key_for("http://x", {"a": 2})

    def test_equal_bodies_produce_equal_keys(self) -> None:
        assert key_for("http://x", {"a": 1, "b": [1, 2]}) == key_for(
            "http://x", {"a": 1, "b": [1, 2]}
        )

    def test_field_order_is_canonicalised(self) -> None:
        """Mapping keys are sorted, so insertion order does not matter."""
        assert key_for("http://x", {"a": 1, "b": 2}) == key_for("http://x", {"b": 2, "a": 1})

    def test_nested_field_order_is_canonicalised(self) -> None:
        first = key_for("http://x", {"outer": {"z": 1, "y": 2}})
        second = key_for("http://x", {"outer": {"y": 2, "z": 1}})
        assert first == second

    def test_empty_body_never_collides_with_get(self) -> None:
        """Only None means "no body"; an empty mapping still extends the key."""
        assert key_for("http://x", {}) == "http://x{}"
        assert key_for("http://x", {}) != key_for("http://x")

    def test_string_body_quoted(self) -> None:
        assert key_for("http://x", "raw=1") == 'http://x"raw=1"'

    def test_bytes_body_keyed_like_text(self) -> None:
        assert key_for("http://x", b"raw=1") == key_for("http://x", "raw=1")

    def test_empty_string_body_never_collides_with_get(self) -> None:
        assert key_for("http://x", "") == 'http://x""'
        assert key_for("http://x", "") != key_for("http://x")

    def test_json_text_body_distinct_from_mapping(self) -> None:
        """A raw JSON string is sent as content, a mapping as form fields."""
        assert key_for("http://x", '{"a":1}') != key_for("http://x", {"a": 1})

    def test_string_body_cannot_extend_the_url(self) -> None:
        assert key_for("http://api/item", "s") != key_for("http://api/items")

    def test_different_urls_produce_different_keys(self) -> None:
        assert key_for("http://x/a", {"a": 1}) != key_for("http://x/b", {"a": 1})

    def test_non_json_values_are_stringified(self) -> None:
        """Values json cannot encode fall back to str() instead of raising."""
        key = key_for("http://x", {"when": timedelta(seconds=5)})
        assert key == 'http://x{"when":"0:00:05"}'


# ------------------------------------------------------------------ #
# lookup / put / evict
# ------------------------------------------------------------------ #


class TestStoreOperations:
    def test_lookup_missing_returns_none(self, store: CacheStore) -> None:
        assert store.lookup("http://missing") is None

    def test_put_then_lookup(self, store: CacheStore, clock) -> None:
        store.put("http://x", "A")
        entry = store.lookup("http://x")
        assert entry is not None
        assert entry.key == "http://x"
        assert entry.value == "A"
        assert entry.stored_at == clock.now

    def test_put_overwrites_existing_entry(self, store: CacheStore, clock) -> None:
        store.put("http://x", "A")
        clock.advance(seconds=61)
        store.put("http://x", "B")

        entry = store.lookup("http://x")
        assert entry is not None
        assert entry.value == "B"
        assert entry.stored_at == clock.now
        assert len(store) == 1

    def test_put_returns_stored_entry(self, store: CacheStore) -> None:
        entry = store.put("http://x", {"id": 1})
        assert store.lookup("http://x") == entry

    def test_evict_removes_entry(self, store: CacheStore) -> None:
        store.put("http://x", "A")
        store.evict("http://x")
        assert store.lookup("http://x") is None
        assert "http://x" not in store

    def test_evict_missing_key_is_noop(self, store: CacheStore) -> None:
        store.put("http://y", "A")
        store.evict("http://x")
        assert len(store) == 1

    def test_evict_only_touches_target(self, store: CacheStore) -> None:
        store.put("http://a", "A")
        store.put("http://b", "B")
        store.evict("http://a")
        assert store.lookup("http://b") is not None

    def test_clear_removes_everything(self, store: CacheStore) -> None:
        store.put("http://a", "A")
        store.put("http://b", "B")
        store.clear()
        assert len(store) == 0

    def test_lookup_does_not_mutate(self, store: CacheStore) -> None:
        store.lookup("http://x")
        assert len(store) == 0


# ------------------------------------------------------------------ #
# Stats and iteration
# ------------------------------------------------------------------ #


class TestStats:
    def test_stats_empty(self, store: CacheStore) -> None:
        assert store.stats() == {"size": 0, "keys": []}

    def test_stats_after_inserts(self, store: CacheStore) -> None:
        store.put("http://a", "A")
        store.put("http://b", "B")
        assert store.stats() == {"size": 2, "keys": ["http://a", "http://b"]}

    def test_iteration_yields_entries(self, store: CacheStore) -> None:
        store.put("http://a", "A")
        assert [entry.value for entry in store] == ["A"]


class TestDefaultClock:
    def test_default_clock_is_timezone_aware(self) -> None:
        entry = CacheStore().put("http://x", "A")
        assert entry.stored_at.tzinfo is not None

    def test_stores_are_independent(self) -> None:
        first, second = CacheStore(), CacheStore()
        first.put("http://x", "A")
        assert second.lookup("http://x") is None
