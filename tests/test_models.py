"""Tests for the Pydantic models in cached_request.models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from cached_request.models import (
    BasicAuth,
    BodyEncoding,
    CacheEntry,
    ClientConfig,
    GlobalConfig,
    OutputConfig,
    RequestSettings,
)


class TestBasicAuth:
    def test_from_credential(self) -> None:
        auth = BasicAuth.from_credential("foo:bar")
        assert auth.username == "foo"
        assert auth.password == "bar"

    def test_password_may_contain_colons(self) -> None:
        auth = BasicAuth.from_credential("foo:b:a:r")
        assert auth.password == "b:a:r"

    def test_empty_password_allowed(self) -> None:
        assert BasicAuth.from_credential("foo:").password == ""

    def test_missing_colon_raises(self) -> None:
        with pytest.raises(ValueError, match="username:password"):
            BasicAuth.from_credential("foobar")

    def test_password_hidden_from_repr(self) -> None:
        assert "hunter2" not in repr(BasicAuth(username="foo", password="hunter2"))

    def test_frozen(self) -> None:
        auth = BasicAuth(username="foo", password="bar")
        with pytest.raises(ValidationError):
            auth.username = "other"  # type: ignore[misc]


class TestRequestSettings:
    def test_defaults(self) -> None:
        settings = RequestSettings()
        assert settings.cache_threshold == 1
        assert settings.log_level == "OFF"
        assert settings.verify_ssl is True
        assert settings.timeout == 30
        assert settings.body_encoding == BodyEncoding.FORM
        assert settings.raise_for_status is False
        assert settings.coalesce_requests is False

    def test_log_level_normalised(self) -> None:
        assert RequestSettings(log_level="warn").log_level == "WARN"

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RequestSettings(log_level="chatty")

    def test_negative_threshold_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RequestSettings(cache_threshold=-0.5)

    def test_fractional_threshold_allowed(self) -> None:
        assert RequestSettings(cache_threshold=0.25).cache_threshold == 0.25

    def test_zero_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RequestSettings(timeout=0)

    def test_body_encoding_from_string(self) -> None:
        assert RequestSettings(body_encoding="json").body_encoding == BodyEncoding.JSON


class TestClientConfig:
    def test_auth_and_instance_id(self) -> None:
        config = ClientConfig(
            cache_threshold=10,
            auth=BasicAuth(username="foo", password="bar"),
            instance_id="inventory",
        )
        assert config.auth is not None
        assert config.auth.username == "foo"
        assert config.instance_id == "inventory"

    def test_dump_and_validate_roundtrip(self) -> None:
        config = ClientConfig(auth=BasicAuth(username="foo", password="bar"), log_level="info")
        assert ClientConfig.model_validate(config.model_dump()) == config

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig().instance_id = "late"  # type: ignore[misc]


class TestCacheEntry:
    def test_holds_arbitrary_value(self) -> None:
        stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
        entry = CacheEntry(key="k", value={"nested": [1, 2]}, stored_at=stamp)
        assert entry.value == {"nested": [1, 2]}
        assert entry.stored_at == stamp


class TestGlobalConfig:
    def test_defaults(self) -> None:
        cfg = GlobalConfig()
        assert cfg.request == RequestSettings()
        assert cfg.auth_source is None
        assert cfg.output.format == "auto"

    def test_output_format_validated(self) -> None:
        assert OutputConfig(format="JSON").format == "json"
        with pytest.raises(ValidationError):
            OutputConfig(format="yaml")

    def test_has_no_credential_field(self) -> None:
        assert "auth" not in GlobalConfig().model_dump()["request"]
