"""Tests for core configuration classes."""

from __future__ import annotations

from pathlib import Path

import pytest

from finsync.core.config import (
    CACHE_FILE,
    CACHE_MEMORY,
    ClientConfig,
    default_cache_dir,
)


class TestClientConfig:
    """Tests for ClientConfig class."""

    def test_init_basic(self) -> None:
        """Should initialize with sensible defaults."""
        config = ClientConfig(api_url="https://api.example.com/graphql")
        assert config.api_url == "https://api.example.com/graphql"
        assert config.timeout == 30.0
        assert config.verify_ssl is True
        assert config.max_retries == 3
        assert config.base_delay == 0.1
        assert config.auth_scheme is None
        assert config.cache_dir == default_cache_dir()

    def test_strips_trailing_slash(self) -> None:
        """Should strip trailing slash from api_url."""
        config = ClientConfig(api_url="https://api.example.com/graphql/")
        assert config.api_url == "https://api.example.com/graphql"

    def test_is_secure(self) -> None:
        """Should detect HTTPS endpoints."""
        assert ClientConfig(api_url="https://example.com").is_secure is True
        assert ClientConfig(api_url="http://localhost:4000").is_secure is False

    def test_rejects_negative_retries(self) -> None:
        """Should refuse a negative max_retries."""
        with pytest.raises(ValueError, match="max_retries"):
            ClientConfig(api_url="http://test", max_retries=-1)

    def test_rejects_negative_delay(self) -> None:
        """Should refuse a negative base_delay."""
        with pytest.raises(ValueError, match="base_delay"):
            ClientConfig(api_url="http://test", base_delay=-0.5)

    def test_rejects_unknown_backend(self) -> None:
        """Should refuse cache backends other than memory and file."""
        with pytest.raises(ValueError, match="Unknown cache backend"):
            ClientConfig(api_url="http://test", cache_backends={"profile": "redis"})

    def test_default_backends(self) -> None:
        """Profile lives in memory, the other families on disk."""
        config = ClientConfig(api_url="http://test")
        assert config.backend_for("profile") == CACHE_MEMORY
        assert config.backend_for("transactions") == CACHE_FILE
        assert config.backend_for("targets") == CACHE_FILE
        assert config.backend_for("reports") == CACHE_FILE

    def test_backend_override(self) -> None:
        """Unlisted families fall back to their default backend."""
        config = ClientConfig(
            api_url="http://test", cache_backends={"transactions": CACHE_MEMORY}
        )
        assert config.backend_for("transactions") == CACHE_MEMORY
        assert config.backend_for("reports") == CACHE_FILE
        assert config.backend_for("something-else") == CACHE_MEMORY

    def test_cache_path(self, tmp_path: Path) -> None:
        """Should place one JSON file per family in cache_dir."""
        config = ClientConfig(api_url="http://test", cache_dir=tmp_path)
        assert config.cache_path("targets") == tmp_path / "targets.json"
