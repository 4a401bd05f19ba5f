"""Shared configuration classes for finsync.

This module defines the configuration used by the transport executor, the
cache stores and the sync engines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

CACHE_MEMORY = "memory"
CACHE_FILE = "file"

# Profile is small and sensitive, so it is never persisted across restarts.
DEFAULT_CACHE_BACKENDS: dict[str, str] = {
    "profile": CACHE_MEMORY,
    "transactions": CACHE_FILE,
    "targets": CACHE_FILE,
    "reports": CACHE_FILE,
}


def default_cache_dir() -> Path:
    """Get the default cache directory.

    Returns:
        Path to ~/.finsync/cache.
    """
    return Path.home() / ".finsync" / "cache"


@dataclass
class ClientConfig:
    """Configuration for talking to the finance GraphQL API.

    Attributes:
        api_url: GraphQL endpoint (e.g., "https://graph.example.com/graphql").
        timeout: Connect/read timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
        max_retries: Maximum backoff retries for transient failures.
        base_delay: Base backoff delay in seconds (delay = base * 2**attempt).
        cache_dir: Directory holding the durable JSON caches.
        cache_backends: Cache backend ("memory" or "file") per entity family.
        auth_scheme: Optional scheme prefixed to the token ("Bearer").
            When None the raw token is sent in the Authorization header.
    """

    api_url: str
    timeout: float = 30.0
    verify_ssl: bool = True
    max_retries: int = 3
    base_delay: float = 0.1
    cache_dir: Path = field(default_factory=default_cache_dir)
    cache_backends: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_CACHE_BACKENDS)
    )
    auth_scheme: str | None = None

    def __post_init__(self) -> None:
        """Normalize URL and validate settings."""
        self.api_url = self.api_url.rstrip("/")
        self.cache_dir = Path(self.cache_dir)
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        for family, backend in self.cache_backends.items():
            if backend not in (CACHE_MEMORY, CACHE_FILE):
                raise ValueError(f"Unknown cache backend for {family}: {backend}")

    @property
    def is_secure(self) -> bool:
        """Check if the API is reached over HTTPS."""
        return self.api_url.startswith("https://")

    def backend_for(self, family: str) -> str:
        """Get the cache backend configured for an entity family."""
        return self.cache_backends.get(
            family, DEFAULT_CACHE_BACKENDS.get(family, CACHE_MEMORY)
        )

    def cache_path(self, family: str) -> Path:
        """Get the durable cache file for an entity family."""
        return self.cache_dir / f"{family}.json"
