import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlsplit, urlunsplit

import httpx
import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    redis_timeout: float = float(os.getenv("REDIS_TIMEOUT", "2"))

    # Upstream optimizer
    vroom_url: str = os.getenv("VROOM_URL", "http://vroom:3000")
    vroom_profiles_raw: str = os.getenv("VROOM_PROFILES", "car")
    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "60"))

    # Routing backends, "profile=url" pairs separated by commas
    osrm_urls_raw: str = os.getenv("OSRM_URLS", "car=http://osrm:5000")

    # Cache
    cache_ttl: int = int(os.getenv("CACHE_TTL", "3600"))  # 1 hour
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "vroom")
    cache_canonical_keys: bool = os.getenv("CACHE_CANONICAL_KEYS", "false").lower() == "true"

    # Health
    health_probe_timeout: float = float(os.getenv("HEALTH_PROBE_TIMEOUT", "5"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "4000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def vroom_profiles(self) -> list[str]:
        """Optimizer profiles probed by the health check.

        Returns:
            Profile names in configuration order, blanks removed
        """
        return [p.strip() for p in self.vroom_profiles_raw.split(",") if p.strip()]

    @property
    def osrm_urls(self) -> dict[str, str]:
        """Routing backends keyed by profile.

        Returns:
            Mapping of profile name to base URL, in configuration order
        """
        backends: dict[str, str] = {}
        for pair in self.osrm_urls_raw.split(","):
            if not pair.strip():
                continue
            profile, sep, url = pair.partition("=")
            if not sep or not profile.strip() or not url.strip():
                raise ValueError(f"OSRM_URLS entries must look like 'profile=url', got {pair!r}")
            backends[profile.strip()] = url.strip().rstrip("/")
        return backends

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl <= 0:
            raise ValueError("CACHE_TTL must be a positive number of seconds")

        if min(self.upstream_timeout, self.health_probe_timeout, self.redis_timeout) <= 0:
            raise ValueError("UPSTREAM_TIMEOUT, HEALTH_PROBE_TIMEOUT and REDIS_TIMEOUT must be positive")

        if self.health_probe_timeout >= self.upstream_timeout:
            raise ValueError(
                f"HEALTH_PROBE_TIMEOUT ({self.health_probe_timeout}) must be shorter than "
                f"UPSTREAM_TIMEOUT ({self.upstream_timeout})"
            )

        if self.redis_timeout >= self.upstream_timeout:
            raise ValueError(
                f"REDIS_TIMEOUT ({self.redis_timeout}) must be shorter than "
                f"UPSTREAM_TIMEOUT ({self.upstream_timeout})"
            )

        # Fail fast on malformed routing backends
        _ = self.osrm_urls


def redact_url(url: str) -> str:
    """Mask the password component of a URL."""
    parts = urlsplit(url)
    if parts.password is None:
        return url
    userinfo = f"{parts.username}:***" if parts.username else ":***"
    host = parts.hostname or ""
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, parts.fragment))


def is_http_url(url: str) -> bool:
    """Check that a URL is absolute http(s) with a host."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client(config: Settings | None = None) -> redis.Redis:
    """Create an async Redis client instance.

    Connects and socket reads are bounded by REDIS_TIMEOUT so a silent
    server fails fast instead of stalling requests.
    """
    config = config or settings
    return redis.from_url(
        config.redis_url,
        password=config.redis_password,
        decode_responses=False,
        socket_timeout=config.redis_timeout,
        socket_connect_timeout=config.redis_timeout,
    )


def get_http_client(config: Settings | None = None) -> httpx.AsyncClient:
    """Create the shared async HTTP client for upstream and probe traffic.

    Timeouts are set per call, the client default only covers stray requests.
    """
    config = config or settings
    return httpx.AsyncClient(
        timeout=config.upstream_timeout,
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )
