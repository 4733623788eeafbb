"""Dependency injection configuration for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Long-lived clients (Redis, httpx) created once in lifespan
    - Services receive them through their constructors
    - Dependency functions retrieve the handler from request.app.state
"""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from loguru import logger

from vroom_cache.config import get_http_client, get_settings, is_http_url
from vroom_cache.handlers import ProxyHandler
from vroom_cache.logging_config import configure_logging
from vroom_cache.repositories import RedisCacheRepository
from vroom_cache.services import HealthService, ProxyService, VroomForwarder


def get_handler(request: Request) -> ProxyHandler:
    """Dependency injection for ProxyHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ProxyHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "proxy_handler", None)
    if handler is None:
        raise RuntimeError("ProxyHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Clients (Redis, httpx) - one each for the process lifetime
    2. Services (forwarder, cache-aside, health)
    3. Handler - stored in app.state.proxy_handler

    Cleanup:
        Closes both clients and removes everything from app.state
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    if not is_http_url(settings.vroom_url):
        logger.warning(f"VROOM_URL appears invalid: {settings.vroom_url!r}")

    repository = RedisCacheRepository.create(settings)
    http_client = get_http_client(settings)

    forwarder = VroomForwarder(
        http_client,
        url=settings.vroom_url,
        timeout=settings.upstream_timeout,
        canonical=settings.cache_canonical_keys,
    )
    proxy_service = ProxyService.create(
        store=repository,
        forwarder=forwarder,
        key_prefix=settings.cache_key_prefix,
        canonical_keys=settings.cache_canonical_keys,
        ttl=settings.cache_ttl,
        store_timeout=settings.redis_timeout,
    )
    health_service = HealthService(
        http_client,
        repository,
        vroom_url=settings.vroom_url,
        vroom_profiles=settings.vroom_profiles,
        osrm_urls=settings.osrm_urls,
        probe_timeout=settings.health_probe_timeout,
    )

    app.state.repository = repository
    app.state.http_client = http_client
    app.state.proxy_service = proxy_service
    app.state.health_service = health_service
    app.state.proxy_handler = ProxyHandler(proxy_service=proxy_service, health_service=health_service)

    logger.info(f"Forwarding to VROOM at {settings.vroom_url}")
    logger.info(f"Caching in Redis at {repository.target} (ttl={settings.cache_ttl}s)")
    try:
        await repository.ping()
        logger.info("Redis connection successful")
    except Exception as e:
        logger.error(f"Redis error: {e!r}; requests will bypass the cache until it recovers")

    yield

    del app.state.proxy_handler
    del app.state.health_service
    del app.state.proxy_service
    del app.state.http_client
    del app.state.repository
    await http_client.aclose()
    await repository.close()
    logger.info("Cache proxy shut down")


HandlerDep = Annotated[ProxyHandler, Depends(get_handler)]
