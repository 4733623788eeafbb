from typing import Any

from fastapi import Body, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from vroom_cache.api.dependencies import HandlerDep, lifespan
from vroom_cache.config import settings
from vroom_cache.dto import HealthCheckResponse

app = FastAPI(
    title="VROOM Cache Proxy",
    description="Caching pass-through proxy for a VROOM route optimization backend",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cache"],
)


@app.post("/")
async def optimize(handler: HandlerDep, body: Any = Body(...)) -> Response:
    """
    Solve an optimization problem, from cache when possible.

    The upstream status and body are returned unchanged; the X-Cache
    header tells whether the body came from the cache (HIT) or VROOM (MISS).
    """
    return await handler.optimize(body)


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Composite health of Redis, every VROOM profile and every OSRM backend."""
    return await handler.health_check()


def main() -> None:
    import uvicorn

    uvicorn.run(
        "vroom_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()
