"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tripsync.api.deps import get_services
from tripsync.api.errors import register_exception_handlers
from tripsync.api.routes.generation import router as generation_router
from tripsync.api.routes.health import router as health_router
from tripsync.api.routes.metrics import router as metrics_router
from tripsync.api.routes.schedules import router as schedules_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Only stop the worker pool if services were ever built
    if get_services.cache_info().currsize:
        get_services().coordinator.shutdown(wait=False)


app = FastAPI(title="TripSync API", version="0.1.0", lifespan=lifespan)

register_exception_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(generation_router)
app.include_router(schedules_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "TripSync API", "version": "0.1.0"}
