"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutrition_analytics.api.analytics import router as analytics_router
from nutrition_analytics.api.realtime import router as realtime_router
from nutrition_analytics.app_logging import configure_logging
from nutrition_analytics.containers import AppContainer
from nutrition_analytics.domain.errors import DataFetchError, InvalidDateRangeError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(analytics_router)
    app.include_router(realtime_router)

    @app.exception_handler(InvalidDateRangeError)
    async def invalid_range(
        request: Request, exc: InvalidDateRangeError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.exception_handler(DataFetchError)
    async def fetch_failed(request: Request, exc: DataFetchError) -> JSONResponse:
        logger.warning("Serving empty analytics for %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc), "points": []},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
