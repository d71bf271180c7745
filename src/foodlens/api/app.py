"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from foodlens.api.analyze import router as analyze_router
from foodlens.api.auth import router as auth_router
from foodlens.api.food import router as food_router
from foodlens.app_logging import configure_logging
from foodlens.containers import AppContainer
from foodlens.domain.errors import FoodLensError

FALLBACK_MESSAGE = "Something went wrong. Please try again."


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="FoodLens", lifespan=lifespan)
    app.state.container = container

    app.include_router(analyze_router)
    app.include_router(auth_router)
    app.include_router(food_router)

    @app.exception_handler(FoodLensError)
    async def handle_foodlens_error(
        request: Request, exc: FoodLensError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed: %s",
                exc.message,
                extra={"path": request.url.path, "error": type(exc).__name__},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": _public_message(container, exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(
            status_code=400, content={"error": f"Invalid request: {details}"}
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"error": FALLBACK_MESSAGE})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _public_message(container: AppContainer, exc: FoodLensError) -> str:
    """Return the error message, hiding internal detail outside local runs."""
    if exc.status_code >= 500 and container.settings.environment != "local":
        return exc.user_message
    return exc.message
