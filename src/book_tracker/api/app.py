"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from book_tracker.api.auth import router as auth_router
from book_tracker.api.books import router as books_router
from book_tracker.api.gatekeeper import EdgeGatekeeperMiddleware
from book_tracker.api.pages import router as pages_router
from book_tracker.app_logging import configure_logging
from book_tracker.containers import AppContainer
from book_tracker.errors import BookTrackerError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Book Tracker", lifespan=lifespan)
    app.state.container = container
    app.add_middleware(EdgeGatekeeperMiddleware)

    app.include_router(books_router)
    app.include_router(auth_router)
    app.include_router(pages_router)

    @app.exception_handler(BookTrackerError)
    async def handle_app_error(_: Request, exc: BookTrackerError) -> JSONResponse:
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_request(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected request body", extra={"errors": exc.errors()})
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        _: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            {"error": str(exc.detail)},
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, _: Exception) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
