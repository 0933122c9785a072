"""FastAPI application main module.

This module builds the FastAPI application for the BookRec service: it wires
the routers, logging, error handlers and the lazily loaded ``Library``, and
serves the health, status and metrics endpoints.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookrec import __version__
from bookrec.api.logging_config import RequestLoggingMiddleware, setup_logging
from bookrec.api.metrics import metrics_service
from bookrec.api.routes import books, scrape, stats
from bookrec.config import config
from bookrec.exceptions import BookRecException
from bookrec.recommender.utils import Library
from bookrec.scraper.metadata import ScrapePool

logger = logging.getLogger(__name__)


async def bookrec_exception_handler(request: Request, exc: BookRecException) -> JSONResponse:
    """Render a ``BookRecException`` as ``{"error", "details"}``."""
    if exc.status_code >= 500:
        logger.error(
            exc.message,
            extra={"path": str(request.url.path), "details": exc.details},
        )
    else:
        logger.warning(
            exc.message,
            extra={"path": str(request.url.path), "status_code": exc.status_code},
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": jsonable_encoder(exc.details)},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests as 400 like any other invalid request."""
    logger.warning(
        "Request validation failed",
        extra={"path": str(request.url.path), "errors": str(exc.errors())},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid request",
            "details": {"errors": jsonable_encoder(exc.errors())},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error: {exc}",
        extra={"path": str(request.url.path), "error_type": type(exc).__name__},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "details": {}},
    )


def create_app(
    library: Optional[Library] = None,
    data_dir: Optional[str] = None,
    scrape_pool: Optional[ScrapePool] = None,
    log_level: Optional[str] = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Args:
        library: Pre-built library. When omitted, datasets are loaded from
            ``data_dir`` on the first request that needs them.
        data_dir: Dataset directory, defaults to ``BOOKREC_DATA_DIR``.
        scrape_pool: Scrape worker pool, defaults to a fresh ``ScrapePool``.
        log_level: Logging level, defaults to ``LOG_LEVEL``.

    Returns:
        The configured application.
    """
    setup_logging(log_level or config.LOG_LEVEL)

    pool = scrape_pool if scrape_pool is not None else ScrapePool()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("BookRec starting up", extra={"data_dir": app.state.data_dir})
        yield
        logger.info("BookRec shutting down")
        app.state.scrape_pool.shutdown()

    application = FastAPI(
        title="BookRec API",
        description="Book catalog statistics and content-based recommendations",
        version=__version__,
        lifespan=lifespan,
    )

    application.state.library = library
    application.state.data_dir = data_dir or config.DATA_DIR
    application.state.scrape_pool = pool

    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(BookRecException, bookrec_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)

    application.include_router(stats.router)
    application.include_router(books.router)
    application.include_router(scrape.router)

    @application.get("/ping")
    def ping() -> Dict[str, str]:
        """Health check endpoint.

        Example:
            >>> response = client.get("/ping")
            >>> assert response.json() == {"status": "ok"}
        """
        return {"status": "ok"}

    @application.get("/status")
    def get_status() -> Dict[str, Any]:
        """Report whether the datasets are loaded, without loading them."""
        loaded: Optional[Library] = application.state.library
        return {
            "datasets_loaded": loaded is not None,
            "timestamp_last_loaded": loaded.loaded_at.isoformat() if loaded else None,
            "num_books": len(loaded.catalog) if loaded else 0,
            "num_records": len(loaded.history) if loaded else 0,
            "num_users_tracked": len(loaded.preferences) if loaded else 0,
        }

    @application.get("/metrics")
    def get_metrics() -> Dict[str, Any]:
        """Per-operation call counts and latency."""
        return metrics_service.get_metrics()

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookrec.api.main:app",
        host=config.HOST,
        port=config.PORT,
    )
