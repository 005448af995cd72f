"""
blockdoc HTTP application.

`create_app()` builds the FastAPI instance served by `blockdoc.api.server`:

1.  **Middleware**: CORS so the article front-end can call the API.
2.  **Errors**: every failure leaves as JSON ``{"error", "detail", "path"}``.
    Domain errors and `ValueError` are client errors (400); anything else is 500.
3.  **Routes**: `/render`, `/execute` and the `/health` probe.

A factory (rather than a module-level app) gives each test its own instance
and reads configuration at construction time.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blockdoc import __version__
from blockdoc.api.routers import render
from blockdoc.core.errors import BlockdocError
from blockdoc.core.settings import get_logger, load_settings

logger = get_logger("blockdoc.api")


def _error_response(request: Request, status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": str(exc), "path": request.url.path},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the effective renderer configuration on startup."""
    cfg = load_settings()
    logger.info(
        "Starting blockdoc API (env=%s, exec_timeout_ms=%d, auto_run_embeds=%s)",
        cfg.environment,
        cfg.exec_timeout_ms,
        cfg.auto_run_embeds,
    )
    yield
    logger.info("Shutting down blockdoc API")


def create_app() -> FastAPI:
    """
    Construct and configure the blockdoc FastAPI application.

    Returns
    -------
    FastAPI
        The configured ASGI application ready to be served by Uvicorn.
    """
    app = FastAPI(
        title="blockdoc API",
        description="Block-document rendering and sandboxed code evaluation",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ---- Middleware ---------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict to the article front-end origin in production.
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- Error handlers -----------------------------------------------------
    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return _error_response(request, 500, "Internal Server Error", exc)

    @app.exception_handler(ValueError)
    async def invalid_value(request: Request, exc: ValueError) -> JSONResponse:
        return _error_response(request, 400, "Bad Request", exc)

    @app.exception_handler(BlockdocError)
    async def domain_error(request: Request, exc: BlockdocError) -> JSONResponse:
        return _error_response(request, 400, type(exc).__name__, exc)

    # ---- Routes -------------------------------------------------------------
    app.include_router(render.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Liveness probe with environment and package version."""
        return {
            "status": "ok",
            "environment": load_settings().environment,
            "version": __version__,
        }

    return app


def get_app() -> FastAPI:
    """Alias used by tests and ASGI tooling that expect a `get_app` factory."""
    return create_app()


__all__ = ["create_app", "get_app"]
