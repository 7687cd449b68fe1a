"""Main FastAPI application for the skywatch service."""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from skywatch.api.endpoints import router as weather_router
from skywatch.config import DEBUG, HOST, PORT
from skywatch.logging_config import configure_logging
from skywatch.weather.errors import SkywatchError

# Configure logging
configure_logging()
logger = logging.getLogger(__name__)

STATIC_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting skywatch service")
    yield
    logger.info("Shutting down skywatch service")


async def skywatch_error_handler(request: Request, exc: SkywatchError) -> JSONResponse:
    """Render service errors as ``{"error": message}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any other failure as a 500 ``{"error": message}``."""
    logger.error(f"{request.method} {request.url.path} crashed: {exc!r}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc) or type(exc).__name__})


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="skywatch",
        description="Present sky conditions for Estonia: observed and modelled cloud cover, "
                    "temperature, precipitation, aurora odds and the planetary K-index",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SkywatchError, skywatch_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(weather_router)

    app.mount("/static", StaticFiles(directory=STATIC_PATH), name="static")

    @app.get("/", tags=["root"], include_in_schema=False)
    async def root():
        """Root endpoint serving the dashboard."""
        return FileResponse(os.path.join(STATIC_PATH, "index.html"))

    return app


# Create app instance for uvicorn
app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "skywatch.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()
