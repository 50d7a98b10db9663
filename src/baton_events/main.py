"""
Baton Event Service - Main FastAPI Application

Receives fixed-format status messages from patrol/alarm batons, decodes them,
keeps a bounded recent history and streams every accepted event to connected
observers over Server-Sent Events.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import router
from .core.config import settings
from .services.event_manager import event_manager

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    """
    await event_manager.initialize()
    logger.info(f"Baton Event Service ready on port {settings.service_port}")
    yield
    await event_manager.shutdown()


app = FastAPI(
    title="Baton Event Service",
    description="Ingestion and live streaming of baton status messages",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/", tags=["Info"])
async def root() -> Dict[str, str]:
    """Root endpoint with service info."""
    return {
        "service": settings.service_name,
        "version": __version__,
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


def run() -> None:
    """Console entry point."""
    import uvicorn
    uvicorn.run(
        "baton_events.main:app",
        host=settings.service_host,
        port=settings.service_port,
        access_log=True,
    )


if __name__ == "__main__":
    run()
