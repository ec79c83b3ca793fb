"""
RCPanel - Main FastAPI Application

This module builds the FastAPI application serving the control panel pages
and the streaming update endpoints. Every request shares the RC client in
rcpanel.engine.
"""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from rcpanel import __version__, engine
from rcpanel.api import RCClient
from rcpanel.managers import ConfigManager
from rcpanel.views import ErrorFragment

logger = logging.getLogger(__name__)

# Get the directory where this package is located
script_dir = Path(__file__).parent


def CreateApp(rc_client: Optional[RCClient] = None, config: Optional[ConfigManager] = None,
              poll_interval: Optional[float] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        rc_client: Already built RC client to share between requests. When
                   omitted, the client is created from configuration at startup
                   and closed at shutdown.
        config: Loaded configuration (loaded from config.json when omitted)
        poll_interval: Seconds between polls for watching streams

    Returns:
        FastAPI application
    """
    if rc_client is not None:
        engine.SetEngine(rc_client, poll_interval)

    # ==================== Lifespan Events ====================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        FastAPI lifespan event handler for startup and shutdown
        Manages the shared RC client
        """
        # Startup
        logger.info("RCPanel starting up...")

        owns_engine = engine.rc_client is None
        if owns_engine:
            settings = config
            if settings is None:
                settings = ConfigManager()
                settings.load_config()
            engine.InitializeEngine(settings)

        logger.info("Startup complete")

        yield

        # Shutdown
        logger.info("RCPanel shutting down...")
        if owns_engine:
            engine.ShutdownEngine()
        logger.info("Shutdown complete")

    # ==================== FastAPI Application ====================

    app = FastAPI(
        title="RCPanel",
        description="Web control panel for the rclone remote control API",
        version=__version__,
        lifespan=lifespan
    )

    # ==================== Request Logging ====================

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    # ==================== Error Rendering ====================

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.exception(f"Unhandled error for {request.method} {request.url.path}: {exc}")
        return HTMLResponse(ErrorFragment(str(exc)), status_code=500)

    # ==================== Static Files ====================

    app.mount("/static", StaticFiles(directory=str(script_dir / "static")), name="static")

    # ==================== Include Routers ====================

    from rcpanel.routes import pages, remotes, files, transfers, jobs, stats

    app.include_router(pages.router.api_router)
    app.include_router(remotes.router.api_router)
    app.include_router(files.router.api_router)
    app.include_router(transfers.router.api_router)
    app.include_router(jobs.router.api_router)
    app.include_router(stats.router.api_router)

    return app
