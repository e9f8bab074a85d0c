"""
FastAPI Application

Main application entry point with:
- CORS middleware
- Health endpoint
- API routes
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

# Configure root logger BEFORE any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s  %(name)s  %(message)s",
)
# Silence noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("watchfiles").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pmdesk import __version__
from pmdesk.api.routes import router
from pmdesk.context import AppContext

logger = logging.getLogger(__name__)


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the application.

    With no *context*, one is created at startup from settings; missing
    backend credentials make startup fail.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.start_time = datetime.now(timezone.utc)
        owned = getattr(app.state, "context", None) is None
        if owned:
            app.state.context = AppContext.create()

        yield

        if owned:
            await app.state.context.aclose()
            app.state.context = None
            logger.info("Backend client closed")

    app = FastAPI(
        title="pmdesk API",
        description="Project desk: documents, items and change requests",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
        }

    app.include_router(router, prefix="/api/v1")
    return app


app = create_app()
