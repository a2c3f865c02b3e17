"""FastAPI server for the bug tracker."""

import os
import logging
import time
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..db import connect_db, close_db
from ..services import BugBroadcaster
from . import bugs as bugs_module, updates as updates_module
from .cors_config import build_cors_config
from .error_handlers import register_error_handlers

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage the database connection lifecycle."""
    logger.info("Connecting to MongoDB...")
    await connect_db()

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    debug = os.getenv("DEBUG", "false").lower() == "true"

    app = FastAPI(
        title="Bug Tracker",
        description="REST API for tracking bugs",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.broadcaster = BugBroadcaster()

    cors_config = build_cors_config()
    logger.info(f"CORS allowed origins: {cors_config['allow_origins']}")
    app.add_middleware(CORSMiddleware, **cors_config)

    if debug:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
            return response

    register_error_handlers(app)

    # Mount routers
    app.include_router(bugs_module.router, prefix="/api")
    app.include_router(updates_module.router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Check service health."""
        return {
            "success": True,
            "message": "Server is running",
            "timestamp": datetime.utcnow().isoformat(),
        }

    return app


app = create_app()


# CLI entry point
def main():
    """Run the server."""
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))

    uvicorn.run(
        "src.api.server:app",
        host=host,
        port=port,
        reload=os.getenv("DEBUG", "false").lower() == "true",
    )


if __name__ == "__main__":
    main()
