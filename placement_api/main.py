"""
placement_api/main.py

Purpose: Application entry point

- Builds the FastAPI app around an explicit store handle
- Loads configuration and logging
- Registers API routes, middleware and exception handlers
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import time

from placement_api.core.config import settings, validate_settings
from placement_api.core.errors import add_exception_handlers
from placement_api.core.logging import setup_logging, get_logger
from placement_api.core.middleware import SecurityHeadersMiddleware
from placement_api.core.rate_limit import RateLimiter
from placement_api.db.indexes import create_indexes
from placement_api.db.mongo import MongoStore
from placement_api.api import admin, counsellor, users

# Initialize logging first
setup_logging()
logger = get_logger(__name__)

SLOW_REQUEST_SECONDS = 5.0


def create_app(store: Optional[MongoStore] = None) -> FastAPI:
    """
    Creates the application.

    Args:
        store: Pre-built store handle. When omitted a MongoStore is created
            and connected/closed by the application lifespan; a provided
            store is used as-is.
    """
    owns_store = store is None
    if owns_store:
        store = MongoStore(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.
        Handles startup and shutdown events.
        """
        logger.info("🚀 Starting placement API...")

        if owns_store:
            try:
                logger.info("Validating configuration...")
                validate_settings()
                logger.info("✅ Configuration validated")

                await store.connect()
                await create_indexes(store)

                logger.info(f"Environment: {settings.ENVIRONMENT}")
                logger.info(f"Debug Mode: {settings.DEBUG}")

            except Exception as e:
                logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
                raise

        yield  # Application runs here

        logger.info("🛑 Shutting down placement API...")
        if owns_store:
            await store.close()

    app = FastAPI(
        title="Placement Portal API",
        description="User profiles, avatars and student/counsellor listings",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.DEBUG,
        docs_url="/docs" if settings.is_development else None,  # Disable docs in production
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.store = store
    app.state.rate_limiter = RateLimiter(settings.RATE_LIMIT, enabled=settings.RATE_LIMIT_ENABLED)

    # Middleware added last runs first
    app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MINIMUM_SIZE)
    app.add_middleware(SecurityHeadersMiddleware, environment=settings.ENVIRONMENT)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if process_time > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={"process_time": process_time}
            )

        return response

    if settings.TRUST_PROXY:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.FORWARDED_ALLOW_IPS)

    add_exception_handlers(app)

    api_dependencies = [Depends(app.state.rate_limiter)]
    app.include_router(users.router, prefix=settings.API_PREFIX, tags=["User"], dependencies=api_dependencies)
    app.include_router(admin.router, prefix=settings.API_PREFIX, tags=["Admin"], dependencies=api_dependencies)
    app.include_router(
        counsellor.router, prefix=settings.API_PREFIX, tags=["Counsellor"], dependencies=api_dependencies
    )

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint - basic info."""
        return {
            "name": "Placement Portal API",
            "version": "1.0.0",
            "status": "running",
            "environment": settings.ENVIRONMENT
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint.
        Checks database connectivity.
        """
        db_healthy = await app.state.store.ping()
        health_status = {
            "status": "healthy" if db_healthy else "unhealthy",
            "timestamp": time.time(),
            "environment": settings.ENVIRONMENT,
            "version": "1.0.0",
            "checks": {"database": "healthy" if db_healthy else "unhealthy"}
        }
        return JSONResponse(content=health_status, status_code=200 if db_healthy else 503)

    @app.get("/ready", tags=["Health"])
    async def readiness_check():
        """
        Readiness check - indicates if app is ready to receive traffic.
        """
        if await app.state.store.ping():
            return {"status": "ready"}
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "database_unavailable"}
        )

    @app.get("/live", tags=["Health"])
    async def liveness_check():
        """
        Liveness check - indicates if app is alive.
        """
        return {"status": "alive"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "placement_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
