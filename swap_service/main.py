"""FastAPI application - Swap Orchestration Service.

Clean Architecture implementation з:
- Domain-Driven Design (SwapTrade aggregate, status state machine)
- CQRS pattern (commands / queries + handlers)
- Event-Driven Architecture (domain events → audit subscribers)
- Hexagonal Architecture (aggregator + quote cache ports)

Production-ready with:
- Configuration from environment variables
- Health check endpoints (liveness/readiness)
- Structured logging
- CORS configuration
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.base import BaseHTTPMiddleware

from swap_service import __version__
from swap_service.config import (
    bind_request_context,
    clear_request_context,
    get_logger,
    get_settings,
    setup_logging,
)
from swap_service.infrastructure.aggregator import create_aggregator
from swap_service.infrastructure.cache import create_quote_cache
from swap_service.infrastructure.messaging import get_event_bus, register_default_subscribers
from swap_service.infrastructure.persistence.sqlalchemy import (
    Base,
    create_engine,
    create_session_factory,
)
from swap_service.presentation.api import dependencies
from swap_service.presentation.api.errors import register_exception_handlers
from swap_service.presentation.api.v1.routes import swap_router

# Load settings
settings = get_settings()

# Configure structured logging
setup_logging()
logger = get_logger(__name__)

_engine = None


# ============================================================================
# LIFESPAN EVENTS (startup/shutdown)
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager для FastAPI.

    Startup:
    - Create database engine + session factory
    - Build aggregator adapter + quote cache
    - Register event subscribers, initialize dependencies

    Shutdown:
    - Close aggregator HTTP client, quote cache, DB connections
    """
    global _engine
    logger.info("application.startup.started", environment=settings.environment)

    # ===== STARTUP =====
    engine = create_engine(settings)
    _engine = engine

    if not settings.is_production:
        # Production schema керується Alembic
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("application.database.tables_created")

    session_factory = create_session_factory(engine)
    aggregator = create_aggregator(settings)
    quote_cache = create_quote_cache(settings)

    event_bus = get_event_bus()
    register_default_subscribers(event_bus)

    dependencies.init_dependencies(
        session_factory=session_factory,
        aggregator=aggregator,
        quote_cache=quote_cache,
        settings=settings,
        event_bus=event_bus,
    )

    logger.info("application.startup.completed")

    yield  # Application running

    # ===== SHUTDOWN =====
    logger.info("application.shutdown.started")

    await aggregator.close()
    await quote_cache.close()
    await engine.dispose()
    _engine = None

    logger.info("application.shutdown.completed")


# ============================================================================
# CREATE FASTAPI APPLICATION
# ============================================================================


app = FastAPI(
    title=settings.app_name,
    description="""
    Swap orchestration over a non-custodial liquidity aggregator.

    ## Features
    - Multi-provider rate quotes (best output first)
    - Quote-to-trade binding з exactly-once quote consumption
    - Address validation перед irreversible upstream call
    - Trade status reconciliation (on-demand + background sweep)
    """,
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

# ============================================================================
# MIDDLEWARE
# ============================================================================


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to add request correlation ID to all log messages."""

    async def dispatch(self, request: Request, call_next):
        """Process request with correlation context."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        bind_request_context(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_request_context()


# Add middlewares (order matters - last added is executed first)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# ============================================================================
# ROUTES
# ============================================================================


@app.get("/health", tags=["Health"], summary="Health check (liveness)")
async def health_check() -> dict:
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }


@app.get("/health/ready", tags=["Health"], summary="Readiness check")
async def readiness_check() -> JSONResponse:
    """Readiness check endpoint for Kubernetes.

    Checks:
    - Database connectivity
    - Redis connectivity (тільки для redis quote cache)
    """
    checks = {"database": "unknown"}
    all_healthy = True

    try:
        if _engine is None:
            raise RuntimeError("engine not initialized")
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)[:50]}"
        all_healthy = False

    if settings.quote_cache_backend == "redis":
        try:
            import redis.asyncio as aioredis

            r = aioredis.from_url(settings.redis_url)
            await r.ping()
            checks["redis"] = "healthy"
            await r.aclose()
        except Exception as e:
            checks["redis"] = f"unhealthy: {str(e)[:50]}"
            all_healthy = False

    response_status = status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=response_status,
        content={
            "status": "healthy" if all_healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
        },
    )


@app.get("/health/live", tags=["Health"], summary="Liveness check")
async def liveness_check() -> dict:
    return {"status": "alive"}


app.include_router(swap_router, prefix="/api/v1")


# ============================================================================
# RUN APPLICATION (for development)
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    # Run with: python -m swap_service.main
    uvicorn.run(
        "swap_service.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
