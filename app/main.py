"""Main FastAPI application for the Collector Membership Service."""

import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.collectors import router as collectors_router
from app.api.health import router as health_router
from app.api.members import router as members_router
from app.api.payment_requests import router as payment_requests_router
from app.core.config import get_settings
from app.core.dependencies import get_data_store
from app.core.exceptions import BaseAPIException
from app.core.logging import get_correlation_id, get_logger, setup_logging
from app.core.middleware import CorrelationIDMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)

# Get settings
settings = get_settings()

# Initialize FastAPI app
app = FastAPI(
    title="Collector Membership Service",
    description="Role-scoped member directory and payment request approvals",
    version=settings.service_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(CorrelationIDMiddleware, slow_request_threshold_ms=1000.0)

# CORS middleware
if settings.enable_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include API routers
app.include_router(members_router, prefix=settings.api_prefix)
app.include_router(payment_requests_router, prefix=settings.api_prefix)
app.include_router(collectors_router, prefix=settings.api_prefix)
app.include_router(health_router, prefix=settings.api_prefix, tags=["health"])


@app.exception_handler(BaseAPIException)
async def api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Render service exceptions with their error code and correlation ID."""
    exc.correlation_id = get_correlation_id() or exc.correlation_id

    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "Request rejected",
        path=request.url.path,
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.detail,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    app.state.start_time = time.time()
    logger.info("Starting Collector Membership Service", version=settings.service_version)

    store_healthy = await get_data_store().health_check()
    if not store_healthy:
        logger.warning("Data store health check failed on startup")

    logger.info("Service startup complete", storage_healthy=store_healthy)


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Collector Membership Service")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
