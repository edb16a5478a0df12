"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.api.rate_limit import limiter
from app.middleware.error_handler import ErrorHandlerMiddleware
from app.api.v1.routers import farms, geo, seasons

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Season calendar: cutoff_month={settings.season_harvest_cutoff_month}, "
                f"fallback_end={settings.season_fallback_end_month}/{settings.season_fallback_end_day}, "
                f"days_per_month={settings.season_days_per_month}")
    logger.info(f"Relocation limit: {settings.relocation_max_distance_m}m")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from app.infrastructure.external_api_client import get_api_client
    logger.info("Shutting down application...")
    client = get_api_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Season and spatial integrity checks for orchard farm records.

    ## Features

    - **Season Phase**: Classify where a tree is in its production cycle from
      the farm's most recent season record
    - **Yield Reconciliation**: Read a tree's prior-season count from
      breakdown entries of any legacy shape
    - **Relocation Validation**: Reject manual GPS corrections that move a
      tree implausibly far (haversine distance)
    - **Zone Area**: Estimate zone area in hectares from boundary polygons,
      falling back to stored values
    - **Rate Limiting**: Protects the API from abuse

    Nothing is persisted: results are returned to the caller, which decides
    what to store.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(farms.router, prefix="/api/v1")
app.include_router(seasons.router, prefix="/api/v1")
app.include_router(geo.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
