import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from config import settings
from routes.proxy_routes import router as proxy_router

# Configure logging based on settings
handlers = [logging.StreamHandler()]
if settings.log_file:
    handlers.append(logging.FileHandler(settings.log_file))

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=handlers
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown events."""
    # Startup
    logger.info(
        f"Starting RentDesk proxy: {settings.proxy_mount_prefix} -> {settings.proxy_backend_url}"
    )

    yield

    # Shutdown
    logger.info("Shutting down RentDesk proxy...")


# OpenAPI tags for better documentation organization
tags_metadata = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring the proxy itself",
    },
    {
        "name": "proxy",
        "description": "Requests under the mount prefix, forwarded verbatim to the rental backend",
    },
]

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
    ## Overview
    Reverse proxy between the RentDesk frontend and the rental backend.
    The frontend is served over HTTPS while the backend speaks plain HTTP,
    so browser calls go through this proxy instead.

    ## Behaviour
    - Strips the mount prefix and forwards method, path, query string and body
    - Copies only the `Authorization` and `Content-Type` headers
    - Mirrors the backend's status code and body
    - Answers CORS preflight requests directly
    """,
    version=settings.app_version,
    lifespan=lifespan,
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    debug=settings.debug
)


# Health check endpoint
@app.get("/health",
         tags=["health"],
         summary="Health Check",
         description="Check that the proxy process is up",
         response_description="Health status information")
async def health_check():
    """Check proxy health status.

    Returns:
        dict: Proxy status, backend it forwards to and version
    """
    return {
        "status": "healthy",
        "backend": settings.proxy_backend_url,
        "version": settings.app_version
    }


# Root endpoint
@app.get("/",
         summary="Proxy Information",
         description="Get basic information about the RentDesk proxy",
         response_description="Proxy metadata")
async def root():
    """Get basic proxy information.

    Returns:
        dict: Proxy name, version, mount prefix and documentation URL
    """
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "mount_prefix": settings.proxy_mount_prefix,
        "documentation": "/docs"
    }


app.include_router(proxy_router)


# Error handlers
@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Handle 500 Internal Server errors.

    Args:
        request: The incoming request
        exc: The exception that was raised
    """
    logger.error(f"Internal server error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        headers={"Access-Control-Allow-Origin": "*"},
        content={"error": "Internal server error"}
    )
