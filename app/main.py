# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the GuitarVault API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import GuitarVaultException, guitarvault_exception_handler
from app.routers import guitars, health, objects

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Clients are created lazily by app.dependencies on first use.
    """
    logger.info(f"Starting GuitarVault API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down GuitarVault API")


# Create FastAPI application
app = FastAPI(
    title="GuitarVault API",
    description="""
## Guitar Inventory API

Catalog of guitar listings for the Bond St Guitars storefront.

### Features

- **Catalog**: create, update, and delete guitar listings
- **Search**: case-insensitive text search over brand, model, color, description
- **Filters**: type, brand, status, and price range
- **Images**: signed upload URLs and policy-gated image downloads
""",
    version=health.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Guitars",
            "description": "Guitar listings: list, search, filter, and CRUD",
        },
        {
            "name": "Objects",
            "description": "Image uploads and downloads",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    """Log method, path, status, and duration of every /api request."""
    start = time.perf_counter()
    response = await call_next(request)

    if request.url.path.startswith("/api"):
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms")

    return response


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(GuitarVaultException)
async def handle_guitarvault_exception(request: Request, exc: GuitarVaultException):
    """Handle custom GuitarVault exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    return await guitarvault_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    guitars.router,
    prefix="/api/guitars",
    tags=["Guitars"]
)

app.include_router(
    objects.router,
    tags=["Objects"]
)

app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "GuitarVault API",
        "version": health.VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
