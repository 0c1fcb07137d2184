"""
Jewelry Product Studio - Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog
from datetime import datetime, timezone

from config import settings, check_connection, create_supabase_client
from exceptions import AppError
from services.gemini_service import GeminiService
from services.storage_service import ObjectStorage

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Create database, storage and Gemini clients
    Shutdown: Close them

    A client that fails to start is left as None; routes depending on it
    answer 503 while the rest of the API keeps working.
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug
    )

    app.state.db = None
    app.state.storage = None
    app.state.gemini = None

    try:
        app.state.db = create_supabase_client(settings)
    except Exception as e:
        logger.error("database_connection_failed", error=str(e))

    try:
        app.state.storage = ObjectStorage.from_settings(settings)
    except Exception as e:
        logger.error("storage_init_failed", error=str(e))

    try:
        app.state.gemini = GeminiService.from_settings(settings)
    except Exception as e:
        logger.error("gemini_init_failed", error=str(e))

    yield

    # Shutdown
    logger.info("application_shutting_down")
    for name in ("gemini", "storage"):
        handle = getattr(app.state, name, None)
        if handle is not None:
            try:
                handle.close()
            except Exception as e:
                logger.warning("client_close_failed", client=name, error=str(e))
        setattr(app.state, name, None)
    app.state.db = None


# Create FastAPI app
app = FastAPI(
    title="Jewelry Product Studio",
    description="AI photo editing and product metadata for the jewelry catalog",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns:
        Basic health status and database connection state
    """
    db_status = check_connection(getattr(request.app.state, "db", None), settings.products_table)

    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": db_status,
        "storage": getattr(request.app.state, "storage", None) is not None,
        "gemini": getattr(request.app.state, "gemini", None) is not None
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Jewelry Product Studio API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "products": "/products",
            "generate": "/generate"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Errors raised outside route bodies (e.g. in dependencies)."""
    logger.warning(
        "app_error",
        path=request.url.path,
        code=exc.code,
        error=exc.message
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns the standard failure shape.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": f"An internal server error occurred: {exc}" if settings.debug
                else "An internal server error occurred",
            "error": {
                "code": "INTERNAL_ERROR",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.products import router as products_router
from routes.generation import router as generation_router

app.include_router(products_router, prefix="/products", tags=["Products"])
app.include_router(generation_router, prefix="/generate", tags=["Generation"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
