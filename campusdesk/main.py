from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from slowapi.errors import RateLimitExceeded

from campusdesk import __version__
from campusdesk.core.config import settings
from campusdesk.core.database import init_db, close_db
from campusdesk.core.exceptions import CampusDeskError, error_response
from campusdesk.core.logging_config import logger
from campusdesk.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from campusdesk.core.rate_limiter import limiter, rate_limit_exceeded_handler
from campusdesk.api.v1.router import api_router
import campusdesk.models  # Import models so metadata knows about them


async def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = settings.validate_critical()
    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Invalid configuration: {', '.join(errors)}")

    if settings.is_dev_mode():
        logger.warning("[Startup] WARNING: running in development mode")

    logger.info("[Startup] Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME} v{__version__}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    await validate_critical_config()

    try:
        await init_db()
        logger.info("[Startup] Database tables ready")
    except Exception as e:
        logger.error(f"[Startup] Database initialization failed: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="College portal: faculty timetable with conflict checks and No-Due clearance",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

# Add rate limiter state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Add middleware (order matters - last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time", "X-Certificate-Ref"],
)


# Exception handlers
@app.exception_handler(CampusDeskError)
async def campusdesk_error_handler(request: Request, exc: CampusDeskError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    else:
        logger.info(f"[{exc.code}] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An error occurred"
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": __version__,
        "environment": settings.ENVIRONMENT
    }


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "institution": settings.INSTITUTION_NAME,
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Include API router
app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "campusdesk.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
