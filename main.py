"""
Main FastAPI Application.
Entry point for the Record Schema Service API.
"""

from fastapi import FastAPI, Request, status # type: ignore
from fastapi.encoders import jsonable_encoder # type: ignore
from fastapi.exceptions import RequestValidationError # type: ignore
from fastapi.middleware.cors import CORSMiddleware # type: ignore
from fastapi.responses import JSONResponse # type: ignore
from contextlib import asynccontextmanager
import time
from datetime import datetime

from app.config import settings
from app.core.exceptions import GENERIC_ERROR_MESSAGE, AppException
from app.core.responses import ResponseHandler
from app.core.logging_config import (
    setup_logging,
    get_logger,
    log_operation_start,
    log_operation_end,
    log_api_request
)

from app.api.routes import schema_routes, form_routes, record_routes, system_routes


# Setup logging before anything else
setup_logging(log_level="DEBUG" if settings.DEBUG else "INFO")

logger = get_logger(__name__)


def _uses_database() -> bool:
    return settings.STORAGE_BACKEND == "postgres"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info("=" * 80)
    logger.info(f"Starting {settings.APP_NAME}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")
    logger.info(f"Version: {settings.APP_VERSION}")
    logger.info("=" * 80)

    logger.perf.log_performance_snapshot("Application Startup")

    if _uses_database():
        from app.core.database import get_db_manager
        from app.core.schema_manager import SchemaManager

        try:
            log_operation_start(logger, "database_initialization")
            db_manager = get_db_manager()
            SchemaManager.initialize_tables()
            logger.info(f"Database connection pool initialized: {db_manager.get_pool_status()}")
            log_operation_end(logger, "database_initialization", success=True)
        except Exception as e:
            logger.critical(f"Failed to initialize database: {str(e)}", exc_info=True)
            log_operation_end(logger, "database_initialization", success=False, error=str(e))
            raise

    yield

    logger.info("=" * 80)
    logger.info(f"Shutting down {settings.APP_NAME}")
    logger.perf.log_performance_snapshot("Application Shutdown")

    if _uses_database():
        from app.core.database import get_db_manager

        try:
            log_operation_start(logger, "database_shutdown")
            get_db_manager().close_pool()
            log_operation_end(logger, "database_shutdown", success=True)
        except Exception as e:
            logger.error(f"Error during shutdown: {str(e)}", exc_info=True)
            log_operation_end(logger, "database_shutdown", success=False, error=str(e))

    logger.info("Shutdown complete")
    logger.info("=" * 80)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Per-tenant record types with user-editable field schemas",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing information."""
    start_time = time.time()
    request.state.timestamp = datetime.utcnow().isoformat()

    logger.debug(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "client_host": request.client.host if request.client else "unknown",
            "query_params": dict(request.query_params)
        }
    )

    try:
        response = await call_next(request)
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Request failed: {request.method} {request.url.path} - {str(e)}",
            extra={"method": request.method, "path": request.url.path, "duration_ms": duration_ms},
            exc_info=True
        )
        raise

    duration_ms = (time.time() - start_time) * 1000
    log_api_request(
        logger,
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=duration_ms
    )

    if duration_ms > 1000:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path} - {duration_ms:.2f}ms",
            extra={"path": request.url.path, "duration_ms": duration_ms, "slow_request": True}
        )

    response.headers["X-Request-ID"] = request.state.timestamp
    response.headers["X-Process-Time"] = str(duration_ms)
    return response


def _request_timestamp(request: Request):
    return getattr(request.state, "timestamp", None)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Handle application exceptions; server errors never expose their cause."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application exception: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=ResponseHandler.error(
            code=exc.error_code,
            message=exc.client_message,
            status_code=exc.status_code,
            details=exc.client_details,
            timestamp=_request_timestamp(request)
        )
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are client errors (400)."""
    logger.warning(
        f"Request validation failed: {request.method} {request.url.path}",
        extra={"path": request.url.path, "method": request.method}
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ResponseHandler.error(
            code="VALIDATION_ERROR",
            message="Invalid request data",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": jsonable_encoder(exc.errors())},
            timestamp=_request_timestamp(request)
        )
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )
    logger.perf.log_performance_snapshot("Unhandled Exception")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ResponseHandler.error(
            code="INTERNAL_ERROR",
            message=GENERIC_ERROR_MESSAGE,
            status_code=500,
            timestamp=_request_timestamp(request)
        )
    )


logger.info("Registering API routes...")
app.include_router(schema_routes.router, prefix="/api/v1")
app.include_router(form_routes.router, prefix="/api/v1")
app.include_router(record_routes.router, prefix="/api/v1")
app.include_router(system_routes.router, prefix="/api/v1")
logger.info("All API routes registered successfully")


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint with process metrics."""
    health_data = {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "storage_backend": settings.STORAGE_BACKEND
    }

    try:
        if _uses_database():
            from app.core.database import get_db_manager

            db_manager = get_db_manager()
            pool_status = db_manager.get_pool_status()
            pool_status["reachable"] = pool_status["initialized"] and db_manager.validate_connection()
            health_data["database"] = pool_status
            if not pool_status["reachable"]:
                health_data["status"] = "degraded"

        health_data["performance"] = logger.perf.snapshot()
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}", exc_info=True)
        return {
            "status": "unhealthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "error": str(e) if settings.DEBUG else "Health check failed"
        }

    logger.debug(f"Health check: {health_data['status']}")
    return health_data


@app.get("/", tags=["System"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "docs": "/api/docs",
        "health": "/health",
        "api_prefix": "/api/v1"
    }


if __name__ == "__main__":
    import uvicorn # type: ignore

    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
        access_log=False
    )
