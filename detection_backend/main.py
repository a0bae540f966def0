"""Content Risk Detection FastAPI application"""
from contextlib import asynccontextmanager
from pathlib import Path
import sys
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from detection_backend.api import analyze_routes, dashboard_routes, health_routes, network_routes
from detection_backend.api.dependencies import get_cache, get_detection_engine, get_repository
from detection_backend.errors import StorageError
from detection_backend.models.schemas import ErrorResponse
from detection_backend.services.database import test_connection
from detection_backend.settings import settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def configure_logging() -> None:
    """stdout sink, plus error.log / combined.log under LOG_DIR when set"""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=settings.LOG_LEVEL)
    if settings.LOG_DIR:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(log_dir / "error.log", format=LOG_FORMAT, level="ERROR", rotation="10 MB")
        logger.add(log_dir / "combined.log", format=LOG_FORMAT, level=settings.LOG_LEVEL, rotation="10 MB")


configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    logger.info("Starting Content Risk Detection API...")

    repository = get_repository()
    try:
        repository.init_schema()
        if not test_connection(repository.engine):
            logger.warning("Database connection failed! Analyses will not be stored.")
    except StorageError as e:
        logger.warning(f"Database initialization failed: {e}")

    cache = get_cache()
    if cache.enabled and not cache.ping():
        logger.warning("Redis connection failed! Dashboard cache will be bypassed.")

    # classifier is trained on first build
    get_detection_engine()

    logger.info(f"Content Risk Detection API started (mode={settings.MODE})")
    yield
    logger.info("Content Risk Detection API stopped")


app = FastAPI(
    title="Content Risk Detection API",
    description="Heuristic risk scoring for social media content",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=f"/{settings.API_VERSION}/docs",
    redoc_url=f"/{settings.API_VERSION}/redoc",
    openapi_url=f"/{settings.API_VERSION}/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Request logging"""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} "
        f"status={response.status_code} "
        f"duration={process_time:.2f}ms"
    )
    response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Route errors are returned as {error, details?} bodies"""
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unhandled errors"""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    logger.opt(exception=exc).error(f"[{request_id}] Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error", request_id=request_id).model_dump(by_alias=True, exclude_none=True),
    )


app.include_router(analyze_routes.router)
app.include_router(dashboard_routes.router)
app.include_router(network_routes.router)
app.include_router(health_routes.router)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "service": "Content Risk Detection API",
        "version": "1.0.0",
        "docs": f"/{settings.API_VERSION}/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "detection_backend.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
    )
