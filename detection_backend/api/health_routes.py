"""
Health check router
Service status for load balancers and monitoring
"""
from datetime import datetime
import sys

from fastapi import APIRouter, Depends

from detection_backend.services.cache import CacheService
from detection_backend.services.database import test_connection
from detection_backend.services.repository import AnalysisRepository
from detection_backend.api.dependencies import get_cache, get_repository
from detection_backend.settings import settings

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(
    repository: AnalysisRepository = Depends(get_repository),
    cache: CacheService = Depends(get_cache),
):
    """
    Health check

    status is "degraded" when the database is unreachable, or when the
    cache is enabled but not answering.
    """
    db_ok = test_connection(repository.engine)
    cache_ok = cache.ping() if cache.enabled else None

    healthy = db_ok and cache_ok is not False
    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "service": "Content Risk Detection API",
        "mode": settings.MODE,
        "database": "ok" if db_ok else "error",
        "cache": "disabled" if cache_ok is None else ("ok" if cache_ok else "error"),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }


@router.get("/ping")
async def ping():
    """Liveness check"""
    return {"message": "pong", "timestamp": datetime.utcnow().isoformat()}
