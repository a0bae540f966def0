"""Service providers for FastAPI Depends"""
from functools import lru_cache
from typing import Optional

from detection_backend.services.analysis import AnalysisService
from detection_backend.services.cache import CacheService
from detection_backend.services.dashboard import DashboardService
from detection_backend.services.engine import DetectionEngine
from detection_backend.services.network import MockNetworkDataSource, NetworkDataSource
from detection_backend.services.repository import AnalysisRepository
from detection_backend.settings import settings


@lru_cache(maxsize=1)
def get_repository() -> AnalysisRepository:
    return AnalysisRepository()


@lru_cache(maxsize=1)
def get_cache() -> CacheService:
    return CacheService()


@lru_cache(maxsize=1)
def get_detection_engine() -> DetectionEngine:
    """Engine is built once; the classifier trains here"""
    network_source: Optional[NetworkDataSource] = None
    if settings.NETWORK_MOCK_ENABLED:
        network_source = MockNetworkDataSource(seed=settings.NETWORK_MOCK_SEED)
    return DetectionEngine(
        activity_lookup=get_repository().find_user_activity,
        network_source=network_source,
        lookup_timeout=settings.BOT_LOOKUP_TIMEOUT_SECONDS,
    )


def get_analysis_service() -> AnalysisService:
    return AnalysisService(get_detection_engine(), get_repository(), cache=get_cache())


def get_dashboard_service() -> DashboardService:
    return DashboardService(get_repository(), cache=get_cache())
