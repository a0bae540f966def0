"""
Dashboard aggregation service
Time-windowed counts, tier distribution, recent records and suspicious actors.
"""
from datetime import datetime
from typing import Callable, List, Optional

from loguru import logger

from detection_backend.models.schemas import (
    DashboardSummary,
    PlatformStat,
    RecentAnalysis,
    RiskDistribution,
    RiskLevel,
    SummaryCounts,
    SuspiciousActor,
    Timeframe,
)
from detection_backend.services.cache import CacheService
from detection_backend.services.repository import AnalysisRepository

RECENT_LIMIT = 10
SUSPICIOUS_ACTOR_LIMIT = 20


def percentage(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(count / total * 100, 2)


def normalize_platform(platform: Optional[str]) -> Optional[str]:
    """'all', blank and None mean no platform filter"""
    if platform is None or not platform.strip() or platform.strip().lower() == "all":
        return None
    return platform.strip()


class DashboardService:
    """Read-only queries over persisted analysis results"""

    def __init__(
        self,
        repository: AnalysisRepository,
        cache: Optional[CacheService] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.repository = repository
        self.cache = cache
        self.clock = clock

    def _since(self, timeframe: Timeframe) -> Optional[datetime]:
        window = timeframe.window
        return self.clock() - window if window is not None else None

    def dashboard_summary(self, timeframe: Timeframe = Timeframe.ONE_DAY, platform: Optional[str] = None) -> DashboardSummary:
        platform_filter = normalize_platform(platform)
        cache_key = None
        if self.cache is not None:
            cache_key = self.cache.generate_key(
                "dashboard:summary", timeframe=timeframe.value, platform=platform_filter or "all"
            )
            cached = self.cache.get(cache_key)
            if cached:
                logger.debug(f"Dashboard cache hit: {cache_key}")
                return DashboardSummary.model_validate(cached)

        since = self._since(timeframe)
        counts = self.repository.count_by_level(since, platform_filter)
        total = sum(counts.values())

        summary = SummaryCounts(
            total_analyses=total,
            high_risk_count=counts[RiskLevel.HIGH],
            medium_risk_count=counts[RiskLevel.MEDIUM],
            low_risk_count=counts[RiskLevel.LOW],
            minimal_risk_count=counts[RiskLevel.MINIMAL],
            risk_distribution=RiskDistribution(
                high=percentage(counts[RiskLevel.HIGH], total),
                medium=percentage(counts[RiskLevel.MEDIUM], total),
                low=percentage(counts[RiskLevel.LOW], total),
                minimal=percentage(counts[RiskLevel.MINIMAL], total),
            ),
        )

        recent = [
            RecentAnalysis(
                id=result.id,
                content=result.content,
                risk_level=result.risk_level,
                risk_score=result.risk_score,
                flags=result.flags,
                timestamp=result.timestamp,
                platform=result.platform,
                explanation=result.explanation,
            )
            for result in self.repository.recent(since, platform_filter, limit=RECENT_LIMIT)
        ]

        # platform breakdown covers every platform in the window
        platform_stats = [
            PlatformStat(platform=name, count=count, avg_risk=round(avg, 2))
            for name, count, avg in self.repository.platform_stats(since)
        ]

        dashboard = DashboardSummary(
            summary=summary,
            platform_stats=platform_stats,
            recent_analyses=recent,
            timeframe=timeframe,
            platform=platform_filter or "all",
        )

        if cache_key is not None:
            self.cache.set(cache_key, dashboard.model_dump(mode="json", by_alias=True))
        return dashboard

    def suspicious_actors(self, timeframe: Timeframe = Timeframe.ONE_DAY) -> List[SuspiciousActor]:
        """Users with network indicators in the window, highest summed risk first (top 20)"""
        actors = self.repository.network_flagged_by_user(self._since(timeframe), limit=SUSPICIOUS_ACTOR_LIMIT)
        return [SuspiciousActor.model_validate(actor) for actor in actors]
