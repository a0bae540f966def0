"""Analyze-and-store service"""
from typing import Optional

from loguru import logger

from detection_backend.errors import ValidationError
from detection_backend.models.schemas import AnalysisResult, Metadata, UserPost
from detection_backend.services.cache import CacheService
from detection_backend.services.engine import DetectionEngine
from detection_backend.services.repository import AnalysisRepository


def validate_content(content: Optional[str]) -> str:
    if content is None or not content.strip():
        raise ValidationError()
    return content


class AnalysisService:
    """Validates, scores, persists and updates the author's activity profile"""

    def __init__(self, engine: DetectionEngine, repository: AnalysisRepository, cache: Optional[CacheService] = None):
        self.engine = engine
        self.repository = repository
        self.cache = cache

    async def analyze_and_store(self, content: Optional[str], metadata: Optional[Metadata] = None) -> AnalysisResult:
        content = validate_content(content)
        metadata = metadata or Metadata()

        analysis = await self.engine.score(content, metadata)
        if analysis.user_id:
            post = UserPost(content=content, timestamp=analysis.timestamp, platform=analysis.platform)
            saved = self.repository.save_with_activity(analysis, post)
        else:
            saved = self.repository.save(analysis)

        if self.cache is not None:
            self.cache.clear_pattern("dashboard:*")

        logger.info(
            f"Content analyzed - Risk Level: {saved.risk_level.value} "
            f"(riskScore={saved.risk_score}, platform={saved.platform}, id={saved.id})"
        )
        return saved
