"""
Detection engine
Runs every rule over a submission and folds the hits into one AnalysisResult.
"""
import asyncio
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from loguru import logger

from detection_backend.errors import AnalysisError, LookupDegraded
from detection_backend.models.schemas import AnalysisResult, Metadata, NetworkAnalysis, UserActivityProfile
from detection_backend.services.network import NetworkDataSource, resolve_network_data
from detection_backend.services.rules import Rule, Signals, categorize_risk, default_rules, is_bot_activity
from detection_backend.services.sentiment import SentimentAnalyzer

# (user_id, since) -> profile or None
ActivityLookup = Callable[[str, Optional[datetime]], Optional[UserActivityProfile]]


class DetectionEngine:
    """
    Scoring engine

    Rules and static configuration are fixed at construction; score() is
    safe to call concurrently.
    """

    def __init__(
        self,
        rules: Optional[Sequence[Rule]] = None,
        sentiment_analyzer: Optional[SentimentAnalyzer] = None,
        activity_lookup: Optional[ActivityLookup] = None,
        network_source: Optional[NetworkDataSource] = None,
        lookup_timeout: float = 2.0,
        bot_window: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.rules: List[Rule] = list(rules) if rules is not None else default_rules()
        self.sentiment_analyzer = sentiment_analyzer or SentimentAnalyzer()
        self.activity_lookup = activity_lookup
        self.network_source = network_source
        self.lookup_timeout = lookup_timeout
        self.bot_window = bot_window
        self.clock = clock

    async def score(self, content: str, metadata: Optional[Metadata] = None) -> AnalysisResult:
        """
        Score one submission

        Args:
            content: non-empty text (validated by the caller)
            metadata: platform, userId, hashtags, networkData

        Returns:
            unsaved AnalysisResult

        Raises:
            AnalysisError: any rule or signal failed; no partial result
        """
        metadata = metadata or Metadata()
        try:
            now = self.clock()
            signals = Signals(
                sentiment=self.sentiment_analyzer.analyze(content),
                bot_detected=await self._detect_bot_behavior(metadata.user_id, now),
                network_data=resolve_network_data(metadata, self.network_source),
            )

            risk_score = 0
            flags: List[str] = []
            explanation: List[str] = []
            network = NetworkAnalysis()

            for rule in self.rules:
                hit = rule.evaluate(content, metadata, signals)
                if hit is None:
                    continue
                risk_score += hit.points
                if hit.flag and hit.flag not in flags:
                    flags.append(hit.flag)
                explanation.append(hit.explanation)
                if hit.network is not None:
                    network = hit.network

            return AnalysisResult(
                content=content,
                platform=metadata.platform,
                risk_score=risk_score,
                risk_level=categorize_risk(risk_score),
                flags=flags,
                sentiment=signals.sentiment,
                network_analysis=network,
                explanation=explanation,
                timestamp=now,
                user_id=metadata.user_id,
            )
        except AnalysisError:
            raise
        except Exception as e:
            logger.exception(f"Error in content analysis: {e}")
            raise AnalysisError(cause=e) from e

    async def _detect_bot_behavior(self, user_id: Optional[str], now: datetime) -> bool:
        """Fail-open: a failed or slow lookup means no bot signal"""
        if not user_id or self.activity_lookup is None:
            return False
        try:
            profile = await self._lookup(user_id, now - self.bot_window)
        except LookupDegraded as e:
            logger.warning(f"Bot detection degraded for user {user_id}: {e}")
            return False
        if profile is None:
            return False
        return is_bot_activity(profile.posts, now, window=self.bot_window)

    async def _lookup(self, user_id: str, since: datetime) -> Optional[UserActivityProfile]:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.activity_lookup, user_id, since),
                timeout=self.lookup_timeout,
            )
        except asyncio.TimeoutError as e:
            raise LookupDegraded(f"lookup timed out after {self.lookup_timeout}s", cause=e) from e
        except Exception as e:
            raise LookupDegraded(cause=e) from e
