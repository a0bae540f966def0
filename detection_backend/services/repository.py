"""
Analysis result and user activity repository
Persists scoring results and per-user posting history (SQLite/MySQL)
"""
from collections import OrderedDict
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

from sqlalchemy import desc, func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from detection_backend.errors import StorageError
from detection_backend.models.schemas import (
    AnalysisResult,
    NetworkAnalysis,
    RiskLevel,
    RiskProfile,
    SentimentResult,
    UserActivityProfile,
    UserPost,
)
from detection_backend.models.tables import analysis_results, metadata, user_activity, user_posts
from detection_backend.services.database import get_engine, read_session, session_factory, write_session

# riskScore above this counts as a flagged post in the user's risk profile
FLAGGED_POST_THRESHOLD = 25


class AnalysisRepository:
    """Storage collaborator for the scoring engine and dashboard queries"""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()
        self._sessions = session_factory(self.engine)

    def init_schema(self) -> None:
        """Create tables if missing"""
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(cause=e) from e

    @contextmanager
    def _write(self) -> Generator[Session, None, None]:
        try:
            with write_session(self._sessions) as session:
                yield session
        except SQLAlchemyError as e:
            raise StorageError(cause=e) from e

    @contextmanager
    def _read(self) -> Generator[Session, None, None]:
        try:
            with read_session(self._sessions) as session:
                yield session
        except SQLAlchemyError as e:
            raise StorageError(cause=e) from e

    # ------------------------------------------------------------------
    # Analysis results
    # ------------------------------------------------------------------

    def save(self, result: AnalysisResult) -> AnalysisResult:
        """
        Persist a scoring result

        Returns:
            the same result with its assigned id
        """
        with self._write() as session:
            record_id = self._insert_result(session, result)
        return result.model_copy(update={"id": record_id})

    def save_with_activity(self, result: AnalysisResult, post: UserPost) -> AnalysisResult:
        """
        Persist a scoring result together with its author's activity update

        The analysis row, profile, post and counters commit or roll back
        together, so a failed activity write leaves no stored result.
        """
        if not result.user_id:
            return self.save(result)

        def work(session: Session) -> int:
            record_id = self._insert_result(session, result)
            self._apply_activity(session, result.user_id, post, result.risk_score)
            return record_id

        record_id = self._write_with_profile(work)
        return result.model_copy(update={"id": record_id})

    @staticmethod
    def _insert_result(session: Session, result: AnalysisResult) -> int:
        values = {
            "content": result.content,
            "platform": result.platform,
            "risk_score": result.risk_score,
            "risk_level": result.risk_level.value,
            "flags": list(result.flags),
            "sentiment": result.sentiment.model_dump(),
            "network_analysis": result.network_analysis.model_dump(),
            "network_flagged": bool(result.network_analysis.indicators),
            "explanation": list(result.explanation),
            "user_id": result.user_id,
            "resolved": result.resolved,
            "timestamp": result.timestamp,
        }
        res = session.execute(insert(analysis_results).values(**values))
        return res.inserted_primary_key[0]

    def get(self, record_id: int) -> Optional[AnalysisResult]:
        with self._read() as session:
            row = session.execute(
                select(analysis_results).where(analysis_results.c.id == record_id)
            ).mappings().first()
        return self._to_result(row) if row else None

    def mark_resolved(self, record_id: int, resolved: bool = True) -> Optional[AnalysisResult]:
        """Set the moderation resolved flag; None when the record does not exist"""
        with self._write() as session:
            res = session.execute(
                update(analysis_results)
                .where(analysis_results.c.id == record_id)
                .values(resolved=resolved)
            )
            if res.rowcount == 0:
                return None
        return self.get(record_id)

    # ------------------------------------------------------------------
    # User activity
    # ------------------------------------------------------------------

    def find_user_activity(
        self, user_id: str, since: Optional[datetime] = None
    ) -> Optional[UserActivityProfile]:
        """
        Look up a user's activity profile

        Args:
            user_id: author id
            since: only include posts at or after this time (all posts when None)
        """
        with self._read() as session:
            profile = session.execute(
                select(user_activity).where(user_activity.c.user_id == user_id)
            ).mappings().first()
            if profile is None:
                return None

            stmt = select(user_posts).where(user_posts.c.user_id == user_id)
            if since is not None:
                stmt = stmt.where(user_posts.c.timestamp >= since)
            stmt = stmt.order_by(user_posts.c.timestamp, user_posts.c.id)
            posts = session.execute(stmt).mappings().all()

        return UserActivityProfile(
            user_id=user_id,
            posts=[
                UserPost(content=p["content"], timestamp=p["timestamp"], platform=p["platform"])
                for p in posts
            ],
            risk_profile=RiskProfile(
                total_risk_score=profile["total_risk_score"],
                flagged_posts=profile["flagged_posts"],
            ),
        )

    def _ensure_profile(self, user_id: str) -> None:
        try:
            with write_session(self._sessions) as session:
                found = session.execute(
                    select(user_activity.c.user_id).where(user_activity.c.user_id == user_id)
                ).first()
                if found is None:
                    session.execute(
                        insert(user_activity).values(user_id=user_id, total_risk_score=0, flagged_posts=0)
                    )
        except IntegrityError:
            # profile was created by a concurrent writer
            return
        except SQLAlchemyError as e:
            raise StorageError(cause=e) from e

    def append_post(self, user_id: str, post: UserPost) -> None:
        self._ensure_profile(user_id)
        with self._write() as session:
            session.execute(
                insert(user_posts).values(
                    user_id=user_id,
                    content=post.content,
                    platform=post.platform,
                    timestamp=post.timestamp,
                )
            )

    def increment_risk_profile(self, user_id: str, score_delta: int, flagged_delta: int) -> None:
        """Atomic counter increment (UPDATE ... SET x = x + delta)"""
        self._ensure_profile(user_id)
        with self._write() as session:
            session.execute(self._increment_stmt(user_id, score_delta, flagged_delta))

    def record_user_activity(self, user_id: str, post: UserPost, risk_score: int) -> None:
        """Append the post and bump the risk counters in one transaction"""
        self._write_with_profile(lambda session: self._apply_activity(session, user_id, post, risk_score))

    def _write_with_profile(self, work: Callable[[Session], Any]) -> Any:
        """
        Run work in one write transaction

        A unique-key conflict means a concurrent writer created the same
        profile first; the transaction is retried once and finds it.
        """
        try:
            with self._write() as session:
                return work(session)
        except StorageError as e:
            if not isinstance(e.cause, IntegrityError):
                raise
        with self._write() as session:
            return work(session)

    def _apply_activity(self, session: Session, user_id: str, post: UserPost, risk_score: int) -> None:
        found = session.execute(
            select(user_activity.c.user_id).where(user_activity.c.user_id == user_id)
        ).first()
        if found is None:
            session.execute(
                insert(user_activity).values(user_id=user_id, total_risk_score=0, flagged_posts=0)
            )
        session.execute(
            insert(user_posts).values(
                user_id=user_id,
                content=post.content,
                platform=post.platform,
                timestamp=post.timestamp,
            )
        )
        flagged_delta = 1 if risk_score > FLAGGED_POST_THRESHOLD else 0
        session.execute(self._increment_stmt(user_id, risk_score, flagged_delta))

    @staticmethod
    def _increment_stmt(user_id: str, score_delta: int, flagged_delta: int):
        return (
            update(user_activity)
            .where(user_activity.c.user_id == user_id)
            .values(
                total_risk_score=user_activity.c.total_risk_score + score_delta,
                flagged_posts=user_activity.c.flagged_posts + flagged_delta,
            )
        )

    # ------------------------------------------------------------------
    # Dashboard queries
    # ------------------------------------------------------------------

    @staticmethod
    def _filters(since: Optional[datetime], platform: Optional[str] = None) -> list:
        conditions = []
        if since is not None:
            conditions.append(analysis_results.c.timestamp >= since)
        if platform is not None:
            conditions.append(analysis_results.c.platform == platform)
        return conditions

    def count(self, since: Optional[datetime] = None, platform: Optional[str] = None) -> int:
        with self._read() as session:
            return session.execute(
                select(func.count()).select_from(analysis_results).where(*self._filters(since, platform))
            ).scalar_one()

    def count_by_level(
        self, since: Optional[datetime] = None, platform: Optional[str] = None
    ) -> Dict[RiskLevel, int]:
        """Result count per risk tier (tiers with no results are 0)"""
        counts = {level: 0 for level in RiskLevel}
        with self._read() as session:
            rows = session.execute(
                select(analysis_results.c.risk_level, func.count())
                .where(*self._filters(since, platform))
                .group_by(analysis_results.c.risk_level)
            ).all()
        for level, count in rows:
            counts[RiskLevel(level)] = count
        return counts

    def recent(
        self, since: Optional[datetime] = None, platform: Optional[str] = None, limit: int = 10
    ) -> List[AnalysisResult]:
        with self._read() as session:
            rows = session.execute(
                select(analysis_results)
                .where(*self._filters(since, platform))
                .order_by(desc(analysis_results.c.timestamp), desc(analysis_results.c.id))
                .limit(limit)
            ).mappings().all()
        return [self._to_result(row) for row in rows]

    def platform_stats(self, since: Optional[datetime] = None) -> List[Tuple[str, int, float]]:
        """(platform, count, average risk score) per platform"""
        with self._read() as session:
            rows = session.execute(
                select(
                    analysis_results.c.platform,
                    func.count(),
                    func.avg(analysis_results.c.risk_score),
                )
                .where(*self._filters(since))
                .group_by(analysis_results.c.platform)
            ).all()
        return [(platform, count, float(avg or 0.0)) for platform, count, avg in rows]

    def network_flagged_by_user(self, since: Optional[datetime] = None, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Users whose results carry network indicators, highest summed risk first

        Returns:
            [{user_id, posts, total_risk_score, indicators}] capped at limit
        """
        conditions = self._filters(since) + [
            analysis_results.c.network_flagged == True,  # noqa: E712
            analysis_results.c.user_id.isnot(None),
        ]
        total = func.sum(analysis_results.c.risk_score).label("total_risk_score")

        with self._read() as session:
            totals = session.execute(
                select(analysis_results.c.user_id, total)
                .where(*conditions)
                .group_by(analysis_results.c.user_id)
                .order_by(desc(total), analysis_results.c.user_id)
                .limit(limit)
            ).all()
            if not totals:
                return []

            user_ids = [user_id for user_id, _ in totals]
            rows = session.execute(
                select(
                    analysis_results.c.user_id,
                    analysis_results.c.content,
                    analysis_results.c.network_analysis,
                )
                .where(*conditions, analysis_results.c.user_id.in_(user_ids))
                .order_by(analysis_results.c.timestamp, analysis_results.c.id)
            ).all()

        actors = OrderedDict(
            (user_id, {
                "user_id": user_id,
                "posts": [],
                "total_risk_score": int(score or 0),
                "indicators": [],
            })
            for user_id, score in totals
        )
        for user_id, content, network in rows:
            actor = actors[user_id]
            actor["posts"].append(content)
            for indicator in (network or {}).get("indicators", []):
                if indicator not in actor["indicators"]:
                    actor["indicators"].append(indicator)
        return list(actors.values())

    # ------------------------------------------------------------------

    @staticmethod
    def _to_result(row) -> AnalysisResult:
        return AnalysisResult(
            id=row["id"],
            content=row["content"],
            platform=row["platform"],
            risk_score=row["risk_score"],
            risk_level=RiskLevel(row["risk_level"]),
            flags=row["flags"] or [],
            sentiment=SentimentResult.model_validate(row["sentiment"] or {}),
            network_analysis=NetworkAnalysis.model_validate(row["network_analysis"] or {}),
            explanation=row["explanation"] or [],
            timestamp=row["timestamp"],
            user_id=row["user_id"],
            resolved=bool(row["resolved"]),
        )
