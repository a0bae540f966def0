"""Table definitions (SQLAlchemy Core)"""
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

analysis_results = Table(
    "analysis_results",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("content", Text, nullable=False),
    Column("platform", String(64), nullable=False, default="unknown"),
    Column("risk_score", Integer, nullable=False, default=0),
    Column("risk_level", String(16), nullable=False),
    Column("flags", JSON),
    Column("sentiment", JSON),
    Column("network_analysis", JSON),
    # true when network_analysis.indicators is non-empty
    Column("network_flagged", Boolean, nullable=False, default=False),
    Column("explanation", JSON),
    Column("user_id", String(128), nullable=True),
    Column("resolved", Boolean, nullable=False, default=False),
    Column("timestamp", DateTime, nullable=False, default=datetime.utcnow),
    Index("idx_analysis_timestamp", "timestamp"),
    Index("idx_analysis_platform", "platform"),
    Index("idx_analysis_risk_level", "risk_level"),
    Index("idx_analysis_user", "user_id"),
)

user_activity = Table(
    "user_activity",
    metadata,
    Column("user_id", String(128), primary_key=True),
    Column("total_risk_score", Integer, nullable=False, default=0),
    Column("flagged_posts", Integer, nullable=False, default=0),
)

user_posts = Table(
    "user_posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(128), ForeignKey("user_activity.user_id", ondelete="CASCADE"), nullable=False),
    Column("content", Text, nullable=False),
    Column("platform", String(64), nullable=False, default="unknown"),
    Column("timestamp", DateTime, nullable=False, default=datetime.utcnow),
    Index("idx_user_posts_user_ts", "user_id", "timestamp"),
)
