"""Data schemas and Pydantic models"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime, timedelta
from enum import Enum


class CamelModel(BaseModel):
    """Serialized with camelCase field names, accepts both spellings on input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RiskLevel(str, Enum):
    """Risk tier"""
    MINIMAL = "MINIMAL"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Timeframe(str, Enum):
    """Dashboard time window"""
    ONE_HOUR = "1h"
    ONE_DAY = "24h"
    SEVEN_DAYS = "7d"
    ALL = "all"

    @property
    def window(self) -> Optional[timedelta]:
        return {
            Timeframe.ONE_HOUR: timedelta(hours=1),
            Timeframe.ONE_DAY: timedelta(hours=24),
            Timeframe.SEVEN_DAYS: timedelta(days=7),
        }.get(self)


# ============================================
# Analysis input
# ============================================

class SharedContent(CamelModel):
    suspicious_percentage: Optional[float] = Field(None, description="Share of suspicious content (0~1)")


class NetworkData(CamelModel):
    """Network signals attached to a submission"""
    simultaneous_posts: Optional[int] = Field(None, ge=0, description="Posts published in the same burst")
    shared_content: Optional[SharedContent] = None
    account_age: Optional[int] = Field(None, ge=0, description="Account age in days")
    followers_count: Optional[int] = Field(None, ge=0)
    following_count: Optional[int] = Field(None, ge=0)


class Metadata(CamelModel):
    """Submission metadata"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    platform: str = Field("unknown", max_length=64, description="Source platform")
    user_id: Optional[str] = Field(None, max_length=128, description="Author id")
    hashtags: List[str] = Field(default_factory=list, description="Hashtags in posting order")
    network_data: Optional[NetworkData] = None

    @field_validator("platform", mode="before")
    @classmethod
    def platform_default(cls, v):
        """Blank platform falls back to unknown"""
        if v is None or not str(v).strip():
            return "unknown"
        return str(v).strip()

    @field_validator("user_id", mode="before")
    @classmethod
    def blank_user_id(cls, v):
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("hashtags", mode="before")
    @classmethod
    def hashtags_default(cls, v):
        return v or []


class AnalyzeRequest(CamelModel):
    """Analysis request"""
    content: Optional[str] = Field(None, max_length=50_000, description="Text to analyze")
    metadata: Metadata = Field(default_factory=Metadata)

    @field_validator("metadata", mode="before")
    @classmethod
    def metadata_default(cls, v):
        return v or {}


class BatchAnalyzeRequest(CamelModel):
    """Batch analysis request"""
    items: List[AnalyzeRequest] = Field(..., min_length=1, max_length=100)


# ============================================
# Analysis output
# ============================================

class SentimentResult(CamelModel):
    score: int = Field(0, description="Sum of matched word polarities")
    comparative: float = Field(0.0, description="score / token count")
    positive: List[str] = Field(default_factory=list)
    negative: List[str] = Field(default_factory=list)


class NetworkAnalysis(CamelModel):
    score: int = 0
    indicators: List[str] = Field(default_factory=list)


class AnalysisResult(CamelModel):
    """Persisted scoring result"""
    id: Optional[int] = None
    content: str
    platform: str = "unknown"
    risk_score: int = Field(0, ge=0)
    risk_level: RiskLevel = RiskLevel.MINIMAL
    flags: List[str] = Field(default_factory=list)
    sentiment: SentimentResult = Field(default_factory=SentimentResult)
    network_analysis: NetworkAnalysis = Field(default_factory=NetworkAnalysis)
    explanation: List[str] = Field(default_factory=list)
    timestamp: datetime
    user_id: Optional[str] = None
    resolved: bool = False


class AnalyzeResponse(CamelModel):
    success: bool = True
    analysis: AnalysisResult


class BatchItemResult(CamelModel):
    index: int
    analysis: Optional[AnalysisResult] = None
    error: Optional[str] = None


class BatchAnalyzeResponse(CamelModel):
    success: bool = True
    accepted: int
    rejected: int
    results: List[BatchItemResult]


class ResolveRequest(CamelModel):
    resolved: bool = True


# ============================================
# User activity
# ============================================

class UserPost(CamelModel):
    content: str
    timestamp: datetime
    platform: str = "unknown"


class RiskProfile(CamelModel):
    total_risk_score: int = 0
    flagged_posts: int = 0


class UserActivityProfile(CamelModel):
    user_id: str
    posts: List[UserPost] = Field(default_factory=list)
    risk_profile: RiskProfile = Field(default_factory=RiskProfile)


# ============================================
# Dashboard
# ============================================

class RiskDistribution(CamelModel):
    """Tier share of total in percent"""
    high: float = 0.0
    medium: float = 0.0
    low: float = 0.0
    minimal: float = 0.0


class SummaryCounts(CamelModel):
    total_analyses: int = 0
    high_risk_count: int = 0
    medium_risk_count: int = 0
    low_risk_count: int = 0
    minimal_risk_count: int = 0
    risk_distribution: RiskDistribution = Field(default_factory=RiskDistribution)


class RecentAnalysis(CamelModel):
    id: int
    content: str
    risk_level: RiskLevel
    risk_score: int
    flags: List[str]
    timestamp: datetime
    platform: str
    explanation: List[str] = Field(default_factory=list)


class PlatformStat(CamelModel):
    platform: str
    count: int
    avg_risk: float


class DashboardSummary(CamelModel):
    summary: SummaryCounts
    platform_stats: List[PlatformStat]
    recent_analyses: List[RecentAnalysis]
    timeframe: Timeframe
    platform: str


class DashboardResponse(CamelModel):
    success: bool = True
    dashboard: DashboardSummary


class SuspiciousActor(CamelModel):
    user_id: str
    posts: List[str]
    total_risk_score: int
    indicators: List[str]


class NetworkAnalysisResponse(CamelModel):
    success: bool = True
    suspicious_networks: List[SuspiciousActor]


class ErrorResponse(CamelModel):
    """Error response"""
    error: str = Field(..., description="Error message")
    details: Optional[str] = Field(None, description="Details, development mode only")
    request_id: Optional[str] = Field(None, description="Request ID")
