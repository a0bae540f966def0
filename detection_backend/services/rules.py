"""
Detection rules
Each rule is an independent check returning a RuleHit when it fires.
The risk score is the sum of the points of every hit, in rule order.

| Rule                | Points | Flag                        |
| keywords            | +40    | suspicious_keywords         |
| classifier          | +35    | ml_classification_positive  |
| negative sentiment  | +20    | negative_sentiment          |
| bot behaviour       | +30    | bot_behavior                |
| hashtags            | +25    | suspicious_hashtags         |
| network patterns    | +20/25 | (networkAnalysis.indicators)|
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from detection_backend.models.schemas import (
    Metadata,
    NetworkAnalysis,
    NetworkData,
    RiskLevel,
    SentimentResult,
    UserPost,
)
from detection_backend.services.classifier import TextClassifier

SUSPICIOUS_KEYWORDS: Tuple[str, ...] = (
    'anti-india', 'destroy india', 'fake india', 'propaganda india',
    'indian fake news', 'corrupt india', 'terrorist india',
    # Hindi (Devanagari)
    'भारत विरोधी', 'हिंदुस्तान दुश्मन', 'पाकिस्तान जिंदाबाद',
    # Urdu
    'پاکستان زندہ باد',
)

SUSPICIOUS_HASHTAGS: Tuple[str, ...] = (
    '#antiindia', '#destroyindia', '#fakeindia',
    '#pakistanzindabad', '#indiaexposed',
)

# Tier thresholds, checked highest first
RISK_THRESHOLDS: Tuple[Tuple[int, RiskLevel], ...] = (
    (80, RiskLevel.HIGH),
    (50, RiskLevel.MEDIUM),
    (25, RiskLevel.LOW),
)


def categorize_risk(score: int) -> RiskLevel:
    for threshold, level in RISK_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.MINIMAL


@dataclass(frozen=True)
class RuleHit:
    points: int
    explanation: str
    flag: Optional[str] = None
    network: Optional[NetworkAnalysis] = None


@dataclass(frozen=True)
class Signals:
    """Inputs gathered once per analysis and shared by all rules"""
    sentiment: SentimentResult
    bot_detected: bool = False
    network_data: Optional[NetworkData] = None


class Rule:
    name = "rule"

    def evaluate(self, content: str, metadata: Metadata, signals: Signals) -> Optional[RuleHit]:
        raise NotImplementedError


# ============================================================================
# Helpers
# ============================================================================

def match_keywords(content: str, keywords: Sequence[str]) -> List[str]:
    lowered = content.lower()
    return [keyword for keyword in keywords if keyword.lower() in lowered]


def match_hashtags(hashtags: Sequence[str], suspicious: Sequence[str]) -> List[str]:
    needles = [tag.lower().replace('#', '') for tag in suspicious]
    return [
        tag for tag in hashtags
        if any(needle in tag.lower().replace('#', '') for needle in needles)
    ]


def repetition_ratio(posts: Sequence[UserPost]) -> float:
    """(total - unique) / total over post contents; 0.0 for no posts"""
    if not posts:
        return 0.0
    contents = [post.content for post in posts]
    return (len(contents) - len(set(contents))) / len(contents)


def is_bot_activity(
    posts: Sequence[UserPost],
    now: datetime,
    window: timedelta = timedelta(hours=24),
    max_posts: int = 50,
    repetition_threshold: float = 0.7,
) -> bool:
    """More than max_posts inside the window, or mostly repeated content"""
    recent = [post for post in posts if now - post.timestamp < window]
    return len(recent) > max_posts or repetition_ratio(recent) > repetition_threshold


# ============================================================================
# Rules
# ============================================================================

@dataclass(frozen=True)
class KeywordRule(Rule):
    keywords: Tuple[str, ...] = SUSPICIOUS_KEYWORDS
    points: int = 40
    flag: str = "suspicious_keywords"
    name = "keywords"

    def evaluate(self, content, metadata, signals):
        matches = match_keywords(content, self.keywords)
        if not matches:
            return None
        return RuleHit(
            points=self.points,
            flag=self.flag,
            explanation=f"Suspicious keywords detected: {', '.join(matches)}",
        )


@dataclass(frozen=True)
class ClassifierRule(Rule):
    classifier: TextClassifier = field(default_factory=TextClassifier)
    points: int = 35
    flag: str = "ml_classification_positive"
    name = "classifier"

    def evaluate(self, content, metadata, signals):
        if self.classifier.classify(content.lower()) != self.classifier.positive_label:
            return None
        return RuleHit(
            points=self.points,
            flag=self.flag,
            explanation="Machine learning model flagged as anti-India content",
        )


@dataclass(frozen=True)
class SentimentRule(Rule):
    threshold: float = -0.5
    points: int = 20
    flag: str = "negative_sentiment"
    name = "sentiment"

    def evaluate(self, content, metadata, signals):
        if signals.sentiment.comparative >= self.threshold:
            return None
        return RuleHit(
            points=self.points,
            flag=self.flag,
            explanation="Extremely negative sentiment detected",
        )


@dataclass(frozen=True)
class BotBehaviorRule(Rule):
    points: int = 30
    flag: str = "bot_behavior"
    name = "bot_behavior"

    def evaluate(self, content, metadata, signals):
        if not (metadata.user_id and signals.bot_detected):
            return None
        return RuleHit(
            points=self.points,
            flag=self.flag,
            explanation="Bot-like behavior patterns detected",
        )


@dataclass(frozen=True)
class HashtagRule(Rule):
    hashtags: Tuple[str, ...] = SUSPICIOUS_HASHTAGS
    points: int = 25
    flag: str = "suspicious_hashtags"
    name = "hashtags"

    def evaluate(self, content, metadata, signals):
        matches = match_hashtags(metadata.hashtags, self.hashtags)
        if not matches:
            return None
        return RuleHit(
            points=self.points,
            flag=self.flag,
            explanation=f"Suspicious hashtags: {', '.join(matches)}",
        )


@dataclass(frozen=True)
class NetworkPatternRule(Rule):
    simultaneous_posts_threshold: int = 10
    simultaneous_points: int = 20
    shared_content_threshold: float = 0.6
    shared_content_points: int = 25
    name = "network_patterns"

    def analyze(self, network_data: Optional[NetworkData]) -> NetworkAnalysis:
        analysis = NetworkAnalysis()
        if network_data is None:
            return analysis

        if (network_data.simultaneous_posts or 0) > self.simultaneous_posts_threshold:
            analysis.score += self.simultaneous_points
            analysis.indicators.append("synchronized_posting")

        shared = network_data.shared_content
        if shared is not None and (shared.suspicious_percentage or 0.0) > self.shared_content_threshold:
            analysis.score += self.shared_content_points
            analysis.indicators.append("coordinated_messaging")

        return analysis

    def evaluate(self, content, metadata, signals):
        analysis = self.analyze(signals.network_data)
        if not analysis.indicators:
            return None
        return RuleHit(
            points=analysis.score,
            explanation=f"Coordinated network patterns detected: {', '.join(analysis.indicators)}",
            network=analysis,
        )


def default_rules(classifier: Optional[TextClassifier] = None) -> List[Rule]:
    """Rules in evaluation order"""
    return [
        KeywordRule(),
        ClassifierRule(classifier=classifier or TextClassifier()),
        SentimentRule(),
        BotBehaviorRule(),
        HashtagRule(),
        NetworkPatternRule(),
    ]
