import asyncio
import time
from datetime import datetime, timedelta

import pytest

from detection_backend.errors import AnalysisError
from detection_backend.models.schemas import Metadata, RiskLevel, UserActivityProfile, UserPost
from detection_backend.services.engine import DetectionEngine
from detection_backend.services.network import MockNetworkDataSource
from detection_backend.services.rules import HashtagRule, KeywordRule, Rule, SentimentRule, default_rules

NOW = datetime(2025, 1, 1, 12, 0, 0)
NEUTRAL_TEXT = "Cricket match starts at noon"


@pytest.fixture
def make_engine(classifier):
    def _make(**kwargs):
        kwargs.setdefault("rules", default_rules(classifier))
        kwargs.setdefault("clock", lambda: NOW)
        return DetectionEngine(**kwargs)
    return _make


def _score(engine, content, metadata=None):
    return asyncio.run(engine.score(content, metadata))


def _profile(contents):
    return UserActivityProfile(
        user_id="u1",
        posts=[UserPost(content=c, timestamp=NOW - timedelta(minutes=1)) for c in contents],
    )


def test_worked_example_sums_fired_rules(make_engine):
    result = _score(make_engine(), "Destroy India and its economy")
    assert result.risk_score == 40 + 35 + 20
    assert result.risk_level == RiskLevel.HIGH
    assert result.flags == ["suspicious_keywords", "ml_classification_positive", "negative_sentiment"]
    assert len(result.explanation) == 3
    assert result.sentiment.comparative == -0.6
    assert result.timestamp == NOW
    assert result.id is None


def test_neutral_text_scores_zero(make_engine):
    result = _score(make_engine(), NEUTRAL_TEXT)
    assert result.risk_score == 0
    assert result.risk_level == RiskLevel.MINIMAL
    assert result.flags == []
    assert result.explanation == []
    assert result.network_analysis.score == 0
    assert result.network_analysis.indicators == []


def test_keyword_adds_exactly_forty():
    engine = DetectionEngine(rules=[KeywordRule(), HashtagRule()], clock=lambda: NOW)
    base = _score(engine, "nothing to see here")
    flagged = _score(engine, "nothing to see here, fake india")
    assert flagged.risk_score - base.risk_score == 40


def test_extra_signal_never_lowers_score(make_engine):
    engine = make_engine()
    base = _score(engine, NEUTRAL_TEXT, Metadata(platform="twitter"))
    tagged = _score(engine, NEUTRAL_TEXT, Metadata(platform="twitter", hashtags=["#FakeIndia"]))
    assert tagged.risk_score == base.risk_score + 25
    assert "suspicious_hashtags" in tagged.flags


def test_network_signals_add_explanation_without_flag(make_engine):
    metadata = Metadata.model_validate({
        "networkData": {"simultaneousPosts": 15, "sharedContent": {"suspiciousPercentage": 0.9}},
    })
    result = _score(make_engine(), NEUTRAL_TEXT, metadata)
    assert result.risk_score == 45
    assert result.risk_level == RiskLevel.LOW
    assert result.flags == []
    assert result.network_analysis.indicators == ["synchronized_posting", "coordinated_messaging"]
    assert result.explanation == [
        "Coordinated network patterns detected: synchronized_posting, coordinated_messaging"
    ]


def test_every_flag_has_an_explanation(make_engine):
    metadata = Metadata(hashtags=["#antiindia"], user_id="u1")
    result = _score(make_engine(), "Destroy India and its economy", metadata)
    assert len(result.flags) == len(set(result.flags))
    assert len(result.explanation) >= len(result.flags)


def test_bot_behavior_detected_from_history(make_engine):
    calls = []

    def lookup(user_id, since):
        calls.append((user_id, since))
        return _profile(["buy now"] * 9 + ["hello"])

    result = _score(make_engine(activity_lookup=lookup), NEUTRAL_TEXT, Metadata(user_id="u1"))
    assert result.risk_score == 30
    assert result.flags == ["bot_behavior"]
    assert calls == [("u1", NOW - timedelta(hours=24))]


def test_bot_lookup_skipped_without_user(make_engine):
    def lookup(user_id, since):
        raise AssertionError("lookup must not run")

    result = _score(make_engine(activity_lookup=lookup), NEUTRAL_TEXT)
    assert result.risk_score == 0


def test_bot_lookup_failure_is_fail_open(make_engine):
    def lookup(user_id, since):
        raise RuntimeError("database down")

    result = _score(make_engine(activity_lookup=lookup), NEUTRAL_TEXT, Metadata(user_id="u1"))
    assert result.risk_score == 0
    assert "bot_behavior" not in result.flags


def test_bot_lookup_timeout_is_fail_open(make_engine):
    def lookup(user_id, since):
        time.sleep(0.5)
        return _profile(["spam"] * 60)

    engine = make_engine(activity_lookup=lookup, lookup_timeout=0.05)
    result = _score(engine, NEUTRAL_TEXT, Metadata(user_id="u1"))
    assert "bot_behavior" not in result.flags


def test_unknown_user_is_not_a_bot(make_engine):
    result = _score(make_engine(activity_lookup=lambda user_id, since: None), NEUTRAL_TEXT, Metadata(user_id="u1"))
    assert result.risk_score == 0


def test_rule_failure_raises_analysis_error():
    class BrokenRule(Rule):
        def evaluate(self, content, metadata, signals):
            raise RuntimeError("boom")

    engine = DetectionEngine(rules=[KeywordRule(), BrokenRule()], clock=lambda: NOW)
    with pytest.raises(AnalysisError) as exc_info:
        _score(engine, "anything")
    assert exc_info.value.message == "Analysis failed"


def test_mock_network_source_is_seedable(make_engine):
    metadata = Metadata(user_id="u1")
    first = _score(make_engine(network_source=MockNetworkDataSource(seed=7)), NEUTRAL_TEXT, metadata)
    second = _score(make_engine(network_source=MockNetworkDataSource(seed=7)), NEUTRAL_TEXT, metadata)
    assert first.network_analysis == second.network_analysis
    assert first.risk_score == second.risk_score


def test_request_network_data_wins_over_source(make_engine):
    metadata = Metadata.model_validate({"userId": "u1", "networkData": {"simultaneousPosts": 0}})
    result = _score(make_engine(network_source=MockNetworkDataSource(seed=7)), NEUTRAL_TEXT, metadata)
    assert result.network_analysis.indicators == []


def test_negative_sentiment_fires_on_mixed_script_text():
    engine = DetectionEngine(rules=[SentimentRule()], clock=lambda: NOW)
    result = _score(engine, "destroy भारत भारत भारत")
    assert result.flags == ["negative_sentiment"]
    assert result.risk_score == 20
