import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path

# Ensure project root on sys.path when running via pytest
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# settings are read at import time
_TEST_DIR = Path(tempfile.mkdtemp(prefix="detection-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'app.sqlite3'}"
os.environ["MODE"] = "development"
os.environ["CACHE_ENABLED"] = "false"
os.environ["NETWORK_MOCK_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from detection_backend.models.schemas import AnalysisResult, NetworkAnalysis
from detection_backend.services.analysis import AnalysisService
from detection_backend.services.classifier import TextClassifier
from detection_backend.services.dashboard import DashboardService
from detection_backend.services.database import build_engine
from detection_backend.services.engine import DetectionEngine
from detection_backend.services.repository import AnalysisRepository
from detection_backend.services.rules import categorize_risk, default_rules


@pytest.fixture(scope="session")
def classifier():
    return TextClassifier()


@pytest.fixture
def repository(tmp_path):
    repo = AnalysisRepository(build_engine(f"sqlite:///{tmp_path / 'test.sqlite3'}"))
    repo.init_schema()
    yield repo
    repo.engine.dispose()


@pytest.fixture
def make_result():
    """Factory for unsaved AnalysisResult records"""
    def _make(
        risk_score=0,
        content="sample post",
        platform="twitter",
        user_id=None,
        indicators=(),
        timestamp=None,
        flags=(),
        explanation=(),
    ):
        return AnalysisResult(
            content=content,
            platform=platform,
            risk_score=risk_score,
            risk_level=categorize_risk(risk_score),
            flags=list(flags),
            explanation=list(explanation),
            network_analysis=NetworkAnalysis(score=0, indicators=list(indicators)),
            timestamp=timestamp or datetime.utcnow(),
            user_id=user_id,
        )
    return _make


@pytest.fixture
def api_client(repository, classifier):
    from detection_backend.api.dependencies import (
        get_analysis_service,
        get_dashboard_service,
        get_repository,
    )
    from detection_backend.main import app

    engine = DetectionEngine(
        rules=default_rules(classifier),
        activity_lookup=repository.find_user_activity,
    )
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(engine, repository)
    app.dependency_overrides[get_dashboard_service] = lambda: DashboardService(repository)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
