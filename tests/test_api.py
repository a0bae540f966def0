from fastapi.testclient import TestClient

from detection_backend.api.dependencies import get_analysis_service, get_dashboard_service
from detection_backend.models.tables import user_posts
from detection_backend.services.analysis import AnalysisService
from detection_backend.services.engine import DetectionEngine
from detection_backend.services.rules import Rule


def _analyze(client, content, **metadata):
    return client.post("/api/analyze", json={"content": content, "metadata": metadata})


def test_analyze_success(api_client):
    response = _analyze(api_client, "Destroy India and its economy", platform="twitter")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True

    analysis = body["analysis"]
    assert analysis["riskScore"] == 95
    assert analysis["riskLevel"] == "HIGH"
    assert analysis["platform"] == "twitter"
    assert analysis["id"] > 0
    assert {"flags", "sentiment", "networkAnalysis", "explanation", "timestamp"} <= analysis.keys()


def test_analyze_rejects_empty_content(api_client):
    response = _analyze(api_client, "   ")
    assert response.status_code == 400
    assert response.json() == {"error": "Content is required for analysis"}


def test_analyze_rejects_missing_content(api_client):
    response = api_client.post("/api/analyze", json={"metadata": {"platform": "twitter"}})
    assert response.status_code == 400


def test_analyze_ignores_unknown_metadata_keys(api_client):
    response = _analyze(api_client, "Cricket match starts at noon", timestamp="2025-01-01T00:00:00Z")
    assert response.status_code == 200
    assert response.json()["analysis"]["platform"] == "unknown"


def test_analyze_updates_user_activity(api_client, repository):
    _analyze(api_client, "Destroy India and its economy", userId="author-1", platform="twitter")
    _analyze(api_client, "Cricket match starts at noon", userId="author-1", platform="twitter")

    profile = repository.find_user_activity("author-1")
    assert len(profile.posts) == 2
    assert profile.risk_profile.total_risk_score == 95
    assert profile.risk_profile.flagged_posts == 1


def test_analysis_failure_returns_500(api_client, repository):
    from detection_backend.main import app

    class BrokenRule(Rule):
        def evaluate(self, content, metadata, signals):
            raise RuntimeError("boom")

    engine = DetectionEngine(rules=[BrokenRule()])
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(engine, repository)

    response = _analyze(api_client, "anything")
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Analysis failed"
    assert "boom" in body["details"]
    assert repository.count() == 0


def test_batch_analyze(api_client):
    response = api_client.post("/api/analyze/batch", json={"items": [
        {"content": "Destroy India and its economy"},
        {"content": ""},
        {"content": "Cricket match starts at noon", "metadata": {"platform": "reddit"}},
    ]})
    assert response.status_code == 200
    body = response.json()
    assert (body["accepted"], body["rejected"]) == (2, 1)
    assert [item["index"] for item in body["results"]] == [0, 1, 2]
    assert body["results"][1]["error"] == "Content is required for analysis"
    assert body["results"][2]["analysis"]["platform"] == "reddit"


def test_batch_size_limits(api_client):
    assert api_client.post("/api/analyze/batch", json={"items": []}).status_code == 422
    items = [{"content": f"post {i}"} for i in range(101)]
    assert api_client.post("/api/analyze/batch", json={"items": items}).status_code == 422


def test_get_and_resolve_analysis(api_client):
    record_id = _analyze(api_client, "Destroy India and its economy").json()["analysis"]["id"]

    fetched = api_client.get(f"/api/analyses/{record_id}")
    assert fetched.status_code == 200
    assert fetched.json()["resolved"] is False

    resolved = api_client.patch(f"/api/analyses/{record_id}/resolve")
    assert resolved.status_code == 200
    assert resolved.json()["resolved"] is True

    reopened = api_client.patch(f"/api/analyses/{record_id}/resolve", json={"resolved": False})
    assert reopened.json()["resolved"] is False


def test_missing_analysis_returns_404(api_client):
    assert api_client.get("/api/analyses/999").json() == {"error": "Analysis not found"}
    assert api_client.patch("/api/analyses/999/resolve").status_code == 404


def test_dashboard(api_client):
    _analyze(api_client, "Destroy India and its economy", platform="twitter")
    _analyze(api_client, "Cricket match starts at noon", platform="reddit")

    response = api_client.get("/api/dashboard", params={"timeframe": "24h", "platform": "all"})
    assert response.status_code == 200
    dashboard = response.json()["dashboard"]
    summary = dashboard["summary"]
    assert summary["totalAnalyses"] == 2
    assert summary["highRiskCount"] == 1
    assert summary["minimalRiskCount"] == 1
    assert summary["riskDistribution"]["high"] == 50.0
    assert len(dashboard["recentAnalyses"]) == 2
    assert {s["platform"] for s in dashboard["platformStats"]} == {"twitter", "reddit"}
    assert dashboard["timeframe"] == "24h"


def test_dashboard_empty(api_client):
    summary = api_client.get("/api/dashboard").json()["dashboard"]["summary"]
    assert summary["totalAnalyses"] == 0
    assert summary["riskDistribution"] == {"high": 0.0, "medium": 0.0, "low": 0.0, "minimal": 0.0}


def test_dashboard_rejects_unknown_timeframe(api_client):
    assert api_client.get("/api/dashboard", params={"timeframe": "30d"}).status_code == 422


def test_network_analysis(api_client):
    _analyze(
        api_client,
        "Cricket match starts at noon",
        userId="ring-1",
        networkData={"simultaneousPosts": 15, "sharedContent": {"suspiciousPercentage": 0.8}},
    )
    _analyze(api_client, "Cricket match starts at noon", userId="quiet-user")

    response = api_client.get("/api/network-analysis")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["suspiciousNetworks"] == [{
        "userId": "ring-1",
        "posts": ["Cricket match starts at noon"],
        "totalRiskScore": 45,
        "indicators": ["synchronized_posting", "coordinated_messaging"],
    }]


def test_health(api_client):
    body = api_client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "ok"
    assert body["cache"] == "disabled"
    assert api_client.get("/health/ping").json()["message"] == "pong"


def test_failed_activity_write_stores_nothing(api_client, repository):
    user_posts.drop(repository.engine)

    response = _analyze(api_client, "Destroy India and its economy", userId="author-1")
    assert response.status_code == 500
    assert response.json()["error"] == "Analysis failed"
    assert repository.count() == 0

    dashboard = api_client.get("/api/dashboard").json()["dashboard"]
    assert dashboard["summary"]["totalAnalyses"] == 0


def test_error_bodies_are_documented(api_client):
    schema = api_client.get("/v1/openapi.json").json()
    assert "ErrorResponse" in schema["components"]["schemas"]
    analyze_responses = schema["paths"]["/api/analyze"]["post"]["responses"]
    assert {"400", "500"} <= analyze_responses.keys()


def test_unhandled_error_returns_request_id(api_client):
    from detection_backend.main import app

    class FailingDashboard:
        def dashboard_summary(self, timeframe, platform):
            raise RuntimeError("unexpected")

    app.dependency_overrides[get_dashboard_service] = lambda: FailingDashboard()
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/dashboard", headers={"x-request-id": "req-42"})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "requestId": "req-42"}
