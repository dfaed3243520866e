"""
tests/test_analyze_api.py

HTTP contract of POST /api/analyze, POST /api/analyze/export and GET /health.
Services are replaced through ``app.dependency_overrides``; nothing touches
the network.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.config import (
    AnalysisCapabilities,
    AnalysisSettings,
    get_analysis_capabilities,
    get_analysis_settings,
)
from app.main import URLS_REQUIRED_MESSAGE, create_app
from app.scraping.batching import BatchPacer
from app.services.analysis_cache import TTLAnalysisCache
from app.services.competitor_analysis_service import CompetitorAnalysisService
from app.services.entity_extraction_service import EntityExtractionService
from app.services.market_intelligence_service import MarketIntelligenceService
from app.services.site_analysis_orchestrator import (
    SiteAnalysisOrchestrator,
    get_site_analysis_orchestrator,
)
from llm_synthesis.adapter import MockLLMAdapter


class FakeFetcher:
    def fetch_text(self, url: str) -> str:
        return f"Page text for {url}"


class FailingOrchestrator:
    def analyze(self, *, urls, find_competitors):
        raise RuntimeError("boom")


def _orchestrator() -> SiteAnalysisOrchestrator:
    fetcher = FakeFetcher()
    extractor = EntityExtractionService(adapter=MockLLMAdapter())
    return SiteAnalysisOrchestrator(
        fetcher=fetcher,
        extractor=extractor,
        cache=TTLAnalysisCache(ttl_seconds=600),
        competitor_analyzer=CompetitorAnalysisService(
            fetcher=fetcher,
            extractor=extractor,
            pacer=BatchPacer(batch_size=3, pause_seconds=0.0),
        ),
        aggregator=MarketIntelligenceService(),
        discoverer=None,
        clock=lambda: datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


@pytest.fixture()
def application():
    app = create_app()
    orchestrator = _orchestrator()
    app.dependency_overrides[get_site_analysis_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_analysis_settings] = lambda: AnalysisSettings(max_urls_per_request=2)
    app.dependency_overrides[get_analysis_capabilities] = lambda: AnalysisCapabilities(
        llm_configured=True,
        competitor_discovery=False,
    )
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(application) -> TestClient:
    return TestClient(application)


# ---------------------------------------------------------------------------
# Validation gate
# ---------------------------------------------------------------------------


class TestRequestValidation:
    @pytest.mark.parametrize(
        "body",
        [
            {"urls": []},
            {},
            {"urls": "https://acme.io"},
            {"urls": [123]},
            {"urls": ["   "]},
        ],
    )
    def test_invalid_urls_return_400(self, client: TestClient, body: dict) -> None:
        response = client.post("/api/analyze", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": URLS_REQUIRED_MESSAGE}

    def test_malformed_json_returns_400(self, client: TestClient) -> None:
        response = client.post(
            "/api/analyze",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_too_many_urls_returns_400(self, client: TestClient) -> None:
        response = client.post("/api/analyze", json={"urls": ["https://a.io", "https://b.io", "https://c.io"]})
        assert response.status_code == 400
        assert "At most 2 urls" in response.json()["error"]


# ---------------------------------------------------------------------------
# Failure responses
# ---------------------------------------------------------------------------


def test_missing_llm_credential_returns_500(application, client: TestClient) -> None:
    application.dependency_overrides[get_analysis_capabilities] = lambda: AnalysisCapabilities(
        llm_configured=False,
        competitor_discovery=False,
    )
    response = client.post("/api/analyze", json={"urls": ["https://acme.io"]})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "LLM API key not configured"
    assert "details" in body


def test_unhandled_failure_returns_500(application, client: TestClient) -> None:
    application.dependency_overrides[get_site_analysis_orchestrator] = lambda: FailingOrchestrator()
    response = client.post("/api/analyze", json={"urls": ["https://acme.io"]})

    assert response.status_code == 500
    assert response.json() == {"error": "Analysis failed", "details": "boom"}


# ---------------------------------------------------------------------------
# Success payload
# ---------------------------------------------------------------------------


def test_without_search_key_competitors_are_disabled(client: TestClient) -> None:
    response = client.post(
        "/api/analyze",
        json={"urls": ["https://acme.io"], "findCompetitors": True},
    )

    assert response.status_code == 200
    body = response.json()
    result = body["results"][0]
    assert "competitors" not in result or result["competitors"] == []
    assert result["searchPhrase"] == "customer analytics cloud platform"
    assert result["entities"][0] == {
        "name": "Customer Analytics",
        "confidence": 88,
        "category": "Product",
    }
    assert body["marketIntelligence"] is None
    assert body["metadata"]["competitorAnalysisEnabled"] is False
    assert body["metadata"]["totalUrls"] == 1
    assert body["metadata"]["successfulAnalyses"] == 1
    assert body["metadata"]["timestamp"].startswith("2024-05-01T00:00:00")


def test_two_urls_include_market_intelligence(client: TestClient) -> None:
    response = client.post("/api/analyze", json={"urls": ["https://a.io", "https://b.io"]})

    assert response.status_code == 200
    intelligence = response.json()["marketIntelligence"]
    assert intelligence["totalSites"] == 2
    assert {"name": "customer analytics", "frequency": 100} in intelligence["commonEntities"]
    assert intelligence["industryDistribution"][0]["count"] == 2
    assert intelligence["competitiveGaps"] == []
    assert intelligence["topicalOpportunities"] == []


def test_health_reports_capabilities(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "llmConfigured": True,
        "competitorDiscovery": False,
    }


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def _export_body() -> dict:
    return {
        "results": [
            {
                "url": "https://acme.io",
                "entities": [{"name": "CRM", "confidence": 90, "category": "Product"}],
                "searchPhrase": "crm software",
                "summary": "Acme CRM.",
                "competitors": [
                    {
                        "url": "https://rival.com",
                        "title": "Rival",
                        "snippet": "",
                        "position": 1,
                        "entities": [{"name": "ERP", "confidence": 80, "category": "Product"}],
                        "analysis": "Rival ERP.",
                        "success": True,
                    },
                    {
                        "url": "https://down.com",
                        "title": "Down",
                        "snippet": "",
                        "position": 2,
                        "error": "HTTP 500",
                        "success": False,
                    },
                ],
            }
        ],
        "metadata": {"totalUrls": 1},
    }


def test_export_csv(client: TestClient) -> None:
    response = client.post("/api/analyze/export?format=csv", json=_export_body())

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert [(row["url"], row["source"], row["entity"]) for row in rows] == [
        ("https://acme.io", "primary", "CRM"),
        ("https://rival.com", "competitor", "ERP"),
    ]
    assert rows[0]["searchPhrase"] == "crm software"


def test_export_json(client: TestClient) -> None:
    response = client.post("/api/analyze/export?format=json", json=_export_body())

    assert response.status_code == 200
    body = response.json()
    assert body["rows"] == 2
    assert body["fields"][:3] == ["url", "source", "entity"]
    assert body["data"][1]["summary"] == "Rival ERP."


def test_export_competitor_without_analysis_has_blank_summary(client: TestClient) -> None:
    body = _export_body()
    del body["results"][0]["competitors"][0]["analysis"]

    data = client.post("/api/analyze/export?format=json", json=body).json()["data"]
    assert data[1]["summary"] == ""
    assert data[1]["searchPhrase"] == ""

    response = client.post("/api/analyze/export?format=csv", json=body)
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert rows[1]["summary"] == ""
    assert response.headers["x-row-count"] == "2"


def test_export_rejects_unknown_format(client: TestClient) -> None:
    response = client.post("/api/analyze/export?format=xlsx", json=_export_body())

    assert response.status_code == 400
    assert "Invalid format" in response.json()["error"]
