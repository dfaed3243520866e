"""
tests/test_site_analysis_orchestrator.py

Request Orchestrator with fake fetcher/discoverer and the mock LLM adapter.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.domain.site_analysis import CompetitorResult
from app.errors import DiscoveryError, FetchError
from app.scraping.batching import BatchPacer
from app.services.analysis_cache import TTLAnalysisCache, analysis_cache_key
from app.services.competitor_analysis_service import CompetitorAnalysisService
from app.services.entity_extraction_service import EntityExtractionService
from app.services.market_intelligence_service import MarketIntelligenceService
from app.services.site_analysis_orchestrator import SiteAnalysisOrchestrator
from llm_synthesis.adapter import MockLLMAdapter

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeFetcher:
    def __init__(self, failing: dict[str, int] | None = None) -> None:
        self.failing = failing or {}
        self.calls: list[str] = []

    def fetch_text(self, url: str) -> str:
        self.calls.append(url)
        if url in self.failing:
            status = self.failing[url]
            raise FetchError(f"HTTP {status}", url=url, status_code=status)
        return f"Page text for {url}"


class FakeDiscoverer:
    def __init__(self, urls: list[str] | None = None, error: Exception | None = None) -> None:
        self.urls = urls or []
        self.error = error
        self.phrases: list[str] = []

    def discover(self, search_phrase: str) -> list[CompetitorResult]:
        self.phrases.append(search_phrase)
        if self.error is not None:
            raise self.error
        return [
            CompetitorResult(url=url, title=url, snippet="", position=index + 1)
            for index, url in enumerate(self.urls)
        ]


class ExplodingAggregator:
    def build(self, results):
        raise ZeroDivisionError("division by zero")


def _orchestrator(
    fetcher: FakeFetcher,
    *,
    discoverer: FakeDiscoverer | None = None,
    aggregator=None,
    cache: TTLAnalysisCache | None = None,
) -> SiteAnalysisOrchestrator:
    extractor = EntityExtractionService(adapter=MockLLMAdapter())
    return SiteAnalysisOrchestrator(
        fetcher=fetcher,
        extractor=extractor,
        cache=cache if cache is not None else TTLAnalysisCache(ttl_seconds=600),
        competitor_analyzer=CompetitorAnalysisService(
            fetcher=fetcher,
            extractor=extractor,
            pacer=BatchPacer(batch_size=3, pause_seconds=0.0),
        ),
        aggregator=aggregator or MarketIntelligenceService(),
        discoverer=discoverer,
        clock=lambda: FIXED_NOW,
    )


class TestPrimaryAnalysis:
    def test_primary_failure_degrades_single_result(self) -> None:
        fetcher = FakeFetcher(failing={"https://down.example": 404})
        report = _orchestrator(fetcher).analyze(
            urls=["https://acme.io", "https://down.example"],
            find_competitors=False,
        )

        ok, failed = report.results
        assert len(ok.entities) == 3
        assert ok.search_phrase == "customer analytics cloud platform"
        assert ok.original_content == "Page text for https://acme.io"

        assert failed.url == "https://down.example"
        assert failed.entities == []
        assert failed.search_phrase == ""
        assert failed.summary == "Analysis failed: HTTP 404"
        assert failed.competitors == []

        assert report.metadata.total_urls == 2
        assert report.metadata.successful_analyses == 1
        assert report.metadata.timestamp == FIXED_NOW
        assert report.market_intelligence is not None

    def test_results_follow_request_order(self) -> None:
        urls = ["https://c.example", "https://a.example", "https://b.example"]
        report = _orchestrator(FakeFetcher()).analyze(urls=urls, find_competitors=False)
        assert [result.url for result in report.results] == urls

    def test_cache_reuses_primary_analysis(self) -> None:
        fetcher = FakeFetcher()
        orchestrator = _orchestrator(fetcher)

        orchestrator.analyze(urls=["https://acme.io"], find_competitors=False)
        report = orchestrator.analyze(urls=["https://acme.io"], find_competitors=False)

        assert fetcher.calls == ["https://acme.io"]
        assert len(report.results[0].entities) == 3

    def test_single_url_has_no_market_intelligence(self) -> None:
        report = _orchestrator(FakeFetcher()).analyze(urls=["https://acme.io"], find_competitors=False)
        assert report.market_intelligence is None

    def test_aggregation_failure_becomes_none(self) -> None:
        report = _orchestrator(FakeFetcher(), aggregator=ExplodingAggregator()).analyze(
            urls=["https://a.example", "https://b.example"],
            find_competitors=False,
        )
        assert report.market_intelligence is None
        assert len(report.results) == 2


class TestCompetitors:
    def test_competitors_attached_and_counted(self) -> None:
        fetcher = FakeFetcher(failing={"https://rival-b.com": 503})
        discoverer = FakeDiscoverer(urls=["https://rival-a.com", "https://rival-b.com"])
        report = _orchestrator(fetcher, discoverer=discoverer).analyze(
            urls=["https://acme.io"],
            find_competitors=True,
        )

        result = report.results[0]
        assert discoverer.phrases == ["customer analytics cloud platform"]
        assert [item.success for item in result.competitors] == [True, False]
        assert result.competitors[1].error == "HTTP 503"
        assert report.metadata.competitor_analysis_enabled is True
        assert report.metadata.competitor_success_rate == 50
        assert report.market_intelligence is not None
        assert report.market_intelligence.total_sites == 1

    def test_all_competitors_failing_skips_market_intelligence(self) -> None:
        fetcher = FakeFetcher(failing={"https://rival-a.com": 500, "https://rival-b.com": 503})
        discoverer = FakeDiscoverer(urls=["https://rival-a.com", "https://rival-b.com"])
        report = _orchestrator(fetcher, discoverer=discoverer).analyze(
            urls=["https://acme.io"],
            find_competitors=True,
        )

        result = report.results[0]
        assert len(result.entities) == 3
        assert [item.success for item in result.competitors] == [False, False]
        assert report.metadata.competitor_analysis_enabled is True
        assert report.metadata.competitor_success_rate == 0
        assert report.market_intelligence is None

    def test_cached_copy_excludes_competitors(self) -> None:
        cache = TTLAnalysisCache(ttl_seconds=600)
        discoverer = FakeDiscoverer(urls=["https://rival-a.com"])
        _orchestrator(FakeFetcher(), discoverer=discoverer, cache=cache).analyze(
            urls=["https://acme.io"],
            find_competitors=True,
        )

        cached = cache.get(analysis_cache_key("https://acme.io"))
        assert cached is not None
        assert cached.competitors is None

    def test_discovery_failure_keeps_primary_result(self) -> None:
        discoverer = FakeDiscoverer(error=DiscoveryError("SerpAPI key not configured"))
        report = _orchestrator(FakeFetcher(), discoverer=discoverer).analyze(
            urls=["https://acme.io"],
            find_competitors=True,
        )

        result = report.results[0]
        assert len(result.entities) == 3
        assert result.competitors is None
        assert report.metadata.successful_analyses == 1
        assert report.metadata.competitor_success_rate == 0

    @pytest.mark.parametrize("find_competitors", [True, False])
    def test_without_discoverer_competitors_are_disabled(self, find_competitors: bool) -> None:
        report = _orchestrator(FakeFetcher()).analyze(
            urls=["https://acme.io"],
            find_competitors=find_competitors,
        )

        assert report.metadata.competitor_analysis_enabled is False
        assert report.results[0].competitors is None

    def test_not_requested_skips_discovery(self) -> None:
        discoverer = FakeDiscoverer(urls=["https://rival-a.com"])
        report = _orchestrator(FakeFetcher(), discoverer=discoverer).analyze(
            urls=["https://acme.io"],
            find_competitors=False,
        )

        assert discoverer.phrases == []
        assert report.metadata.competitor_analysis_enabled is False
