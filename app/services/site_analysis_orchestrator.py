"""
app/services/site_analysis_orchestrator.py

Per-request pipeline: cache -> fetch -> extract -> discover -> analyze
competitors -> aggregate.

URLs are processed strictly one after another; a URL's full pipeline,
including its competitor batches, completes before the next URL starts.
Only the primary fetch/extract stage can degrade a result; discovery and
competitor failures are logged and the primary analysis is kept.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from functools import lru_cache

from app.config import (
    get_analysis_capabilities,
    get_analysis_settings,
    get_fetch_settings,
    get_llm_settings,
    get_search_settings,
)
from app.connectors.base import BaseSearchConnector
from app.connectors.serpapi_connector import SerpAPIConnector
from app.domain.site_analysis import (
    AnalysisMetadata,
    AnalysisReport,
    AnalysisResult,
    CompetitorResult,
    MarketIntelligence,
)
from app.scraping.batching import BatchPacer
from app.scraping.content_fetcher import ContentFetcher
from app.scraping.logging_utils import log_event
from app.services.analysis_cache import AnalysisCache, TTLAnalysisCache, analysis_cache_key
from app.services.competitor_analysis_service import CompetitorAnalysisService
from app.services.entity_extraction_service import EntityExtractionService
from app.services.market_intelligence_service import MarketIntelligenceService
from llm_synthesis.adapter import build_llm_adapter
from llm_synthesis.prompt_builder import EntityPromptBuilder

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SiteAnalysisOrchestrator:
    """
    Sequences the analysis pipeline for a list of URLs.
    """

    def __init__(
        self,
        *,
        fetcher: ContentFetcher,
        extractor: EntityExtractionService,
        cache: AnalysisCache,
        competitor_analyzer: CompetitorAnalysisService,
        aggregator: MarketIntelligenceService,
        discoverer: BaseSearchConnector | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._cache = cache
        self._competitor_analyzer = competitor_analyzer
        self._aggregator = aggregator
        self._discoverer = discoverer
        self._clock = clock

    @property
    def competitor_discovery_available(self) -> bool:
        return self._discoverer is not None

    def analyze(self, *, urls: Sequence[str], find_competitors: bool) -> AnalysisReport:
        discovery_enabled = find_competitors and self.competitor_discovery_available
        results = [self._analyze_url(url, discovery_enabled=discovery_enabled) for url in urls]

        market_intelligence = None
        if self._has_multiple_sites(results):
            market_intelligence = self._build_market_intelligence(results)

        competitors = [
            competitor for result in results for competitor in result.competitors or []
        ]
        successful_competitors = sum(1 for competitor in competitors if competitor.success)
        success_rate = (
            math.floor(successful_competitors / len(competitors) * 100 + 0.5) if competitors else 0
        )

        metadata = AnalysisMetadata(
            total_urls=len(urls),
            successful_analyses=sum(1 for result in results if result.entities),
            competitor_analysis_enabled=discovery_enabled,
            competitor_success_rate=success_rate,
            timestamp=self._clock(),
        )
        log_event(
            logger,
            logging.INFO,
            "analysis_request_completed",
            total_urls=metadata.total_urls,
            successful_analyses=metadata.successful_analyses,
            competitor_analysis_enabled=discovery_enabled,
            market_intelligence=market_intelligence is not None,
        )
        return AnalysisReport(
            results=results,
            market_intelligence=market_intelligence,
            metadata=metadata,
        )

    def _analyze_url(self, url: str, *, discovery_enabled: bool) -> AnalysisResult:
        try:
            result = self._primary_analysis(url)
        except Exception as exc:
            reason = str(exc) or "Unknown error"
            log_event(
                logger,
                logging.ERROR,
                "url_analysis_failed",
                url=url,
                error=reason,
                error_type=type(exc).__name__,
            )
            return AnalysisResult.failure(url, reason)

        if discovery_enabled:
            competitors = self._analyze_competitors(result)
            if competitors is not None:
                result.competitors = competitors
        return result

    def _primary_analysis(self, url: str) -> AnalysisResult:
        key = analysis_cache_key(url)
        cached = self._cache.get(key)
        if cached is not None:
            log_event(logger, logging.INFO, "analysis_cache_hit", url=url)
            return cached

        content = self._fetcher.fetch_text(url)
        extraction = self._extractor.extract(content=content, url=url)
        result = AnalysisResult(
            url=url,
            entities=list(extraction.entities),
            search_phrase=extraction.search_phrase,
            summary=extraction.summary,
            original_content=content,
        )
        self._cache.set(key, result)
        return result

    def _analyze_competitors(self, result: AnalysisResult) -> list[CompetitorResult] | None:
        if self._discoverer is None:
            return None
        try:
            stubs = self._discoverer.discover(result.search_phrase)
            return self._competitor_analyzer.analyze_all(stubs)
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "competitor_stage_failed",
                url=result.url,
                search_phrase=result.search_phrase,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None

    @staticmethod
    def _has_multiple_sites(results: Sequence[AnalysisResult]) -> bool:
        if len(results) > 1:
            return True
        return any(
            competitor.success
            for result in results
            for competitor in result.competitors or []
        )

    def _build_market_intelligence(
        self,
        results: Sequence[AnalysisResult],
    ) -> MarketIntelligence | None:
        try:
            return self._aggregator.build(results)
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "market_intelligence_failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None


def build_site_analysis_orchestrator() -> SiteAnalysisOrchestrator:
    """
    Wire the pipeline from environment settings.
    """

    llm_settings = get_llm_settings()
    search_settings = get_search_settings()
    fetch_settings = get_fetch_settings()
    analysis_settings = get_analysis_settings()
    capabilities = get_analysis_capabilities()

    fetcher = ContentFetcher(settings=fetch_settings)
    adapter = build_llm_adapter(
        llm_settings.adapter,
        model=llm_settings.model,
        max_tokens=llm_settings.max_tokens,
        api_key=llm_settings.api_key,
        base_url=llm_settings.base_url,
    )
    extractor = EntityExtractionService(
        adapter=adapter,
        prompt_builder=EntityPromptBuilder(content_length=analysis_settings.prompt_content_length),
    )
    pacer = BatchPacer(
        batch_size=analysis_settings.competitor_batch_size,
        pause_seconds=analysis_settings.competitor_batch_pause_seconds,
    )
    discoverer = SerpAPIConnector(settings=search_settings) if capabilities.competitor_discovery else None

    return SiteAnalysisOrchestrator(
        fetcher=fetcher,
        extractor=extractor,
        cache=TTLAnalysisCache(ttl_seconds=analysis_settings.cache_ttl_seconds),
        competitor_analyzer=CompetitorAnalysisService(
            fetcher=fetcher,
            extractor=extractor,
            pacer=pacer,
            max_competitors=search_settings.max_results,
        ),
        aggregator=MarketIntelligenceService(
            denominator=analysis_settings.market_intel_denominator,
        ),
        discoverer=discoverer,
    )


@lru_cache(maxsize=1)
def get_site_analysis_orchestrator() -> SiteAnalysisOrchestrator:
    """
    Build and cache the process-wide orchestrator (and with it the result cache).
    """

    return build_site_analysis_orchestrator()
