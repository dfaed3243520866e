"""
app/services/competitor_analysis_service.py

Fetch + extract for each discovered competitor, run in paced batches.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from app.domain.site_analysis import CompetitorResult
from app.errors import AnalysisError
from app.scraping.batching import BatchPacer
from app.scraping.content_fetcher import ContentFetcher
from app.scraping.logging_utils import log_event
from app.services.entity_extraction_service import EntityExtractionService

logger = logging.getLogger(__name__)


class CompetitorAnalysisService:
    """
    Analyzes competitor stubs; every stub comes back with ``success`` decided.
    """

    def __init__(
        self,
        *,
        fetcher: ContentFetcher,
        extractor: EntityExtractionService,
        pacer: BatchPacer,
        max_competitors: int = 10,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._pacer = pacer
        self._max_competitors = max_competitors

    def analyze_all(self, competitors: Sequence[CompetitorResult]) -> list[CompetitorResult]:
        """
        Analyze up to ``max_competitors`` stubs in batches; input order is kept.
        """

        selected = list(competitors[: self._max_competitors])
        analyzed = self._pacer.run(selected, self.analyze_one)
        successful = sum(1 for item in analyzed if item.success)
        log_event(
            logger,
            logging.INFO,
            "competitor_analysis_completed",
            competitors=len(analyzed),
            successful=successful,
            batches=len(self._pacer.batches(selected)),
        )
        return analyzed

    def analyze_one(self, competitor: CompetitorResult) -> CompetitorResult:
        """
        Fetch and extract one competitor. Never raises.
        """

        try:
            content = self._fetcher.fetch_text(competitor.url)
            extraction = self._extractor.extract(content=content, url=competitor.url)
        except Exception as exc:
            failure = AnalysisError(str(exc) or "Analysis failed", url=competitor.url, cause=exc)
            log_event(
                logger,
                logging.WARNING,
                "competitor_analysis_failed",
                url=competitor.url,
                error=str(failure),
                error_type=type(exc).__name__,
            )
            return replace(competitor, entities=None, analysis=None, error=str(failure), success=False)

        return replace(
            competitor,
            entities=list(extraction.entities),
            analysis=extraction.summary,
            error=None,
            success=True,
        )
