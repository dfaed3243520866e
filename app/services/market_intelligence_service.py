"""
app/services/market_intelligence_service.py

Cross-site entity statistics for one analyze request.

Every entity from every primary result and every successful competitor is
flattened into (lowercased name, category, owning site url) mentions.
Coverage of a name is the share of sites that mention it:

    frequency = round(distinct_sites_with_name / total_sites * 100)

Denominator modes
-----------------
primary_only  (default) total_sites counts primary results only. Competitor
              mentions still enter the pool, so raw coverage can exceed
              100; values are clamped to 100.
all_sites     total_sites counts every distinct site in the pool (primary
              results plus successful competitors), so coverage is a true
              share and needs no clamp.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from app.config import DENOMINATOR_ALL_SITES, DENOMINATOR_PRIMARY_ONLY
from app.domain.site_analysis import (
    AnalysisResult,
    CategoryCount,
    CommonEntity,
    CompetitiveGap,
    MarketIntelligence,
    TopicalOpportunity,
    UniquePositioning,
)
from app.services.opportunity_service import OpportunityFinder

logger = logging.getLogger(__name__)

COMMON_MIN_FREQUENCY = 40
GAP_MIN_COVERAGE = 20
GAP_MAX_COVERAGE = 30
UNIQUE_MAX_SITES = 2
TOP_LIMIT = 10
UNIQUE_PER_RESULT_LIMIT = 5


@dataclass(frozen=True)
class EntityMention:
    name: str
    category: str
    url: str


def collect_mentions(results: Sequence[AnalysisResult]) -> list[EntityMention]:
    mentions: list[EntityMention] = []
    for result in results:
        for entity in result.entities:
            mentions.append(
                EntityMention(
                    name=entity.name.lower(),
                    category=entity.category or "Other",
                    url=result.url,
                )
            )
        for competitor in result.competitors or []:
            if not competitor.success:
                continue
            for entity in competitor.entities or []:
                mentions.append(
                    EntityMention(
                        name=entity.name.lower(),
                        category=entity.category or "Other",
                        url=competitor.url,
                    )
                )
    return mentions


class MarketIntelligenceService:
    """
    Stateless aggregator; recomputed from the full result set on every call.
    """

    def __init__(
        self,
        *,
        denominator: str = DENOMINATOR_PRIMARY_ONLY,
        opportunity_finder: OpportunityFinder | None = None,
    ) -> None:
        if denominator not in {DENOMINATOR_ALL_SITES, DENOMINATOR_PRIMARY_ONLY}:
            raise ValueError(f"Unknown market intelligence denominator '{denominator}'.")
        self._denominator = denominator
        self._opportunity_finder = opportunity_finder or OpportunityFinder()

    def total_sites(self, results: Sequence[AnalysisResult]) -> int:
        if self._denominator == DENOMINATOR_PRIMARY_ONLY:
            return len(results)

        sites = {result.url for result in results}
        for result in results:
            sites.update(
                competitor.url for competitor in result.competitors or [] if competitor.success
            )
        return len(sites)

    def build(self, results: Sequence[AnalysisResult]) -> MarketIntelligence:
        mentions = collect_mentions(results)
        total_sites = self.total_sites(results)
        if total_sites == 0:
            return MarketIntelligence(total_sites=0)

        sites_by_name: dict[str, set[str]] = {}
        for mention in mentions:
            sites_by_name.setdefault(mention.name, set()).add(mention.url)

        coverage = {
            name: self._percentage(len(urls), total_sites)
            for name, urls in sites_by_name.items()
        }

        common_entities = sorted(
            (
                CommonEntity(name=name, frequency=frequency)
                for name, frequency in coverage.items()
                if frequency >= COMMON_MIN_FREQUENCY
            ),
            key=lambda item: item.frequency,
            reverse=True,
        )[:TOP_LIMIT]

        category_counts = Counter(mention.category for mention in mentions)
        industry_distribution = [
            CategoryCount(category=category, count=count)
            for category, count in category_counts.most_common()
        ]

        competitive_gaps = sorted(
            (
                CompetitiveGap(entity=name, coverage=value)
                for name, value in coverage.items()
                if GAP_MIN_COVERAGE <= value <= GAP_MAX_COVERAGE
            ),
            key=lambda item: item.coverage,
        )[:TOP_LIMIT]

        unique_positioning: list[UniquePositioning] = []
        for result in results:
            unique = [
                entity.name
                for entity in result.entities
                if len(sites_by_name.get(entity.name.lower(), ())) <= UNIQUE_MAX_SITES
            ][:UNIQUE_PER_RESULT_LIMIT]
            if unique:
                unique_positioning.append(UniquePositioning(url=result.url, unique_entities=unique))

        topical_opportunities: list[TopicalOpportunity] = []
        for result in results:
            topical_opportunities.extend(self._opportunity_finder.find(result))

        logger.info(
            "Market intelligence built total_sites=%d names=%d mentions=%d denominator=%s",
            total_sites,
            len(sites_by_name),
            len(mentions),
            self._denominator,
        )
        return MarketIntelligence(
            total_sites=total_sites,
            common_entities=common_entities,
            industry_distribution=industry_distribution,
            competitive_gaps=competitive_gaps,
            unique_positioning=unique_positioning,
            topical_opportunities=topical_opportunities,
        )

    def _percentage(self, site_count: int, total_sites: int) -> int:
        # half-up rounding, not round-half-even
        value = math.floor(site_count / total_sites * 100 + 0.5)
        if self._denominator == DENOMINATOR_PRIMARY_ONLY:
            return min(value, 100)
        return value
