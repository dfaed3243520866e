"""
app/domain/site_analysis.py

Domain models for site entity analysis and competitor intelligence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Entity:
    """
    One business entity extracted from page text.
    """

    name: str
    confidence: int
    category: str = "Other"


@dataclass(frozen=True)
class SiteExtraction:
    """
    Entity extraction outcome for one page.
    """

    entities: list[Entity]
    summary: str
    search_phrase: str


@dataclass
class CompetitorResult:
    """
    One discovered competitor site and, once analyzed, its entities.

    Discovery creates the stub with ``success=False``; analysis either
    attaches entities and flips ``success`` or records ``error``.
    """

    url: str
    title: str
    snippet: str
    position: int
    entities: list[Entity] | None = None
    analysis: str | None = None
    error: str | None = None
    success: bool = False


@dataclass
class AnalysisResult:
    """
    Primary analysis for one requested URL.
    """

    url: str
    entities: list[Entity]
    search_phrase: str
    summary: str
    competitors: list[CompetitorResult] | None = None
    original_content: str | None = None

    @classmethod
    def failure(cls, url: str, reason: str) -> "AnalysisResult":
        return cls(
            url=url,
            entities=[],
            search_phrase="",
            summary=f"Analysis failed: {reason}",
            competitors=[],
            original_content="",
        )


@dataclass(frozen=True)
class CommonEntity:
    name: str
    frequency: int


@dataclass(frozen=True)
class CategoryCount:
    category: str
    count: int


@dataclass(frozen=True)
class CompetitiveGap:
    entity: str
    coverage: int


@dataclass(frozen=True)
class UniquePositioning:
    url: str
    unique_entities: list[str]


@dataclass(frozen=True)
class TopicalOpportunity:
    """
    Competitor entity absent from the primary page and shared by several competitors.
    """

    url: str
    name: str
    sites: list[str]
    confidence: int
    category: str


@dataclass(frozen=True)
class MarketIntelligence:
    """
    Cross-site statistics for one analyze request.
    """

    total_sites: int
    common_entities: list[CommonEntity] = field(default_factory=list)
    industry_distribution: list[CategoryCount] = field(default_factory=list)
    competitive_gaps: list[CompetitiveGap] = field(default_factory=list)
    unique_positioning: list[UniquePositioning] = field(default_factory=list)
    topical_opportunities: list[TopicalOpportunity] = field(default_factory=list)


@dataclass(frozen=True)
class AnalysisMetadata:
    total_urls: int
    successful_analyses: int
    competitor_analysis_enabled: bool
    competitor_success_rate: int
    timestamp: datetime


@dataclass(frozen=True)
class AnalysisReport:
    """
    Full outcome of one analyze run.
    """

    results: list[AnalysisResult]
    market_intelligence: MarketIntelligence | None
    metadata: AnalysisMetadata
