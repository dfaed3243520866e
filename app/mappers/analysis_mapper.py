"""
app/mappers/analysis_mapper.py

Maps pipeline domain objects to API response schemas.
"""

from __future__ import annotations

from app.domain.site_analysis import (
    AnalysisMetadata,
    AnalysisReport,
    AnalysisResult,
    CompetitorResult,
    Entity,
    MarketIntelligence,
)
from app.schemas.site_analysis import (
    AnalysisResultResponse,
    AnalyzeMetadataResponse,
    AnalyzeResponse,
    CategoryCountResponse,
    CommonEntityResponse,
    CompetitiveGapResponse,
    CompetitorResultResponse,
    EntityResponse,
    MarketIntelligenceResponse,
    TopicalOpportunityResponse,
    UniquePositioningResponse,
)


def to_entity_response(entity: Entity) -> EntityResponse:
    return EntityResponse(name=entity.name, confidence=entity.confidence, category=entity.category)


def to_competitor_response(competitor: CompetitorResult) -> CompetitorResultResponse:
    entities = None
    if competitor.entities is not None:
        entities = [to_entity_response(entity) for entity in competitor.entities]
    return CompetitorResultResponse(
        url=competitor.url,
        title=competitor.title,
        snippet=competitor.snippet,
        position=competitor.position,
        entities=entities,
        analysis=competitor.analysis,
        error=competitor.error,
        success=competitor.success,
    )


def to_result_response(result: AnalysisResult) -> AnalysisResultResponse:
    competitors = None
    if result.competitors is not None:
        competitors = [to_competitor_response(item) for item in result.competitors]
    return AnalysisResultResponse(
        url=result.url,
        entities=[to_entity_response(entity) for entity in result.entities],
        search_phrase=result.search_phrase,
        summary=result.summary,
        competitors=competitors,
        original_content=result.original_content,
    )


def to_market_intelligence_response(
    intelligence: MarketIntelligence,
) -> MarketIntelligenceResponse:
    return MarketIntelligenceResponse(
        total_sites=intelligence.total_sites,
        common_entities=[
            CommonEntityResponse(name=item.name, frequency=item.frequency)
            for item in intelligence.common_entities
        ],
        industry_distribution=[
            CategoryCountResponse(category=item.category, count=item.count)
            for item in intelligence.industry_distribution
        ],
        competitive_gaps=[
            CompetitiveGapResponse(entity=item.entity, coverage=item.coverage)
            for item in intelligence.competitive_gaps
        ],
        unique_positioning=[
            UniquePositioningResponse(url=item.url, unique_entities=list(item.unique_entities))
            for item in intelligence.unique_positioning
        ],
        topical_opportunities=[
            TopicalOpportunityResponse(
                url=item.url,
                name=item.name,
                sites=list(item.sites),
                confidence=item.confidence,
                category=item.category,
            )
            for item in intelligence.topical_opportunities
        ],
    )


def to_metadata_response(metadata: AnalysisMetadata) -> AnalyzeMetadataResponse:
    return AnalyzeMetadataResponse(
        total_urls=metadata.total_urls,
        successful_analyses=metadata.successful_analyses,
        competitor_analysis_enabled=metadata.competitor_analysis_enabled,
        competitor_success_rate=metadata.competitor_success_rate,
        timestamp=metadata.timestamp,
    )


def build_analyze_response(report: AnalysisReport) -> AnalyzeResponse:
    """
    Convert a full analysis report into the ``POST /api/analyze`` body.
    """

    market_intelligence = None
    if report.market_intelligence is not None:
        market_intelligence = to_market_intelligence_response(report.market_intelligence)
    return AnalyzeResponse(
        results=[to_result_response(result) for result in report.results],
        market_intelligence=market_intelligence,
        metadata=to_metadata_response(report.metadata),
    )
