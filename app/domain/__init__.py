"""
app/domain package marker.
"""

from app.domain.site_analysis import (
    AnalysisMetadata,
    AnalysisReport,
    AnalysisResult,
    CompetitorResult,
    Entity,
    MarketIntelligence,
    SiteExtraction,
)

__all__ = [
    "AnalysisMetadata",
    "AnalysisReport",
    "AnalysisResult",
    "CompetitorResult",
    "Entity",
    "MarketIntelligence",
    "SiteExtraction",
]
