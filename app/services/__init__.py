"""
app/services package marker.
"""

from app.services.analysis_cache import AnalysisCache, TTLAnalysisCache, analysis_cache_key
from app.services.competitor_analysis_service import CompetitorAnalysisService
from app.services.entity_extraction_service import EntityExtractionService
from app.services.export_service import AnalysisExportService, get_analysis_export_service
from app.services.market_intelligence_service import MarketIntelligenceService
from app.services.opportunity_service import OpportunityFinder
from app.services.site_analysis_orchestrator import (
    SiteAnalysisOrchestrator,
    build_site_analysis_orchestrator,
    get_site_analysis_orchestrator,
)

__all__ = [
    "AnalysisCache",
    "AnalysisExportService",
    "CompetitorAnalysisService",
    "EntityExtractionService",
    "MarketIntelligenceService",
    "OpportunityFinder",
    "SiteAnalysisOrchestrator",
    "TTLAnalysisCache",
    "analysis_cache_key",
    "build_site_analysis_orchestrator",
    "get_analysis_export_service",
    "get_site_analysis_orchestrator",
]
