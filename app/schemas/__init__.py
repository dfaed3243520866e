"""
app/schemas package marker.
"""

from app.schemas.site_analysis import (
    AnalysisResultResponse,
    AnalyzeMetadataResponse,
    AnalyzeRequest,
    AnalyzeResponse,
    CompetitorResultResponse,
    EntityResponse,
    ErrorResponse,
    ExportRequest,
    HealthResponse,
    MarketIntelligenceResponse,
)

__all__ = [
    "AnalysisResultResponse",
    "AnalyzeMetadataResponse",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "CompetitorResultResponse",
    "EntityResponse",
    "ErrorResponse",
    "ExportRequest",
    "HealthResponse",
    "MarketIntelligenceResponse",
]
