"""
app/schemas/site_analysis.py

Request/response schemas for the site analysis API.

Wire names are camelCase (``searchPhrase``, ``findCompetitors``); models
accept either spelling on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _OmitNoneModel(_CamelModel):
    """
    Optional keys that are unset are left out of the payload instead of sent as null.
    """

    @model_serializer(mode="wrap")
    def _omit_none(self, handler: SerializerFunctionWrapHandler):
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}


class AnalyzeRequest(_CamelModel):
    """
    Body of ``POST /api/analyze``.
    """

    urls: list[str] = Field(..., min_length=1)
    find_competitors: bool = False

    @field_validator("urls")
    @classmethod
    def _strip_urls(cls, value: list[str]) -> list[str]:
        cleaned = [url.strip() for url in value if url.strip()]
        if not cleaned:
            raise ValueError("urls must contain at least one non-empty URL")
        return cleaned


class EntityResponse(_CamelModel):
    name: str
    confidence: int = Field(..., ge=0, le=100)
    category: str = "Other"


class CompetitorResultResponse(_OmitNoneModel):
    """
    One discovered competitor; ``entities``/``analysis`` on success, ``error`` on failure.
    """

    url: str
    title: str = ""
    snippet: str = ""
    position: int = 0
    entities: list[EntityResponse] | None = None
    analysis: str | None = None
    error: str | None = None
    success: bool = False


class AnalysisResultResponse(_OmitNoneModel):
    url: str
    entities: list[EntityResponse] = Field(default_factory=list)
    search_phrase: str = ""
    summary: str = ""
    competitors: list[CompetitorResultResponse] | None = None
    original_content: str | None = None


class CommonEntityResponse(_CamelModel):
    name: str
    frequency: int = Field(..., ge=0, le=100)


class CategoryCountResponse(_CamelModel):
    category: str
    count: int = Field(..., ge=0)


class CompetitiveGapResponse(_CamelModel):
    entity: str
    coverage: int = Field(..., ge=0, le=100)


class UniquePositioningResponse(_CamelModel):
    url: str
    unique_entities: list[str]


class TopicalOpportunityResponse(_CamelModel):
    url: str
    name: str
    sites: list[str]
    confidence: int
    category: str


class MarketIntelligenceResponse(_CamelModel):
    """
    Cross-site statistics; every percentage is within [0, 100].
    """

    total_sites: int = Field(..., ge=0)
    common_entities: list[CommonEntityResponse] = Field(default_factory=list)
    industry_distribution: list[CategoryCountResponse] = Field(default_factory=list)
    competitive_gaps: list[CompetitiveGapResponse] = Field(default_factory=list)
    unique_positioning: list[UniquePositioningResponse] = Field(default_factory=list)
    topical_opportunities: list[TopicalOpportunityResponse] = Field(default_factory=list)


class AnalyzeMetadataResponse(_CamelModel):
    total_urls: int = Field(..., ge=0)
    successful_analyses: int = Field(..., ge=0)
    competitor_analysis_enabled: bool
    competitor_success_rate: int = Field(0, ge=0, le=100)
    timestamp: datetime


class AnalyzeResponse(_CamelModel):
    """
    Body of a successful ``POST /api/analyze``.
    """

    results: list[AnalysisResultResponse]
    market_intelligence: MarketIntelligenceResponse | None = None
    metadata: AnalyzeMetadataResponse


class ExportRequest(_CamelModel):
    """
    Body of ``POST /api/analyze/export``: an analyze response, or just its results.
    """

    results: list[AnalysisResultResponse] = Field(..., min_length=1)


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class HealthResponse(_CamelModel):
    status: str
    llm_configured: bool
    competitor_discovery: bool


def error_payload(error: str, details: Any = None) -> dict[str, Any]:
    """
    Build the ``{error[, details]}`` body used by every non-2xx analysis response.
    """

    payload: dict[str, Any] = {"error": error}
    if details is not None:
        payload["details"] = str(details)
    return payload
