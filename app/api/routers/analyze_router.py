"""
app/api/routers/analyze_router.py

Site analysis endpoint.

POST /api/analyze

Body
----
urls            : non-empty list of page URLs (at most MAX_URLS_PER_REQUEST)
findCompetitors : bool, default false

Responses
---------
200 → AnalyzeResponse (per-URL failures are reported inside ``results``)
400 → {"error"} for a missing/empty/oversized ``urls`` field
500 → {"error", "details"} when no LLM credential is configured or the
      pipeline fails unexpectedly
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.config import (
    AnalysisCapabilities,
    AnalysisSettings,
    get_analysis_capabilities,
    get_analysis_settings,
)
from app.mappers.analysis_mapper import build_analyze_response
from app.schemas.site_analysis import AnalyzeRequest, AnalyzeResponse, ErrorResponse, error_payload
from app.services.site_analysis_orchestrator import (
    SiteAnalysisOrchestrator,
    get_site_analysis_orchestrator,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    summary="Analyze business entities on one or more web pages",
)
def analyze_sites(
    payload: AnalyzeRequest,
    settings: AnalysisSettings = Depends(get_analysis_settings),
    capabilities: AnalysisCapabilities = Depends(get_analysis_capabilities),
    orchestrator: SiteAnalysisOrchestrator = Depends(get_site_analysis_orchestrator),
) -> AnalyzeResponse | JSONResponse:
    """
    Extract entities for each URL, optionally discover and analyze competitors,
    and aggregate market intelligence across all analyzed sites.
    """
    if len(payload.urls) > settings.max_urls_per_request:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_payload(
                f"At most {settings.max_urls_per_request} urls may be analyzed per request"
            ),
        )

    if not capabilities.llm_configured:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_payload(
                "LLM API key not configured",
                "Set LLM_API_KEY or OPENAI_API_KEY, or LLM_ADAPTER=mock.",
            ),
        )

    try:
        report = orchestrator.analyze(
            urls=payload.urls,
            find_competitors=payload.find_competitors,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("Site analysis failed urls=%d", len(payload.urls))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_payload("Analysis failed", exc),
        )

    logger.info(
        "Site analysis urls=%d successful=%d competitors_enabled=%s",
        report.metadata.total_urls,
        report.metadata.successful_analyses,
        report.metadata.competitor_analysis_enabled,
    )
    return build_analyze_response(report)
